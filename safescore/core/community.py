"""
Community signal aggregation for SafeScore.

Crowd-sourced reports near a point are turned into qualitative
lighting/crowd labels and a small score penalty. Zero matching reports
yields ``None`` labels (no signal), which is different from a handful
of reports that label the area without penalizing it.
"""

import time
from typing import Iterable, List, Optional

from safescore.common.geo import haversine_distance_km, is_finite_number
from safescore.common.timeutil import epoch_ms, parse_timestamp
from .models import CommunityReport, CommunitySignal, Coordinates

DEFAULT_COMMUNITY_RADIUS_KM = 2.0
DEFAULT_COMMUNITY_DAYS = 30
DAY_MS = 86_400_000

# 페널티 규칙
MIN_REPORTS_FOR_PENALTY = 2
LIGHTING_PENALTY = -0.7
CROWD_PENALTY = -0.5
LIGHTING_TYPES = ("lighting",)
CROWD_TYPES = ("crowd_low", "crowd")

def filter_reports(point: Coordinates,
                   reports: Iterable[CommunityReport],
                   radius_km: float = DEFAULT_COMMUNITY_RADIUS_KM,
                   days: float = DEFAULT_COMMUNITY_DAYS,
                   now_ms: Optional[float] = None) -> List[CommunityReport]:
    """
    기간과 반경 조건을 만족하는 제보를 최신순으로 반환합니다.

    Args:
        point: 기준 지점
        reports: 후보 제보 목록
        radius_km: 반경 (킬로미터)
        days: 최근 며칠까지 포함할지
        now_ms: 현재 시각 (epoch 밀리초)

    Returns:
        필터링된 제보 목록 (createdAt 내림차순)
    """
    if now_ms is None:
        now_ms = time.time() * 1000
    since = now_ms - days * DAY_MS

    kept = []
    for report in reports:
        created = parse_timestamp(report.created_at)
        if created is None:
            continue
        created_ms = epoch_ms(created)
        if created_ms < since:
            continue
        coords = report.coordinates
        if not (is_finite_number(coords.lat) and is_finite_number(coords.lng)):
            continue
        if haversine_distance_km(point, coords) <= radius_km:
            kept.append((created_ms, report))

    kept.sort(key=lambda pair: pair[0], reverse=True)
    return [report for _, report in kept]

def community_penalty(reports: List[CommunityReport]) -> CommunitySignal:
    """이미 필터링된 제보로 라벨과 페널티를 계산합니다."""
    if not reports:
        return CommunitySignal(delta=0.0, lighting=None, crowd=None, reports=[])

    lighting_neg = sum(1 for r in reports if r.type in LIGHTING_TYPES)
    crowd_low = sum(1 for r in reports if r.type in CROWD_TYPES)

    delta = 0.0
    if lighting_neg >= MIN_REPORTS_FOR_PENALTY:
        delta += LIGHTING_PENALTY
    if crowd_low >= MIN_REPORTS_FOR_PENALTY:
        delta += CROWD_PENALTY

    # 제보가 1건이라도 있으면 라벨은 붙지만 페널티는 2건부터
    lighting = "Poor" if lighting_neg > 0 else "Good"
    crowd = "Low" if crowd_low > 0 else "High"

    return CommunitySignal(delta=delta, lighting=lighting, crowd=crowd, reports=list(reports))

def aggregate_community_signal(point: Coordinates,
                               reports: Iterable[CommunityReport],
                               radius_km: float = DEFAULT_COMMUNITY_RADIUS_KM,
                               days: float = DEFAULT_COMMUNITY_DAYS,
                               now_ms: Optional[float] = None) -> CommunitySignal:
    """
    근처 커뮤니티 제보를 집계합니다.

    Returns:
        CommunitySignal(delta, lighting, crowd, reports)
    """
    filtered = filter_reports(point, reports, radius_km, days, now_ms)
    return community_penalty(filtered)
