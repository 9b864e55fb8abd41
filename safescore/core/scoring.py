"""
Safety scoring functions for SafeScore.

This module contains the pure pieces of the safety assessment:
score blending, label thresholds, incident-driven downgrades and
assembly of the SafetyAssessment output shape.
"""

import math
from typing import List, Optional, Sequence

from safescore.common.geo import clamp, round1
from safescore.common.timeutil import utc_now_iso
from .models import (
    CommunitySignal, CommunitySummary, CountryRisk, Location, NearbyIncident,
    Safety, SafetyAssessment, SourceRef, Thresholds,
)

SAFE_THRESHOLD = 7.5
CAUTION_THRESHOLD = 4.0

# 가장 가까운 사고가 이 심각도면 Safe → Caution
_DOWNGRADE_SEVERITIES = ("watch and act", "watch-and-act", "warning")

def label_from_score(score: Optional[float],
                     safe_threshold: float = SAFE_THRESHOLD,
                     caution_threshold: float = CAUTION_THRESHOLD) -> str:
    """
    점수를 안전 라벨로 변환합니다.

    Args:
        score: 0~10 점수 (없으면 None)
        safe_threshold: Safe 하한
        caution_threshold: Caution 하한

    Returns:
        "Safe" | "Caution" | "Unsafe" | "Unknown"
    """
    if score is None or math.isnan(score):
        return "Unknown"
    if score >= safe_threshold:
        return "Safe"
    if score >= caution_threshold:
        return "Caution"
    return "Unsafe"

def downgrade_by_incidents(label: str, incidents: Optional[Sequence[NearbyIncident]]) -> str:
    """
    근처 사고 심각도에 따라 라벨을 낮춥니다.

    Args:
        label: 점수 기반 라벨
        incidents: 가까운 순으로 정렬된 근처 사고

    Returns:
        조정된 라벨
    """
    if not incidents:
        return label
    # 긴급 경보가 하나라도 있으면 무조건 Unsafe
    if any("emergency" in (i.severity or "").lower() for i in incidents):
        return "Unsafe"
    nearest = (incidents[0].severity or "").lower()
    if any(s in nearest for s in _DOWNGRADE_SEVERITIES):
        return "Caution" if label == "Safe" else label
    return label

def base_score_from(risk: Optional[CountryRisk]) -> Optional[float]:
    if risk is None:
        return None
    return clamp(round1(risk.risk_score), 0.0, 10.0)

def blend_score(base_score: Optional[float], penalty: float) -> Optional[float]:
    """기본 점수에 커뮤니티 페널티를 더하고 0~10으로 제한합니다."""
    if base_score is None:
        return None
    return clamp(round1(base_score + penalty), 0.0, 10.0)

def build_assessment(*,
                     lat: float,
                     lng: float,
                     country: Optional[str],
                     risk: Optional[CountryRisk],
                     incidents: List[NearbyIncident],
                     signal: CommunitySignal,
                     safe_threshold: float = SAFE_THRESHOLD,
                     caution_threshold: float = CAUTION_THRESHOLD,
                     timestamp: Optional[str] = None) -> SafetyAssessment:
    """
    수집된 입력으로 SafetyAssessment를 조립합니다.

    빈 incidents / community / sources 는 빈 값이 아닌 None으로 내보냅니다.
    """
    breakdown = {}
    sources: List[SourceRef] = []

    base_score = base_score_from(risk)
    coverage = "NONE"
    if base_score is not None:
        coverage = "COUNTRY"
        breakdown["country_risk"] = base_score
        sources.append(SourceRef(name=risk.source or "WorldBank/UNODC", year=risk.year))

    penalty = signal.delta
    if signal.lighting is not None:
        breakdown["lighting"] = signal.lighting
    if signal.crowd is not None:
        breakdown["crowd"] = signal.crowd

    score = blend_score(base_score, penalty)
    label = label_from_score(score, safe_threshold, caution_threshold)
    label = downgrade_by_incidents(label, incidents)

    community = None
    if signal.reports:
        community = CommunitySummary(
            total=len(signal.reports),
            lighting=signal.lighting,
            crowd=signal.crowd,
            penalty=round1(penalty),
        )

    return SafetyAssessment(
        location=Location(lat=lat, lng=lng, country=country or None),
        safety=Safety(
            label=label,
            score=score,
            coverage=coverage,
            confidence="low",
            thresholds=Thresholds(safe=safe_threshold, caution=caution_threshold),
        ),
        breakdown=breakdown,
        incidents=list(incidents) if incidents else None,
        community=community,
        sources=sources or None,
        timestamp=timestamp or utc_now_iso(),
    )
