"""
Safety assessment orchestrator for SafeScore.

This module fans out to the three collaborators (country risk, live
incidents, community reports) concurrently, degrades any source that
fails to an empty result, and hands the joined inputs to the pure
scoring functions.
"""

import asyncio
import math
import time
from typing import Awaitable, List, Optional, TypeVar

from safescore.common.geo import validate_coordinates
from safescore.core.community import (
    DEFAULT_COMMUNITY_DAYS, DEFAULT_COMMUNITY_RADIUS_KM, aggregate_community_signal,
)
from safescore.core.errors import ValidationError
from safescore.core.incidents import DEFAULT_INCIDENT_RADIUS_KM, find_nearby_incidents
from safescore.core.models import (
    CommunitySignal, Coordinates, CountryRisk, NearbyIncident, SafetyAssessment,
)
from safescore.core.scoring import CAUTION_THRESHOLD, SAFE_THRESHOLD, build_assessment
from safescore.observability import metrics
from safescore.observability.logging_setup import get_logger
from safescore.ports import CommunityReportSource, CountryRiskSource, IncidentSource

log = get_logger("safescore.assessor")

T = TypeVar("T")

def validate_point(lat, lng) -> Coordinates:
    """
    요청 좌표를 검증합니다.

    Raises:
        ValidationError: 누락, 숫자가 아님, 유한하지 않음, 범위 밖
    """
    if lat is None or lng is None:
        raise ValidationError("lat,lng required")
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError):
        raise ValidationError("lat,lng must be numbers")
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        raise ValidationError("lat,lng must be finite numbers")
    if not validate_coordinates(lat_f, lng_f):
        raise ValidationError("lat must be within [-90,90] and lng within [-180,180]")
    return Coordinates(lat=lat_f, lng=lng_f)

class SafetyAssessor:
    """위치 안전도 평가 오케스트레이터"""

    def __init__(self,
                 incident_source: Optional[IncidentSource] = None,
                 country_source: Optional[CountryRiskSource] = None,
                 report_source: Optional[CommunityReportSource] = None,
                 *,
                 safe_threshold: float = SAFE_THRESHOLD,
                 caution_threshold: float = CAUTION_THRESHOLD,
                 incident_radius_km: float = DEFAULT_INCIDENT_RADIUS_KM,
                 community_radius_km: float = DEFAULT_COMMUNITY_RADIUS_KM,
                 community_days: float = DEFAULT_COMMUNITY_DAYS):
        """
        초기화합니다.

        Args:
            incident_source: 사고 공급 포트
            country_source: 국가 위험도 포트
            report_source: 커뮤니티 제보 포트
            safe_threshold: Safe 하한 점수
            caution_threshold: Caution 하한 점수
            incident_radius_km: 사고 검색 반경 (킬로미터)
            community_radius_km: 제보 검색 반경 (킬로미터)
            community_days: 제보 기간 (일)
        """
        self.incident_source = incident_source
        self.country_source = country_source
        self.report_source = report_source
        self.safe_threshold = safe_threshold
        self.caution_threshold = caution_threshold
        self.incident_radius_km = incident_radius_km
        self.community_radius_km = community_radius_km
        self.community_days = community_days

        log.info("안전도 평가기 초기화됨",
                 safe=safe_threshold,
                 caution=caution_threshold)

    async def _guarded(self, name: str, work: Awaitable[T], default: T) -> T:
        """소스 하나의 실패를 기본값으로 낮춥니다."""
        try:
            return await work
        except Exception as e:
            metrics.source_failures.labels(source=name).inc()
            log.warning(f"{name} 조회 실패, 기본값으로 진행 error:{e!r}")
            return default

    async def _country_risk(self, country: Optional[str]) -> Optional[CountryRisk]:
        if not country or self.country_source is None:
            return None
        return await self.country_source.get_country_risk(country)

    async def _nearby_incidents(self, point: Coordinates, now_ms: float) -> List[NearbyIncident]:
        if self.incident_source is None:
            return []
        incidents = await self.incident_source.fetch_incidents()
        return find_nearby_incidents(point, incidents, self.incident_radius_km, now_ms / 1000)

    async def _community_signal(self, point: Coordinates, now_ms: float) -> CommunitySignal:
        if self.report_source is None:
            return CommunitySignal()
        reports = await self.report_source.list_reports(
            point.lat, point.lng, self.community_radius_km, self.community_days
        )
        return aggregate_community_signal(
            point, reports, self.community_radius_km, self.community_days, now_ms
        )

    async def assess(self,
                     lat,
                     lng,
                     country: Optional[str] = None,
                     now_ms: Optional[float] = None) -> SafetyAssessment:
        """
        한 지점의 안전도를 평가합니다.

        Args:
            lat: 위도
            lng: 경도
            country: ISO-2 국가 코드 (선택)
            now_ms: 현재 시각 (epoch 밀리초), 테스트용 주입

        Returns:
            SafetyAssessment

        Raises:
            ValidationError: 좌표가 잘못된 경우 (다른 오류는 모두 소스별로 흡수)
        """
        point = validate_point(lat, lng)
        country_code = (country or "").strip().upper() or None
        if now_ms is None:
            now_ms = time.time() * 1000

        t0 = time.perf_counter()

        # 국가 위험도 / 사고 / 제보를 동시에 조회 후 합류
        risk, incidents, signal = await asyncio.gather(
            self._guarded("country_risk", self._country_risk(country_code), None),
            self._guarded("incidents", self._nearby_incidents(point, now_ms), []),
            self._guarded("community", self._community_signal(point, now_ms), CommunitySignal()),
        )

        assessment = build_assessment(
            lat=point.lat,
            lng=point.lng,
            country=country_code,
            risk=risk,
            incidents=incidents,
            signal=signal,
            safe_threshold=self.safe_threshold,
            caution_threshold=self.caution_threshold,
        )

        metrics.assessments_total.labels(
            label=assessment.safety.label,
            coverage=assessment.safety.coverage,
        ).inc()
        metrics.assessment_seconds.observe(time.perf_counter() - t0)

        log.info("안전도 평가 완료",
                 lat=point.lat,
                 lng=point.lng,
                 country=country_code,
                 label=assessment.safety.label,
                 score=assessment.safety.score,
                 penalty=signal.delta,
                 incidents=len(incidents))
        return assessment
