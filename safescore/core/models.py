"""
Core domain models for SafeScore.

This module defines the core domain models using Pydantic v2
for type safety and validation. Wire-facing models serialize with
the camelCase field names that client UIs key off, so dump them
with ``by_alias=True``.
"""

import math
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

# 심각도 분류 (피드 어휘가 예상 밖이면 원문 문자열이 그대로 들어감)
ADVICE = "Advice"
WARNING = "Warning"
WATCH_AND_ACT = "Watch and Act"
EMERGENCY_WARNING = "Emergency Warning"
Severity = str

# 커뮤니티 제보 유형
ReportType = Literal["lighting", "harassment", "theft", "other", "crowd", "crowd_low"]
REPORT_TYPES = ("lighting", "harassment", "theft", "other", "crowd", "crowd_low")

MAX_REPORT_TEXT = 2000

# 안전 라벨
SafetyLabel = Literal["Safe", "Caution", "Unsafe", "Unknown"]
Coverage = Literal["NONE", "COUNTRY"]


class WireModel(BaseModel):
    """camelCase 별칭과 snake_case 이름을 모두 받는 기본 모델"""
    model_config = ConfigDict(populate_by_name=True)


class Coordinates(BaseModel):
    """위경도 좌표 모델"""
    lat: float
    lng: float


class Incident(WireModel):
    """피드에서 파싱된 지점 위험 사고"""
    id: str
    type: str
    severity: Severity = ADVICE
    coordinates: Coordinates
    started_at: Optional[str] = Field(default=None, alias="startedAt")
    source: str
    expires_at: Optional[float] = Field(default=None, alias="expiresAt")


class NearbyIncident(WireModel):
    """IncidentLocator 출력 투영"""
    id: str
    type: str
    severity: Severity
    distance_km: float = Field(alias="distanceKm")
    started_at: Optional[str] = Field(default=None, alias="startedAt")
    source: str


class CommunityReport(WireModel):
    """크라우드소싱 제보"""
    id: str
    type: str
    text: str = ""
    coordinates: Coordinates
    area_code: Optional[str] = Field(default=None, alias="areaCode")
    created_at: str = Field(alias="createdAt")

    @field_validator("text")
    @classmethod
    def _cap_text(cls, v: str) -> str:
        return v[:MAX_REPORT_TEXT]


class NewCommunityReport(WireModel):
    """제보 생성 요청"""
    type: ReportType
    text: Optional[str] = ""
    lat: float
    lng: float
    area_code: Optional[str] = Field(default=None, alias="areaCode")

    @field_validator("text", mode="before")
    @classmethod
    def _clean_text(cls, v: Any) -> str:
        # 숫자 등 문자열이 아닌 값은 문자열로 변환
        if not v:
            return ""
        return str(v)[:MAX_REPORT_TEXT]

    @field_validator("lat", "lng")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("lat/lng must be finite numbers")
        return v


class CountryRisk(WireModel):
    """국가별 기본 안전 점수 (높을수록 안전)"""
    country_code: str = Field(alias="countryCode")
    risk_score: float = Field(ge=0.0, le=10.0, alias="riskScore")
    year: int
    source: str = "WorldBank/UNODC"
    last_updated: str = Field(alias="lastUpdated")


class CommunitySignal(BaseModel):
    """커뮤니티 제보 집계 결과"""
    delta: float = 0.0
    lighting: Optional[str] = None
    crowd: Optional[str] = None
    reports: List[CommunityReport] = Field(default_factory=list)


class Location(BaseModel):
    lat: float
    lng: float
    country: Optional[str] = None


class Thresholds(BaseModel):
    safe: float
    caution: float


class Safety(BaseModel):
    label: SafetyLabel
    score: Optional[float] = None
    coverage: Coverage = "NONE"
    confidence: Literal["low"] = "low"
    thresholds: Thresholds


class CommunitySummary(BaseModel):
    total: int
    lighting: Optional[str] = None
    crowd: Optional[str] = None
    penalty: float


class SourceRef(BaseModel):
    name: str
    year: Optional[int] = None


class SafetyAssessment(BaseModel):
    """SafetyScorer 출력 (저장되지 않는 계산 값)"""
    location: Location
    safety: Safety
    breakdown: Dict[str, Union[float, str]] = Field(default_factory=dict)
    incidents: Optional[List[NearbyIncident]] = None
    community: Optional[CommunitySummary] = None
    sources: Optional[List[SourceRef]] = None
    timestamp: str

    def to_wire(self) -> dict:
        """클라이언트로 내보낼 JSON 호환 딕셔너리"""
        return self.model_dump(mode="json", by_alias=True)
