# safescore/settings.py
from __future__ import annotations
from pydantic import BaseModel, Field

WORLD_BANK_HOMICIDE_URL = (
    "https://api.worldbank.org/v2/country/all/indicator/VC.IHR.PSRC.P5"
    "?format=json&per_page=30000"
)

class Scoring(BaseModel):
    safe_threshold: float = 7.5
    caution_threshold: float = 4.0
    homicide_ceiling: float = 50.0            # 10만명당 살인율 상한 (0점 기준)
    incident_radius_km: float = 20.0
    community_radius_km: float = 2.0
    community_days: int = 30

class FeedConfig(BaseModel):
    url: str | None = None                    # RFS_FEED_URL
    source_label: str = "NSW RFS"
    ttl_hours: float = 36.0                   # 수집된 사고의 soft TTL
    cache_ttl_sec: float = 300.0
    timeout_sec: int = 10
    max_retries: int = 2

class DatasetConfig(BaseModel):
    url: str = WORLD_BANK_HOMICIDE_URL
    cache_ttl_sec: float = 6 * 3600
    timeout_sec: int = 20
    max_retries: int = 2
    use_seeded_table: bool = True             # True면 SQLite 시드 테이블 우선

class Storage(BaseModel):
    reports_path: str = "/data/reports.db"
    country_risk_path: str = "/data/country_risk.db"

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "SafeScore"
    build_version: str = "0.2.0"
    build_date: str = "2025-09-01"
    log_level: str = "INFO"
    log_format: str = "console"               # console | json

class Settings(BaseModel):
    # 하위 섹션 (기본값/팩토리로 누락 방지)
    scoring: Scoring = Field(default_factory=Scoring)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    storage: Storage = Field(default_factory=Storage)
    observability: Observability = Field(default_factory=Observability)
