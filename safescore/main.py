# safescore/main.py
import argparse
import asyncio
import json
import math
import os
from typing import Callable, TypeVar

from fastapi import FastAPI

from safescore.adapters.feed.client import FeedIncidentSource
from safescore.adapters.storage.sqlite_country_risk import SQLiteCountryRiskStore
from safescore.adapters.storage.sqlite_reports import SQLiteReportStore
from safescore.adapters.worldbank.client import DatasetCountryRiskSource, WorldBankClient
from safescore.core.errors import ConfigurationError, DatasetFetchError
from safescore.observability.health import create_app
from safescore.observability.logging_setup import get_logger, setup_logging
from safescore.observability.server import serve
from safescore.orchestrators.assessor import SafetyAssessor
from safescore.orchestrators.seeder import CountryRiskSeeder
from safescore.settings import Scoring, Settings

log = get_logger("safescore.main")

T = TypeVar("T")

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _parse(name: str, raw: str, cast: Callable[[str], T]) -> T:
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name}={raw!r} 해석 불가")
    # nan, inf 거부
    if not math.isfinite(value):
        raise ConfigurationError(f"{name}={raw!r} 유한한 숫자가 아님")
    return value

def _num(name: str, default: T, cast: Callable[[str], T] = float) -> T:
    """숫자 환경변수를 읽습니다. 없거나 잘못되면 기본값."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return _parse(name, raw, cast)
    except ConfigurationError as e:
        log.warning(f"{e}, 기본값 사용: {default}")
        return default

def build_settings() -> Settings:
    s = Settings()

    # 점수 기준
    s.scoring.safe_threshold = _num("SAFE_THRESHOLD", s.scoring.safe_threshold)
    s.scoring.caution_threshold = _num("CAUTION_THRESHOLD", s.scoring.caution_threshold)
    s.scoring.homicide_ceiling = _num("HOMICIDE_CEILING", s.scoring.homicide_ceiling)
    s.scoring.incident_radius_km = _num("INCIDENT_RADIUS_KM", s.scoring.incident_radius_km)
    s.scoring.community_radius_km = _num("COMMUNITY_RADIUS_KM", s.scoring.community_radius_km)
    s.scoring.community_days = _num("COMMUNITY_DAYS", s.scoring.community_days, int)

    if s.scoring.caution_threshold > s.scoring.safe_threshold:
        log.warning("CAUTION_THRESHOLD가 SAFE_THRESHOLD보다 큼, 기본 임계값 사용")
        s.scoring.safe_threshold = Scoring().safe_threshold
        s.scoring.caution_threshold = Scoring().caution_threshold
    if s.scoring.homicide_ceiling <= 0:
        log.warning("HOMICIDE_CEILING은 양수여야 함, 기본값 사용")
        s.scoring.homicide_ceiling = Scoring().homicide_ceiling

    # 사고 피드
    s.feed.url = os.getenv("RFS_FEED_URL", s.feed.url) or None
    s.feed.source_label = os.getenv("FEED_SOURCE_LABEL", s.feed.source_label)
    s.feed.ttl_hours = _num("INCIDENT_TTL_HOURS", s.feed.ttl_hours)
    s.feed.cache_ttl_sec = _num("FEED_CACHE_TTL_SEC", s.feed.cache_ttl_sec)

    # 국가 위험도 데이터셋
    s.dataset.url = os.getenv("WORLD_BANK_URL", s.dataset.url)
    s.dataset.cache_ttl_sec = _num("DATASET_CACHE_TTL_SEC", s.dataset.cache_ttl_sec)
    s.dataset.use_seeded_table = _b("USE_SEEDED_TABLE", s.dataset.use_seeded_table)

    # 저장소
    s.storage.reports_path = os.getenv("REPORTS_DB_PATH", s.storage.reports_path)
    s.storage.country_risk_path = os.getenv("COUNTRY_RISK_DB_PATH", s.storage.country_risk_path)

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = _num("HTTP_PORT", s.observability.http_port, int)
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.log_format = os.getenv("LOG_FORMAT", s.observability.log_format)

    return s

def build_seeder(s: Settings) -> CountryRiskSeeder:
    client = WorldBankClient(
        s.dataset.url,
        timeout=s.dataset.timeout_sec,
        max_retries=s.dataset.max_retries,
        cache_ttl_sec=s.dataset.cache_ttl_sec,
    )
    store = SQLiteCountryRiskStore(s.storage.country_risk_path)
    return CountryRiskSeeder(
        client, store,
        ceiling=s.scoring.homicide_ceiling,
        safe_threshold=s.scoring.safe_threshold,
        caution_threshold=s.scoring.caution_threshold,
    )

async def build_app(s: Settings) -> FastAPI:
    reports = SQLiteReportStore(s.storage.reports_path); await reports.init()
    seeder = build_seeder(s); await seeder.store.init()

    if s.dataset.use_seeded_table:
        country_source = seeder.store
        # 첫 실행이면 한 번 시딩 (실패해도 coverage NONE으로 동작)
        if await seeder.store.get_count() == 0:
            try:
                await seeder.run()
            except DatasetFetchError as e:
                log.warning(f"초기 국가 위험도 시딩 실패, 국가 점수 없이 시작 error:{e}")
    else:
        country_source = DatasetCountryRiskSource(seeder.client, s.scoring.homicide_ceiling)

    feed = FeedIncidentSource(
        s.feed.url,
        source_label=s.feed.source_label,
        ttl_hours=s.feed.ttl_hours,
        cache_ttl_sec=s.feed.cache_ttl_sec,
        timeout=s.feed.timeout_sec,
        max_retries=s.feed.max_retries,
    )

    assessor = SafetyAssessor(
        feed, country_source, reports,
        safe_threshold=s.scoring.safe_threshold,
        caution_threshold=s.scoring.caution_threshold,
        incident_radius_km=s.scoring.incident_radius_km,
        community_radius_km=s.scoring.community_radius_km,
        community_days=s.scoring.community_days,
    )
    log.info("평가 파이프라인 구성 완료")
    return create_app(s, assessor, reports, seeder, feed)

async def main():
    s = build_settings()
    setup_logging(s.observability.log_level, s.observability.log_format)
    log.info("설정 로드 완료")
    app = await build_app(s)
    await serve(app, s)

async def seed_once():
    s = build_settings()
    setup_logging(s.observability.log_level, s.observability.log_format)
    seeder = build_seeder(s)
    await seeder.store.init()
    summary = await seeder.run()
    print(json.dumps(summary, ensure_ascii=False))

def cli():
    parser = argparse.ArgumentParser(description="SafeScore 안전도 평가 서비스")
    parser.add_argument("command", nargs="?", choices=["serve", "seed"], default="serve",
                        help="serve: HTTP 서버 실행, seed: 국가 위험도 테이블 시딩")
    args = parser.parse_args()
    if args.command == "seed":
        asyncio.run(seed_once())
    else:
        asyncio.run(main())

if __name__ == "__main__":
    cli()
