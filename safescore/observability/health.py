"""
HTTP endpoints for SafeScore.

This module implements health, readiness, metrics and info endpoints
plus the safety assessment, community report, incident feed and
country risk seeding endpoints.
"""

import json
import time
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import ValidationError as SchemaError

from safescore.adapters.feed.client import FeedIncidentSource
from safescore.adapters.storage.sqlite_reports import SQLiteReportStore
from safescore.common.timeutil import utc_now_iso
from safescore.core.community import filter_reports
from safescore.core.errors import DatasetFetchError, FeedParseError, ValidationError
from safescore.core.models import NewCommunityReport, REPORT_TYPES
from safescore.observability.logging_setup import get_logger
from safescore.observability.metrics import uptime_seconds
from safescore.orchestrators.assessor import SafetyAssessor, validate_point
from safescore.orchestrators.seeder import CountryRiskSeeder
from safescore.settings import Settings

log = get_logger("safescore.http")

def error_payload(status: int, error: str, message: str) -> JSONResponse:
    """오류 응답 (메시지와 타임스탬프 포함)"""
    return JSONResponse(
        status_code=status,
        content={"error": error, "message": message, "timestamp": utc_now_iso()},
    )

def create_app(settings: Settings,
               assessor: Optional[SafetyAssessor] = None,
               report_store: Optional[SQLiteReportStore] = None,
               seeder: Optional[CountryRiskSeeder] = None,
               feed: Optional[FeedIncidentSource] = None) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="SafeScore location safety assessment service"
    )

    start_time = time.time()

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ready" if assessor is not None else "degraded",
            "service": settings.observability.service_name,
            "assessor": assessor is not None,
            "reports": report_store is not None,
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")
        uptime_seconds.set(time.time() - start_time)
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "thresholds": {
                "safe": settings.scoring.safe_threshold,
                "caution": settings.scoring.caution_threshold,
            },
        })

    @app.get("/safety")
    async def safety(lat: Optional[str] = None,
                     lng: Optional[str] = None,
                     country: Optional[str] = None):
        """위치 안전도 평가 엔드포인트"""
        if assessor is None:
            return error_payload(503, "Service unavailable", "assessor not configured")
        try:
            assessment = await assessor.assess(lat, lng, country)
        except ValidationError as e:
            return error_payload(400, "lat,lng required", str(e))
        except Exception as e:
            log.exception(f"안전도 평가 오류: {e}")
            return error_payload(500, "Internal server error", str(e))
        return JSONResponse(assessment.to_wire())

    @app.post("/reports", status_code=201)
    async def create_report(request: Request):
        """커뮤니티 제보 생성 엔드포인트"""
        if report_store is None:
            return error_payload(503, "Service unavailable", "report storage not configured")
        body = await request.body()
        try:
            payload = json.loads(body) if body.strip() else {}
        except ValueError:
            return error_payload(400, "Bad request", "Malformed JSON body")
        if not isinstance(payload, dict):
            return error_payload(400, "Bad request", "JSON object body required")
        try:
            new = NewCommunityReport.model_validate(payload)
        except SchemaError as e:
            fields = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
            if "type" in fields:
                message = f"Invalid 'type'. Allowed: {'|'.join(REPORT_TYPES)}"
            elif fields & {"lat", "lng"}:
                message = "Invalid lat/lng"
            else:
                message = "Bad request"
            return error_payload(400, "Bad request", message)

        report = await report_store.add(new)
        return JSONResponse(status_code=201, content=report.model_dump(mode="json", by_alias=True))

    @app.get("/reports")
    async def list_reports(lat: Optional[str] = None,
                           lng: Optional[str] = None,
                           radius_km: Optional[float] = Query(default=None, alias="radiusKm"),
                           days: Optional[float] = Query(default=None),
                           limit: int = Query(default=50, ge=1, le=500)):
        """근처 커뮤니티 제보 조회 엔드포인트"""
        if report_store is None:
            return error_payload(503, "Service unavailable", "report storage not configured")
        try:
            point = validate_point(lat, lng)
        except ValidationError as e:
            return error_payload(400, "lat,lng required", str(e))

        radius = radius_km if radius_km is not None else settings.scoring.community_radius_km
        window = days if days is not None else settings.scoring.community_days
        candidates = await report_store.list_reports(point.lat, point.lng, radius, window)
        items = filter_reports(point, candidates, radius, window)[:limit]
        return JSONResponse({
            "items": [r.model_dump(mode="json", by_alias=True) for r in items],
            "query": {"lat": point.lat, "lng": point.lng, "radiusKm": radius,
                      "days": window, "limit": limit},
        })

    @app.post("/admin/seed-country-risk")
    async def seed_country_risk():
        """국가 위험도 테이블 시딩 엔드포인트"""
        if seeder is None:
            raise HTTPException(status_code=400, detail="seeding disabled")
        try:
            summary = await seeder.run()
        except DatasetFetchError as e:
            log.error(f"국가 위험도 시딩 실패 error:{e}")
            return error_payload(502, "Failed to fetch country risk data", str(e))
        return JSONResponse({"message": "Country risk data seeded", **summary})

    async def _feed_response(refresh: bool, message: str):
        if feed is None:
            raise HTTPException(status_code=400, detail="feed not configured")
        try:
            incidents = await (feed.refresh() if refresh else feed.fetch_incidents())
        except (DatasetFetchError, FeedParseError) as e:
            log.error(f"피드 수집 실패 error:{e}")
            return error_payload(502, "Failed to ingest incident feed", str(e))
        return JSONResponse({
            "message": message,
            "count": len(incidents),
            "incidents": [i.model_dump(mode="json", by_alias=True) for i in incidents],
            "source": feed.source_label,
            "lastUpdated": utc_now_iso(),
        })

    @app.get("/incidents")
    async def list_incidents():
        """현재 수집된 사고 목록 (캐시 사용)"""
        return await _feed_response(False, "Current incidents")

    @app.post("/admin/ingest-feed")
    async def ingest_feed():
        """캐시를 버리고 사고 피드를 다시 수집"""
        return await _feed_response(True, "Incident feed ingested")

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "safety": "/safety",
                "reports": "/reports",
                "incidents": "/incidents",
                "ingest_feed": "/admin/ingest-feed",
                "seed_country_risk": "/admin/seed-country-risk"
            }
        })

    return app
