"""
SQLite-based community report store for SafeScore.

This module implements local storage for crowd-sourced reports and
serves them through the CommunityReportSource port.
"""

import time
import uuid
from typing import List, Optional

import aiosqlite

from safescore.common.timeutil import to_iso_utc, utc_now
from safescore.core.community import DAY_MS
from safescore.core.models import CommunityReport, Coordinates, NewCommunityReport
from safescore.observability import metrics
from safescore.observability.logging_setup import get_logger

log = get_logger("safescore.reports")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS reports (
    id TEXT PRIMARY KEY,
    type TEXT NOT NULL,
    text TEXT NOT NULL DEFAULT '',
    lat REAL NOT NULL,
    lng REAL NOT NULL,
    area_code TEXT,
    created_at TEXT NOT NULL,
    created_ms INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_reports_created ON reports(created_ms);
"""

def _row_to_report(row) -> CommunityReport:
    return CommunityReport(
        id=row[0],
        type=row[1],
        text=row[2] or "",
        coordinates=Coordinates(lat=row[3], lng=row[4]),
        area_code=row[5],
        created_at=row[6],
    )

class SQLiteReportStore:
    """SQLite 기반 커뮤니티 제보 저장소"""

    def __init__(self, path: str):
        """
        초기화합니다.

        Args:
            path: SQLite 데이터베이스 파일 경로
        """
        self.path = path
        log.info(f"SQLiteReportStore 초기화: {path}")

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info(f"SQLiteReportStore 스키마 초기화 완료: {self.path}")

    async def add(self, new: NewCommunityReport) -> CommunityReport:
        """
        제보를 저장하고 저장된 레코드를 반환합니다.

        Args:
            new: 검증된 제보 생성 요청

        Returns:
            id와 createdAt이 채워진 CommunityReport
        """
        now = utc_now()
        report = CommunityReport(
            id=str(uuid.uuid4()),
            type=new.type,
            text=new.text or "",
            coordinates=Coordinates(lat=new.lat, lng=new.lng),
            area_code=new.area_code or None,
            created_at=to_iso_utc(now),
        )
        async with aiosqlite.connect(self.path) as db:
            await db.execute(
                "INSERT INTO reports (id, type, text, lat, lng, area_code, created_at, created_ms) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (report.id, report.type, report.text, new.lat, new.lng,
                 report.area_code, report.created_at, int(now.timestamp() * 1000)),
            )
            await db.commit()

        metrics.reports_created.labels(type=report.type).inc()
        log.info("제보 저장됨", report_id=report.id, type=report.type)
        return report

    async def list_reports(self, lat: float, lng: float,
                           radius_km: float, days: float,
                           now_ms: Optional[float] = None) -> List[CommunityReport]:
        """
        기간 조건에 맞는 후보 제보를 최신순으로 반환합니다.

        거리 필터는 코어의 aggregate_community_signal에서 적용합니다.
        """
        if now_ms is None:
            now_ms = time.time() * 1000
        since = int(now_ms - days * DAY_MS)

        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute(
                "SELECT id, type, text, lat, lng, area_code, created_at FROM reports "
                "WHERE created_ms >= ? ORDER BY created_ms DESC",
                (since,),
            )
            rows = await cursor.fetchall()
        return [_row_to_report(r) for r in rows]
