"""
SQLite-based country risk table for SafeScore.

The seeding run overwrites one row per country code; request-time
lookups read from it through the CountryRiskSource port.
"""

from typing import Iterable, Optional

import aiosqlite

from safescore.core.models import CountryRisk
from safescore.observability.logging_setup import get_logger

log = get_logger("safescore.country_risk_store")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS country_risk (
    country_code TEXT PRIMARY KEY,
    risk_score REAL NOT NULL,
    year INTEGER NOT NULL,
    source TEXT NOT NULL,
    last_updated TEXT NOT NULL
);
"""

UPSERT = """
INSERT INTO country_risk (country_code, risk_score, year, source, last_updated)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT(country_code) DO UPDATE SET
    risk_score = excluded.risk_score,
    year = excluded.year,
    source = excluded.source,
    last_updated = excluded.last_updated
"""

class SQLiteCountryRiskStore:
    """SQLite 기반 국가 위험도 테이블"""

    def __init__(self, path: str):
        """
        초기화합니다.

        Args:
            path: SQLite 데이터베이스 파일 경로
        """
        self.path = path
        log.info(f"SQLiteCountryRiskStore 초기화: {path}")

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info(f"SQLiteCountryRiskStore 스키마 초기화 완료: {self.path}")

    async def upsert_many(self, records: Iterable[CountryRisk]) -> int:
        """
        국가별 레코드를 덮어씁니다.

        Args:
            records: CountryRisk 목록

        Returns:
            기록된 레코드 수
        """
        params = [
            (r.country_code.upper(), r.risk_score, r.year, r.source, r.last_updated)
            for r in records
        ]
        async with aiosqlite.connect(self.path) as db:
            await db.executemany(UPSERT, params)
            await db.commit()
        log.info(f"국가 위험도 {len(params)}건 저장됨")
        return len(params)

    async def get_country_risk(self, country_code: str) -> Optional[CountryRisk]:
        """국가 코드로 레코드를 조회합니다 (없으면 None)."""
        if not country_code:
            return None
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute(
                "SELECT country_code, risk_score, year, source, last_updated "
                "FROM country_risk WHERE country_code = ?",
                (country_code.strip().upper(),),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return CountryRisk(
            country_code=row[0],
            risk_score=row[1],
            year=row[2],
            source=row[3] or "WorldBank/UNODC",
            last_updated=row[4],
        )

    async def get_count(self) -> int:
        """
        현재 저장된 국가 수를 반환합니다.

        Returns:
            레코드 수
        """
        try:
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute("SELECT COUNT(*) FROM country_risk")
                result = await cursor.fetchone()
                return result[0] if result else 0
        except aiosqlite.Error as e:
            log.error(f"SQLiteCountryRiskStore get_count 오류: {e}")
            return 0
