"""
Country risk seeding run for SafeScore.

Offline/periodic batch job: download the homicide indicator, keep the
latest year per country and overwrite the local country risk table.
"""

from typing import Any, Dict

from safescore.adapters.storage.sqlite_country_risk import SQLiteCountryRiskStore
from safescore.adapters.worldbank.client import WorldBankClient
from safescore.common.timeutil import to_iso_utc, utc_now
from safescore.core.country_risk import DEFAULT_CEILING, RISK_SOURCE, build_latest_risk_table
from safescore.core.scoring import CAUTION_THRESHOLD, SAFE_THRESHOLD
from safescore.observability import metrics
from safescore.observability.logging_setup import get_logger

log = get_logger("safescore.seeder")

class CountryRiskSeeder:
    """국가 위험도 테이블 시딩 작업"""

    def __init__(self,
                 client: WorldBankClient,
                 store: SQLiteCountryRiskStore,
                 *,
                 ceiling: float = DEFAULT_CEILING,
                 safe_threshold: float = SAFE_THRESHOLD,
                 caution_threshold: float = CAUTION_THRESHOLD):
        self.client = client
        self.store = store
        self.ceiling = ceiling
        self.safe_threshold = safe_threshold
        self.caution_threshold = caution_threshold

    async def run(self) -> Dict[str, Any]:
        """
        시딩을 한 번 실행합니다.

        Returns:
            {count, source, lastUpdated, thresholds} 요약

        Raises:
            DatasetFetchError: 데이터셋 조회 실패
        """
        log.info("국가 위험도 시딩 시작")
        rows = await self.client.fetch_rows()

        started = utc_now()
        table = build_latest_risk_table(rows, ceiling=self.ceiling, now=started)
        count = await self.store.upsert_many(table) if table else 0
        metrics.country_risk_records.set(await self.store.get_count())

        log.info(f"국가 위험도 시딩 완료 rows:{len(rows)} countries:{count}")
        return {
            "count": count,
            "source": RISK_SOURCE,
            "lastUpdated": to_iso_utc(started),
            "thresholds": {"safe": self.safe_threshold, "caution": self.caution_threshold},
        }
