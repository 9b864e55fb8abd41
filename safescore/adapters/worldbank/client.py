"""
World Bank indicator adapter for SafeScore.

This module downloads the intentional homicide indicator
(VC.IHR.PSRC.P5) and serves country base scores from it through the
CountryRiskSource port.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from safescore.common.cache import TTLCache
from safescore.common.retry import retry_with_backoff
from safescore.core.country_risk import DEFAULT_CEILING, resolve_country_risk
from safescore.core.errors import DatasetFetchError
from safescore.core.models import CountryRisk
from safescore.observability import metrics
from safescore.observability.logging_setup import get_logger
from safescore.settings import WORLD_BANK_HOMICIDE_URL

log = get_logger("safescore.worldbank")

class WorldBankClient:
    """World Bank 지표 API 클라이언트"""

    def __init__(self,
                 url: str = WORLD_BANK_HOMICIDE_URL,
                 *,
                 timeout: int = 20,
                 max_retries: int = 2,
                 cache_ttl_sec: float = 6 * 3600,
                 retry_base_delay: float = 1.0):
        """
        초기화합니다.

        Args:
            url: 지표 API URL (format=json)
            timeout: 요청 타임아웃 (초)
            max_retries: 최대 재시도 횟수
            cache_ttl_sec: 행 캐시 유지 시간 (초)
            retry_base_delay: 재시도 기본 지연 (초)
        """
        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.cache = TTLCache(cache_ttl_sec)

    async def _fetch_json(self) -> Any:
        async def _request() -> Any:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.get(self.url) as response:
                    response.raise_for_status()
                    return await response.json(content_type=None)

        def _count_retry(attempt: int, error: Exception) -> None:
            metrics.fetch_retries.labels(target="worldbank").inc()
            log.warning(f"World Bank 요청 재시도 attempt:{attempt} error:{error}")

        try:
            return await retry_with_backoff(
                _request,
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
                max_delay=10.0,
                on_retry=_count_retry,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise DatasetFetchError(f"World Bank fetch failed: {e}") from e

    async def _load_rows(self) -> List[Dict[str, Any]]:
        payload = await self._fetch_json()
        # 응답 형식: [meta, rows]
        if not isinstance(payload, list) or len(payload) < 2:
            raise DatasetFetchError("Unexpected World Bank response shape")
        rows = payload[1] or []
        if not isinstance(rows, list):
            raise DatasetFetchError("Unexpected World Bank response shape")
        log.info(f"World Bank 행 수신 완료 rows:{len(rows)}")
        return rows

    async def fetch_rows(self) -> List[Dict[str, Any]]:
        """
        지표 데이터셋의 전체 행을 반환합니다 (캐시 사용).

        Raises:
            DatasetFetchError: 조회 실패 또는 응답 형식 오류
        """
        return await self.cache.get_or_compute(self.url, self._load_rows)

class DatasetCountryRiskSource:
    """원시 데이터셋에서 바로 계산하는 CountryRiskSource 구현"""

    def __init__(self, client: WorldBankClient, ceiling: float = DEFAULT_CEILING):
        self.client = client
        self.ceiling = ceiling

    async def get_country_risk(self, country_code: str) -> Optional[CountryRisk]:
        rows = await self.client.fetch_rows()
        return resolve_country_risk(country_code, rows, ceiling=self.ceiling)
