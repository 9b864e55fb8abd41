"""
Hazard feed adapter for SafeScore.

This module fetches a GeoRSS/CAP feed over HTTP and exposes the parsed
incidents through the IncidentSource port. Parsed results are cached
per feed URL so concurrent assessments share one download.
"""

import asyncio
import time
from typing import List, Optional

import aiohttp

from safescore.common.cache import TTLCache
from safescore.common.retry import retry_with_backoff
from safescore.core.errors import DatasetFetchError
from safescore.core.feed import DEFAULT_SOURCE, parse_feed_document
from safescore.core.models import Incident
from safescore.observability import metrics
from safescore.observability.logging_setup import get_logger

log = get_logger("safescore.feed_client")

class FeedIncidentSource:
    """HTTP 사고 피드 어댑터 (IncidentSource 구현)"""

    def __init__(self,
                 url: Optional[str],
                 *,
                 source_label: str = DEFAULT_SOURCE,
                 ttl_hours: Optional[float] = 36.0,
                 cache_ttl_sec: float = 300.0,
                 timeout: int = 10,
                 max_retries: int = 2,
                 retry_base_delay: float = 0.5):
        """
        초기화합니다.

        Args:
            url: 피드 URL (None이면 빈 결과)
            source_label: 사고 출처 라벨
            ttl_hours: 수집된 사고의 soft TTL (시간)
            cache_ttl_sec: 파싱 결과 캐시 유지 시간 (초)
            timeout: 요청 타임아웃 (초)
            max_retries: 최대 재시도 횟수
            retry_base_delay: 재시도 기본 지연 (초)
        """
        self.url = url
        self.source_label = source_label
        self.ttl_hours = ttl_hours
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.cache = TTLCache(cache_ttl_sec)

        log.info(f"피드 어댑터 초기화됨 url:{url} source:{source_label}")

    async def _fetch_text(self) -> str:
        """피드 원문을 가져옵니다."""
        async def _request() -> str:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.get(self.url, allow_redirects=True) as response:
                    response.raise_for_status()
                    return await response.text()

        def _count_retry(attempt: int, error: Exception) -> None:
            metrics.fetch_retries.labels(target="feed").inc()
            log.warning(f"피드 요청 재시도 attempt:{attempt} error:{error}")

        try:
            return await retry_with_backoff(
                _request,
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
                max_delay=5.0,
                on_retry=_count_retry,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DatasetFetchError(f"feed fetch failed: {e}") from e

    async def _load(self) -> List[Incident]:
        xml_text = await self._fetch_text()
        log.info(f"피드 수신 완료 chars:{len(xml_text)}")

        with metrics.feed_parse_seconds.time():
            result = parse_feed_document(
                xml_text,
                self.source_label,
                now=time.time(),
                ttl_hours=self.ttl_hours,
            )

        metrics.incidents_parsed.labels(source=self.source_label).inc(len(result.incidents))
        if result.skipped:
            metrics.feed_entries_skipped.inc(result.skipped)
        log.info("피드 파싱 완료",
                 incidents=len(result.incidents),
                 skipped=result.skipped)
        return result.incidents

    async def fetch_incidents(self) -> List[Incident]:
        """
        피드의 현재 사고 목록을 반환합니다.

        Raises:
            DatasetFetchError: HTTP 조회 실패
            FeedParseError: 피드를 XML로 파싱할 수 없음
        """
        if not self.url:
            log.warning("RFS_FEED_URL이 설정되지 않아 사고 없이 진행합니다")
            return []
        return await self.cache.get_or_compute(self.url, self._load)

    async def refresh(self) -> List[Incident]:
        """
        캐시를 버리고 피드를 다시 수집합니다.

        Raises:
            DatasetFetchError: HTTP 조회 실패
            FeedParseError: 피드를 XML로 파싱할 수 없음
        """
        if self.url:
            self.cache.invalidate(self.url)
        return await self.fetch_incidents()
