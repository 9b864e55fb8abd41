"""
TTL cache with in-flight request deduplication.

Entries hold the cached value, the instant it was inserted and, while a
computation is running, the pending future that concurrent callers share.
Failed computations are never cached.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional

from safescore.core.errors import DatasetFetchError
from safescore.observability.logging_setup import get_logger

log = get_logger("safescore.cache")

@dataclass
class CacheEntry:
    value: Any = None
    inserted_at: float = 0.0
    pending: Optional[asyncio.Future] = None
    has_value: bool = False

class TTLCache:
    """TTL 만료와 동시 요청 병합을 지원하는 비동기 캐시"""

    def __init__(self, ttl_sec: float, clock: Callable[[], float] = time.monotonic):
        """
        초기화합니다.

        Args:
            ttl_sec: 항목 유효 시간 (초)
            clock: 시간 함수 (테스트용 주입)
        """
        self.ttl = ttl_sec
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}

    def _fresh(self, entry: CacheEntry) -> bool:
        return entry.has_value and (self._clock() - entry.inserted_at) < self.ttl

    async def get_or_compute(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> Any:
        """
        캐시된 값을 반환하거나, 없으면 factory로 계산합니다.

        같은 키에 대해 계산이 진행 중이면 그 결과를 함께 기다립니다.

        Args:
            key: 캐시 키
            factory: 값을 계산하는 비동기 함수

        Returns:
            캐시된 값 또는 새로 계산된 값
        """
        entry = self._entries.get(key)
        if entry is not None:
            if self._fresh(entry):
                log.debug("캐시 적중", key=str(key))
                return entry.value
            if entry.pending is not None:
                log.debug("진행 중인 요청에 합류", key=str(key))
                return await asyncio.shield(entry.pending)
        else:
            entry = CacheEntry()
            self._entries[key] = entry

        future = asyncio.get_running_loop().create_future()
        entry.pending = future
        try:
            value = await factory()
        except BaseException as e:
            if isinstance(e, Exception):
                future.set_exception(e)
            else:
                # 소유자가 취소되면 대기자는 조회 실패로 처리
                future.set_exception(DatasetFetchError(f"computation for {key!r} was cancelled"))
            # 대기자가 없을 때의 "never retrieved" 경고 방지
            future.exception()
            raise
        else:
            entry.value = value
            entry.inserted_at = self._clock()
            entry.has_value = True
            future.set_result(value)
            return value
        finally:
            entry.pending = None

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """키 하나 또는 전체 캐시를 비웁니다."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
