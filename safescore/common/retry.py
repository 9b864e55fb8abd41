"""
Retry utilities for SafeScore.

This module provides retry and backoff utilities used by
the HTTP adapters that talk to external datasets.
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar('T')

async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    on_retry: Optional[Callable[[int, Exception], None]] = None,
) -> T:
    """
    지수 백오프와 함께 함수를 재시도합니다.

    Args:
        func: 재시도할 비동기 함수
        max_retries: 최대 재시도 횟수
        base_delay: 기본 지연 시간 (초)
        max_delay: 최대 지연 시간 (초)
        jitter: 지터 적용 여부
        on_retry: 재시도 직전에 (시도 횟수, 예외)로 호출되는 콜백

    Returns:
        함수 실행 결과

    Raises:
        마지막 시도에서 발생한 예외
    """
    last_exception: Optional[Exception] = None

    for attempt in range(1, max_retries + 2):  # 최초 1회 + max_retries
        try:
            return await func()
        except Exception as e:
            last_exception = e

            if attempt > max_retries:
                break

            if on_retry is not None:
                on_retry(attempt, e)

            # 지연 계산
            delay = min(max_delay, base_delay * (2 ** (attempt - 1)))

            # 지터 적용
            if jitter:
                delay = delay * (0.5 + random.random() * 0.5)

            await asyncio.sleep(delay)

    raise last_exception
