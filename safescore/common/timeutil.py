"""
Time helpers for SafeScore.

Timestamps leave the service as UTC ISO 8601 strings with millisecond
precision and a ``Z`` suffix.
"""

from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as date_parser

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def to_iso_utc(dt: datetime) -> str:
    """datetime을 UTC ISO 문자열로 변환합니다 (naive는 UTC로 간주)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"

def utc_now_iso() -> str:
    return to_iso_utc(utc_now())

def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    ISO 8601 또는 RFC 822 형식의 시각 문자열을 파싱합니다.

    Args:
        value: 시각 문자열

    Returns:
        timezone 정보가 있는 datetime, 파싱 실패 시 None
    """
    if not value or not str(value).strip():
        return None
    try:
        dt = date_parser.parse(str(value).strip())
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt

def epoch_ms(dt: datetime) -> float:
    return dt.timestamp() * 1000.0
