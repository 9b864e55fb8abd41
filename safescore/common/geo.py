"""
Geographic utilities for SafeScore.

This module provides the great-circle distance used by every
spatial filter, plus the small numeric helpers (finite checks,
clamping and half-up rounding) shared by the scoring code.
"""

import math
from typing import Any

# 지구 반지름 (킬로미터)
EARTH_RADIUS_KM = 6371.0

def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    두 지점 간의 Haversine 거리를 계산합니다 (킬로미터).

    Args:
        lat1: 첫 번째 지점의 위도
        lon1: 첫 번째 지점의 경도
        lat2: 두 번째 지점의 위도
        lon2: 두 번째 지점의 경도

    Returns:
        두 지점 간의 거리 (킬로미터)
    """
    # 도를 라디안으로 변환
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)

    # 위도와 경도의 차이
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    # Haversine 공식
    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    # 대척점에서 부동소수 오차로 1을 넘을 수 있음
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return c * EARTH_RADIUS_KM

def haversine_distance_km(a: Any, b: Any) -> float:
    """
    lat/lng 속성을 가진 두 지점 간의 거리를 계산합니다 (킬로미터).

    Args:
        a: 첫 번째 지점 (Coordinates 등)
        b: 두 번째 지점

    Returns:
        두 지점 간의 거리 (킬로미터)
    """
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)

def validate_coordinates(lat: float, lon: float) -> bool:
    """
    좌표가 유효한지 확인합니다.

    Args:
        lat: 위도
        lon: 경도

    Returns:
        좌표가 유효하면 True
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180

def is_finite_number(value: Any) -> bool:
    """bool을 제외한 유한한 실수인지 확인합니다."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)

def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))

def round1(value: float) -> float:
    """소수점 첫째 자리로 반올림합니다 (half-up, 음수는 +무한대 방향)."""
    return math.floor(value * 10 + 0.5) / 10
