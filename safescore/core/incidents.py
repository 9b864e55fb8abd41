"""
Nearby incident lookup for SafeScore.
"""

import time
from typing import Iterable, List, Optional

from safescore.common.geo import haversine_distance_km, is_finite_number, round1
from .models import Coordinates, Incident, NearbyIncident

DEFAULT_INCIDENT_RADIUS_KM = 20.0

def is_expired(incident: Incident, now_epoch: float) -> bool:
    return incident.expires_at is not None and incident.expires_at < now_epoch

def find_nearby_incidents(point: Coordinates,
                          incidents: Iterable[Incident],
                          radius_km: float = DEFAULT_INCIDENT_RADIUS_KM,
                          now_epoch: Optional[float] = None) -> List[NearbyIncident]:
    """
    반경 내의 유효한 사고를 가까운 순으로 반환합니다.

    Args:
        point: 기준 지점
        incidents: 후보 사고 목록
        radius_km: 검색 반경 (킬로미터)
        now_epoch: 현재 시각 (epoch 초), TTL 만료 판정용

    Returns:
        거리(소수 1자리)를 포함한 NearbyIncident 목록
    """
    if now_epoch is None:
        now_epoch = time.time()

    # TTL 필터를 거리 계산보다 먼저 적용
    live = [i for i in incidents if not is_expired(i, now_epoch)]

    hits = []
    for incident in live:
        coords = incident.coordinates
        if not (is_finite_number(coords.lat) and is_finite_number(coords.lng)):
            continue
        distance = haversine_distance_km(point, coords)
        if distance <= radius_km:
            hits.append((distance, incident))

    hits.sort(key=lambda pair: pair[0])

    return [
        NearbyIncident(
            id=incident.id,
            type=incident.type,
            severity=incident.severity,
            distance_km=round1(distance),
            started_at=incident.started_at,
            source=incident.source,
        )
        for distance, incident in hits
    ]
