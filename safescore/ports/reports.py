"""
Community report source port interface.

This module defines the protocol for reading crowd-sourced reports.
"""

from typing import List, Protocol
from safescore.core.models import CommunityReport

class CommunityReportSource(Protocol):
    """커뮤니티 제보 조회 포트 인터페이스"""

    async def list_reports(self, lat: float, lng: float,
                           radius_km: float, days: float) -> List[CommunityReport]:
        """
        후보 제보를 가져옵니다.

        거리/기간 필터는 코어에서 다시 적용하므로 넓게 가져와도 됩니다.

        Args:
            lat: 기준 위도
            lng: 기준 경도
            radius_km: 반경 (킬로미터)
            days: 최근 일수

        Returns:
            CommunityReport 목록
        """
        ...
