"""
Incident source port interface.

This module defines the protocol for obtaining the current incident set.
"""

from typing import List, Protocol
from safescore.core.models import Incident

class IncidentSource(Protocol):
    """사고 데이터 공급 포트 인터페이스"""

    async def fetch_incidents(self) -> List[Incident]:
        """
        현재 유효한 사고 목록을 가져옵니다.

        Returns:
            Incident 목록 (필터링 전)
        """
        ...
