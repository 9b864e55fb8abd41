"""
Country risk source port interface.

This module defines the protocol for country base-risk lookups.
"""

from typing import Optional, Protocol
from safescore.core.models import CountryRisk

class CountryRiskSource(Protocol):
    """국가 위험도 조회 포트 인터페이스"""

    async def get_country_risk(self, country_code: str) -> Optional[CountryRisk]:
        """
        국가 코드로 기본 위험도 레코드를 조회합니다.

        Args:
            country_code: ISO-2 국가 코드

        Returns:
            CountryRisk 또는 None
        """
        ...
