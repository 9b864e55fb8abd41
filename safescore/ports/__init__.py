"""
Port interfaces for SafeScore hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the scoring core and external collaborators.
"""

from .incidents import IncidentSource
from .country_risk import CountryRiskSource
from .reports import CommunityReportSource

__all__ = ["IncidentSource", "CountryRiskSource", "CommunityReportSource"]
