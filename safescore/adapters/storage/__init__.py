"""
Storage adapters for SafeScore hexagonal architecture.

This module contains local SQLite stores for community reports
and the seeded country risk table.
"""

from .sqlite_reports import SQLiteReportStore
from .sqlite_country_risk import SQLiteCountryRiskStore

__all__ = ["SQLiteReportStore", "SQLiteCountryRiskStore"]
