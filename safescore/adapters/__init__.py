"""
Adapters for SafeScore hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O: the hazard feed, the World Bank indicator
API and the local SQLite stores.
"""

from .storage import SQLiteReportStore, SQLiteCountryRiskStore
from .feed.client import FeedIncidentSource
from .worldbank.client import WorldBankClient, DatasetCountryRiskSource

__all__ = [
    "SQLiteReportStore", "SQLiteCountryRiskStore", "FeedIncidentSource",
    "WorldBankClient", "DatasetCountryRiskSource",
]
