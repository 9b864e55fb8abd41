"""
Core domain models and pure functions for SafeScore.

This module contains the domain models and pure scoring logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import (
    Coordinates, Incident, NearbyIncident, CommunityReport, NewCommunityReport,
    CountryRisk, CommunitySignal, SafetyAssessment,
)
from .errors import (
    SafeScoreError, ValidationError, FeedParseError, DatasetFetchError, ConfigurationError,
)
from .severity import normalize_severity
from .feed import parse_incident_feed
from .country_risk import compute_risk_score, resolve_country_risk, build_latest_risk_table
from .incidents import find_nearby_incidents
from .community import aggregate_community_signal
from .scoring import label_from_score, downgrade_by_incidents, blend_score, build_assessment

__all__ = [
    "Coordinates", "Incident", "NearbyIncident", "CommunityReport", "NewCommunityReport",
    "CountryRisk", "CommunitySignal", "SafetyAssessment",
    "SafeScoreError", "ValidationError", "FeedParseError", "DatasetFetchError", "ConfigurationError",
    "normalize_severity", "parse_incident_feed",
    "compute_risk_score", "resolve_country_risk", "build_latest_risk_table",
    "find_nearby_incidents", "aggregate_community_signal",
    "label_from_score", "downgrade_by_incidents", "blend_score", "build_assessment",
]
