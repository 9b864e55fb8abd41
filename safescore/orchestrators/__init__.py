"""
Orchestrators for SafeScore.

This module contains the orchestrators that coordinate
the flow between ports and the scoring core.
"""
from .assessor import SafetyAssessor, validate_point
from .seeder import CountryRiskSeeder

__all__ = ["SafetyAssessor", "CountryRiskSeeder", "validate_point"]
