"""
Metrics definitions for SafeScore.

This module defines Prometheus metrics for monitoring
feed ingestion and the safety assessment pipeline.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
assessments_total = Counter(
    "assessments_total",
    "Number of safety assessments produced",
    ["label", "coverage"]
)

source_failures = Counter(
    "source_failures_total",
    "Collaborator failures degraded to an empty result",
    ["source"]
)

incidents_parsed = Counter(
    "incidents_parsed_total",
    "Number of incidents parsed from hazard feeds",
    ["source"]
)

feed_entries_skipped = Counter(
    "feed_entries_skipped_total",
    "Feed entries dropped for missing id or coordinates"
)

reports_created = Counter(
    "reports_created_total",
    "Community reports accepted",
    ["type"]
)

fetch_retries = Counter(
    "fetch_retries_total",
    "HTTP fetch retries against external datasets",
    ["target"]
)

# 히스토그램 메트릭
assessment_seconds = Histogram(
    "assessment_duration_seconds",
    "Time spent producing a safety assessment",
    buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0]
)

feed_parse_seconds = Histogram(
    "feed_parse_duration_seconds",
    "Time spent parsing a hazard feed",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
)

# 게이지 메트릭
country_risk_records = Gauge(
    "country_risk_records",
    "Number of country risk records in the seeded table"
)

uptime_seconds = Gauge(
    "uptime_seconds",
    "Service uptime in seconds"
)
