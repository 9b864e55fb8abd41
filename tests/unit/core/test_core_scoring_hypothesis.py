"""
hypothesis를 활용한 scoring 모듈 테스트

이 모듈은 점수 결합, 라벨 임계값, 사고 기반 하향 조정,
SafetyAssessment 조립을 테스트합니다.
"""

import pytest
from hypothesis import given, strategies as st

from factories import make_risk
from safescore.core.models import (
    CommunitySignal, NearbyIncident, SafetyAssessment,
)
from safescore.core.scoring import (
    base_score_from, blend_score, build_assessment, downgrade_by_incidents,
    label_from_score,
)

LABELS = ["Safe", "Caution", "Unsafe", "Unknown"]


def nearby(severity, distance=1.0, id="n1"):
    return NearbyIncident(id=id, type="Bush Fire", severity=severity,
                          distance_km=distance, started_at=None, source="NSW RFS")


class TestLabelFromScore:
    """점수 → 라벨 테스트"""

    @pytest.mark.parametrize("score,label", [
        (10.0, "Safe"),
        (7.5, "Safe"),
        (7.4999, "Caution"),
        (4.0, "Caution"),
        (3.9999, "Unsafe"),
        (0.0, "Unsafe"),
        (None, "Unknown"),
        (float("nan"), "Unknown"),
    ])
    def test_default_thresholds(self, score, label):
        assert label_from_score(score) == label

    def test_custom_thresholds(self):
        assert label_from_score(7.0, safe_threshold=7.0, caution_threshold=3.0) == "Safe"
        assert label_from_score(2.9, safe_threshold=7.0, caution_threshold=3.0) == "Unsafe"

    @given(st.floats(min_value=0, max_value=10, allow_nan=False))
    def test_label_is_known(self, score):
        assert label_from_score(score) in ("Safe", "Caution", "Unsafe")


class TestDowngradeByIncidents:
    """사고 기반 하향 조정 테스트"""

    @pytest.mark.parametrize("label", LABELS)
    def test_emergency_anywhere_is_unsafe(self, label):
        incidents = [nearby("Advice", 0.5), nearby("Emergency Warning", 15.0, "n2")]
        assert downgrade_by_incidents(label, incidents) == "Unsafe"

    @pytest.mark.parametrize("severity", ["Watch and Act", "watch-and-act", "Warning"])
    def test_nearest_watch_or_warning_caps_safe(self, severity):
        assert downgrade_by_incidents("Safe", [nearby(severity)]) == "Caution"

    def test_only_nearest_counts_for_caution(self):
        incidents = [nearby("Advice", 0.5), nearby("Watch and Act", 3.0, "n2")]
        assert downgrade_by_incidents("Safe", incidents) == "Safe"

    @pytest.mark.parametrize("label", ["Caution", "Unsafe", "Unknown"])
    def test_warning_does_not_touch_other_labels(self, label):
        assert downgrade_by_incidents(label, [nearby("Warning")]) == label

    def test_no_incidents(self):
        assert downgrade_by_incidents("Safe", []) == "Safe"
        assert downgrade_by_incidents("Safe", None) == "Safe"

    @given(
        label=st.sampled_from(LABELS),
        severities=st.lists(
            st.sampled_from(["Advice", "Warning", "Watch and Act", "Emergency Warning", "Extreme"]),
            max_size=5,
        ),
    )
    def test_idempotent(self, label, severities):
        incidents = [nearby(s, float(i), f"n{i}") for i, s in enumerate(severities)]
        once = downgrade_by_incidents(label, incidents)
        assert downgrade_by_incidents(once, incidents) == once


class TestBlendScore:
    """점수 결합 테스트"""

    def test_penalty_applied(self):
        assert blend_score(8.0, -1.2) == 6.8

    def test_no_base(self):
        assert blend_score(None, -0.7) is None

    def test_base_score_from_risk(self):
        assert base_score_from(None) is None
        assert base_score_from(make_risk(score=9.8)) == 9.8

    @given(
        base=st.floats(min_value=0, max_value=10, allow_nan=False),
        penalty=st.sampled_from([0.0, -0.5, -0.7, -1.2]),
    )
    def test_clamped(self, base, penalty):
        score = blend_score(base, penalty)
        assert 0.0 <= score <= 10.0


class TestBuildAssessment:
    """SafetyAssessment 조립 테스트"""

    def test_country_only(self):
        result = build_assessment(
            lat=-33.8688, lng=151.2093, country="AU",
            risk=make_risk(score=8.0), incidents=[], signal=CommunitySignal(),
            timestamp="2025-01-15T00:00:00.000Z",
        )

        assert isinstance(result, SafetyAssessment)
        assert result.safety.label == "Safe"
        assert result.safety.score == 8.0
        assert result.safety.coverage == "COUNTRY"
        assert result.safety.confidence == "low"
        assert result.breakdown == {"country_risk": 8.0}
        assert result.incidents is None
        assert result.community is None
        assert result.sources[0].name == "WorldBank/UNODC"
        assert result.sources[0].year == 2021
        assert result.timestamp == "2025-01-15T00:00:00.000Z"

    def test_nothing_known(self):
        result = build_assessment(
            lat=0.0, lng=0.0, country=None, risk=None,
            incidents=[], signal=CommunitySignal(),
        )
        assert result.safety.label == "Unknown"
        assert result.safety.score is None
        assert result.safety.coverage == "NONE"
        assert result.breakdown == {}
        assert result.sources is None
        assert result.location.country is None
        assert result.timestamp.endswith("Z")

    def test_thresholds_echoed(self):
        result = build_assessment(
            lat=0.0, lng=0.0, country="AU", risk=make_risk(score=7.0),
            incidents=[], signal=CommunitySignal(),
            safe_threshold=7.0, caution_threshold=3.0,
        )
        assert result.safety.label == "Safe"
        assert result.safety.thresholds.safe == 7.0
        assert result.safety.thresholds.caution == 3.0

    def test_wire_shape(self):
        result = build_assessment(
            lat=-33.8688, lng=151.2093, country="AU", risk=make_risk(score=8.0),
            incidents=[nearby("Warning")], signal=CommunitySignal(),
        )
        wire = result.to_wire()

        assert set(wire) == {"location", "safety", "breakdown", "incidents",
                             "community", "sources", "timestamp"}
        assert wire["safety"]["label"] == "Caution"
        assert wire["incidents"][0]["distanceKm"] == 1.0
        assert wire["community"] is None
