"""
근처 사고 검색 및 커뮤니티 제보 집계 테스트
"""

import pytest

from factories import NOW_EPOCH, NOW_MS, SYDNEY, make_incident, make_report
from safescore.core.community import (
    aggregate_community_signal, community_penalty, filter_reports,
)
from safescore.core.incidents import find_nearby_incidents, is_expired
from safescore.core.models import Coordinates


class TestFindNearbyIncidents:
    """근처 사고 검색 테스트"""

    def test_sorted_by_distance(self, sydney):
        incidents = [
            make_incident("far", lat=-33.95, lng=151.25),
            make_incident("near", lat=-33.869, lng=151.210),
            make_incident("mid", lat=-33.90, lng=151.21),
        ]
        nearby = find_nearby_incidents(sydney, incidents, 20, NOW_EPOCH)

        assert [i.id for i in nearby] == ["near", "mid", "far"]
        distances = [i.distance_km for i in nearby]
        assert distances == sorted(distances)

    def test_radius_filter(self, sydney):
        # 멜버른은 약 714km
        incidents = [make_incident("melbourne", lat=-37.8136, lng=144.9631)]
        assert find_nearby_incidents(sydney, incidents, 20, NOW_EPOCH) == []
        assert len(find_nearby_incidents(sydney, incidents, 1000, NOW_EPOCH)) == 1

    def test_distance_rounded_to_one_decimal(self, sydney):
        nearby = find_nearby_incidents(
            sydney, [make_incident(lat=-33.90, lng=151.21)], 20, NOW_EPOCH)
        assert nearby[0].distance_km == round(nearby[0].distance_km, 1)
        assert nearby[0].distance_km == pytest.approx(3.5, abs=0.1)

    def test_expired_incidents_dropped(self, sydney):
        incidents = [
            make_incident("stale", expires_at=NOW_EPOCH - 1),
            make_incident("live", expires_at=NOW_EPOCH + 3600),
            make_incident("no-ttl"),
        ]
        nearby = find_nearby_incidents(sydney, incidents, 20, NOW_EPOCH)
        assert {i.id for i in nearby} == {"live", "no-ttl"}

    def test_is_expired(self):
        assert is_expired(make_incident(expires_at=NOW_EPOCH - 1), NOW_EPOCH)
        assert not is_expired(make_incident(expires_at=NOW_EPOCH), NOW_EPOCH)
        assert not is_expired(make_incident(expires_at=None), NOW_EPOCH)

    def test_projection_fields(self, sydney):
        nearby = find_nearby_incidents(
            sydney, [make_incident("x", severity="Watch and Act")], 20, NOW_EPOCH)
        wire = nearby[0].model_dump(by_alias=True)
        assert wire["id"] == "x"
        assert wire["severity"] == "Watch and Act"
        assert wire["source"] == "NSW RFS"
        assert wire["startedAt"] == "2025-01-14T22:00:00.000Z"
        assert "distanceKm" in wire

    def test_empty(self, sydney):
        assert find_nearby_incidents(sydney, [], 20, NOW_EPOCH) == []


class TestCommunitySignal:
    """커뮤니티 제보 집계 테스트"""

    def test_no_reports_is_no_signal(self, sydney):
        signal = aggregate_community_signal(sydney, [], now_ms=NOW_MS)
        assert signal.delta == 0.0
        assert signal.lighting is None
        assert signal.crowd is None
        assert signal.reports == []

    def test_single_report_labels_without_penalty(self, sydney):
        signal = aggregate_community_signal(sydney, [make_report()], now_ms=NOW_MS)
        assert signal.delta == 0.0
        assert signal.lighting == "Poor"
        assert signal.crowd == "High"
        assert len(signal.reports) == 1

    def test_unrelated_type_labels_good(self, sydney):
        signal = aggregate_community_signal(
            sydney, [make_report(type="theft")], now_ms=NOW_MS)
        assert signal.lighting == "Good"
        assert signal.crowd == "High"
        assert signal.delta == 0.0

    def test_two_lighting_reports_penalize(self, sydney):
        reports = [make_report("a"), make_report("b")]
        signal = aggregate_community_signal(sydney, reports, now_ms=NOW_MS)
        assert signal.delta == pytest.approx(-0.7)

    def test_lighting_and_crowd_penalties_add(self, sydney):
        reports = [
            make_report("l1"), make_report("l2"), make_report("l3"),
            make_report("c1", type="crowd_low"), make_report("c2", type="crowd"),
        ]
        signal = aggregate_community_signal(sydney, reports, now_ms=NOW_MS)
        assert signal.delta == pytest.approx(-1.2)
        assert signal.lighting == "Poor"
        assert signal.crowd == "Low"

    def test_old_reports_excluded(self, sydney):
        reports = [make_report("old", age_days=31), make_report("new", age_days=29)]
        kept = filter_reports(sydney, reports, 2, 30, NOW_MS)
        assert [r.id for r in kept] == ["new"]

    def test_far_reports_excluded(self, sydney):
        reports = [make_report("far", lat=-33.95, lng=151.21), make_report("near")]
        kept = filter_reports(sydney, reports, 2, 30, NOW_MS)
        assert [r.id for r in kept] == ["near"]

    def test_newest_first(self, sydney):
        reports = [
            make_report("older", age_days=5),
            make_report("newest", age_days=0.5),
            make_report("middle", age_days=2),
        ]
        kept = filter_reports(sydney, reports, 2, 30, NOW_MS)
        assert [r.id for r in kept] == ["newest", "middle", "older"]

    def test_unparseable_created_at_skipped(self, sydney):
        report = make_report().model_copy(update={"created_at": "yesterday-ish"})
        assert filter_reports(sydney, [report], 2, 30, NOW_MS) == []

    def test_penalty_on_prefiltered(self):
        signal = community_penalty([make_report("c1", type="crowd_low"),
                                    make_report("c2", type="crowd_low")])
        assert signal.delta == pytest.approx(-0.5)
        assert signal.lighting == "Good"
        assert signal.crowd == "Low"

    def test_custom_point(self):
        point = Coordinates(lat=0.0, lng=0.0)
        assert aggregate_community_signal(point, [make_report()], now_ms=NOW_MS).reports == []
