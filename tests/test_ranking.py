"""
Tests for the activity feed ranking
"""
import pytest

from communitywatch.core.geo_utils import Coordinates
from communitywatch.crowdsource.ranking import parse_time_of_day, rank_reports
from communitywatch.crowdsource.report_handler import Report

USER = Coordinates(lat=-26.2041, lng=28.0473)
NEAR = Coordinates(lat=-26.2050, lng=28.0480)
MID = Coordinates(lat=-26.1500, lng=28.0400)
FAR = Coordinates(lat=-25.7479, lng=28.2293)  # Pretoria


def make_report(report_id, time, coords):
    return Report(coords=coords, id=report_id, time=time, report_type="Crime")


def ids(reports):
    return [r.id for r in reports]


class TestParseTimeOfDay:
    """Test suite for report time parsing."""

    def test_parse_full_time_string(self):
        hours = parse_time_of_day("14:35:12 GMT+0200 (South Africa Standard Time)")
        assert hours == pytest.approx(14 + 35 / 60 + 12 / 3600)

    def test_parse_hours_and_minutes(self):
        assert parse_time_of_day("9:05") == pytest.approx(9 + 5 / 60)

    @pytest.mark.parametrize("value", ["", None, "noon", "25:00", "12:75", "T12:00", 1200])
    def test_malformed_returns_none(self, value):
        assert parse_time_of_day(value) is None


class TestRankReports:
    """Test suite for recency/proximity ranking."""

    def test_empty_list(self):
        assert rank_reports([], USER) == []

    def test_single_report_unchanged(self):
        report = make_report("a", "10:00", FAR)
        assert rank_reports([report], USER) == [report]

    def test_returns_new_list(self):
        reports = [make_report("a", "10:00", FAR), make_report("b", "10:00", NEAR)]
        ranked = rank_reports(reports, USER)
        assert ranked is not reports
        assert ids(reports) == ["a", "b"]

    def test_same_elements_in_and_out(self, sample_reports, home_coords):
        ranked = rank_reports(sample_reports, home_coords)
        assert sorted(ids(ranked)) == sorted(ids(sample_reports))
        assert len(ranked) == len(sample_reports)

    def test_identical_time_orders_by_distance(self):
        reports = [
            make_report("far", "10:00", FAR),
            make_report("near", "10:00", NEAR),
            make_report("mid", "10:00", MID),
        ]
        assert ids(rank_reports(reports, USER)) == ["near", "mid", "far"]

    def test_equal_distance_latest_first(self):
        reports = [
            make_report("ten", "10:00", MID),
            make_report("eleven", "11:00", MID),
        ]
        assert ids(rank_reports(reports, USER)) == ["eleven", "ten"]

    def test_stable_for_identical_time_and_place(self):
        reports = [make_report(str(i), "10:00", MID) for i in range(5)]
        assert ids(rank_reports(reports, USER)) == ["0", "1", "2", "3", "4"]

    def test_malformed_time_does_not_raise(self):
        reports = [
            make_report("bad", "not a time", MID),
            make_report("early", "08:00", MID),
            make_report("late", "12:00", MID),
        ]
        # The malformed report has a zero time term, tying with the latest one
        assert ids(rank_reports(reports, USER)) == ["bad", "late", "early"]

    def test_all_malformed_ranks_by_distance(self):
        reports = [
            make_report("far", "", FAR),
            make_report("near", None, NEAR),
        ]
        assert ids(rank_reports(reports, USER)) == ["near", "far"]

    def test_without_user_position_ranks_by_time(self):
        reports = [
            make_report("early", "07:00", NEAR),
            make_report("late", "18:00", FAR),
            make_report("noon", "12:00", MID),
        ]
        assert ids(rank_reports(reports, None)) == ["late", "noon", "early"]

    def test_distance_weight_only(self):
        reports = [
            make_report("late_far", "18:00", FAR),
            make_report("early_near", "07:00", NEAR),
        ]
        ranked = rank_reports(reports, USER, time_weight=0.0, distance_weight=1.0)
        assert ids(ranked) == ["early_near", "late_far"]

    def test_time_weight_only(self):
        reports = [
            make_report("early_near", "07:00", NEAR),
            make_report("late_far", "18:00", FAR),
        ]
        ranked = rank_reports(reports, USER, time_weight=1.0, distance_weight=0.0)
        assert ids(ranked) == ["late_far", "early_near"]

    def test_default_weights_blend_both_terms(self):
        # "mid" is neither newest nor nearest but beats both extremes
        reports = [
            make_report("newest_far", "12:00", FAR),
            make_report("oldest_near", "06:00", USER),
            make_report("mid", "11:30", NEAR),
        ]
        assert ids(rank_reports(reports, USER))[0] == "mid"

    def test_reference_time_clamps_future_reports(self):
        reports = [
            make_report("future", "13:00", MID),
            make_report("now", "12:00", MID),
            make_report("old", "06:00", MID),
        ]
        ranked = rank_reports(reports, USER, reference_time="12:00")
        assert ids(ranked) == ["future", "now", "old"]

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            rank_reports([], USER, time_weight=-1.0)
