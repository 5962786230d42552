"""Tests for the league aggregation engine."""

import math

import pytest

from playstyle_metrics.aggregation import (
    compare_to_league,
    compute_comparison,
    compute_league_snapshot,
    league_context,
    normalize,
    normalize_with,
    rank_percentile,
)
from playstyle_metrics.errors import ConfigurationError, UnknownMetricError
from playstyle_metrics.types import (
    MetricCategory,
    MetricDefinition,
    MetricFormat,
    MetricRange,
    ResultBucket,
    TeamMetricValue,
)

# --- Sample data for tests ---

POSSESSION_WITH_TIE = [("C", 50.0), ("A", 70.0), ("B", 50.0)]

LEAGUE_POSSESSION = [
    TeamMetricValue("arsenal", "possession_percentage", ResultBucket.ALL, 61.2),
    TeamMetricValue("brentford", "possession_percentage", ResultBucket.ALL, 44.8),
    TeamMetricValue("chelsea", "possession_percentage", ResultBucket.ALL, 57.5),
    TeamMetricValue("everton", "possession_percentage", ResultBucket.ALL, 39.1),
    TeamMetricValue("fulham", "possession_percentage", ResultBucket.ALL, 50.3),
]


# --- compute_league_snapshot tests ---

class TestLeagueSnapshotRanking:
    def test_tie_broken_by_team_id(self):
        """Equal values get distinct consecutive ranks, lower team id first."""
        snap = compute_league_snapshot("possession_percentage", "all", POSSESSION_WITH_TIE)
        ranks = {t.team_id: t.rank for t in snap.ranked_teams}
        assert ranks == {"A": 1, "B": 2, "C": 3}
        assert snap.percentile_by_team == {"A": 100, "B": 50, "C": 0}

    def test_tie_order_independent_of_input_order(self):
        forward = compute_league_snapshot("possession_percentage", "all", POSSESSION_WITH_TIE)
        backward = compute_league_snapshot(
            "possession_percentage", "all", list(reversed(POSSESSION_WITH_TIE))
        )
        assert forward == backward

    def test_higher_is_better_sorts_descending(self):
        snap = compute_league_snapshot("possession_percentage", "all", LEAGUE_POSSESSION)
        order = [t.team_id for t in snap.ranked_teams]
        assert order == ["arsenal", "chelsea", "fulham", "brentford", "everton"]
        assert [t.rank for t in snap.ranked_teams] == [1, 2, 3, 4, 5]

    def test_lower_is_better_sorts_ascending(self):
        values = [("high-press", 7.2), ("mid-block", 11.5), ("low-block", 16.0)]
        snap = compute_league_snapshot("ppda", "all", values)
        assert [t.team_id for t in snap.ranked_teams] == ["high-press", "mid-block", "low-block"]
        assert snap.percentile_by_team["high-press"] == 100
        assert snap.percentile_by_team["low-block"] == 0

    def test_neutral_metric_sorts_descending(self):
        values = [("patient", 20.0), ("direct", 80.0), ("mixed", 50.0)]
        snap = compute_league_snapshot("direct_play_vs_possession", "all", values)
        assert [t.team_id for t in snap.ranked_teams] == ["direct", "mixed", "patient"]

    def test_rank_monotonic_for_distinct_values(self):
        snap = compute_league_snapshot("possession_percentage", "all", LEAGUE_POSSESSION)
        entries = snap.ranked_teams
        for a in entries:
            for b in entries:
                if a.value > b.value:
                    assert a.rank < b.rank

    def test_rank_of_and_top(self):
        snap = compute_league_snapshot("possession_percentage", "all", LEAGUE_POSSESSION)
        assert snap.rank_of("fulham") == 3
        assert snap.rank_of("liverpool") is None
        assert [t.team_id for t in snap.top(2)] == ["arsenal", "chelsea"]


class TestLeagueSnapshotAggregates:
    def test_average_min_max(self):
        snap = compute_league_snapshot("possession_percentage", "all", LEAGUE_POSSESSION)
        assert snap.average == pytest.approx((61.2 + 44.8 + 57.5 + 39.1 + 50.3) / 5)
        assert snap.min == 39.1
        assert snap.max == 61.2
        assert snap.count == 5

    def test_missing_values_excluded_not_zero(self):
        values = [
            {"teamId": "a", "value": 40.0},
            {"teamId": "b", "value": None},
            {"teamId": "c", "value": float("nan")},
            {"teamId": "d", "value": "60"},
            {"teamId": "e", "value": True},
            {"team_id": "f", "value": 60.0},
        ]
        snap = compute_league_snapshot("possession_percentage", "all", values)
        assert snap.count == 2
        assert snap.average == 50.0
        assert snap.min == 40.0
        assert set(snap.percentile_by_team) == {"a", "f"}

    def test_other_metric_and_bucket_records_ignored(self):
        values = LEAGUE_POSSESSION + [
            TeamMetricValue("arsenal", "possession_percentage", ResultBucket.WIN, 99.0),
            TeamMetricValue("arsenal", "ppda", ResultBucket.ALL, 9.0),
        ]
        snap = compute_league_snapshot("possession_percentage", ResultBucket.ALL, values)
        assert snap.count == 5
        assert snap.max == 61.2

    def test_empty_input_returns_no_data_marker(self):
        snap = compute_league_snapshot("possession_percentage", "win", [])
        assert snap.average is None
        assert snap.min is None
        assert snap.max is None
        assert snap.ranked_teams == ()
        assert snap.percentile_by_team == {}
        assert not snap.has_data
        assert snap.insufficient_data

    def test_single_team_percentile_is_100(self):
        snap = compute_league_snapshot("ppda", "draw", [("only", 12.0)])
        assert snap.percentile_by_team == {"only": 100}
        assert snap.ranked_teams[0].rank == 1
        assert snap.has_data
        assert snap.insufficient_data
        assert snap.average == 12.0

    def test_idempotent(self):
        first = compute_league_snapshot("possession_percentage", "all", LEAGUE_POSSESSION)
        second = compute_league_snapshot("possession_percentage", "all", LEAGUE_POSSESSION)
        assert first == second

    def test_bucket_string_coerced(self):
        snap = compute_league_snapshot("ppda", "loss", [("x", 10.0)])
        assert snap.bucket is ResultBucket.LOSS

    def test_duplicate_team_raises(self):
        with pytest.raises(ValueError, match="Duplicate"):
            compute_league_snapshot("ppda", "all", [("x", 10.0), ("x", 11.0)])

    def test_unknown_metric_raises(self):
        with pytest.raises(UnknownMetricError):
            compute_league_snapshot("not_a_metric", "all", [("x", 1.0)])


class TestRankPercentile:
    def test_bounds(self):
        for total in range(1, 25):
            values = [rank_percentile(i, total) for i in range(total)]
            assert all(0 <= v <= 100 for v in values)
            assert values[0] == 100
            if total > 1:
                assert values[-1] == 0

    def test_halves_round_up(self):
        # 9 teams: index 1 -> 87.5, index 5 -> 37.5
        assert rank_percentile(1, 9) == 88
        assert rank_percentile(5, 9) == 38

    def test_single_team(self):
        assert rank_percentile(0, 1) == 100


# --- normalize tests ---

class TestNormalize:
    def test_ppda_inverted(self):
        assert normalize("ppda", 5) == pytest.approx(75.0)

    def test_directionality_endpoints(self):
        assert normalize("ppda", 0) == pytest.approx(100.0)
        assert normalize("ppda", 20) == pytest.approx(0.0)
        assert normalize("possession_percentage", 0) == pytest.approx(0.0)
        assert normalize("possession_percentage", 100) == pytest.approx(100.0)

    def test_offset_range(self):
        # defensive_line_height spans 10-60 m
        assert normalize("defensive_line_height", 35) == pytest.approx(50.0)

    def test_out_of_range_clamped(self):
        assert normalize("possession_percentage", 150) == 100.0
        assert normalize("possession_percentage", -10) == 0.0
        assert normalize("ppda", 25) == 0.0
        assert normalize("ppda", -5) == 100.0
        assert normalize("pass_completion", float("inf")) == 100.0

    def test_always_within_bounds(self):
        for value in (-1e9, -1, 0, 3.3, 10, 19.99, 20, 1e9):
            for metric in ("ppda", "possession_percentage", "direct_play_vs_possession"):
                assert 0.0 <= normalize(metric, value) <= 100.0

    def test_neutral_not_inverted(self):
        assert normalize("direct_play_vs_possession", 80) == pytest.approx(80.0)

    def test_nan_raises(self):
        with pytest.raises(ValueError):
            normalize("ppda", float("nan"))

    def test_unknown_metric_raises(self):
        with pytest.raises(UnknownMetricError):
            normalize("not_a_metric", 5)

    def test_invalid_range_raises(self):
        bad = MetricDefinition(
            id="broken", name="Broken", description="", category=MetricCategory.GENERAL,
            unit="count", format=MetricFormat(decimals=0),
            range=MetricRange(min=10, max=10), higher_is_better=True,
        )
        with pytest.raises(ConfigurationError):
            normalize_with(bad, 5)


# --- compute_comparison tests ---

class TestComputeComparison:
    def test_goals_per_match_significant(self):
        record = compute_comparison("goals_per_match", 2.0, 1.0)
        assert record.percent_difference == pytest.approx(66.667, abs=0.01)
        assert record.is_significant
        assert record.better_team == "A"

    def test_zero_values_no_division(self):
        record = compute_comparison("goals_per_match", 0, 0)
        assert record.percent_difference == 0
        assert not record.is_significant
        assert record.better_team is None

    def test_lower_is_better_favors_smaller(self):
        record = compute_comparison("ppda", 6.0, 12.0)
        assert record.is_significant
        assert record.better_team == "A"

    def test_neutral_metric_has_no_better_team(self):
        record = compute_comparison("direct_play_vs_possession", 80, 20)
        assert record.is_significant
        assert record.better_team is None

    def test_insignificant_has_no_better_team(self):
        record = compute_comparison("goals_per_match", 1.0, 1.1)
        assert not record.is_significant
        assert record.better_team is None

    def test_custom_threshold(self):
        record = compute_comparison("goals_per_match", 1.0, 1.1, threshold_percent=5)
        assert record.is_significant
        assert record.better_team == "B"

    def test_team_ids_used(self):
        record = compute_comparison(
            "possession_percentage", 40, 65, team_a="everton", team_b="chelsea"
        )
        assert record.better_team == "chelsea"

    def test_minimal_difference(self):
        assert compute_comparison("pass_completion", 85.0, 86.0).is_minimal
        assert not compute_comparison("pass_completion", 60.0, 86.0).is_minimal

    def test_unknown_metric_raises(self):
        with pytest.raises(UnknownMetricError):
            compute_comparison("not_a_metric", 1, 2)


# --- league helpers ---

class TestCompareToLeague:
    def test_above_average(self):
        delta = compare_to_league("possession_percentage", 60.0, 50.0)
        assert delta.difference == pytest.approx(10.0)
        assert delta.percent_difference == pytest.approx(20.0)

    def test_zero_average(self):
        delta = compare_to_league("goals_per_match", 1.0, 0.0)
        assert delta.difference == 1.0
        assert delta.percent_difference == 0.0
        assert math.isfinite(delta.percent_difference)


class TestLeagueContext:
    @pytest.mark.parametrize(
        "percentile, label",
        [
            (100, "Top 10%"),
            (90, "Top 10%"),
            (85, "Top 20%"),
            (60, "Above Average"),
            (50, "Average"),
            (35, "Below Average"),
            (25, "Bottom 30%"),
            (10, "Bottom 20%"),
            (9.9, "Bottom 10%"),
            (0, "Bottom 10%"),
        ],
    )
    def test_bands(self, percentile, label):
        assert league_context(percentile) == label
