"""League aggregation engine for team metrics.

Percentile ranks, league averages, normalized radar scores and pairwise
comparisons. Pure math module, no I/O, no side effects.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from playstyle_metrics.catalog import MetricCatalog, default_catalog, validate_definition
from playstyle_metrics.types import (
    DEFAULT_SIGNIFICANCE_THRESHOLD,
    ComparisonRecord,
    LeagueDelta,
    LeagueMetricSnapshot,
    MetricDefinition,
    RankedTeam,
    ResultBucket,
    TeamMetricValue,
)

# (inclusive lower bound, label), checked top down
LEAGUE_CONTEXT_BANDS: tuple[tuple[int, str], ...] = (
    (90, "Top 10%"),
    (80, "Top 20%"),
    (70, "Top 30%"),
    (60, "Above Average"),
    (40, "Average"),
    (30, "Below Average"),
    (20, "Bottom 30%"),
    (10, "Bottom 20%"),
)


def compute_league_snapshot(
    metric_id: str,
    bucket: ResultBucket | str,
    values: Iterable[TeamMetricValue | Mapping[str, Any] | tuple[str, float]],
    catalog: MetricCatalog | None = None,
) -> LeagueMetricSnapshot:
    """Aggregate all teams' values for one metric and result bucket.

    Teams without a finite numeric value are left out rather than counted as
    zero. An empty input returns a snapshot with ``average=None`` and no
    ranked teams instead of raising.

    Ranking: descending by value unless the metric is lower-is-better, in
    which case ascending. Neutral metrics sort descending. Equal values never
    share a rank; they are ordered by team id (lexical, ascending) and get
    consecutive ranks.
    """
    definition = _definition(metric_id, catalog)
    validate_definition(definition)
    bucket = ResultBucket(bucket)

    observed = _collect_values(metric_id, bucket, values)
    if not observed:
        return LeagueMetricSnapshot(
            metric_id=metric_id, bucket=bucket, average=None, min=None, max=None,
        )

    ranked = rank_values(observed, definition.higher_is_better)
    numbers = [value for _, value in observed]

    return LeagueMetricSnapshot(
        metric_id=metric_id,
        bucket=bucket,
        average=sum(numbers) / len(numbers),
        min=min(numbers),
        max=max(numbers),
        ranked_teams=ranked,
        percentile_by_team={entry.team_id: entry.percentile for entry in ranked},
    )


def rank_values(
    observed: list[tuple[str, float]], higher_is_better: bool | None
) -> tuple[RankedTeam, ...]:
    """Sort (team_id, value) pairs by directionality and assign rank/percentile."""
    if higher_is_better is False:
        ordered = sorted(observed, key=lambda item: (item[1], item[0]))
    else:
        ordered = sorted(observed, key=lambda item: (-item[1], item[0]))

    total = len(ordered)
    return tuple(
        RankedTeam(
            team_id=team_id,
            value=value,
            rank=index + 1,
            percentile=rank_percentile(index, total),
        )
        for index, (team_id, value) in enumerate(ordered)
    )


def rank_percentile(index: int, total: int) -> int:
    """Percentile for zero-based sorted position ``index`` among ``total`` teams.

    Best position maps to 100, worst to 0. A single team is trivially 100.
    Halves round up.
    """
    if total <= 1:
        return 100
    return math.floor((total - index - 1) / (total - 1) * 100 + 0.5)


def normalize(
    metric_id: str, value: float, catalog: MetricCatalog | None = None
) -> float:
    """Scale a raw value into [0, 100] using the metric's range.

    The value is clamped into the range first. Lower-is-better metrics are
    inverted so a better value always plots higher.
    """
    definition = _definition(metric_id, catalog)
    return normalize_with(definition, value)


def normalize_with(definition: MetricDefinition, value: float) -> float:
    validate_definition(definition)
    if math.isnan(value):
        raise ValueError(f"Cannot normalize NaN for metric '{definition.id}'")

    lo, hi = definition.range.min, definition.range.max
    clamped = min(max(value, lo), hi)
    normalized = (clamped - lo) / (hi - lo) * 100
    normalized = min(max(normalized, 0.0), 100.0)

    if definition.higher_is_better is False:
        return 100.0 - normalized
    return normalized


def compute_comparison(
    metric_id: str,
    value_a: float,
    value_b: float,
    threshold_percent: float = DEFAULT_SIGNIFICANCE_THRESHOLD,
    catalog: MetricCatalog | None = None,
    team_a: str = "A",
    team_b: str = "B",
) -> ComparisonRecord:
    """Compare two teams' values on one metric.

    The difference is relative to the mean of both values. A zero mean
    yields a 0% difference. ``better_team`` stays None for neutral metrics
    and for differences at or below the threshold.
    """
    definition = _definition(metric_id, catalog)

    avg = (value_a + value_b) / 2
    if avg == 0:
        percent_difference = 0.0
    else:
        percent_difference = abs(value_a - value_b) / avg * 100
    is_significant = percent_difference > threshold_percent

    better_team: str | None = None
    if is_significant and definition.higher_is_better is not None:
        a_is_higher = value_a > value_b
        if definition.higher_is_better:
            better_team = team_a if a_is_higher else team_b
        else:
            better_team = team_b if a_is_higher else team_a

    return ComparisonRecord(
        metric_id=metric_id,
        team_a_value=value_a,
        team_b_value=value_b,
        percent_difference=percent_difference,
        is_significant=is_significant,
        better_team=better_team,
    )


def compare_to_league(
    metric_id: str, team_value: float, league_average: float
) -> LeagueDelta:
    """Team value against the league average; 0% when the average is zero."""
    difference = team_value - league_average
    percent_difference = (
        difference / league_average * 100 if league_average != 0 else 0.0
    )
    return LeagueDelta(
        metric_id=metric_id,
        team_value=team_value,
        league_average=league_average,
        difference=difference,
        percent_difference=percent_difference,
    )


def league_context(percentile: float) -> str:
    """Human label for where a percentile sits in the league."""
    for lower_bound, label in LEAGUE_CONTEXT_BANDS:
        if percentile >= lower_bound:
            return label
    return "Bottom 10%"


def _definition(metric_id: str, catalog: MetricCatalog | None) -> MetricDefinition:
    return (catalog or default_catalog()).get_definition(metric_id)


def _collect_values(
    metric_id: str,
    bucket: ResultBucket,
    values: Iterable[TeamMetricValue | Mapping[str, Any] | tuple[str, float]],
) -> list[tuple[str, float]]:
    """Extract (team_id, value) pairs that belong to this metric and bucket."""
    observed: list[tuple[str, float]] = []
    seen: set[str] = set()

    for entry in values:
        team_id, value, entry_metric, entry_bucket = _unpack(entry)
        if team_id is None:
            continue
        if entry_metric is not None and entry_metric != metric_id:
            continue
        if entry_bucket is not None and ResultBucket(entry_bucket) is not bucket:
            continue
        if not _is_number(value):
            continue
        if team_id in seen:
            raise ValueError(
                f"Duplicate value for team '{team_id}' on {metric_id}/{bucket.value}"
            )
        seen.add(team_id)
        observed.append((team_id, float(value)))

    return observed


def _unpack(entry: Any) -> tuple[str | None, Any, str | None, str | None]:
    if isinstance(entry, TeamMetricValue):
        return entry.team_id, entry.value, entry.metric_id, entry.bucket
    if isinstance(entry, Mapping):
        team_id = entry.get("team_id", entry.get("teamId"))
        metric = entry.get("metric_id", entry.get("metricId"))
        return team_id, entry.get("value"), metric, entry.get("bucket")
    team_id, value = entry
    return team_id, value, None, None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
