"""Team-level views built on the aggregation engine.

Category averages against the league, the play style radar profile and a
team's metric split by match result.
"""

from __future__ import annotations

from playstyle_metrics.aggregation import (
    compare_to_league,
    compute_league_snapshot,
    league_context,
    normalize_with,
)
from playstyle_metrics.catalog import MetricCatalog, default_catalog
from playstyle_metrics.types import (
    LeagueDelta,
    LeagueMetricSnapshot,
    MetricCategory,
    RadarPoint,
    ResultBucket,
    ResultSplit,
)
from playstyle_metrics.value_store import MetricValueStore


def category_deltas(
    store: MetricValueStore,
    team_id: str,
    category: MetricCategory | str,
    bucket: ResultBucket | str = ResultBucket.ALL,
    catalog: MetricCatalog | None = None,
) -> dict[str, LeagueDelta]:
    """Team value vs league average for every metric in a category.

    Metrics the team or the league has no value for are skipped.
    """
    catalog = catalog or default_catalog()
    result: dict[str, LeagueDelta] = {}

    for metric in catalog.metrics_by_category(category):
        team_value = store.get(team_id, metric.id, bucket)
        if team_value is None:
            continue
        snapshot = compute_league_snapshot(
            metric.id, bucket, store.values_for(metric.id, bucket), catalog
        )
        if snapshot.average is None:
            continue
        result[metric.id] = compare_to_league(metric.id, team_value, snapshot.average)

    return result


def radar_profile(
    store: MetricValueStore,
    team_id: str,
    bucket: ResultBucket | str = ResultBucket.ALL,
    use_percentiles: bool = True,
    catalog: MetricCatalog | None = None,
) -> list[RadarPoint]:
    """One radar axis per radar metric the team holds a value for.

    With ``use_percentiles`` the league context label follows the team's
    league percentile, otherwise the normalized value.
    """
    catalog = catalog or default_catalog()
    points: list[RadarPoint] = []

    for metric in catalog.radar_metrics():
        raw = store.get(team_id, metric.id, bucket)
        if raw is None:
            continue

        normalized = normalize_with(metric, raw)
        percentile: int | None = None
        if use_percentiles:
            snapshot = compute_league_snapshot(
                metric.id, bucket, store.values_for(metric.id, bucket), catalog
            )
            percentile = snapshot.percentile_by_team.get(team_id)

        points.append(RadarPoint(
            metric_id=metric.id,
            name=metric.name,
            category=metric.category,
            raw_value=raw,
            normalized=round(normalized, 1),
            percentile=percentile,
            display_value=catalog.format_value(metric.id, raw),
            league_context=league_context(
                percentile if percentile is not None else normalized
            ),
        ))

    return points


def result_breakdown(
    store: MetricValueStore,
    team_id: str,
    metric_id: str,
    catalog: MetricCatalog | None = None,
) -> list[ResultSplit]:
    """A team's metric across the all, win, draw and loss buckets.

    Each bucket carries the league percentile within that same bucket.
    Buckets the team has no value for are skipped.
    """
    catalog = catalog or default_catalog()
    definition = catalog.get_definition(metric_id)
    splits: list[ResultSplit] = []

    for bucket in ResultBucket:
        raw = store.get(team_id, metric_id, bucket)
        if raw is None:
            continue
        snapshot = compute_league_snapshot(
            metric_id, bucket, store.values_for(metric_id, bucket), catalog
        )
        splits.append(ResultSplit(
            bucket=bucket,
            raw_value=raw,
            normalized=round(normalize_with(definition, raw), 1),
            percentile=snapshot.percentile_by_team.get(team_id),
            display_value=catalog.format_value(metric_id, raw),
        ))

    return splits


def league_table(
    store: MetricValueStore,
    metric_id: str,
    bucket: ResultBucket | str = ResultBucket.ALL,
    catalog: MetricCatalog | None = None,
) -> tuple[LeagueMetricSnapshot, list[dict]]:
    """League snapshot plus display rows sorted by rank."""
    catalog = catalog or default_catalog()
    snapshot = compute_league_snapshot(
        metric_id, bucket, store.values_for(metric_id, bucket), catalog
    )
    rows = [
        {
            "rank": entry.rank,
            "team": entry.team_id,
            "value": entry.value,
            "display_value": catalog.format_value(metric_id, entry.value),
            "percentile": entry.percentile,
            "normalized": round(normalize_with(catalog.get_definition(metric_id), entry.value), 1),
        }
        for entry in snapshot.ranked_teams
    ]
    return snapshot, rows
