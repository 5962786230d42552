"""Play Style Metrics MCP Server: league rankings and team comparisons.

Tools:
  - list_metrics: Metric catalog, optionally filtered by category
  - get_league_snapshot: League ranking, percentiles and averages for a metric
  - compare_teams: Side-by-side comparison of two teams over a category
  - get_team_profile: Radar profile and league deltas for one team
  - get_result_breakdown: One team's metric split by win, draw and loss
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from playstyle_metrics.aggregation import compute_comparison
from playstyle_metrics.catalog import MetricCatalog, default_catalog
from playstyle_metrics.config import Settings, get_settings
from playstyle_metrics.data_fetcher import (
    DataFetcher,
    load_records_from_file,
    validate_league_id,
)
from playstyle_metrics.errors import UnknownMetricError
from playstyle_metrics.profiles import (
    category_deltas,
    league_table,
    radar_profile,
    result_breakdown,
)
from playstyle_metrics.types import MetricCategory, ResultBucket
from playstyle_metrics.value_store import MetricValueStore

logger = logging.getLogger(__name__)

mcp = FastMCP("PlayStyleMetrics")


class StoreRegistry:
    """One MetricValueStore per league, loaded on first use."""

    def __init__(self, settings: Settings, fetcher: DataFetcher | None = None):
        self._settings = settings
        self._fetcher = fetcher or DataFetcher(settings)
        self._stores: dict[str, MetricValueStore] = {}

    async def get(self, league_id: str | None = None) -> MetricValueStore:
        league_id = validate_league_id(league_id or self._settings.DEFAULT_LEAGUE)
        store = self._stores.get(league_id)
        if store is None:
            store = MetricValueStore(await self._load(league_id))
            logger.info("Loaded %d metric values for league %s", len(store), league_id)
            self._stores[league_id] = store
        return store

    async def _load(self, league_id: str):
        if self._settings.DATA_FILE is not None:
            return load_records_from_file(self._settings.DATA_FILE)
        return await self._fetcher.get_metric_records(league_id)


def resolve_bucket(query: str) -> ResultBucket:
    """Resolve a result bucket from "all", "win", "wins", "Draw", etc."""
    q = query.strip().lower()
    for bucket in ResultBucket:
        if q in (bucket.value, f"{bucket.value}s", f"{bucket.value}es"):
            return bucket
    available = ", ".join(b.value for b in ResultBucket)
    raise ValueError(f"Unknown result '{query}'. Available: {available}")


def resolve_category(query: str) -> MetricCategory:
    q = query.strip().lower()
    if not q:
        raise ValueError("Category must not be empty.")
    for category in MetricCategory:
        if q == category.value or category.value.startswith(q):
            return category
    available = ", ".join(c.value for c in MetricCategory)
    raise ValueError(f"Unknown category '{query}'. Available: {available}")


def find_team(name: str, team_ids: list[str]) -> str | None:
    """Find team id with case-insensitive exact + partial match."""
    name_lower = name.strip().lower()

    # Exact match first
    for team in team_ids:
        if team.lower() == name_lower:
            return team

    # Partial match fallback (substring in either direction)
    for team in team_ids:
        team_lower = team.lower()
        if name_lower in team_lower or team_lower in name_lower:
            return team

    return None


def resolve_team(name: str, store: MetricValueStore) -> str:
    team = find_team(name, store.team_ids())
    if team is None:
        raise ValueError(f"Team '{name}' not found in metrics data.")
    return team


def ordinal(rank: int) -> str:
    """1 -> "1st", 12 -> "12th", 22 -> "22nd"."""
    if rank % 100 in (11, 12, 13):
        return f"{rank}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(rank % 10, "th")
    return f"{rank}{suffix}"


def unknown_metric_payload(error: UnknownMetricError) -> dict:
    return {"metric": error.metric_id, "error": str(error)}


def metric_list_payload(
    category: str | None = None, catalog: MetricCatalog | None = None
) -> list[dict]:
    catalog = catalog or default_catalog()
    metrics = (
        catalog.metrics_by_category(resolve_category(category))
        if category else list(catalog)
    )
    return [
        {
            "id": m.id,
            "name": m.name,
            "category": m.category.value,
            "unit": m.unit,
            "range": [m.range.min, m.range.max],
            "higher_is_better": m.higher_is_better,
        }
        for m in metrics
    ]


def snapshot_payload(
    store: MetricValueStore,
    metric_id: str,
    bucket: ResultBucket,
    catalog: MetricCatalog | None = None,
) -> dict:
    catalog = catalog or default_catalog()
    try:
        snapshot, rows = league_table(store, metric_id, bucket, catalog)
    except UnknownMetricError as exc:
        return unknown_metric_payload(exc)

    for row in rows:
        row["rank"] = ordinal(row["rank"])

    if not snapshot.has_data:
        averages = None
    else:
        averages = {
            "average": catalog.format_value(metric_id, snapshot.average),
            "min": catalog.format_value(metric_id, snapshot.min),
            "max": catalog.format_value(metric_id, snapshot.max),
        }

    return {
        "metric": catalog.display_name(metric_id),
        "result": bucket.value,
        "teams_with_data": snapshot.count,
        "league": averages,
        "teams": rows,
    }


def comparison_payload(
    store: MetricValueStore,
    team_a: str,
    team_b: str,
    category: MetricCategory,
    bucket: ResultBucket,
    threshold_percent: float,
    catalog: MetricCatalog | None = None,
) -> dict:
    if team_a == team_b:
        raise ValueError(f"Cannot compare '{team_a}' with itself.")
    catalog = catalog or default_catalog()
    label, metrics = catalog.play_style_category(category)
    if not metrics:
        metrics = catalog.metrics_by_category(category)

    rows = []
    for metric in metrics:
        value_a = store.get(team_a, metric.id, bucket)
        value_b = store.get(team_b, metric.id, bucket)
        if value_a is None or value_b is None:
            continue
        record = compute_comparison(
            metric.id, value_a, value_b, threshold_percent, catalog,
            team_a=team_a, team_b=team_b,
        )
        rows.append({
            "metric": metric.name,
            "values": {
                "team_a": catalog.format_value(metric.id, value_a),
                "team_b": catalog.format_value(metric.id, value_b),
            },
            "difference": f"{round(record.percent_difference, 1)}%",
            "status": "Different" if record.is_significant else "Similar",
            "minimal": record.is_minimal,
            "better_team": record.better_team,
        })

    return {
        "match_up": f"{team_a} vs {team_b}",
        "team_a": team_a,
        "team_b": team_b,
        "category": label or category.value,
        "result": bucket.value,
        "metrics": rows,
    }


def profile_payload(
    store: MetricValueStore,
    team_id: str,
    bucket: ResultBucket,
    catalog: MetricCatalog | None = None,
) -> dict:
    catalog = catalog or default_catalog()
    radar = [
        {
            "metric": point.name,
            "category": point.category.value,
            "value": point.display_value,
            "normalized": point.normalized,
            "percentile": point.percentile,
            "league_context": point.league_context,
        }
        for point in radar_profile(store, team_id, bucket, catalog=catalog)
    ]

    vs_league = {}
    for category in MetricCategory:
        deltas = category_deltas(store, team_id, category, bucket, catalog)
        if not deltas:
            continue
        vs_league[category.value] = {
            catalog.display_name(metric_id): {
                "team": catalog.format_value(metric_id, delta.team_value),
                "league_avg": catalog.format_value(metric_id, delta.league_average),
                "difference": f"{round(delta.percent_difference, 1)}%",
            }
            for metric_id, delta in deltas.items()
        }

    return {
        "team": team_id,
        "result": bucket.value,
        "radar": radar,
        "vs_league_average": vs_league,
    }


def breakdown_payload(
    store: MetricValueStore,
    team_id: str,
    metric_id: str,
    catalog: MetricCatalog | None = None,
) -> dict:
    catalog = catalog or default_catalog()
    try:
        splits = result_breakdown(store, team_id, metric_id, catalog)
    except UnknownMetricError as exc:
        return unknown_metric_payload(exc)

    return {
        "team": team_id,
        "metric": catalog.display_name(metric_id),
        "results": [
            {
                "result": split.bucket.value,
                "value": split.display_value,
                "normalized": split.normalized,
                "percentile": split.percentile,
            }
            for split in splits
        ],
    }


# Shared instances
_settings = get_settings()
_stores = StoreRegistry(_settings)


@mcp.tool()
async def list_metrics(category: str | None = None) -> list[dict]:
    """List metric definitions, optionally for one category.

    Args:
        category: possession, attacking, defensive, tempo or general
    """
    return metric_list_payload(category)


@mcp.tool()
async def get_league_snapshot(
    metric: str,
    result: str = "all",
    league: str | None = None,
) -> dict:
    """Rank every team in a league on one metric.

    Returns league average/min/max and each team's rank, percentile
    (100 = best) and normalized 0-100 score.

    Args:
        metric: Metric id (e.g. "possession_percentage", "ppda")
        result: Match result filter: all, win, draw or loss
        league: League id (default from settings)
    """
    store = await _stores.get(league)
    return snapshot_payload(store, metric, resolve_bucket(result))


@mcp.tool()
async def compare_teams(
    team_a: str,
    team_b: str,
    category: str = "possession",
    result: str = "all",
    league: str | None = None,
) -> dict:
    """Compare two teams on every metric of a play style category.

    Args:
        team_a: First team (e.g. "Arsenaki")
        team_b: Second team
        category: possession, attacking, defensive or tempo
        result: Match result filter: all, win, draw or loss
        league: League id (default from settings)
    """
    store = await _stores.get(league)
    return comparison_payload(
        store,
        resolve_team(team_a, store),
        resolve_team(team_b, store),
        resolve_category(category),
        resolve_bucket(result),
        _settings.SIGNIFICANCE_THRESHOLD,
    )


@mcp.tool()
async def get_team_profile(
    team: str,
    result: str = "all",
    league: str | None = None,
) -> dict:
    """Play style radar and league-average comparison for one team.

    Args:
        team: Team name or id
        result: Match result filter: all, win, draw or loss
        league: League id (default from settings)
    """
    store = await _stores.get(league)
    return profile_payload(store, resolve_team(team, store), resolve_bucket(result))


@mcp.tool()
async def get_result_breakdown(
    team: str,
    metric: str,
    league: str | None = None,
) -> dict:
    """Show how one team's metric changes in wins, draws and losses.

    Each result carries the raw value, normalized 0-100 score and the
    team's league percentile among teams with the same result.

    Args:
        team: Team name or id
        metric: Metric id (e.g. "possession_percentage")
        league: League id (default from settings)
    """
    store = await _stores.get(league)
    return breakdown_payload(store, resolve_team(team, store), metric)


def main():
    """Entry point for the playstyle-metrics CLI command."""
    logging.basicConfig(
        level=_settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    mcp.run()


if __name__ == "__main__":
    main()
