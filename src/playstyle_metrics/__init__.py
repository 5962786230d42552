"""Play style metrics: league aggregation and normalization for team metrics."""

from playstyle_metrics.aggregation import (
    compute_comparison,
    compute_league_snapshot,
    normalize,
)
from playstyle_metrics.catalog import MetricCatalog, default_catalog
from playstyle_metrics.errors import ConfigurationError, UnknownMetricError
from playstyle_metrics.types import (
    ComparisonRecord,
    LeagueMetricSnapshot,
    MetricCategory,
    MetricDefinition,
    ResultBucket,
    TeamMetricValue,
)
from playstyle_metrics.value_store import MetricValueStore

__all__ = [
    "ComparisonRecord",
    "ConfigurationError",
    "LeagueMetricSnapshot",
    "MetricCatalog",
    "MetricCategory",
    "MetricDefinition",
    "MetricValueStore",
    "ResultBucket",
    "TeamMetricValue",
    "UnknownMetricError",
    "compute_comparison",
    "compute_league_snapshot",
    "default_catalog",
    "normalize",
]
