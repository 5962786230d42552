"""Error types raised by the metric catalog and aggregation engine."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """A metric definition is invalid (e.g. range.min >= range.max)."""


class UnknownMetricError(KeyError):
    """Lookup for a metric id that is not in the catalog."""

    def __init__(self, metric_id: str):
        super().__init__(metric_id)
        self.metric_id = metric_id

    def __str__(self) -> str:
        return f"Unknown metric: {self.metric_id}"
