"""In-memory store of per-team, per-metric, per-bucket raw values."""

from __future__ import annotations

from collections.abc import Iterable

from playstyle_metrics.types import ResultBucket, TeamMetricValue

_Key = tuple[str, str, ResultBucket]


class MetricValueStore:
    """Holds the team x metric x bucket value matrix.

    ``load`` builds a new mapping and swaps it in with one assignment, so a
    reader iterating a snapshot from ``values_for`` never sees a half-loaded
    dataset. ``version`` increases on every load.
    """

    def __init__(self, records: Iterable[TeamMetricValue] = ()):
        self._values: dict[_Key, TeamMetricValue] = {}
        self._version = 0
        self.load(records)

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._values)

    def load(self, records: Iterable[TeamMetricValue]) -> None:
        """Replace the entire dataset.

        Raises ValueError if a (team, metric, bucket) tuple appears twice.
        """
        values: dict[_Key, TeamMetricValue] = {}
        for record in records:
            key = (record.team_id, record.metric_id, ResultBucket(record.bucket))
            if key in values:
                raise ValueError(
                    f"Duplicate value for team '{key[0]}', metric '{key[1]}', "
                    f"bucket '{key[2].value}'"
                )
            values[key] = record

        self._values = values
        self._version += 1

    def get(
        self,
        team_id: str,
        metric_id: str,
        bucket: ResultBucket | str = ResultBucket.ALL,
    ) -> float | None:
        record = self._values.get((team_id, metric_id, ResultBucket(bucket)))
        return record.value if record is not None else None

    def values_for(
        self, metric_id: str, bucket: ResultBucket | str = ResultBucket.ALL
    ) -> tuple[TeamMetricValue, ...]:
        """Immutable snapshot of every team's value for one metric and bucket."""
        bucket = ResultBucket(bucket)
        return tuple(
            record
            for (_, metric, record_bucket), record in self._values.items()
            if metric == metric_id and record_bucket is bucket
        )

    def team_values(
        self, team_id: str, bucket: ResultBucket | str = ResultBucket.ALL
    ) -> dict[str, float]:
        """All metric values for one team in one bucket, keyed by metric id."""
        bucket = ResultBucket(bucket)
        return {
            metric: record.value
            for (team, metric, record_bucket), record in self._values.items()
            if team == team_id and record_bucket is bucket
        }

    def team_ids(self) -> list[str]:
        """Sorted ids of every team holding at least one value."""
        return sorted({team for team, _, _ in self._values})
