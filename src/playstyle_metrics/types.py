"""Shared types and constants for play style metrics."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class MetricCategory(str, Enum):
    """Fixed set of metric categories."""
    POSSESSION = "possession"
    ATTACKING = "attacking"
    DEFENSIVE = "defensive"
    TEMPO = "tempo"
    GENERAL = "general"


class ResultBucket(str, Enum):
    """Partition of a team's matches by outcome."""
    ALL = "all"
    WIN = "win"
    DRAW = "draw"
    LOSS = "loss"


@dataclass(frozen=True)
class MetricFormat:
    """Display formatting for a metric value."""
    decimals: int
    show_unit: bool = False
    prefix: str = ""
    suffix: str = ""


@dataclass(frozen=True)
class MetricRange:
    """Expected bounds of a metric, used for normalization."""
    min: float
    max: float


@dataclass(frozen=True)
class MetricDefinition:
    """Static definition of one measurable quantity."""
    id: str
    name: str
    description: str
    category: MetricCategory
    unit: str          # percentage, seconds, count, meters, km/h, ratio, score, index
    format: MetricFormat
    range: MetricRange
    higher_is_better: bool | None  # None = directionally neutral
    include_in_radar: bool = False


@dataclass(frozen=True)
class TeamMetricValue:
    """One team's raw observation for one metric in one result bucket."""
    team_id: str
    metric_id: str
    bucket: ResultBucket
    value: float


@dataclass(frozen=True)
class RankedTeam:
    """A team's position in a league ranking for one metric."""
    team_id: str
    value: float
    rank: int
    percentile: int


@dataclass(frozen=True)
class LeagueMetricSnapshot:
    """League-wide aggregate for one metric and result bucket.

    ``average``, ``min`` and ``max`` are None when no team holds a value.
    """
    metric_id: str
    bucket: ResultBucket
    average: float | None
    min: float | None
    max: float | None
    ranked_teams: tuple[RankedTeam, ...] = ()
    percentile_by_team: dict[str, int] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.ranked_teams)

    @property
    def has_data(self) -> bool:
        return self.count > 0

    @property
    def insufficient_data(self) -> bool:
        """True for zero or one data point."""
        return self.count < 2

    def rank_of(self, team_id: str) -> int | None:
        for entry in self.ranked_teams:
            if entry.team_id == team_id:
                return entry.rank
        return None

    def top(self, count: int = 5) -> tuple[RankedTeam, ...]:
        return self.ranked_teams[:count]


@dataclass(frozen=True)
class ComparisonRecord:
    """Pairwise result for two teams on one metric."""
    metric_id: str
    team_a_value: float
    team_b_value: float
    percent_difference: float
    is_significant: bool
    better_team: str | None

    @property
    def is_minimal(self) -> bool:
        """Differences this small are not worth surfacing."""
        return self.percent_difference < MINIMAL_DIFFERENCE_PERCENT


@dataclass(frozen=True)
class LeagueDelta:
    """A team's value against the league average for one metric."""
    metric_id: str
    team_value: float
    league_average: float
    difference: float
    percent_difference: float


@dataclass(frozen=True)
class RadarPoint:
    """One axis of a team's play style radar."""
    metric_id: str
    name: str
    category: MetricCategory
    raw_value: float
    normalized: float
    percentile: int | None
    display_value: str
    league_context: str

    @property
    def plotted_value(self) -> float:
        """Percentile when known, otherwise the normalized value."""
        return self.percentile if self.percentile is not None else self.normalized


@dataclass(frozen=True)
class ResultSplit:
    """One team's value for a metric within one result bucket."""
    bucket: ResultBucket
    raw_value: float
    normalized: float
    percentile: int | None
    display_value: str


DEFAULT_SIGNIFICANCE_THRESHOLD = 20.0
MINIMAL_DIFFERENCE_PERCENT = 5.0
