"""Static metric catalog: definitions, lookup and display formatting."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from functools import lru_cache

from playstyle_metrics.errors import ConfigurationError, UnknownMetricError
from playstyle_metrics.types import (
    MetricCategory,
    MetricDefinition,
    MetricFormat,
    MetricRange,
)

PERCENT_1 = MetricFormat(decimals=1, show_unit=True, suffix="%")
PERCENT_0 = MetricFormat(decimals=0, show_unit=True, suffix="%")
SECONDS_1 = MetricFormat(decimals=1, show_unit=True, suffix="s")
PLAIN_0 = MetricFormat(decimals=0)
PLAIN_1 = MetricFormat(decimals=1)
PLAIN_2 = MetricFormat(decimals=2)

P = MetricCategory.POSSESSION
A = MetricCategory.ATTACKING
D = MetricCategory.DEFENSIVE
T = MetricCategory.TEMPO
G = MetricCategory.GENERAL


def _define(
    id: str,
    name: str,
    description: str,
    category: MetricCategory,
    unit: str,
    fmt: MetricFormat,
    lo: float,
    hi: float,
    higher_is_better: bool | None,
    radar: bool = False,
) -> MetricDefinition:
    return MetricDefinition(
        id=id,
        name=name,
        description=description,
        category=category,
        unit=unit,
        format=fmt,
        range=MetricRange(min=lo, max=hi),
        higher_is_better=higher_is_better,
        include_in_radar=radar,
    )


METRICS: tuple[MetricDefinition, ...] = (
    # Possession & build-up
    _define("possession_percentage", "Possession",
            "Percentage of time the team has possession of the ball",
            P, "percentage", PERCENT_1, 0, 100, True, radar=True),
    _define("pass_completion", "Pass Completion",
            "Percentage of passes that successfully reach a teammate",
            P, "percentage", PERCENT_1, 0, 100, True, radar=True),
    _define("progressive_passes", "Progressive Passes",
            "Number of passes that move the ball significantly closer to the opponent's goal",
            P, "count", PLAIN_0, 0, 100, True, radar=True),
    _define("build_up_time", "Build-up Time",
            "Average time taken to move the ball from defense to attacking third",
            P, "seconds", SECONDS_1, 0, 30, False),
    _define("ppda", "PPDA",
            "Passes Per Defensive Action - measure of pressing intensity",
            P, "ratio", PLAIN_1, 0, 20, False, radar=True),

    # Attacking patterns
    _define("shot_creation_methods", "Shot Creation Methods",
            "Distribution of how shots are created (open play, set pieces, etc.)",
            A, "percentage", PERCENT_0, 0, 100, True),
    _define("attack_zones", "Attack Zones",
            "Distribution of attacks by zone (left, center, right)",
            A, "percentage", PERCENT_0, 0, 100, True),
    _define("counter_attack_frequency", "Counter-Attack Frequency",
            "Percentage of attacks that are counter-attacks",
            A, "percentage", PERCENT_1, 0, 50, True, radar=True),
    _define("set_piece_dependency", "Set Piece Dependency",
            "Percentage of goals scored from set pieces",
            A, "percentage", PERCENT_1, 0, 100, True, radar=True),
    _define("expected_goals", "Expected Goals (xG)",
            "Expected goals based on quality of chances created",
            A, "count", PLAIN_2, 0, 5, True, radar=True),
    _define("goals_per_match", "Goals per Match",
            "Average number of goals scored per match",
            A, "count", PLAIN_2, 0, 5, True, radar=True),
    _define("shot_accuracy", "Shot Accuracy",
            "Percentage of shots on target",
            A, "percentage", PERCENT_1, 0, 100, True, radar=True),

    # Defensive organization
    _define("defensive_line_height", "Defensive Line Height",
            "Average distance of defensive line from own goal",
            D, "meters", MetricFormat(decimals=1, show_unit=True, suffix="m"),
            10, 60, True, radar=True),
    _define("pressing_intensity", "Pressing Intensity",
            "Index of how aggressively the team presses (0-100)",
            D, "index", PLAIN_0, 0, 100, True, radar=True),
    _define("recovery_time", "Recovery Time",
            "Average time to regain possession after losing it",
            D, "seconds", SECONDS_1, 0, 30, False, radar=True),
    _define("defensive_actions_by_zone", "Defensive Actions by Zone",
            "Distribution of defensive actions by pitch zone",
            D, "percentage", PERCENT_0, 0, 100, True),
    _define("defensive_duels_won", "Defensive Duels Won",
            "Percentage of defensive duels won",
            D, "percentage", PERCENT_1, 0, 100, True, radar=True),
    _define("goals_against_per_match", "Goals Against per Match",
            "Average number of goals conceded per match",
            D, "count", PLAIN_2, 0, 5, False),

    # Tempo & transitions
    _define("direct_play_vs_possession", "Direct Play vs Possession",
            "Index representing tendency toward direct play (100) vs patient possession (0)",
            T, "index", PLAIN_0, 0, 100, None, radar=True),
    _define("transition_speed", "Transition Speed",
            "Average speed of transitions from defense to attack",
            T, "km/h", MetricFormat(decimals=1, show_unit=True, suffix="km/h"),
            0, 30, True, radar=True),
    _define("game_state_adaptability", "Game State Adaptability",
            "Index of how team performance varies by game state (winning/losing/drawing)",
            T, "index", PLAIN_0, 0, 100, True, radar=True),
    _define("attacking_transition_time", "Attacking Transition Time",
            "Average time from winning possession to creating a shot",
            T, "seconds", SECONDS_1, 0, 30, False, radar=True),

    # General
    _define("matches_played", "Matches Played",
            "Total number of matches played by the team",
            G, "count", PLAIN_0, 0, 38, None),
    _define("points_per_match", "Points per Match",
            "Average league points earned per match",
            G, "score", PLAIN_2, 0, 3, True),
)


@dataclass(frozen=True)
class PlayStyleCategory:
    """A named group of metrics shown together on the dashboard."""
    category: MetricCategory
    name: str
    metric_ids: tuple[str, ...]


PLAY_STYLE_CATEGORIES: dict[MetricCategory, PlayStyleCategory] = {
    P: PlayStyleCategory(P, "Possession & Build-up", (
        "possession_percentage", "pass_completion", "progressive_passes",
        "build_up_time", "ppda",
    )),
    A: PlayStyleCategory(A, "Attacking Patterns", (
        "shot_creation_methods", "attack_zones", "counter_attack_frequency",
        "set_piece_dependency",
    )),
    D: PlayStyleCategory(D, "Defensive Organization", (
        "defensive_line_height", "pressing_intensity", "recovery_time",
        "defensive_actions_by_zone",
    )),
    T: PlayStyleCategory(T, "Tempo & Transitions", (
        "direct_play_vs_possession", "transition_speed", "game_state_adaptability",
    )),
}


def validate_definition(definition: MetricDefinition) -> None:
    """Raise ConfigurationError for a definition that cannot be normalized."""
    lo, hi = definition.range.min, definition.range.max
    if not lo < hi:
        raise ConfigurationError(
            f"Metric '{definition.id}' has invalid range: min={lo} must be below max={hi}"
        )
    if definition.format.decimals < 0:
        raise ConfigurationError(
            f"Metric '{definition.id}' has negative decimals: {definition.format.decimals}"
        )


class MetricCatalog:
    """Immutable registry of metric definitions keyed by id.

    Every definition is validated on construction so a bad range fails at
    load time instead of producing a corrupted normalization later.
    """

    def __init__(self, definitions: Iterable[MetricDefinition]):
        by_id: dict[str, MetricDefinition] = {}
        for definition in definitions:
            validate_definition(definition)
            if definition.id in by_id:
                raise ConfigurationError(f"Duplicate metric id: {definition.id}")
            by_id[definition.id] = definition
        self._by_id = by_id

    def __contains__(self, metric_id: object) -> bool:
        return metric_id in self._by_id

    def __iter__(self) -> Iterator[MetricDefinition]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, metric_id: str) -> MetricDefinition | None:
        return self._by_id.get(metric_id)

    def get_definition(self, metric_id: str) -> MetricDefinition:
        definition = self._by_id.get(metric_id)
        if definition is None:
            raise UnknownMetricError(metric_id)
        return definition

    def is_higher_better(self, metric_id: str) -> bool | None:
        """Directionality of a metric; None means neutral.

        Unknown ids raise UnknownMetricError rather than returning None.
        """
        return self.get_definition(metric_id).higher_is_better

    def format_value(self, metric_id: str, value: float) -> str:
        """Format a raw value with the metric's decimals, prefix and suffix."""
        definition = self._by_id.get(metric_id)
        if definition is None:
            return _plain_number(value)

        fmt = definition.format
        formatted = f"{value:.{fmt.decimals}f}"
        if not fmt.show_unit:
            return f"{fmt.prefix}{formatted}"
        return f"{fmt.prefix}{formatted}{fmt.suffix}"

    def display_name(self, metric_id: str) -> str:
        definition = self._by_id.get(metric_id)
        if definition is None:
            return str(UnknownMetricError(metric_id))
        return definition.name

    def metrics_by_category(self, category: MetricCategory | str) -> list[MetricDefinition]:
        category = MetricCategory(category)
        return [m for m in self._by_id.values() if m.category is category]

    def metrics_by_ids(self, metric_ids: Iterable[str]) -> list[MetricDefinition]:
        """Definitions for the given ids, in order; unknown ids are dropped."""
        return [self._by_id[i] for i in metric_ids if i in self._by_id]

    def radar_metrics(self) -> list[MetricDefinition]:
        return [m for m in self._by_id.values() if m.include_in_radar]

    def play_style_category(self, category: MetricCategory | str) -> tuple[str, list[MetricDefinition]]:
        """Label and member metrics of a play style group.

        GENERAL has no play style group and yields an empty list.
        """
        group = PLAY_STYLE_CATEGORIES.get(MetricCategory(category))
        if group is None:
            return ("", [])
        return (group.name, self.metrics_by_ids(group.metric_ids))


def _plain_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@lru_cache
def default_catalog() -> MetricCatalog:
    """Catalog built from the bundled METRICS table."""
    return MetricCatalog(METRICS)
