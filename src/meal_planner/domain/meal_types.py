"""Meal types and their share of the daily target."""

from dataclasses import dataclass
from enum import StrEnum


class MealType(StrEnum):
    """Named slot in a daily plan."""

    BREAKFAST = "reggeli"
    MORNING_SNACK = "tízórai"
    LUNCH = "ebéd"
    AFTERNOON_SNACK = "uzsonna"
    DINNER = "vacsora"


@dataclass(frozen=True)
class MealDistribution:
    """Target share of daily calories for a meal type."""

    meal_type: MealType
    target_percent: float
    tolerance_percent: float = 5.0

    @property
    def min_percent(self) -> float:
        return self.target_percent - self.tolerance_percent

    @property
    def max_percent(self) -> float:
        return self.target_percent + self.tolerance_percent


DEFAULT_MEAL_DISTRIBUTIONS: tuple[MealDistribution, ...] = (
    MealDistribution(MealType.BREAKFAST, 28),
    MealDistribution(MealType.MORNING_SNACK, 6),
    MealDistribution(MealType.LUNCH, 39),
    MealDistribution(MealType.AFTERNOON_SNACK, 5),
    MealDistribution(MealType.DINNER, 22),
)

MEAL_COUNT_PRESETS: dict[int, tuple[MealDistribution, ...]] = {
    3: (
        MealDistribution(MealType.BREAKFAST, 28),
        MealDistribution(MealType.LUNCH, 39),
        MealDistribution(MealType.DINNER, 33),
    ),
    4: (
        MealDistribution(MealType.BREAKFAST, 25),
        MealDistribution(MealType.LUNCH, 35),
        MealDistribution(MealType.AFTERNOON_SNACK, 15),
        MealDistribution(MealType.DINNER, 25),
    ),
    5: DEFAULT_MEAL_DISTRIBUTIONS,
}

_FLEXIBLE_TOLERANCE = 8.0


def default_meal_types(meal_count: int) -> tuple[MealType, ...]:
    """Return the meal slots used when the user states no preference."""
    preset = MEAL_COUNT_PRESETS.get(meal_count)
    if preset is not None:
        return tuple(item.meal_type for item in preset)
    main = (MealType.LUNCH, MealType.DINNER)
    if meal_count <= 1:
        return main[:1]
    return main


def distributions_for(
    meal_types: "tuple[MealType, ...] | list[MealType]",
) -> tuple[MealDistribution, ...]:
    """Return the distribution table for a selection of meal types."""
    selected = list(dict.fromkeys(meal_types))
    if not selected:
        return ()
    preset = MEAL_COUNT_PRESETS.get(len(selected))
    if preset is None:
        return equal_distributions(selected)
    if {item.meal_type for item in preset} == set(selected):
        return _ordered(preset, selected)

    defaults = {item.meal_type: item for item in DEFAULT_MEAL_DISTRIBUTIONS}
    base_total = sum(defaults[meal_type].target_percent for meal_type in selected)
    return tuple(
        MealDistribution(
            meal_type,
            defaults[meal_type].target_percent / base_total * 100,
            defaults[meal_type].tolerance_percent,
        )
        for meal_type in selected
    )


def equal_distributions(meal_types: "list[MealType]") -> tuple[MealDistribution, ...]:
    """Equal split with a wider tolerance, for unusual meal counts."""
    if not meal_types:
        return ()
    share = round(100 / len(meal_types))
    return tuple(
        MealDistribution(meal_type, share, _FLEXIBLE_TOLERANCE)
        for meal_type in meal_types
    )


def _ordered(
    preset: tuple[MealDistribution, ...], selected: list[MealType]
) -> tuple[MealDistribution, ...]:
    by_type = {item.meal_type: item for item in preset}
    return tuple(by_type[meal_type] for meal_type in selected)
