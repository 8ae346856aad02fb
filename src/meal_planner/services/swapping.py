"""Swap recipes in a combination to repair its weakest macro."""

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from meal_planner.domain.macros import MACRO_NAMES, percent_deviation
from meal_planner.domain.meal_types import MealDistribution, MealType
from meal_planner.domain.plans import MealCombination
from meal_planner.domain.recipes import RecipeScalability, VarietyAdjustment
from meal_planner.services.combiner import create_meal_combination

_STRONG_CANDIDATES = 5

_logger = logging.getLogger(__name__)


class WeaknessSeverity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class MacroTolerances:
    protein: float = 15.0
    carbs: float = 20.0
    fat: float = 25.0
    calories: float = 10.0

    def get(self, macro: str) -> float:
        return float(getattr(self, macro))


@dataclass(frozen=True)
class SwapCriteria:
    max_swaps: int = 3
    min_improvement: float = 5.0
    tolerances: MacroTolerances = field(default_factory=MacroTolerances)
    preserve_variety: bool = True
    favorite_protection: bool = True
    score_weight: float = 0.6


@dataclass(frozen=True)
class MacroWeakness:
    macro: str
    current_value: float
    target_value: float
    deviation_percent: float
    severity: WeaknessSeverity

    @property
    def needs_increase(self) -> bool:
        return self.current_value < self.target_value


@dataclass(frozen=True)
class SwapCandidate:
    meal_type: MealType
    current_recipe: VarietyAdjustment
    replacement_recipe: VarietyAdjustment
    score_change: float
    macro_improvement: float
    deviation_improvement: float
    variety_impact: float
    combination: MealCombination

    def benefit(self, score_weight: float) -> float:
        return (
            self.score_change * score_weight
            + self.deviation_improvement * (1 - score_weight)
            + self.variety_impact
        )


@dataclass(frozen=True)
class SwapRecord:
    meal_type: MealType
    old_recipe: str
    new_recipe: str
    reason: str


@dataclass(frozen=True)
class SwapOutcome:
    original: MealCombination
    combination: MealCombination
    swaps_made: list[SwapRecord]

    @property
    def score_improvement(self) -> float:
        return self.combination.average_score - self.original.average_score

    @property
    def deviation_reduction(self) -> float:
        return (
            self.original.deviation.total_percent
            - self.combination.deviation.total_percent
        )


def identify_macro_weaknesses(
    combination: MealCombination, tolerances: MacroTolerances
) -> list[MacroWeakness]:
    """Macros outside tolerance, most deviating first."""
    weaknesses = []
    for macro in MACRO_NAMES:
        target = combination.target_macros.get(macro)
        if target == 0:
            continue
        current = combination.total_macros.get(macro)
        deviation = percent_deviation(current, target)
        tolerance = tolerances.get(macro)
        if deviation <= tolerance:
            continue
        if deviation > tolerance * 2:
            severity = WeaknessSeverity.HIGH
        elif deviation > tolerance * 1.5:
            severity = WeaknessSeverity.MEDIUM
        else:
            severity = WeaknessSeverity.LOW
        weaknesses.append(
            MacroWeakness(
                macro=macro,
                current_value=current,
                target_value=target,
                deviation_percent=deviation,
                severity=severity,
            )
        )
    weaknesses.sort(key=lambda weakness: weakness.deviation_percent, reverse=True)
    return weaknesses


def find_macro_strong_recipes(
    available: list[VarietyAdjustment],
    macro: str,
    scalability_data: dict[int, RecipeScalability],
    exclude_recipe_id: int | None = None,
) -> list[VarietyAdjustment]:
    """Top recipes ranked by 0.7 * macro amount + 30 * macro scalability."""

    def strength(adjustment: VarietyAdjustment) -> float:
        scalability = scalability_data.get(
            adjustment.recipe_id
        ) or RecipeScalability.neutral(adjustment.recipe_id)
        value = adjustment.recipe.base_macros.get(macro)
        return value * 0.7 + scalability.for_macro(macro) * 30

    candidates = [item for item in available if item.recipe_id != exclude_recipe_id]
    candidates.sort(key=strength, reverse=True)
    return candidates[:_STRONG_CANDIDATES]


def evaluate_swap(  # noqa: PLR0913
    combination: MealCombination,
    meal_type: MealType,
    replacement: VarietyAdjustment,
    weakness: MacroWeakness,
    distributions: tuple[MealDistribution, ...],
    criteria: SwapCriteria,
) -> SwapCandidate | None:
    """Return the swap if it moves the weak macro toward its target."""
    meal = combination.meals.get(meal_type)
    if meal is None:
        return None
    current = meal.recipe

    selected = {slot: planned.recipe for slot, planned in combination.meals.items()}
    selected[meal_type] = replacement
    swapped = create_meal_combination(
        selected, combination.target_macros, distributions, combination.meal_plan_id
    )

    change = swapped.total_macros.get(weakness.macro) - combination.total_macros.get(
        weakness.macro
    )
    improvement = change if weakness.needs_increase else -change
    if improvement <= 0:
        return None

    new_deviation = percent_deviation(
        swapped.total_macros.get(weakness.macro), weakness.target_value
    )
    deviation_improvement = weakness.deviation_percent - new_deviation
    if deviation_improvement <= 0:
        return None

    variety_impact = 0.0
    if (
        criteria.preserve_variety
        and current.recipe.usage_count_last_7_days == 0
        and replacement.recipe.usage_count_last_7_days > 0
    ):
        variety_impact = -5.0
    if criteria.favorite_protection and current.recipe.is_favorite:
        variety_impact -= 10.0

    return SwapCandidate(
        meal_type=meal_type,
        current_recipe=current,
        replacement_recipe=replacement,
        score_change=replacement.final_score - current.final_score,
        macro_improvement=improvement,
        deviation_improvement=deviation_improvement,
        variety_impact=variety_impact,
        combination=swapped,
    )


def optimize_meal_combination(
    combination: MealCombination,
    recipes_by_meal_type: dict[MealType, list[VarietyAdjustment]],
    scalability_data: dict[int, RecipeScalability],
    distributions: tuple[MealDistribution, ...],
    criteria: SwapCriteria | None = None,
) -> SwapOutcome:
    """Greedily apply the most beneficial swap per round, up to max_swaps."""
    criteria = criteria or SwapCriteria()
    current = combination
    swaps: list[SwapRecord] = []

    for _ in range(criteria.max_swaps):
        weaknesses = identify_macro_weaknesses(current, criteria.tolerances)
        if not weaknesses:
            break
        primary = weaknesses[0]

        best: SwapCandidate | None = None
        best_benefit = criteria.min_improvement
        for meal_type, meal in current.meals.items():
            strong = find_macro_strong_recipes(
                recipes_by_meal_type.get(meal_type, []),
                primary.macro,
                scalability_data,
                exclude_recipe_id=meal.recipe.recipe_id,
            )
            for replacement in strong:
                candidate = evaluate_swap(
                    current, meal_type, replacement, primary, distributions, criteria
                )
                if candidate is None:
                    continue
                benefit = candidate.benefit(criteria.score_weight)
                if benefit > best_benefit:
                    best, best_benefit = candidate, benefit

        if best is None:
            break
        current = best.combination
        swaps.append(
            SwapRecord(
                meal_type=best.meal_type,
                old_recipe=best.current_recipe.recipe_name,
                new_recipe=best.replacement_recipe.recipe_name,
                reason=f"Improve {primary.macro} ({primary.deviation_percent:.1f}% deviation)",
            )
        )
        _logger.info(
            "Swapped %s for %s in %s",
            best.current_recipe.recipe_name,
            best.replacement_recipe.recipe_name,
            best.meal_type,
        )

    return SwapOutcome(original=combination, combination=current, swaps_made=swaps)
