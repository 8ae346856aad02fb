"""Combine ranked recipes into one-recipe-per-meal plans."""

import itertools
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from uuid import uuid4

from meal_planner.domain.macros import MacroVector, compute_deviation, sum_macros
from meal_planner.domain.meal_types import (
    DEFAULT_MEAL_DISTRIBUTIONS,
    MealDistribution,
    MealType,
)
from meal_planner.domain.plans import MealCombination, PlannedMeal
from meal_planner.domain.recipes import VarietyAdjustment

_DEFAULT_MEAL_SHARE = 25.0
_FULL_COVERAGE_MEALS = 3

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CombinerCriteria:
    """Search limits and the meal distribution table."""

    min_average_score: float = 80.0
    meal_distributions: tuple[MealDistribution, ...] = DEFAULT_MEAL_DISTRIBUTIONS
    max_combinations: int = 50
    top_n: int = 3
    allow_partial: bool = False


@dataclass(frozen=True)
class CombinerStats:
    total_recipes: int
    recipes_above_threshold: int
    average_score: float
    combinations_generated: int
    combinations_meeting_threshold: int


@dataclass(frozen=True)
class CombinerResult:
    combinations: list[MealCombination]
    recipes_by_meal_type: dict[MealType, list[VarietyAdjustment]]
    stats: CombinerStats


@dataclass(frozen=True)
class CombinationQuality:
    quality_score: float
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


def generate_plan_id() -> str:
    return f"plan_{uuid4().hex[:12]}"


def group_recipes_by_meal_type(
    ranked: list[VarietyAdjustment], distributions: tuple[MealDistribution, ...]
) -> dict[MealType, list[VarietyAdjustment]]:
    """Bucket ranked recipes per meal slot, keeping rank order.

    Slots without any suitable recipe are left out.
    """
    grouped: dict[MealType, list[VarietyAdjustment]] = {}
    for distribution in distributions:
        suitable = [
            item for item in ranked if distribution.meal_type in item.recipe.meal_types
        ]
        if suitable:
            grouped[distribution.meal_type] = suitable
        else:
            _logger.info("No recipes available for %s", distribution.meal_type)
    return grouped


def calculate_meal_macros(
    selected: dict[MealType, VarietyAdjustment],
    distributions: tuple[MealDistribution, ...],
) -> dict[MealType, MacroVector]:
    """Portion each recipe by its slot's share of the day."""
    shares = {item.meal_type: item.target_percent for item in distributions}
    meal_macros = {}
    for meal_type, adjustment in selected.items():
        multiplier = shares.get(meal_type, _DEFAULT_MEAL_SHARE) / 100
        base = adjustment.recipe.base_macros
        meal_macros[meal_type] = MacroVector.from_grams(
            protein=base.protein * multiplier,
            carbs=base.carbs * multiplier,
            fat=base.fat * multiplier,
        )
    return meal_macros


def create_meal_combination(
    selected: dict[MealType, VarietyAdjustment],
    target: MacroVector,
    distributions: tuple[MealDistribution, ...],
    plan_id: str | None = None,
) -> MealCombination:
    """Build a combination value from one recipe per slot."""
    meal_macros = calculate_meal_macros(selected, distributions)
    total = sum_macros(list(meal_macros.values()))
    scores = [adjustment.final_score for adjustment in selected.values()]
    total_score = sum(scores)
    return MealCombination(
        meal_plan_id=plan_id or generate_plan_id(),
        meals={
            meal_type: PlannedMeal(recipe=adjustment, assigned_macros=meal_macros[meal_type])
            for meal_type, adjustment in selected.items()
        },
        total_macros=total,
        target_macros=target,
        deviation=compute_deviation(total, target),
        total_score=total_score,
        average_score=total_score / len(scores) if scores else 0.0,
    )


def iter_meal_combinations(
    recipes_by_meal_type: dict[MealType, list[VarietyAdjustment]],
    target: MacroVector,
    criteria: CombinerCriteria,
) -> Iterator[MealCombination]:
    """Lazily yield accepted combinations over the top-N recipes per slot."""
    meal_types = list(recipes_by_meal_type)
    if not meal_types:
        return
    candidates = [recipes_by_meal_type[meal_type][: criteria.top_n] for meal_type in meal_types]
    for choice in itertools.product(*candidates):
        combination = create_meal_combination(
            dict(zip(meal_types, choice, strict=True)),
            target,
            criteria.meal_distributions,
        )
        if criteria.allow_partial or combination.average_score >= criteria.min_average_score:
            yield combination


def generate_meal_combinations(
    recipes_by_meal_type: dict[MealType, list[VarietyAdjustment]],
    target: MacroVector,
    criteria: CombinerCriteria | None = None,
) -> list[MealCombination]:
    """Collect up to max_combinations accepted combinations, best first."""
    criteria = criteria or CombinerCriteria()
    combinations = list(
        itertools.islice(
            iter_meal_combinations(recipes_by_meal_type, target, criteria),
            criteria.max_combinations,
        )
    )
    combinations.sort(key=lambda combination: combination.average_score, reverse=True)
    return combinations


def select_top_recipes_by_category(
    ranked: list[VarietyAdjustment],
    target: MacroVector,
    criteria: CombinerCriteria | None = None,
) -> CombinerResult:
    """Group, combine and summarise in one call."""
    criteria = criteria or CombinerCriteria()
    grouped = group_recipes_by_meal_type(ranked, criteria.meal_distributions)
    combinations = generate_meal_combinations(grouped, target, criteria)
    scores = [item.final_score for item in ranked]
    stats = CombinerStats(
        total_recipes=len(ranked),
        recipes_above_threshold=sum(
            1 for score in scores if score >= criteria.min_average_score
        ),
        average_score=sum(scores) / len(scores) if scores else 0.0,
        combinations_generated=len(combinations),
        combinations_meeting_threshold=sum(
            1 for combination in combinations if combination.meets_threshold
        ),
    )
    _logger.info(
        "Generated %s combinations (%s meeting threshold)",
        stats.combinations_generated,
        stats.combinations_meeting_threshold,
    )
    return CombinerResult(
        combinations=combinations, recipes_by_meal_type=grouped, stats=stats
    )


def get_best_meal_combination(
    combinations: list[MealCombination], *, fallback: bool = True
) -> MealCombination | None:
    """Prefer the best combination meeting the threshold, else the best overall."""
    for combination in combinations:
        if combination.meets_threshold:
            return combination
    if fallback and combinations:
        return combinations[0]
    return None


def analyze_combination_quality(combination: MealCombination) -> CombinationQuality:
    """Score a combination on recipe quality, macro fit and meal coverage."""
    quality = CombinationQuality(quality_score=0.0)
    score = min(100.0, combination.average_score) * 0.4

    if combination.average_score >= 90:
        quality.strengths.append("Excellent recipe quality scores")
    elif combination.average_score >= 80:
        quality.strengths.append("Good recipe quality scores")
    else:
        quality.weaknesses.append("Below optimal recipe quality scores")
        quality.recommendations.append("Consider recipes with higher base scores")

    deviation = combination.deviation.total_percent
    score += max(0.0, 100 - min(100.0, deviation)) * 0.4
    if deviation <= 10:
        quality.strengths.append("Excellent macro target alignment")
    elif deviation <= 20:
        quality.strengths.append("Good macro target alignment")
    else:
        quality.weaknesses.append("High deviation from target macros")
        quality.recommendations.append("Consider recipe swapping or portion adjustments")

    meal_count = len(combination.meals)
    score += min(100.0, meal_count / _FULL_COVERAGE_MEALS * 100) * 0.2
    if meal_count >= _FULL_COVERAGE_MEALS:
        quality.strengths.append("Good meal variety coverage")
    else:
        quality.weaknesses.append("Limited meal variety")
        quality.recommendations.append("Add more meal types for better coverage")

    return CombinationQuality(
        quality_score=score,
        strengths=quality.strengths,
        weaknesses=quality.weaknesses,
        recommendations=quality.recommendations,
    )
