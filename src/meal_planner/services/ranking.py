"""History-based variety adjustments on top of base recipe scores."""

import logging
from dataclasses import dataclass

from meal_planner.domain.recipes import ScoredRecipe, VarietyAdjustment

_logger = logging.getLogger(__name__)

_REPORT_TOP = 5


@dataclass(frozen=True)
class VarietyParameters:
    """Penalty and reward settings for the ranker."""

    recent_usage_penalty: float = 10.0
    favorite_not_used_reward: float = 10.0
    recent_days_threshold: int = 3
    favorite_days_threshold: int = 7
    unused_recipe_reward: float = 5.0


@dataclass(frozen=True)
class VarietyReport:
    total_recipes: int
    penalized_recipes: int
    rewarded_recipes: int
    average_adjustment: float
    top_penalized: list[VarietyAdjustment]
    top_rewarded: list[VarietyAdjustment]


def apply_variety_adjustment(
    scored: ScoredRecipe, parameters: VarietyParameters
) -> VarietyAdjustment:
    """Penalise recent use and reward favourites or never-used recipes."""
    recipe = scored.recipe
    days = recipe.days_since_last_use

    penalty = 0.0
    recently_used = days is not None and days <= parameters.recent_days_threshold
    if recently_used or recipe.usage_count_last_7_days > 0:
        penalty = parameters.recent_usage_penalty

    reward = 0.0
    if recipe.is_favorite and (days is None or days > parameters.favorite_days_threshold):
        reward += parameters.favorite_not_used_reward
    if days is None and recipe.usage_count_last_30_days == 0:
        reward += parameters.unused_recipe_reward

    return VarietyAdjustment(
        recipe=recipe,
        score=scored.score,
        penalty=penalty,
        reward=reward,
        final_score=scored.base_score - penalty + reward,
    )


def rank_recipes_with_variety(
    scored_recipes: list[ScoredRecipe],
    parameters: VarietyParameters | None = None,
) -> list[VarietyAdjustment]:
    """Apply variety adjustments and sort by final score, best first."""
    params = parameters or VarietyParameters()
    adjusted = [apply_variety_adjustment(scored, params) for scored in scored_recipes]
    adjusted.sort(key=lambda item: item.final_score, reverse=True)
    _logger.info(
        "Ranked %s recipes (%s penalised, %s rewarded)",
        len(adjusted),
        sum(1 for item in adjusted if item.penalty > 0),
        sum(1 for item in adjusted if item.reward > 0),
    )
    return adjusted


def create_variety_report(adjustments: list[VarietyAdjustment]) -> VarietyReport:
    """Summarise how the ranker moved scores."""
    penalized = sorted(
        (item for item in adjustments if item.penalty > 0),
        key=lambda item: item.penalty,
        reverse=True,
    )
    rewarded = sorted(
        (item for item in adjustments if item.reward > 0),
        key=lambda item: item.reward,
        reverse=True,
    )
    total_adjustment = sum(item.reward - item.penalty for item in adjustments)
    return VarietyReport(
        total_recipes=len(adjustments),
        penalized_recipes=len(penalized),
        rewarded_recipes=len(rewarded),
        average_adjustment=total_adjustment / len(adjustments) if adjustments else 0.0,
        top_penalized=penalized[:_REPORT_TOP],
        top_rewarded=rewarded[:_REPORT_TOP],
    )
