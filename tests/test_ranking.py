"""Tests for variety ranking."""

from meal_planner.domain.meal_types import MealType
from meal_planner.domain.recipes import RecipeScore, ScoredRecipe
from meal_planner.services.ranking import (
    VarietyParameters,
    apply_variety_adjustment,
    create_variety_report,
    rank_recipes_with_variety,
)
from tests.conftest import make_recipe


def _scored(recipe_id: int, base: float, **history: object) -> ScoredRecipe:
    return ScoredRecipe(
        recipe=make_recipe(recipe_id, (MealType.LUNCH,), **history),
        score=RecipeScore(
            total_score=base,
            cosine_similarity=base,
            weighted_scalability=base,
            size_factor=100.0,
        ),
    )


def test_recent_use_is_penalized() -> None:
    adjustment = apply_variety_adjustment(
        _scored(1, 80, days_since_last_use=2, usage_count_last_30_days=3),
        VarietyParameters(),
    )

    assert adjustment.penalty == 10
    assert adjustment.reward == 0
    assert adjustment.final_score == 70


def test_use_within_week_is_penalized() -> None:
    adjustment = apply_variety_adjustment(
        _scored(1, 80, days_since_last_use=5, usage_count_last_7_days=1),
        VarietyParameters(recent_usage_penalty=15),
    )

    assert adjustment.final_score == 65


def test_forgotten_favorite_is_rewarded() -> None:
    adjustment = apply_variety_adjustment(
        _scored(1, 80, is_favorite=True, days_since_last_use=12, usage_count_last_30_days=1),
        VarietyParameters(),
    )

    assert adjustment.reward == 10
    assert adjustment.final_score == 90


def test_never_used_recipe_gets_small_reward() -> None:
    adjustment = apply_variety_adjustment(_scored(1, 80), VarietyParameters())

    assert adjustment.reward == 5
    assert adjustment.final_score == 85


def test_rank_sorts_by_final_score() -> None:
    ranked = rank_recipes_with_variety(
        [
            _scored(1, 90, days_since_last_use=1, usage_count_last_30_days=4),
            _scored(2, 82, days_since_last_use=20, usage_count_last_30_days=1),
            _scored(3, 78),
        ]
    )

    assert [item.recipe_id for item in ranked] == [3, 2, 1]
    assert [item.final_score for item in ranked] == [83, 82, 80]


def test_variety_report_summarises_adjustments() -> None:
    ranked = rank_recipes_with_variety(
        [
            _scored(1, 90, days_since_last_use=1, usage_count_last_30_days=4),
            _scored(2, 80),
        ]
    )

    report = create_variety_report(ranked)

    assert report.total_recipes == 2
    assert report.penalized_recipes == 1
    assert report.rewarded_recipes == 1
    assert report.average_adjustment == -2.5
    assert report.top_penalized[0].recipe_id == 1


def test_variety_report_handles_empty_input() -> None:
    report = create_variety_report([])

    assert report.total_recipes == 0
    assert report.average_adjustment == 0.0
