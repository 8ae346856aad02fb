"""Tests for base recipe scoring."""

import pytest

from meal_planner.domain.macros import MacroVector
from meal_planner.domain.meal_types import MealType
from meal_planner.services.scoring import RecipeScorer
from tests.conftest import TARGET, make_recipe, make_scalability


def test_matching_recipe_scores_high() -> None:
    recipe = make_recipe(1, (MealType.LUNCH,))

    score = RecipeScorer().score(recipe, TARGET, make_scalability(1, 0.9))

    assert score.cosine_similarity > 99
    assert score.weighted_scalability == pytest.approx(90)
    assert score.size_factor == pytest.approx(100)
    assert 90 < score.total_score <= 100


def test_missing_scalability_counts_as_neutral() -> None:
    recipe = make_recipe(1, (MealType.LUNCH,))

    score = RecipeScorer().score(recipe, TARGET, None)

    assert score.weighted_scalability == pytest.approx(50)


def test_small_portion_lowers_size_factor() -> None:
    recipe = make_recipe(1, (MealType.LUNCH,), protein=12, carbs=15, fat=5)
    scorer = RecipeScorer(calorie_shares={MealType.LUNCH: 0.5})

    score = scorer.score(recipe, TARGET, make_scalability(1))

    assert score.size_factor == pytest.approx(153 / 730 * 100)


def test_empty_recipe_only_keeps_scalability_component() -> None:
    recipe = make_recipe(1, (MealType.LUNCH,), protein=0, carbs=0, fat=0)

    score = RecipeScorer().score(recipe, TARGET, make_scalability(1, 1.0))

    assert score.cosine_similarity == 0.0
    assert score.size_factor == 0.0
    assert score.total_score == pytest.approx(40)


def test_score_all_pairs_recipes_with_scores() -> None:
    recipes = [make_recipe(1, (MealType.LUNCH,)), make_recipe(2, (MealType.DINNER,))]

    scored = RecipeScorer().score_all(recipes, TARGET, {1: make_scalability(1)})

    assert [item.recipe.recipe_id for item in scored] == [1, 2]
    assert scored[0].base_score > scored[1].base_score


def test_score_is_clamped_to_hundred() -> None:
    recipe = make_recipe(1, (MealType.LUNCH,), protein=1200, carbs=1500, fat=500)
    target = MacroVector.from_grams(120, 150, 50)

    score = RecipeScorer().score(recipe, target, make_scalability(1, 1.0))

    assert score.total_score <= 100
