"""Tests for recipe scalability derivation."""

import pytest

from meal_planner.domain.meal_types import MealType
from meal_planner.domain.recipes import IngredientType, RecipeIngredient
from meal_planner.services.nutrition import InMemoryNutritionSource
from meal_planner.services.scalability import (
    compute_recipe_scalability,
    macro_scalability,
)
from tests.conftest import ingredient, make_food, make_recipe


def test_macro_scalability_mixes_independent_and_bound_shares() -> None:
    assert macro_scalability(10, 0, 10, 20, 20) == pytest.approx(1.0)
    assert macro_scalability(5, 5, 10, 20, 20) == pytest.approx(0.5)
    assert macro_scalability(0, 10, 10, 20, 20) == pytest.approx(0.0)


def test_macro_scalability_without_macro_is_zero() -> None:
    assert macro_scalability(0, 0, 0, 20, 20) == 0.0


def test_macro_scalability_halves_dense_fat_sources() -> None:
    assert macro_scalability(10, 0, 10, 90, 15, is_fat=True) == pytest.approx(0.5)
    assert macro_scalability(10, 0, 10, 90, 15) == pytest.approx(1.0)


def test_compute_recipe_scalability_uses_ingredient_densities() -> None:
    source = InMemoryNutritionSource([make_food(1, 31, 0, 3.6)])
    recipe = make_recipe(1, (MealType.LUNCH,), ingredients=(ingredient(1, 150),))

    scalability = compute_recipe_scalability(recipe, source)

    assert scalability is not None
    assert scalability.protein_scalability == pytest.approx(1.0)
    assert scalability.carbs_scalability == 0.0
    assert scalability.fat_scalability == pytest.approx(3.6 / 15)
    assert scalability.protein_density == pytest.approx(31)


def test_bound_ingredients_reduce_scalability() -> None:
    source = InMemoryNutritionSource([make_food(1, 31, 0, 3.6), make_food(2, 25, 1, 3)])
    free = make_recipe(1, (MealType.LUNCH,), ingredients=(ingredient(1, 100), ingredient(2, 100)))
    bound = make_recipe(
        2,
        (MealType.LUNCH,),
        ingredients=(ingredient(1, 100), ingredient(2, 100, binding_group="sauce")),
    )

    free_result = compute_recipe_scalability(free, source)
    bound_result = compute_recipe_scalability(bound, source)

    assert free_result is not None and bound_result is not None
    assert bound_result.fat_scalability < free_result.fat_scalability


def test_pure_macro_ingredient_treats_everything_as_independent() -> None:
    source = InMemoryNutritionSource([make_food(1, 31, 0, 3.6), make_food(2, 0, 0, 100)])
    ingredients = (
        ingredient(1, 100, binding_group="marinade"),
        RecipeIngredient(
            food_id=2,
            name="Olive oil",
            quantity_g=10,
            ingredient_type=IngredientType.PURE_MACRO,
        ),
    )
    recipe = make_recipe(1, (MealType.DINNER,), ingredients=ingredients)

    scalability = compute_recipe_scalability(recipe, source)

    assert scalability is not None
    assert scalability.protein_scalability == pytest.approx(min(1.0, 15.5 / 20))


def test_missing_nutrition_returns_none() -> None:
    recipe = make_recipe(1, (MealType.LUNCH,), ingredients=(ingredient(99, 100),))

    assert compute_recipe_scalability(recipe, InMemoryNutritionSource()) is None
