"""Translate a meal combination into LP ingredient constraints."""

import logging

from meal_planner.domain.meal_types import MealDistribution, MealType
from meal_planner.domain.optimization import IngredientConstraint
from meal_planner.domain.plans import MealCombination, PlannedMeal
from meal_planner.domain.recipes import IngredientType, RecipeIngredient
from meal_planner.services.nutrition import NutritionSource

SCALE_LIMITS: dict[IngredientType, tuple[float, float]] = {
    IngredientType.PURE_MACRO: (0.5, 2.5),
    IngredientType.SUPPLEMENT: (0.5, 2.0),
    IngredientType.FLAVORING: (0.8, 1.2),
    IngredientType.BOUND: (0.7, 1.5),
}
PORTION_SCALE_LIMITS = (0.7, 2.5)
PORTION_BASE_GRAMS = 100.0

_logger = logging.getLogger(__name__)


def build_ingredient_constraints(
    combination: MealCombination,
    nutrition_source: NutritionSource,
    distributions: tuple[MealDistribution, ...],
) -> list[IngredientConstraint]:
    """One constraint per ingredient, or one portion constraint per meal.

    A meal falls back to its portion constraint when any ingredient lacks
    nutrition data.

    Quantities are portioned by the meal's share of the day so that scale 1.0
    reproduces the combination's macros.
    """
    shares = {item.meal_type: item.target_percent for item in distributions}
    constraints: list[IngredientConstraint] = []
    for meal_type, meal in combination.meals.items():
        multiplier = shares.get(meal_type, 25.0) / 100
        ingredient_constraints = [
            _ingredient_constraint(
                ingredient, meal, meal_type, multiplier, nutrition_source
            )
            for ingredient in meal.recipe.recipe.ingredients
            if ingredient.quantity_g > 0
        ]
        resolved = [item for item in ingredient_constraints if item is not None]
        if resolved and len(resolved) == len(ingredient_constraints):
            constraints.extend(resolved)
        else:
            constraints.append(_portion_constraint(meal, meal_type))
    return constraints


def _ingredient_constraint(
    ingredient: RecipeIngredient,
    meal: PlannedMeal,
    meal_type: MealType,
    multiplier: float,
    nutrition_source: NutritionSource,
) -> IngredientConstraint | None:
    food = nutrition_source.get(ingredient.food_id)
    if food is None:
        _logger.info(
            "Ingredient %s of recipe %s has no nutrition data",
            ingredient.food_id,
            meal.recipe.recipe_id,
        )
        return None
    default_min, default_max = SCALE_LIMITS[ingredient.ingredient_type]
    group = (
        f"{meal.recipe.recipe_id}-{meal_type}-{ingredient.binding_group}"
        if ingredient.binding_group
        else None
    )
    per_100g = food.per_100g
    return IngredientConstraint(
        ingredient_id=ingredient.food_id,
        ingredient_name=ingredient.name or food.name,
        recipe_id=meal.recipe.recipe_id,
        recipe_name=meal.recipe.recipe_name,
        meal_type=meal_type,
        protein_per_g=per_100g.protein / 100,
        carbs_per_g=per_100g.carbs / 100,
        fat_per_g=per_100g.fat / 100,
        calories_per_g=per_100g.calories / 100,
        base_quantity=ingredient.quantity_g * multiplier,
        min_scale_factor=default_min
        if ingredient.min_scale_factor is None
        else ingredient.min_scale_factor,
        max_scale_factor=default_max
        if ingredient.max_scale_factor is None
        else ingredient.max_scale_factor,
        ingredient_type=ingredient.ingredient_type,
        binding_group=group,
    )


def _portion_constraint(meal: PlannedMeal, meal_type: MealType) -> IngredientConstraint:
    macros = meal.assigned_macros
    recipe_id = meal.recipe.recipe_id
    return IngredientConstraint(
        ingredient_id=-recipe_id,
        ingredient_name=meal.recipe.recipe_name,
        recipe_id=recipe_id,
        recipe_name=meal.recipe.recipe_name,
        meal_type=meal_type,
        protein_per_g=macros.protein / PORTION_BASE_GRAMS,
        carbs_per_g=macros.carbs / PORTION_BASE_GRAMS,
        fat_per_g=macros.fat / PORTION_BASE_GRAMS,
        calories_per_g=macros.calories / PORTION_BASE_GRAMS,
        base_quantity=PORTION_BASE_GRAMS,
        min_scale_factor=PORTION_SCALE_LIMITS[0],
        max_scale_factor=PORTION_SCALE_LIMITS[1],
        ingredient_type=IngredientType.BOUND,
        binding_group=f"recipe-{recipe_id}-{meal_type}",
    )
