"""Derive per-macro recipe scalability from ingredient composition."""

import logging
from dataclasses import dataclass

from meal_planner.domain.recipes import (
    IngredientType,
    RecipeScalability,
    RecipeWithHistory,
)
from meal_planner.services.nutrition import NutritionSource

REFERENCE_DENSITY = {"protein": 20.0, "carbs": 50.0, "fat": 15.0}
PURE_FAT_DENSITY = 80.0

_logger = logging.getLogger(__name__)


@dataclass
class _MacroTally:
    independent: float = 0.0
    bound: float = 0.0
    density_sum: float = 0.0

    @property
    def total(self) -> float:
        return self.independent + self.bound


def macro_scalability(  # noqa: PLR0913
    independent: float,
    bound: float,
    total: float,
    avg_density: float,
    reference_density: float,
    *,
    is_fat: bool = False,
) -> float:
    """Scalability of one macro in [0, 1].

    original = independent_ratio * 0.7 + (1 - bound_ratio) * 0.3, then scaled
    by avg_density / reference_density and capped at 1. Fat from very dense
    sources (oils) is halved.
    """
    if total <= 0:
        return 0.0
    independent_ratio = independent / total
    bound_ratio = bound / total
    original = independent_ratio * 0.7 + (1 - bound_ratio) * 0.3
    scaled = min(1.0, original * (avg_density / reference_density))
    if is_fat and avg_density > PURE_FAT_DENSITY:
        scaled *= 0.5
    return scaled


def compute_recipe_scalability(
    recipe: RecipeWithHistory, nutrition_source: NutritionSource
) -> RecipeScalability | None:
    """Compute scalability from ingredients, or None without usable data."""
    tallies = {macro: _MacroTally() for macro in REFERENCE_DENSITY}
    counted = 0
    has_pure_macro = False
    for ingredient in recipe.ingredients:
        food = nutrition_source.get(ingredient.food_id)
        if food is None or ingredient.quantity_g <= 0:
            continue
        counted += 1
        if ingredient.ingredient_type == IngredientType.PURE_MACRO:
            has_pure_macro = True
        for macro, tally in tallies.items():
            per_100g = food.per_100g.get(macro)
            grams = per_100g * ingredient.quantity_g / 100
            tally.density_sum += per_100g
            if ingredient.is_bound:
                tally.bound += grams
            else:
                tally.independent += grams

    if counted == 0:
        _logger.info("No ingredient nutrition for recipe %s", recipe.recipe_id)
        return None

    if has_pure_macro:
        for tally in tallies.values():
            tally.independent = tally.total
            tally.bound = 0.0

    values = {
        macro: macro_scalability(
            tally.independent,
            tally.bound,
            tally.total,
            tally.density_sum / counted,
            REFERENCE_DENSITY[macro],
            is_fat=macro == "fat",
        )
        for macro, tally in tallies.items()
    }
    return RecipeScalability(
        recipe_id=recipe.recipe_id,
        protein_scalability=values["protein"],
        carbs_scalability=values["carbs"],
        fat_scalability=values["fat"],
        protein_density=tallies["protein"].density_sum / counted,
        carbs_density=tallies["carbs"].density_sum / counted,
        fat_density=tallies["fat"].density_sum / counted,
    )
