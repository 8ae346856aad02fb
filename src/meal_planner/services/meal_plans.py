"""Application service that loads catalog data and runs the generator."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import UUID

from meal_planner.domain.generation import (
    AlgorithmSettings,
    GenerationPreferences,
    GenerationRequest,
    MasterGenerationResult,
)
from meal_planner.domain.macros import MacroVector
from meal_planner.domain.recipes import (
    FoodNutrition,
    RecipeScalability,
    RecipeWithHistory,
)
from meal_planner.services.generator import MealPlanGenerator
from meal_planner.services.nutrition import InMemoryNutritionSource
from meal_planner.services.prefilter import build_pre_filter
from meal_planner.services.scalability import compute_recipe_scalability

_logger = logging.getLogger(__name__)


class RecipeRepository(Protocol):
    """Read-only access to the recipe catalog."""

    def list_recipes(self, user_id: UUID | None) -> list[RecipeWithHistory]:
        """Return recipes with ingredients and the user's usage history."""

    def list_scalability(self, recipe_ids: list[int]) -> dict[int, RecipeScalability]:
        """Return stored scalability keyed by recipe id."""

    def list_foods(self, food_ids: list[int]) -> list[FoodNutrition]:
        """Return per-100g nutrition for foods."""


@dataclass
class MealPlanService:
    """Service for generating meal plans from the stored catalog."""

    repository: RecipeRepository
    algorithm_settings: AlgorithmSettings = field(default_factory=AlgorithmSettings)
    prefilter_strategy: str = "strict"
    excluded_recipe_ids: frozenset[int] = frozenset()

    def generate(
        self,
        target_macros: MacroVector,
        preferences: GenerationPreferences,
        user_id: UUID | None = None,
        algorithm_settings: AlgorithmSettings | None = None,
    ) -> MasterGenerationResult:
        """Generate a meal plan for a target using the stored catalog."""
        recipes = self.repository.list_recipes(user_id)
        food_ids = sorted(
            {ingredient.food_id for recipe in recipes for ingredient in recipe.ingredients}
        )
        nutrition_source = InMemoryNutritionSource(
            self.repository.list_foods(food_ids) if food_ids else []
        )
        scalability = self.repository.list_scalability(
            [recipe.recipe_id for recipe in recipes]
        )
        derived = 0
        for recipe in recipes:
            if recipe.recipe_id in scalability:
                continue
            computed = compute_recipe_scalability(recipe, nutrition_source)
            if computed is not None:
                scalability[recipe.recipe_id] = computed
                derived += 1
        _logger.info(
            "Loaded %s recipes, %s foods, derived scalability for %s",
            len(recipes),
            len(nutrition_source),
            derived,
        )

        generator = MealPlanGenerator(
            nutrition_source=nutrition_source,
            pre_filter=build_pre_filter(self.prefilter_strategy, nutrition_source),
        )
        request = GenerationRequest(
            target_macros=target_macros,
            recipes=recipes,
            scalability_data=scalability,
            preferences=replace(
                preferences,
                exclude_recipe_ids=preferences.exclude_recipe_ids
                | self.excluded_recipe_ids,
            ),
            algorithm_settings=algorithm_settings or self.algorithm_settings,
        )
        return generator.generate(request)
