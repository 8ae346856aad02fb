"""Shared test fixtures."""

from dataclasses import dataclass, field
from uuid import UUID

import pytest

from meal_planner.config import Settings
from meal_planner.containers import AppContainer
from meal_planner.domain.macros import (
    MacroVector,
    absolute_difference,
    compute_deviation,
)
from meal_planner.domain.meal_types import MealType
from meal_planner.domain.optimization import LPMetadata, LPOptimizationResult
from meal_planner.domain.recipes import (
    FoodNutrition,
    RecipeIngredient,
    RecipeScalability,
    RecipeScore,
    RecipeWithHistory,
    VarietyAdjustment,
)
from meal_planner.services.meal_plans import MealPlanService, RecipeRepository

TARGET = MacroVector(protein=120, carbs=150, fat=50, calories=1460)


def make_recipe(  # noqa: PLR0913
    recipe_id: int,
    meal_types: tuple[MealType, ...],
    protein: float = 120,
    carbs: float = 150,
    fat: float = 50,
    name: str | None = None,
    **history: object,
) -> RecipeWithHistory:
    return RecipeWithHistory(
        recipe_id=recipe_id,
        name=name or f"Recipe {recipe_id}",
        meal_types=meal_types,
        base_macros=MacroVector.from_grams(protein, carbs, fat),
        **history,  # type: ignore[arg-type]
    )


def make_adjustment(
    recipe: RecipeWithHistory,
    final_score: float = 90.0,
    penalty: float = 0.0,
    reward: float = 0.0,
) -> VarietyAdjustment:
    base = final_score + penalty - reward
    return VarietyAdjustment(
        recipe=recipe,
        score=RecipeScore(
            total_score=base,
            cosine_similarity=base,
            weighted_scalability=base,
            size_factor=100.0,
        ),
        penalty=penalty,
        reward=reward,
        final_score=final_score,
    )


def make_scalability(recipe_id: int, value: float = 0.9) -> RecipeScalability:
    return RecipeScalability(
        recipe_id=recipe_id,
        protein_scalability=value,
        carbs_scalability=value,
        fat_scalability=value,
    )


def make_food(food_id: int, protein: float, carbs: float, fat: float) -> FoodNutrition:
    return FoodNutrition(
        food_id=food_id,
        name=f"Food {food_id}",
        per_100g=MacroVector.from_grams(protein, carbs, fat),
    )


def make_lp_result(macros: MacroVector, target: MacroVector) -> LPOptimizationResult:
    return LPOptimizationResult(
        success=True,
        status="optimal",
        objective_value=0.0,
        optimized_quantities=[],
        optimized_macros=macros,
        absolute_deviations=absolute_difference(macros, target),
        deviations=compute_deviation(macros, target),
        metadata=LPMetadata(variables=0, constraints=0, solve_time_ms=0.0),
    )


def balanced_recipes(
    protein: float = 120, carbs: float = 150, fat: float = 50
) -> list[RecipeWithHistory]:
    """One recipe per default slot, each matching the whole-day profile."""
    return [
        make_recipe(1, (MealType.BREAKFAST,), protein, carbs, fat, name="Oat bowl"),
        make_recipe(2, (MealType.LUNCH,), protein, carbs, fat, name="Chicken rice"),
        make_recipe(3, (MealType.DINNER,), protein, carbs, fat, name="Salmon potato"),
    ]


def ingredient(
    food_id: int, quantity_g: float, binding_group: str | None = None
) -> RecipeIngredient:
    return RecipeIngredient(
        food_id=food_id,
        name=f"Food {food_id}",
        quantity_g=quantity_g,
        binding_group=binding_group,
    )


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe catalog for tests."""

    recipes: list[RecipeWithHistory] = field(default_factory=list)
    scalability: dict[int, RecipeScalability] = field(default_factory=dict)
    foods: list[FoodNutrition] = field(default_factory=list)
    requested_users: list[UUID | None] = field(default_factory=list)

    def list_recipes(self, user_id: UUID | None) -> list[RecipeWithHistory]:
        self.requested_users.append(user_id)
        return list(self.recipes)

    def list_scalability(self, recipe_ids: list[int]) -> dict[int, RecipeScalability]:
        return {
            recipe_id: self.scalability[recipe_id]
            for recipe_id in recipe_ids
            if recipe_id in self.scalability
        }

    def list_foods(self, food_ids: list[int]) -> list[FoodNutrition]:
        return [food for food in self.foods if food.food_id in food_ids]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        lp_time_limit_seconds=10,
    )


@pytest.fixture
def recipe_repository() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository(
        recipes=balanced_recipes(),
        scalability={recipe_id: make_scalability(recipe_id) for recipe_id in (1, 2, 3)},
    )


@pytest.fixture
def container(
    settings: Settings, recipe_repository: InMemoryRecipeRepository
) -> AppContainer:
    meal_plan_service = MealPlanService(
        repository=recipe_repository,
        algorithm_settings=settings.algorithm_settings(),
        prefilter_strategy=settings.prefilter_strategy,
    )
    return AppContainer(settings=settings, meal_plan_service=meal_plan_service)
