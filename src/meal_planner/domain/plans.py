"""Domain models for meal combinations."""

from dataclasses import dataclass

from meal_planner.domain.macros import MacroDeviation, MacroVector
from meal_planner.domain.meal_types import MealType
from meal_planner.domain.recipes import VarietyAdjustment

MEETS_THRESHOLD_SCORE = 80.0


@dataclass(frozen=True)
class PlannedMeal:
    """Recipe chosen for a meal slot and the macros it contributes."""

    recipe: VarietyAdjustment
    assigned_macros: MacroVector


@dataclass(frozen=True)
class MealCombination:
    """One recipe per meal type with combined macros and scores."""

    meal_plan_id: str
    meals: dict[MealType, PlannedMeal]
    total_macros: MacroVector
    target_macros: MacroVector
    deviation: MacroDeviation
    total_score: float
    average_score: float

    @property
    def meets_threshold(self) -> bool:
        return self.average_score >= MEETS_THRESHOLD_SCORE

    def recipe_ids(self) -> tuple[int, ...]:
        """Recipe ids in meal-slot order."""
        return tuple(meal.recipe.recipe_id for meal in self.meals.values())
