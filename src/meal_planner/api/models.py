"""Pydantic models for the meal plan API."""

from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from meal_planner.domain.macros import calories_from_grams
from meal_planner.domain.meal_types import MealType

CALORIE_TOLERANCE = 0.15


class TargetMacros(BaseModel):
    """Daily macro target; calories must roughly match the 4-4-9 rule."""

    protein: float = Field(gt=0)
    carbs: float = Field(gt=0)
    fat: float = Field(gt=0)
    calories: float = Field(gt=0)

    @model_validator(mode="after")
    def check_calories(self) -> "TargetMacros":
        computed = calories_from_grams(self.protein, self.carbs, self.fat)
        if abs(self.calories - computed) / computed > CALORIE_TOLERANCE:
            raise ValueError(
                f"calories {self.calories:.0f} do not match macros ({computed:.0f} kcal)"
            )
        return self


class AlgorithmOverrides(BaseModel):
    """Per-request overrides of the configured generation settings."""

    max_attempts: int | None = Field(default=None, ge=1, le=50)
    score_threshold: float | None = Field(default=None, ge=0)
    deviation_threshold: float | None = Field(default=None, ge=0)
    final_deviation_limit: float | None = Field(default=None, ge=0)
    enable_lp_optimization: bool | None = None
    enable_recipe_swapping: bool | None = None


class GenerateMealPlanRequest(BaseModel):
    """Request body for meal plan generation."""

    target_macros: TargetMacros
    user_id: UUID | None = None
    meal_count: int = Field(default=3, ge=1, le=5)
    preferred_meal_types: list[MealType] = Field(default_factory=list)
    exclude_recipe_ids: list[int] = Field(default_factory=list)
    favorite_boost: float = Field(default=10.0, ge=0)
    recent_penalty: float = Field(default=10.0, ge=0)
    algorithm_settings: AlgorithmOverrides | None = None
