"""Per-100g nutrition lookups for raw foods."""

from typing import Protocol

from meal_planner.domain.recipes import FoodNutrition


class NutritionSource(Protocol):
    """Lookup interface for per-100g food nutrition."""

    def get(self, food_id: int) -> FoodNutrition | None:
        """Return nutrition for a food, if known."""


class InMemoryNutritionSource:
    """Nutrition source backed by a dictionary keyed by food id."""

    def __init__(self, foods: list[FoodNutrition] | None = None) -> None:
        self._foods = {food.food_id: food for food in foods or []}

    def get(self, food_id: int) -> FoodNutrition | None:
        return self._foods.get(food_id)

    def __len__(self) -> int:
        return len(self._foods)
