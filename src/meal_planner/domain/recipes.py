"""Domain models for recipes, their history and their scores."""

from dataclasses import dataclass, field
from enum import StrEnum

from meal_planner.domain.macros import MacroVector
from meal_planner.domain.meal_types import MealType


class IngredientType(StrEnum):
    """Role of an ingredient when quantities are rescaled."""

    PURE_MACRO = "FO_MAKRO"
    SUPPLEMENT = "KIEGESZITO"
    FLAVORING = "IZESITO"
    BOUND = "KOTOTT"


@dataclass(frozen=True)
class FoodNutrition:
    """Per-100g nutrition of a raw food."""

    food_id: int
    name: str
    per_100g: MacroVector


@dataclass(frozen=True)
class RecipeIngredient:
    """An ingredient line of a recipe."""

    food_id: int
    name: str
    quantity_g: float
    ingredient_type: IngredientType = IngredientType.SUPPLEMENT
    binding_group: str | None = None
    min_scale_factor: float | None = None
    max_scale_factor: float | None = None

    @property
    def is_bound(self) -> bool:
        return bool(self.binding_group)


@dataclass(frozen=True)
class RecipeScalability:
    """How far each macro of a recipe can be scaled, with its densities."""

    recipe_id: int
    protein_scalability: float
    carbs_scalability: float
    fat_scalability: float
    protein_density: float = 20.0
    carbs_density: float = 50.0
    fat_density: float = 15.0

    @classmethod
    def neutral(cls, recipe_id: int) -> "RecipeScalability":
        """Scalability used when a recipe has no stored profile."""
        return cls(
            recipe_id=recipe_id,
            protein_scalability=0.5,
            carbs_scalability=0.5,
            fat_scalability=0.5,
        )

    def for_macro(self, macro: str) -> float:
        """Return the scalability of protein, carbs, fat or calories."""
        if macro == "calories":
            return (
                self.protein_scalability
                + self.carbs_scalability
                + self.fat_scalability
            ) / 3
        return float(getattr(self, f"{macro}_scalability"))


@dataclass(frozen=True)
class RecipeWithHistory:
    """Recipe with its base macros and the user's usage history."""

    recipe_id: int
    name: str
    meal_types: tuple[MealType, ...]
    base_macros: MacroVector
    is_favorite: bool = False
    days_since_last_use: int | None = None
    usage_count_last_7_days: int = 0
    usage_count_last_30_days: int = 0
    ingredients: tuple[RecipeIngredient, ...] = field(default_factory=tuple)

    @property
    def category(self) -> MealType | None:
        """Primary meal type of the recipe."""
        return self.meal_types[0] if self.meal_types else None

    @property
    def has_ingredient_data(self) -> bool:
        return len(self.ingredients) > 0


@dataclass(frozen=True)
class RecipeScore:
    """Base score of a recipe against a target, with its components (0-100)."""

    total_score: float
    cosine_similarity: float
    weighted_scalability: float
    size_factor: float


@dataclass(frozen=True)
class ScoredRecipe:
    """Recipe paired with its base score."""

    recipe: RecipeWithHistory
    score: RecipeScore

    @property
    def base_score(self) -> float:
        return self.score.total_score


@dataclass(frozen=True)
class VarietyAdjustment:
    """Scored recipe after history-based penalties and rewards."""

    recipe: RecipeWithHistory
    score: RecipeScore
    penalty: float
    reward: float
    final_score: float

    @property
    def recipe_id(self) -> int:
        return self.recipe.recipe_id

    @property
    def recipe_name(self) -> str:
        return self.recipe.name

    @property
    def base_score(self) -> float:
        return self.score.total_score
