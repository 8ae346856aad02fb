"""Domain models for ingredient quantity optimization."""

from dataclasses import dataclass, field

from meal_planner.domain.macros import MacroDeviation, MacroVector
from meal_planner.domain.meal_types import MealType
from meal_planner.domain.recipes import IngredientType


@dataclass(frozen=True)
class IngredientConstraint:
    """Scalable ingredient quantity inside a meal of a combination."""

    ingredient_id: int
    ingredient_name: str
    recipe_id: int
    recipe_name: str
    meal_type: MealType
    protein_per_g: float
    carbs_per_g: float
    fat_per_g: float
    calories_per_g: float
    base_quantity: float
    min_scale_factor: float
    max_scale_factor: float
    ingredient_type: IngredientType
    binding_group: str | None = None

    def contribution(self) -> MacroVector:
        """Macros supplied at scale factor 1.0."""
        return MacroVector(
            protein=self.protein_per_g * self.base_quantity,
            carbs=self.carbs_per_g * self.base_quantity,
            fat=self.fat_per_g * self.base_quantity,
            calories=self.calories_per_g * self.base_quantity,
        )


@dataclass(frozen=True)
class OptimizationWeights:
    protein: float = 0.3
    carbs: float = 0.25
    fat: float = 0.25
    calories: float = 0.2

    def get(self, macro: str) -> float:
        return float(getattr(self, macro))


@dataclass(frozen=True)
class OptimizationPenalties:
    excess: float = 2.0
    deficit: float = 3.0
    scaling: float = 1.0


@dataclass(frozen=True)
class OptimizationCriteria:
    """Target and objective tuning for the quantity optimizer."""

    target_macros: MacroVector
    weights: OptimizationWeights = field(default_factory=OptimizationWeights)
    penalties: OptimizationPenalties = field(default_factory=OptimizationPenalties)
    limit_pure_macro_calories: bool = True
    pure_macro_calorie_share: float = 0.1
    time_limit_seconds: int = 30


@dataclass(frozen=True)
class OptimizedQuantity:
    ingredient_id: int
    ingredient_name: str
    recipe_id: int
    meal_type: MealType
    original_quantity: float
    optimized_quantity: float
    scale_factor: float
    upper_scale_factor: float
    binding_group: str | None = None


@dataclass(frozen=True)
class LPMetadata:
    variables: int
    constraints: int
    solve_time_ms: float


@dataclass(frozen=True)
class LPOptimizationResult:
    """Outcome of a quantity optimization run."""

    success: bool
    status: str
    objective_value: float | None
    optimized_quantities: list[OptimizedQuantity]
    optimized_macros: MacroVector
    absolute_deviations: MacroVector
    deviations: MacroDeviation
    metadata: LPMetadata
    message: str | None = None
