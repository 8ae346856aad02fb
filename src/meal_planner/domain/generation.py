"""Inputs and outputs of a full meal plan generation run."""

from dataclasses import dataclass, field
from enum import StrEnum

from meal_planner.domain.macros import MacroVector
from meal_planner.domain.meal_types import MealType
from meal_planner.domain.optimization import LPOptimizationResult
from meal_planner.domain.plans import MealCombination
from meal_planner.domain.recipes import RecipeScalability, RecipeWithHistory
from meal_planner.domain.validation import ValidationResult


class GenerationStatus(StrEnum):
    SUCCESS = "success"
    FAILED_VALIDATION = "failed_validation"
    FAILED_GENERATION = "failed_generation"
    MAX_ATTEMPTS_REACHED = "max_attempts_reached"


class GenerationStep(StrEnum):
    """Stages completed by the orchestrator, in pipeline order."""

    FILTERING = "recipe_filtering"
    SCORING = "recipe_scoring"
    RANKING = "recipe_ranking"
    COMBINATION = "recipe_combination"
    SWAPPING = "recipe_swapping"
    LP_OPTIMIZATION = "lp_optimization"
    VALIDATION_PASSED = "validation_passed"


class FailureKind(StrEnum):
    INSUFFICIENT_RECIPES = "insufficient_recipes"
    NO_COMBINATIONS = "no_combinations"
    SCORE_BELOW_THRESHOLD = "score_below_threshold"
    LP_INFEASIBLE = "lp_infeasible"
    LP_ERROR = "lp_error"
    VALIDATION_FAILED = "validation_failed"
    MAX_ATTEMPTS_REACHED = "max_attempts_reached"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class GenerationFailure:
    kind: FailureKind
    message: str


@dataclass(frozen=True)
class GenerationPreferences:
    """User preferences for a generation run."""

    meal_count: int = 3
    preferred_meal_types: tuple[MealType, ...] = ()
    exclude_recipe_ids: frozenset[int] = frozenset()
    favorite_boost: float = 10.0
    recent_penalty: float = 10.0


@dataclass(frozen=True)
class AlgorithmSettings:
    """Tuning knobs of the generation loop."""

    max_attempts: int = 10
    score_threshold: float = 80.0
    deviation_threshold: float = 12.0
    final_deviation_limit: float = 20.0
    enable_lp_optimization: bool = True
    enable_recipe_swapping: bool = True
    max_swaps: int = 2
    combination_top_n: int = 3
    max_combinations: int = 50
    lp_time_limit_seconds: int = 30


@dataclass(frozen=True)
class GenerationRequest:
    """Everything the orchestrator needs for one generation call."""

    target_macros: MacroVector
    recipes: list[RecipeWithHistory]
    scalability_data: dict[int, RecipeScalability] = field(default_factory=dict)
    preferences: GenerationPreferences = field(default_factory=GenerationPreferences)
    algorithm_settings: AlgorithmSettings = field(default_factory=AlgorithmSettings)


@dataclass(frozen=True)
class GenerationMetadata:
    attempts: int
    filtered_recipes_count: int
    initial_combination_score: float
    swapping_applied: bool
    lp_optimization_applied: bool
    generation_time_ms: float
    steps_completed: list[GenerationStep]
    failures: list[GenerationFailure]

    @property
    def failure_reasons(self) -> list[str]:
        return [failure.message for failure in self.failures]


@dataclass(frozen=True)
class QualityMetrics:
    final_deviation_percent: float = 100.0
    final_average_score: float = 0.0
    recipe_diversity_score: float = 0.0
    nutritional_balance_score: float = 0.0
    user_satisfaction_score: float = 0.0


@dataclass(frozen=True)
class MasterGenerationResult:
    """Final outcome of the generation pipeline."""

    success: bool
    status: GenerationStatus
    validation: ValidationResult
    generation_metadata: GenerationMetadata
    quality_metrics: QualityMetrics
    final_meal_plan: MealCombination | None = None
    lp_optimization: LPOptimizationResult | None = None
