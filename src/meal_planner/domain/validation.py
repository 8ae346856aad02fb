"""Domain models for meal plan validation."""

from dataclasses import dataclass, field

from meal_planner.domain.meal_types import MealDistribution, MealType


@dataclass(frozen=True)
class ValidationCriteria:
    """Thresholds used by the four validation checks."""

    meal_distribution: tuple[MealDistribution, ...]
    max_total_deviation_percent: float = 20.0
    max_individual_deviation_percent: float = 25.0
    min_recipe_score: float = 70.0
    min_average_score: float = 80.0
    min_protein_density: float = 0.12
    max_fat_percent: float = 40.0
    min_carb_percent: float = 15.0


@dataclass(frozen=True)
class DeviationValidation:
    passes: bool
    total_deviation_percent: float
    protein_percent: float
    carbs_percent: float
    fat_percent: float
    calories_percent: float
    violations: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MealDistributionCheck:
    actual_percent: float
    target_percent: float
    tolerance_percent: float
    is_within_range: bool
    deviation: float


@dataclass(frozen=True)
class DistributionValidation:
    passes: bool
    meal_distributions: dict[MealType, MealDistributionCheck]
    violations: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RecipeScoreCheck:
    recipe_id: int
    recipe_name: str
    meal_type: MealType
    score: float
    meets_minimum: bool


@dataclass(frozen=True)
class QualityValidation:
    passes: bool
    recipe_scores: list[RecipeScoreCheck]
    average_score: float
    violations: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class NutritionValidation:
    passes: bool
    protein_density: float
    fat_percent: float
    carb_percent: float
    violations: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ValidationSummary:
    passed_checks: int
    total_checks: int
    critical_failures: list[str]
    warnings: list[str]
    recommendations: list[str]


@dataclass(frozen=True)
class ValidationResult:
    """Combined outcome of the deviation, distribution, quality and nutrition checks."""

    is_valid: bool
    overall_score: float
    deviation_validation: DeviationValidation
    distribution_validation: DistributionValidation
    quality_validation: QualityValidation
    nutritional_validation: NutritionValidation
    validation_summary: ValidationSummary

    @classmethod
    def empty(cls) -> "ValidationResult":
        """Default result for a run that produced no meal plan."""
        return cls(
            is_valid=False,
            overall_score=0.0,
            deviation_validation=DeviationValidation(
                passes=False,
                total_deviation_percent=0.0,
                protein_percent=0.0,
                carbs_percent=0.0,
                fat_percent=0.0,
                calories_percent=0.0,
            ),
            distribution_validation=DistributionValidation(
                passes=False, meal_distributions={}
            ),
            quality_validation=QualityValidation(
                passes=False, recipe_scores=[], average_score=0.0
            ),
            nutritional_validation=NutritionValidation(
                passes=False, protein_density=0.0, fat_percent=0.0, carb_percent=0.0
            ),
            validation_summary=ValidationSummary(
                passed_checks=0,
                total_checks=4,
                critical_failures=[],
                warnings=[],
                recommendations=[],
            ),
        )
