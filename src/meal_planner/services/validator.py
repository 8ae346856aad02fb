"""Validate a final meal plan against deviation, distribution, quality and nutrition limits."""

import logging
from dataclasses import dataclass

from meal_planner.domain.macros import MacroDeviation, MacroVector
from meal_planner.domain.meal_types import (
    MealType,
    default_meal_types,
    distributions_for,
)
from meal_planner.domain.optimization import LPOptimizationResult
from meal_planner.domain.plans import MEETS_THRESHOLD_SCORE, MealCombination
from meal_planner.domain.validation import (
    DeviationValidation,
    DistributionValidation,
    MealDistributionCheck,
    NutritionValidation,
    QualityValidation,
    RecipeScoreCheck,
    ValidationCriteria,
    ValidationResult,
    ValidationSummary,
)

SCORE_WEIGHTS = {
    "deviation": 40.0,
    "distribution": 20.0,
    "quality": 25.0,
    "nutrition": 15.0,
}
TOTAL_CHECKS = 4

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuickValidation:
    passes: bool
    total_deviation: float
    main_issues: list[str]


def default_validation_criteria(
    meal_types: tuple[MealType, ...] | None = None, meal_count: int = 3
) -> ValidationCriteria:
    """Criteria whose distribution table matches the planned meal slots."""
    slots = meal_types or default_meal_types(meal_count)
    return ValidationCriteria(meal_distribution=distributions_for(slots))


def validate_meal_plan(
    combination: MealCombination,
    criteria: ValidationCriteria,
    lp_result: LPOptimizationResult | None = None,
) -> ValidationResult:
    """Run all four checks; validity needs deviation and quality to pass."""
    optimized = lp_result is not None and lp_result.success
    final_macros = lp_result.optimized_macros if optimized else combination.total_macros
    final_deviation = lp_result.deviations if optimized else combination.deviation

    deviation = validate_deviations(final_deviation, criteria)
    distribution = validate_distribution(combination, criteria)
    quality = validate_quality(combination, criteria)
    nutrition = validate_nutrition(final_macros, criteria)

    checks = {
        "deviation": deviation.passes,
        "distribution": distribution.passes,
        "quality": quality.passes,
        "nutrition": nutrition.passes,
    }
    overall_score = sum(SCORE_WEIGHTS[name] for name, passed in checks.items() if passed)
    summary = _collect_summary(deviation, distribution, quality, nutrition, overall_score)
    is_valid = deviation.passes and quality.passes
    _logger.info(
        "Validation %s with score %.0f/100",
        "passed" if is_valid else "failed",
        overall_score,
    )
    return ValidationResult(
        is_valid=is_valid,
        overall_score=overall_score,
        deviation_validation=deviation,
        distribution_validation=distribution,
        quality_validation=quality,
        nutritional_validation=nutrition,
        validation_summary=summary,
    )


def validate_deviations(
    deviation: MacroDeviation, criteria: ValidationCriteria
) -> DeviationValidation:
    violations = []
    total = deviation.total_percent
    if total > criteria.max_total_deviation_percent:
        violations.append(
            f"Total deviation {total:.1f}% exceeds limit "
            f"{criteria.max_total_deviation_percent:g}%"
        )
    for label, value in (
        ("Protein", deviation.protein_percent),
        ("Carbs", deviation.carbs_percent),
        ("Fat", deviation.fat_percent),
        ("Calories", deviation.calories_percent),
    ):
        if value > criteria.max_individual_deviation_percent:
            violations.append(
                f"{label} deviation {value:.1f}% exceeds limit "
                f"{criteria.max_individual_deviation_percent:g}%"
            )
    return DeviationValidation(
        passes=not violations,
        total_deviation_percent=total,
        protein_percent=deviation.protein_percent,
        carbs_percent=deviation.carbs_percent,
        fat_percent=deviation.fat_percent,
        calories_percent=deviation.calories_percent,
        violations=violations,
    )


def validate_distribution(
    combination: MealCombination, criteria: ValidationCriteria
) -> DistributionValidation:
    """Check each meal's share of the plan's calories against its range.

    Meal types missing from the criteria table are not checked.
    """
    table = {item.meal_type: item for item in criteria.meal_distribution}
    total_calories = combination.total_macros.calories
    checks: dict[MealType, MealDistributionCheck] = {}
    violations = []
    for meal_type, meal in combination.meals.items():
        distribution = table.get(meal_type)
        if distribution is None:
            continue
        actual = (
            meal.assigned_macros.calories / total_calories * 100
            if total_calories > 0
            else 0.0
        )
        within = distribution.min_percent <= actual <= distribution.max_percent
        checks[meal_type] = MealDistributionCheck(
            actual_percent=actual,
            target_percent=distribution.target_percent,
            tolerance_percent=distribution.tolerance_percent,
            is_within_range=within,
            deviation=abs(actual - distribution.target_percent),
        )
        if not within:
            violations.append(
                f"{meal_type} distribution {actual:.1f}% outside range "
                f"{distribution.min_percent:g}%-{distribution.max_percent:g}%"
            )
    return DistributionValidation(
        passes=not violations, meal_distributions=checks, violations=violations
    )


def validate_quality(
    combination: MealCombination, criteria: ValidationCriteria
) -> QualityValidation:
    scores = []
    violations = []
    for meal_type, meal in combination.meals.items():
        score = meal.recipe.final_score
        meets = score >= criteria.min_recipe_score
        scores.append(
            RecipeScoreCheck(
                recipe_id=meal.recipe.recipe_id,
                recipe_name=meal.recipe.recipe_name,
                meal_type=meal_type,
                score=score,
                meets_minimum=meets,
            )
        )
        if not meets:
            violations.append(
                f"{meal.recipe.recipe_name} ({meal_type}) score {score:.1f} "
                f"below minimum {criteria.min_recipe_score:g}"
            )
    if combination.average_score < criteria.min_average_score:
        violations.append(
            f"Average score {combination.average_score:.1f} below minimum "
            f"{criteria.min_average_score:g}"
        )
    return QualityValidation(
        passes=not violations,
        recipe_scores=scores,
        average_score=combination.average_score,
        violations=violations,
    )


def validate_nutrition(
    macros: MacroVector, criteria: ValidationCriteria
) -> NutritionValidation:
    calories = macros.calories
    protein_density = macros.protein / calories if calories > 0 else 0.0
    fat_percent = macros.fat * 9 / calories * 100 if calories > 0 else 0.0
    carb_percent = macros.carbs * 4 / calories * 100 if calories > 0 else 0.0

    violations = []
    if protein_density < criteria.min_protein_density:
        violations.append(
            f"Protein density {protein_density * 100:.1f}% below minimum "
            f"{criteria.min_protein_density * 100:.1f}%"
        )
    if fat_percent > criteria.max_fat_percent:
        violations.append(
            f"Fat percentage {fat_percent:.1f}% exceeds maximum {criteria.max_fat_percent:g}%"
        )
    if carb_percent < criteria.min_carb_percent:
        violations.append(
            f"Carb percentage {carb_percent:.1f}% below minimum {criteria.min_carb_percent:g}%"
        )
    return NutritionValidation(
        passes=not violations,
        protein_density=protein_density,
        fat_percent=fat_percent,
        carb_percent=carb_percent,
        violations=violations,
    )


def quick_validation_check(
    combination: MealCombination, max_deviation_percent: float = 20.0
) -> QuickValidation:
    """Cheap pre-check on the unoptimized combination."""
    total = combination.deviation.total_percent
    issues = []
    if total > max_deviation_percent:
        issues.append(f"High deviation: {total:.1f}%")
    if combination.average_score < MEETS_THRESHOLD_SCORE:
        issues.append(f"Low quality: {combination.average_score:.1f} score")
    return QuickValidation(
        passes=not issues, total_deviation=total, main_issues=issues
    )


def _collect_summary(
    deviation: DeviationValidation,
    distribution: DistributionValidation,
    quality: QualityValidation,
    nutrition: NutritionValidation,
    overall_score: float,
) -> ValidationSummary:
    recommendations = []
    if not deviation.passes:
        recommendations.append(
            "Consider using LP optimization to reduce macro deviations"
        )
        if deviation.carbs_percent > 30:
            recommendations.append(
                "Add more carbohydrate-rich ingredients or increase portions"
            )
        if deviation.protein_percent > 20:
            recommendations.append(
                "Adjust protein sources or add protein supplements"
            )
    if not distribution.passes:
        recommendations.append("Rebalance calorie distribution between meals")
    if not quality.passes:
        recommendations.append(
            "Consider swapping low-scoring recipes for better alternatives"
        )
    if not nutrition.passes:
        recommendations.append(
            "Review overall nutritional balance and ingredient choices"
        )
    if overall_score < 60:
        recommendations.append(
            "Consider using fallback recipe generation for better results"
        )
    return ValidationSummary(
        passed_checks=sum(
            check.passes for check in (deviation, distribution, quality, nutrition)
        ),
        total_checks=TOTAL_CHECKS,
        critical_failures=[*deviation.violations, *quality.violations],
        warnings=[*distribution.violations, *nutrition.violations],
        recommendations=recommendations,
    )
