"""Tests for meal plan validation."""

from dataclasses import replace

import pytest

from meal_planner.domain.meal_types import MealType
from meal_planner.services.combiner import create_meal_combination
from meal_planner.services.validator import (
    default_validation_criteria,
    quick_validation_check,
    validate_meal_plan,
)
from tests.conftest import TARGET, balanced_recipes, make_adjustment, make_lp_result

CRITERIA = default_validation_criteria(meal_count=3)


def _plan(carbs: float = 150, score: float = 90.0, breakfast_factor: float = 1.0):  # type: ignore[no-untyped-def]
    recipes = balanced_recipes(carbs=carbs)
    selected = {}
    for recipe in recipes:
        meal_type = recipe.meal_types[0]
        if meal_type == MealType.BREAKFAST and breakfast_factor != 1.0:
            recipe = balanced_recipes(
                protein=120 * breakfast_factor,
                carbs=carbs * breakfast_factor,
                fat=50 * breakfast_factor,
            )[0]
        selected[meal_type] = make_adjustment(recipe, score)
    return create_meal_combination(selected, TARGET, CRITERIA.meal_distribution)


def test_default_criteria_match_three_meal_preset() -> None:
    shares = {item.meal_type: item.target_percent for item in CRITERIA.meal_distribution}

    assert shares == {MealType.BREAKFAST: 28, MealType.LUNCH: 39, MealType.DINNER: 33}


def test_balanced_plan_is_valid() -> None:
    result = validate_meal_plan(_plan(), CRITERIA)

    assert result.is_valid
    assert result.deviation_validation.passes
    assert result.distribution_validation.passes
    assert result.quality_validation.passes
    assert not result.nutritional_validation.passes
    assert result.overall_score == 85
    assert result.validation_summary.passed_checks == 3
    assert any("Protein density" in item for item in result.validation_summary.warnings)


def test_high_deviation_invalidates_plan() -> None:
    result = validate_meal_plan(_plan(carbs=20), CRITERIA)

    assert not result.is_valid
    assert not result.deviation_validation.passes
    assert any("Carbs deviation" in item for item in result.validation_summary.critical_failures)
    assert (
        "Consider using LP optimization to reduce macro deviations"
        in result.validation_summary.recommendations
    )


def test_successful_lp_result_replaces_plan_macros() -> None:
    result = validate_meal_plan(_plan(carbs=20), CRITERIA, make_lp_result(TARGET, TARGET))

    assert result.is_valid
    assert result.deviation_validation.total_deviation_percent == 0


def test_failed_lp_result_is_ignored() -> None:
    failed = replace(
        make_lp_result(TARGET, TARGET), success=False, status="infeasible"
    )

    result = validate_meal_plan(_plan(carbs=20), CRITERIA, failed)

    assert not result.deviation_validation.passes


def test_low_recipe_scores_fail_quality() -> None:
    result = validate_meal_plan(_plan(score=60), CRITERIA)

    assert not result.is_valid
    assert not result.quality_validation.passes
    assert len(result.quality_validation.violations) == 4


def test_distribution_flags_oversized_meal() -> None:
    result = validate_meal_plan(_plan(breakfast_factor=2.0), CRITERIA)

    breakfast = result.distribution_validation.meal_distributions[MealType.BREAKFAST]
    assert not result.distribution_validation.passes
    assert not breakfast.is_within_range
    assert breakfast.actual_percent == pytest.approx(856.8 / 1958.4 * 100)


def test_distribution_failure_alone_keeps_plan_valid() -> None:
    result = validate_meal_plan(
        _plan(breakfast_factor=2.0), CRITERIA, make_lp_result(TARGET, TARGET)
    )

    assert not result.distribution_validation.passes
    assert result.deviation_validation.passes
    assert result.quality_validation.passes
    assert result.is_valid
    assert any("distribution" in item for item in result.validation_summary.warnings)


def test_quick_validation_reports_issues() -> None:
    assert quick_validation_check(_plan()).passes

    check = quick_validation_check(_plan(carbs=20, score=60))

    assert not check.passes
    assert len(check.main_issues) == 2
