"""Tests for the ingredient quantity LP."""

import pytest

from meal_planner.domain.macros import MacroVector
from meal_planner.domain.meal_types import MealType
from meal_planner.domain.optimization import IngredientConstraint, OptimizationCriteria
from meal_planner.domain.recipes import IngredientType
from meal_planner.services.lp_optimizer import (
    build_lp_problem,
    calculate_dynamic_upper_bounds,
    create_default_optimization_criteria,
    solve_lp_optimization,
)
from tests.conftest import make_scalability

TARGET = MacroVector(protein=50, carbs=100, fat=20, calories=780)


def _constraint(  # noqa: PLR0913
    ingredient_id: int,
    per_g: tuple[float, float, float],
    base_quantity: float = 100,
    min_scale: float = 0.5,
    max_scale: float = 2.0,
    ingredient_type: IngredientType = IngredientType.SUPPLEMENT,
    binding_group: str | None = None,
) -> IngredientConstraint:
    protein, carbs, fat = per_g
    return IngredientConstraint(
        ingredient_id=ingredient_id,
        ingredient_name=f"Food {ingredient_id}",
        recipe_id=1,
        recipe_name="Bowl",
        meal_type=MealType.LUNCH,
        protein_per_g=protein,
        carbs_per_g=carbs,
        fat_per_g=fat,
        calories_per_g=protein * 4 + carbs * 4 + fat * 9,
        base_quantity=base_quantity,
        min_scale_factor=min_scale,
        max_scale_factor=max_scale,
        ingredient_type=ingredient_type,
        binding_group=binding_group,
    )


RICE = _constraint(1, (0.07, 0.8, 0.01))
CHICKEN = _constraint(2, (0.25, 0.0, 0.03))


def test_dynamic_upper_bounds_scale_with_calories() -> None:
    bounds = calculate_dynamic_upper_bounds(2200, make_scalability(1, 1.0))
    low = calculate_dynamic_upper_bounds(440, make_scalability(1, 0.5))
    high = calculate_dynamic_upper_bounds(8800, make_scalability(1, 1.0))

    assert bounds["protein"] == pytest.approx(2.5)
    assert low["carbs"] == pytest.approx(1.2)
    assert high["fat"] == pytest.approx(5.0)


def test_build_problem_has_balance_per_macro() -> None:
    model = build_lp_problem([RICE, CHICKEN], OptimizationCriteria(TARGET), {})

    assert len(model.scale_variables) == 2
    assert {"protein_balance", "carbs_balance", "fat_balance", "calories_balance"} <= set(
        model.problem.constraints
    )
    assert "pure_macro_limit" not in model.problem.constraints


def test_build_problem_requires_constraints() -> None:
    with pytest.raises(ValueError):
        build_lp_problem([], OptimizationCriteria(TARGET), {})


def test_solver_moves_quantities_toward_target() -> None:
    result = solve_lp_optimization(
        [RICE, CHICKEN], create_default_optimization_criteria(TARGET, 10)
    )

    assert result.success
    assert result.status == "optimal"
    assert result.optimized_macros.carbs > 80
    assert result.optimized_macros.protein > 32
    for quantity in result.optimized_quantities:
        assert 0.5 <= quantity.scale_factor <= quantity.upper_scale_factor
        assert quantity.optimized_quantity == pytest.approx(
            quantity.original_quantity * quantity.scale_factor
        )
    assert result.metadata.variables == 10


def test_bound_group_scales_together() -> None:
    sauce_a = _constraint(3, (0.2, 0.1, 0.05), binding_group="sauce")
    sauce_b = _constraint(4, (0.02, 0.05, 0.0), min_scale=0.7, max_scale=1.5, binding_group="sauce")

    result = solve_lp_optimization(
        [RICE, sauce_a, sauce_b], create_default_optimization_criteria(TARGET, 10)
    )

    grouped = [item for item in result.optimized_quantities if item.binding_group == "sauce"]
    assert result.success
    assert len(grouped) == 2
    assert grouped[0].scale_factor == pytest.approx(grouped[1].scale_factor)
    assert 0.7 <= grouped[0].scale_factor <= 1.5
    assert grouped[0].upper_scale_factor == pytest.approx(1.5)


def test_scalability_caps_upper_bound() -> None:
    constraint = _constraint(5, (0.1, 0.3, 0.05), max_scale=2.5)
    criteria = create_default_optimization_criteria(
        MacroVector.from_grams(200, 300, 80), 10
    )

    model = build_lp_problem([constraint], criteria, {1: make_scalability(1, 0.5)})

    expected = 1 + criteria.target_macros.calories / 2200 * 1.5 * 0.5
    assert model.scale_variables[0].upper == pytest.approx(min(2.5, expected))


def test_pure_macro_cap_makes_problem_infeasible() -> None:
    oil = _constraint(
        6, (0.0, 0.0, 1.0), base_quantity=50, max_scale=2.5,
        ingredient_type=IngredientType.PURE_MACRO,
    )

    result = solve_lp_optimization(
        [RICE, oil], create_default_optimization_criteria(TARGET, 10)
    )

    assert not result.success
    assert result.status != "optimal"
    assert result.optimized_quantities == []
    assert result.deviations.total_percent == pytest.approx(100)


def test_empty_constraints_report_error() -> None:
    result = solve_lp_optimization([], create_default_optimization_criteria(TARGET))

    assert not result.success
    assert result.status == "error"
    assert result.message
