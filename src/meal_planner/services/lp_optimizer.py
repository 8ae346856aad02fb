"""Linear program that rescales ingredient quantities toward a macro target."""

import logging
import time
from dataclasses import dataclass

import pulp

from meal_planner.domain.macros import (
    MACRO_NAMES,
    MacroVector,
    absolute_difference,
    compute_deviation,
)
from meal_planner.domain.optimization import (
    IngredientConstraint,
    LPMetadata,
    LPOptimizationResult,
    OptimizationCriteria,
    OptimizedQuantity,
)
from meal_planner.domain.recipes import IngredientType, RecipeScalability

REFERENCE_CALORIES = 2200.0
UPPER_BOUND_SLOPE = 1.5
MIN_UPPER_BOUND = 1.2
MAX_UPPER_BOUND = 5.0
DEFAULT_UPPER_BOUND = 2.0

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScaleVariable:
    """One LP decision variable and the ingredients it scales."""

    variable: pulp.LpVariable
    members: tuple[IngredientConstraint, ...]
    lower: float
    upper: float

    def contribution(self) -> MacroVector:
        total = MacroVector.zero()
        for member in self.members:
            total = total + member.contribution()
        return total


@dataclass(frozen=True)
class LPModel:
    problem: pulp.LpProblem
    scale_variables: list[ScaleVariable]


def calculate_dynamic_upper_bounds(
    target_calories: float, scalability: RecipeScalability
) -> dict[str, float]:
    """Per-macro upper scale bound, clamped to [1.2, 5.0]."""
    calorie_ratio = target_calories / REFERENCE_CALORIES
    return {
        macro: max(
            MIN_UPPER_BOUND,
            min(
                MAX_UPPER_BOUND,
                1 + calorie_ratio * UPPER_BOUND_SLOPE * scalability.for_macro(macro),
            ),
        )
        for macro in MACRO_NAMES
    }


def create_default_optimization_criteria(
    target_macros: MacroVector, time_limit_seconds: int = 30
) -> OptimizationCriteria:
    return OptimizationCriteria(
        target_macros=target_macros, time_limit_seconds=time_limit_seconds
    )


def _dominant_macro(contribution: MacroVector) -> str:
    energy = {
        "protein": contribution.protein * 4,
        "carbs": contribution.carbs * 4,
        "fat": contribution.fat * 9,
    }
    macro = max(energy, key=energy.__getitem__)
    return macro if energy[macro] > 0 else "calories"


def _upper_bound(
    members: tuple[IngredientConstraint, ...],
    declared_max: float,
    target_calories: float,
    scalability_data: dict[int, RecipeScalability],
) -> float:
    scalability = scalability_data.get(members[0].recipe_id)
    if scalability is None:
        dynamic = DEFAULT_UPPER_BOUND
    else:
        contribution = MacroVector.zero()
        for member in members:
            contribution = contribution + member.contribution()
        bounds = calculate_dynamic_upper_bounds(target_calories, scalability)
        dynamic = bounds[_dominant_macro(contribution)]
    return min(declared_max, dynamic)


def build_lp_problem(
    constraints: list[IngredientConstraint],
    criteria: OptimizationCriteria,
    scalability_data: dict[int, RecipeScalability],
) -> LPModel:
    """Assemble the minimisation problem; raises ValueError without ingredients."""
    if not constraints:
        raise ValueError("No ingredient constraints to optimize")

    target = criteria.target_macros
    problem = pulp.LpProblem("MealQuantities", pulp.LpMinimize)

    groups: dict[str, list[IngredientConstraint]] = {}
    independent: list[IngredientConstraint] = []
    for constraint in constraints:
        if constraint.binding_group:
            groups.setdefault(constraint.binding_group, []).append(constraint)
        else:
            independent.append(constraint)

    scale_variables: list[ScaleVariable] = []
    for index, constraint in enumerate(independent):
        members = (constraint,)
        lower = constraint.min_scale_factor
        upper = max(
            lower,
            _upper_bound(
                members, constraint.max_scale_factor, target.calories, scalability_data
            ),
        )
        variable = pulp.LpVariable(f"ing_{index}", lowBound=lower, upBound=upper)
        scale_variables.append(ScaleVariable(variable, members, lower, upper))

    for index, group_members in enumerate(groups.values()):
        members = tuple(group_members)
        lower = max(member.min_scale_factor for member in members)
        declared_max = min(member.max_scale_factor for member in members)
        upper = max(
            lower,
            _upper_bound(members, declared_max, target.calories, scalability_data),
        )
        variable = pulp.LpVariable(f"group_{index}", lowBound=lower, upBound=upper)
        scale_variables.append(ScaleVariable(variable, members, lower, upper))

    excess = {
        macro: pulp.LpVariable(
            f"{macro}_excess", lowBound=0, upBound=2 * target.get(macro)
        )
        for macro in MACRO_NAMES
    }
    deficit = {
        macro: pulp.LpVariable(f"{macro}_deficit", lowBound=0, upBound=target.get(macro))
        for macro in MACRO_NAMES
    }

    penalties = criteria.penalties
    problem += (
        pulp.lpSum(
            criteria.weights.get(macro)
            * (penalties.excess * excess[macro] + penalties.deficit * deficit[macro])
            for macro in MACRO_NAMES
        )
        + pulp.lpSum(
            penalties.scaling * len(item.members) * item.variable
            for item in scale_variables
        ),
        "WeightedDeviation",
    )

    for macro in MACRO_NAMES:
        problem += (
            pulp.lpSum(
                item.contribution().get(macro) * item.variable
                for item in scale_variables
            )
            - excess[macro]
            + deficit[macro]
            == target.get(macro),
            f"{macro}_balance",
        )

    if criteria.limit_pure_macro_calories:
        pure_terms = [
            member.calories_per_g * member.base_quantity * item.variable
            for item in scale_variables
            for member in item.members
            if member.ingredient_type == IngredientType.PURE_MACRO
        ]
        if pure_terms:
            problem += (
                pulp.lpSum(pure_terms)
                <= target.calories * criteria.pure_macro_calorie_share,
                "pure_macro_limit",
            )

    return LPModel(problem=problem, scale_variables=scale_variables)


def solve_lp_optimization(
    constraints: list[IngredientConstraint],
    criteria: OptimizationCriteria,
    scalability_data: dict[int, RecipeScalability] | None = None,
) -> LPOptimizationResult:
    """Build and solve the quantity LP, reporting failures as results."""
    start = time.perf_counter()
    try:
        model = build_lp_problem(constraints, criteria, scalability_data or {})
    except ValueError as exc:
        _logger.warning("LP optimization skipped: %s", exc)
        return _failed_result(criteria, "error", str(exc), start)

    metadata_counts = (
        len(model.problem.variables()),
        len(model.problem.constraints),
    )
    try:
        status = model.problem.solve(
            pulp.PULP_CBC_CMD(msg=False, timeLimit=criteria.time_limit_seconds)
        )
    except pulp.PulpSolverError as exc:
        _logger.exception("LP solver failed")
        return _failed_result(criteria, "error", str(exc), start, metadata_counts)

    status_name = pulp.LpStatus[status]
    if status_name != "Optimal":
        _logger.warning("LP status: %s", status_name)
        return _failed_result(
            criteria,
            status_name.lower().replace(" ", "_"),
            f"Solver finished with status {status_name}",
            start,
            metadata_counts,
        )

    quantities: list[OptimizedQuantity] = []
    macros = MacroVector.zero()
    for item in model.scale_variables:
        raw = item.variable.varValue
        scale = 1.0 if raw is None else raw
        scale = max(item.lower, min(item.upper, scale))
        for member in item.members:
            quantities.append(
                OptimizedQuantity(
                    ingredient_id=member.ingredient_id,
                    ingredient_name=member.ingredient_name,
                    recipe_id=member.recipe_id,
                    meal_type=member.meal_type,
                    original_quantity=member.base_quantity,
                    optimized_quantity=member.base_quantity * scale,
                    scale_factor=scale,
                    upper_scale_factor=item.upper,
                    binding_group=member.binding_group,
                )
            )
            macros = macros + member.contribution().scaled(scale)

    target = criteria.target_macros
    deviations = compute_deviation(macros, target)
    _logger.info(
        "LP solved with %s variables, total deviation %.2f%%",
        metadata_counts[0],
        deviations.total_percent,
    )
    return LPOptimizationResult(
        success=True,
        status="optimal",
        objective_value=pulp.value(model.problem.objective),
        optimized_quantities=quantities,
        optimized_macros=macros,
        absolute_deviations=absolute_difference(macros, target),
        deviations=deviations,
        metadata=LPMetadata(
            variables=metadata_counts[0],
            constraints=metadata_counts[1],
            solve_time_ms=(time.perf_counter() - start) * 1000,
        ),
    )


def _failed_result(
    criteria: OptimizationCriteria,
    status: str,
    message: str,
    start: float,
    counts: tuple[int, int] = (0, 0),
) -> LPOptimizationResult:
    empty = MacroVector.zero()
    target = criteria.target_macros
    return LPOptimizationResult(
        success=False,
        status=status,
        objective_value=None,
        optimized_quantities=[],
        optimized_macros=empty,
        absolute_deviations=absolute_difference(empty, target),
        deviations=compute_deviation(empty, target),
        metadata=LPMetadata(
            variables=counts[0],
            constraints=counts[1],
            solve_time_ms=(time.perf_counter() - start) * 1000,
        ),
        message=message,
    )
