"""End-to-end meal plan generation with bounded retries."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from meal_planner.domain.generation import (
    FailureKind,
    GenerationFailure,
    GenerationMetadata,
    GenerationRequest,
    GenerationStatus,
    GenerationStep,
    MasterGenerationResult,
    QualityMetrics,
)
from meal_planner.domain.meal_types import (
    MealDistribution,
    MealType,
    default_meal_types,
    distributions_for,
)
from meal_planner.domain.optimization import (
    IngredientConstraint,
    LPOptimizationResult,
    OptimizationCriteria,
)
from meal_planner.domain.plans import MealCombination
from meal_planner.domain.recipes import (
    RecipeScalability,
    RecipeWithHistory,
    VarietyAdjustment,
)
from meal_planner.domain.validation import ValidationCriteria, ValidationResult
from meal_planner.services.combiner import (
    CombinerCriteria,
    generate_meal_combinations,
    select_top_recipes_by_category,
)
from meal_planner.services.ingredient_constraints import build_ingredient_constraints
from meal_planner.services.lp_optimizer import (
    create_default_optimization_criteria,
    solve_lp_optimization,
)
from meal_planner.services.nutrition import NutritionSource
from meal_planner.services.prefilter import RecipePreFilter, StrictMacroPreFilter
from meal_planner.services.ranking import VarietyParameters, rank_recipes_with_variety
from meal_planner.services.scoring import RecipeScorer
from meal_planner.services.swapping import SwapCriteria, optimize_meal_combination
from meal_planner.services.validator import (
    default_validation_criteria,
    validate_meal_plan,
)

QuantityOptimizer = Callable[
    [list[IngredientConstraint], OptimizationCriteria, dict[int, RecipeScalability]],
    LPOptimizationResult,
]
PlanValidator = Callable[
    [MealCombination, ValidationCriteria, LPOptimizationResult | None],
    ValidationResult,
]

_logger = logging.getLogger(__name__)


class InsufficientRecipesError(Exception):
    """Raised when too few recipes survive filtering."""


@dataclass
class _Attempt:
    combination: MealCombination
    lp_result: LPOptimizationResult | None = None
    validation: ValidationResult | None = None


@dataclass
class _RunState:
    start: float = field(default_factory=time.perf_counter)
    steps: list[GenerationStep] = field(default_factory=list)
    failures: list[GenerationFailure] = field(default_factory=list)
    attempts: int = 0
    filtered_count: int = 0
    initial_score: float = 0.0
    swapping_applied: bool = False
    lp_applied: bool = False

    def complete(self, step: GenerationStep) -> None:
        if step not in self.steps:
            self.steps.append(step)

    def fail(self, kind: FailureKind, message: str) -> None:
        _logger.warning("%s: %s", kind, message)
        self.failures.append(GenerationFailure(kind=kind, message=message))

    def metadata(self) -> GenerationMetadata:
        return GenerationMetadata(
            attempts=self.attempts,
            filtered_recipes_count=self.filtered_count,
            initial_combination_score=self.initial_score,
            swapping_applied=self.swapping_applied,
            lp_optimization_applied=self.lp_applied,
            generation_time_ms=(time.perf_counter() - self.start) * 1000,
            steps_completed=list(self.steps),
            failures=list(self.failures),
        )


@dataclass(frozen=True)
class _Context:
    request: GenerationRequest
    meal_types: tuple[MealType, ...]
    distributions: tuple[MealDistribution, ...]
    validation_criteria: ValidationCriteria


@dataclass
class MealPlanGenerator:
    """Runs filter, score, rank, combine, swap, optimize and validate."""

    nutrition_source: NutritionSource
    pre_filter: RecipePreFilter | None = None
    optimizer: QuantityOptimizer = solve_lp_optimization
    validator: PlanValidator = validate_meal_plan

    def __post_init__(self) -> None:
        if self.pre_filter is None:
            self.pre_filter = StrictMacroPreFilter(self.nutrition_source)

    def generate(self, request: GenerationRequest) -> MasterGenerationResult:
        """Return a typed result; unexpected errors become failed_generation."""
        state = _RunState()
        try:
            return self._run(request, state)
        except InsufficientRecipesError as exc:
            state.fail(FailureKind.INSUFFICIENT_RECIPES, str(exc))
        except Exception as exc:
            state.fail(FailureKind.UNEXPECTED_ERROR, str(exc))
            _logger.exception("Meal plan generation failed")
        return _result(GenerationStatus.FAILED_GENERATION, state)

    def _run(
        self, request: GenerationRequest, state: _RunState
    ) -> MasterGenerationResult:
        preferences = request.preferences
        settings = request.algorithm_settings
        meal_types = preferences.preferred_meal_types or default_meal_types(
            preferences.meal_count
        )
        context = _Context(
            request=request,
            meal_types=meal_types,
            distributions=distributions_for(meal_types),
            validation_criteria=replace(
                default_validation_criteria(meal_types),
                max_total_deviation_percent=settings.final_deviation_limit,
            ),
        )
        _logger.info("Starting meal plan generation for %s", ", ".join(meal_types))

        recipes = self._filter(request, state)
        if len(recipes) < preferences.meal_count:
            raise InsufficientRecipesError(
                f"Not enough recipes after filtering: {len(recipes)} < {preferences.meal_count}"
            )

        scorer = RecipeScorer(
            calorie_shares={
                item.meal_type: item.target_percent / 100
                for item in context.distributions
            }
        )
        scored = scorer.score_all(recipes, request.target_macros, request.scalability_data)
        state.complete(GenerationStep.SCORING)

        ranked = rank_recipes_with_variety(
            scored,
            VarietyParameters(
                recent_usage_penalty=preferences.recent_penalty,
                favorite_not_used_reward=preferences.favorite_boost,
            ),
        )
        state.complete(GenerationStep.RANKING)

        criteria = CombinerCriteria(
            min_average_score=settings.score_threshold,
            meal_distributions=context.distributions,
            max_combinations=settings.max_combinations,
            top_n=settings.combination_top_n,
        )
        combined = select_top_recipes_by_category(ranked, request.target_macros, criteria)
        candidates = _candidate_list(
            combined.combinations,
            generate_meal_combinations(
                combined.recipes_by_meal_type,
                request.target_macros,
                replace(criteria, allow_partial=True),
            ),
        )
        if not candidates:
            state.fail(FailureKind.NO_COMBINATIONS, "No meal combinations could be generated")
            return _result(GenerationStatus.FAILED_GENERATION, state)
        state.complete(GenerationStep.COMBINATION)

        best: _Attempt | None = None
        for index in range(settings.max_attempts):
            if index >= len(candidates):
                break
            state.attempts = index + 1
            _logger.info("Attempt %s/%s", state.attempts, settings.max_attempts)
            attempt = self._attempt(
                candidates[index], combined.recipes_by_meal_type, context, state
            )
            if attempt.validation is not None and attempt.validation.is_valid:
                state.complete(GenerationStep.VALIDATION_PASSED)
                _logger.info(
                    "Meal plan generated on attempt %s (score %.0f/100)",
                    state.attempts,
                    attempt.validation.overall_score,
                )
                return _result(GenerationStatus.SUCCESS, state, attempt)
            if best is None or attempt.combination.average_score > best.combination.average_score:
                best = attempt

        if state.attempts >= settings.max_attempts:
            status = GenerationStatus.MAX_ATTEMPTS_REACHED
            state.fail(
                FailureKind.MAX_ATTEMPTS_REACHED,
                f"Maximum attempts ({settings.max_attempts}) reached without success",
            )
        else:
            status = GenerationStatus.FAILED_VALIDATION
        _logger.warning(
            "Meal plan generation ended with %s after %s attempts", status, state.attempts
        )
        if best is not None and best.validation is None:
            best.validation = self.validator(
                best.combination, context.validation_criteria, None
            )
        return _result(status, state, best)

    def _filter(
        self, request: GenerationRequest, state: _RunState
    ) -> list[RecipeWithHistory]:
        excluded = request.preferences.exclude_recipe_ids
        recipes = [recipe for recipe in request.recipes if recipe.recipe_id not in excluded]
        pre_filter = self.pre_filter
        if pre_filter is not None:
            if pre_filter.requires_ingredients and not any(
                recipe.has_ingredient_data for recipe in recipes
            ):
                _logger.info("No ingredient data in recipes, skipping pre-filter")
            else:
                recipes = pre_filter.filter(recipes, request.target_macros).accepted
        state.filtered_count = len(recipes)
        state.complete(GenerationStep.FILTERING)
        _logger.info("Filtered to %s recipes", len(recipes))
        return recipes

    def _attempt(
        self,
        combination: MealCombination,
        recipes_by_meal_type: dict[MealType, list[VarietyAdjustment]],
        context: _Context,
        state: _RunState,
    ) -> _Attempt:
        settings = context.request.algorithm_settings
        if state.attempts == 1:
            state.initial_score = combination.average_score

        if combination.average_score < settings.score_threshold:
            if settings.enable_recipe_swapping:
                outcome = optimize_meal_combination(
                    combination,
                    recipes_by_meal_type,
                    context.request.scalability_data,
                    context.distributions,
                    SwapCriteria(max_swaps=settings.max_swaps),
                )
                if outcome.combination.average_score > combination.average_score:
                    _logger.info(
                        "Swapping improved score %.1f -> %.1f",
                        combination.average_score,
                        outcome.combination.average_score,
                    )
                    combination = outcome.combination
                    state.swapping_applied = True
                    state.complete(GenerationStep.SWAPPING)
            if combination.average_score < settings.score_threshold:
                state.fail(
                    FailureKind.SCORE_BELOW_THRESHOLD,
                    f"Attempt {state.attempts}: combination score "
                    f"{combination.average_score:.1f} below threshold {settings.score_threshold:g}",
                )
                return _Attempt(combination)

        lp_result = None
        deviation = combination.deviation.total_percent
        if deviation > settings.deviation_threshold and settings.enable_lp_optimization:
            _logger.info(
                "LP optimization needed (%.1f%% > %.1f%%)",
                deviation,
                settings.deviation_threshold,
            )
            lp_result = self.optimizer(
                build_ingredient_constraints(
                    combination, self.nutrition_source, context.distributions
                ),
                create_default_optimization_criteria(
                    context.request.target_macros, settings.lp_time_limit_seconds
                ),
                context.request.scalability_data,
            )
            if lp_result.success:
                state.lp_applied = True
                state.complete(GenerationStep.LP_OPTIMIZATION)
            else:
                kind = (
                    FailureKind.LP_ERROR
                    if lp_result.status == "error"
                    else FailureKind.LP_INFEASIBLE
                )
                state.fail(
                    kind,
                    f"Attempt {state.attempts}: LP optimization failed: {lp_result.status}",
                )

        validation = self.validator(combination, context.validation_criteria, lp_result)
        if not validation.is_valid:
            state.fail(
                FailureKind.VALIDATION_FAILED,
                f"Attempt {state.attempts}: Validation failed: "
                + ", ".join(validation.validation_summary.critical_failures),
            )
        return _Attempt(combination, lp_result, validation)


def _candidate_list(
    accepted: list[MealCombination], fallback: list[MealCombination]
) -> list[MealCombination]:
    seen: set[tuple[int, ...]] = set()
    candidates = []
    for combination in [*accepted, *fallback]:
        key = combination.recipe_ids()
        if key in seen:
            continue
        seen.add(key)
        candidates.append(combination)
    return candidates


def _result(
    status: GenerationStatus, state: _RunState, attempt: _Attempt | None = None
) -> MasterGenerationResult:
    if attempt is None:
        return MasterGenerationResult(
            success=False,
            status=status,
            validation=ValidationResult.empty(),
            generation_metadata=state.metadata(),
            quality_metrics=QualityMetrics(),
        )
    return MasterGenerationResult(
        success=status == GenerationStatus.SUCCESS,
        status=status,
        validation=attempt.validation or ValidationResult.empty(),
        generation_metadata=state.metadata(),
        quality_metrics=calculate_quality_metrics(attempt.combination, attempt.lp_result),
        final_meal_plan=attempt.combination,
        lp_optimization=attempt.lp_result,
    )


def calculate_quality_metrics(
    plan: MealCombination, lp_result: LPOptimizationResult | None = None
) -> QualityMetrics:
    """Diversity, nutritional balance and predicted satisfaction of a plan."""
    optimized = lp_result is not None and lp_result.success
    deviation = lp_result.deviations.total_percent if optimized else plan.deviation.total_percent
    macros = lp_result.optimized_macros if optimized else plan.total_macros

    recipe_ids = plan.recipe_ids()
    diversity = len(set(recipe_ids)) / len(recipe_ids) * 100 if recipe_ids else 0.0

    balance = 0.0
    if macros.calories > 0:
        protein_pct = macros.protein * 4 / macros.calories * 100
        carb_pct = macros.carbs * 4 / macros.calories * 100
        fat_pct = macros.fat * 9 / macros.calories * 100
        balance = (
            max(0.0, 100 - abs(protein_pct - 20) * 5)
            + max(0.0, 100 - abs(carb_pct - 55) * 2)
            + max(0.0, 100 - abs(fat_pct - 27.5) * 3)
        ) / 3

    satisfaction = (
        max(0.0, 100 - deviation * 4) + min(100.0, plan.average_score * 1.25)
    ) / 2
    return QualityMetrics(
        final_deviation_percent=deviation,
        final_average_score=plan.average_score,
        recipe_diversity_score=diversity,
        nutritional_balance_score=balance,
        user_satisfaction_score=satisfaction,
    )
