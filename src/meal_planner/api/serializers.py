"""Convert generation results to JSON-ready dictionaries."""

from dataclasses import asdict

from meal_planner.domain.generation import MasterGenerationResult
from meal_planner.domain.plans import MealCombination


def serialize_result(result: MasterGenerationResult) -> dict[str, object]:
    metadata = result.generation_metadata
    return {
        "success": result.success,
        "status": result.status.value,
        "final_meal_plan": _serialize_plan(result.final_meal_plan)
        if result.final_meal_plan
        else None,
        "lp_optimization": asdict(result.lp_optimization)
        if result.lp_optimization
        else None,
        "validation": asdict(result.validation),
        "generation_metadata": {
            "attempts": metadata.attempts,
            "filtered_recipes_count": metadata.filtered_recipes_count,
            "initial_combination_score": metadata.initial_combination_score,
            "swapping_applied": metadata.swapping_applied,
            "lp_optimization_applied": metadata.lp_optimization_applied,
            "generation_time_ms": metadata.generation_time_ms,
            "steps_completed": [step.value for step in metadata.steps_completed],
            "failure_reasons": metadata.failure_reasons,
        },
        "quality_metrics": asdict(result.quality_metrics),
    }


def _serialize_plan(plan: MealCombination) -> dict[str, object]:
    return {
        "meal_plan_id": plan.meal_plan_id,
        "meals": {
            meal_type.value: {
                "recipe_id": meal.recipe.recipe_id,
                "recipe_name": meal.recipe.recipe_name,
                "base_score": meal.recipe.base_score,
                "penalty": meal.recipe.penalty,
                "reward": meal.recipe.reward,
                "final_score": meal.recipe.final_score,
                "assigned_macros": asdict(meal.assigned_macros),
            }
            for meal_type, meal in plan.meals.items()
        },
        "total_macros": asdict(plan.total_macros),
        "target_macros": asdict(plan.target_macros),
        "deviation": asdict(plan.deviation),
        "total_score": plan.total_score,
        "average_score": plan.average_score,
        "meets_threshold": plan.meets_threshold,
    }
