"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from meal_planner.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from meal_planner.config import Settings, parse_recipe_ids
from meal_planner.services.meal_plans import MealPlanService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    meal_plan_service: MealPlanService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    meal_plan_service = MealPlanService(
        repository=SupabaseRecipeRepository(supabase_client),
        algorithm_settings=resolved_settings.algorithm_settings(),
        prefilter_strategy=resolved_settings.prefilter_strategy,
        excluded_recipe_ids=parse_recipe_ids(resolved_settings.excluded_recipe_ids),
    )
    return AppContainer(
        settings=resolved_settings,
        meal_plan_service=meal_plan_service,
    )
