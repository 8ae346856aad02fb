"""FastAPI application factory."""

import logging
from dataclasses import replace

from fastapi import FastAPI, Request

from meal_planner.api.models import GenerateMealPlanRequest
from meal_planner.api.serializers import serialize_result
from meal_planner.app_logging import configure_logging
from meal_planner.containers import AppContainer
from meal_planner.domain.generation import GenerationPreferences
from meal_planner.domain.macros import MacroVector


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/meal-plans/generate")
    def generate_meal_plan(
        payload: GenerateMealPlanRequest, request: Request
    ) -> dict[str, object]:
        """Generate a daily meal plan for a macro target."""
        state_container: AppContainer = request.app.state.container
        service = state_container.meal_plan_service
        target = payload.target_macros
        preferences = GenerationPreferences(
            meal_count=payload.meal_count,
            preferred_meal_types=tuple(payload.preferred_meal_types),
            exclude_recipe_ids=frozenset(payload.exclude_recipe_ids),
            favorite_boost=payload.favorite_boost,
            recent_penalty=payload.recent_penalty,
        )
        algorithm_settings = service.algorithm_settings
        if payload.algorithm_settings is not None:
            algorithm_settings = replace(
                algorithm_settings,
                **payload.algorithm_settings.model_dump(exclude_none=True),
            )
        result = service.generate(
            MacroVector(
                protein=target.protein,
                carbs=target.carbs,
                fat=target.fat,
                calories=target.calories,
            ),
            preferences,
            user_id=payload.user_id,
            algorithm_settings=algorithm_settings,
        )
        logger.info(
            "Meal plan request finished with %s after %s attempts",
            result.status,
            result.generation_metadata.attempts,
        )
        return serialize_result(result)

    return app
