"""Tests for the meal plan HTTP API."""

from fastapi.testclient import TestClient

from meal_planner.api.app import create_app
from meal_planner.containers import AppContainer
from tests.conftest import InMemoryRecipeRepository

PAYLOAD = {
    "target_macros": {"protein": 120, "carbs": 150, "fat": 50, "calories": 1460},
}


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_generate_returns_meal_plan(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/meal-plans/generate", json=PAYLOAD)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "success"
    plan = body["final_meal_plan"]
    assert set(plan["meals"]) == {"reggeli", "ebéd", "vacsora"}
    assert plan["meets_threshold"] is True
    assert body["generation_metadata"]["attempts"] == 1
    assert body["generation_metadata"]["steps_completed"][-1] == "validation_passed"
    assert body["lp_optimization"] is None


def test_generate_passes_user_and_overrides(
    container: AppContainer, recipe_repository: InMemoryRecipeRepository
) -> None:
    client = TestClient(create_app(container))
    user_id = "3f1c2d7e-3b7a-4c39-9d55-7f3c1e0a9b12"

    response = client.post(
        "/meal-plans/generate",
        json={
            **PAYLOAD,
            "user_id": user_id,
            "exclude_recipe_ids": [1],
            "algorithm_settings": {"max_attempts": 1},
        },
    )

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "failed_generation"
    assert body["final_meal_plan"] is None
    assert body["generation_metadata"]["failure_reasons"]
    assert str(recipe_repository.requested_users[0]) == user_id


def test_generate_rejects_inconsistent_calories(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/meal-plans/generate",
        json={"target_macros": {"protein": 120, "carbs": 150, "fat": 50, "calories": 3000}},
    )

    assert response.status_code == 422


def test_generate_rejects_non_positive_macros(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/meal-plans/generate",
        json={"target_macros": {"protein": 0, "carbs": 150, "fat": 50, "calories": 1000}},
    )

    assert response.status_code == 422
