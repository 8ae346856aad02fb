"""Supabase implementation of the recipe catalog."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_planner.domain.macros import MacroVector, recipe_to_macro_vector, to_float
from meal_planner.domain.meal_types import MealType
from meal_planner.domain.recipes import (
    FoodNutrition,
    IngredientType,
    RecipeIngredient,
    RecipeScalability,
    RecipeWithHistory,
)
from meal_planner.services.meal_plans import RecipeRepository

_MEAL_TYPES = {meal_type.value: meal_type for meal_type in MealType}
_INGREDIENT_TYPES = {item.value: item for item in IngredientType}


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed repository for recipes, usage and nutrition."""

    client: Client

    def list_recipes(self, user_id: UUID | None) -> list[RecipeWithHistory]:
        """Return recipes joined with ingredients and the user's usage."""
        recipes_response = self.client.table("recipes").select("*").execute()
        rows = recipes_response.data or []
        if not rows:
            return []
        recipe_ids = [int(row["id"]) for row in rows]

        ingredients_response = (
            self.client.table("recipe_ingredients")
            .select("*")
            .in_("recipe_id", recipe_ids)
            .execute()
        )
        ingredients: dict[int, list[RecipeIngredient]] = {}
        for row in ingredients_response.data or []:
            ingredients.setdefault(int(row["recipe_id"]), []).append(
                _parse_ingredient(row)
            )

        usage: dict[int, dict[str, object]] = {}
        if user_id is not None:
            usage_response = (
                self.client.table("recipe_usage")
                .select("*")
                .eq("user_id", str(user_id))
                .execute()
            )
            usage = {int(row["recipe_id"]): row for row in usage_response.data or []}

        return [
            _parse_recipe(
                row,
                ingredients.get(int(row["id"]), []),
                usage.get(int(row["id"]), {}),
            )
            for row in rows
        ]

    def list_scalability(self, recipe_ids: list[int]) -> dict[int, RecipeScalability]:
        """Return stored scalability rows keyed by recipe id."""
        if not recipe_ids:
            return {}
        response = (
            self.client.table("recipe_scalability")
            .select("*")
            .in_("recipe_id", recipe_ids)
            .execute()
        )
        parsed = (_parse_scalability(row) for row in response.data or [])
        return {item.recipe_id: item for item in parsed}

    def list_foods(self, food_ids: list[int]) -> list[FoodNutrition]:
        """Return per-100g nutrition for the given foods."""
        response = (
            self.client.table("ingredients").select("*").in_("id", food_ids).execute()
        )
        return [_parse_food(row) for row in response.data or []]


def _parse_recipe(
    row: dict[str, object],
    ingredients: list[RecipeIngredient],
    usage: dict[str, object],
) -> RecipeWithHistory:
    days_raw = usage.get("days_since_last_use")
    return RecipeWithHistory(
        recipe_id=int(row["id"]),
        name=str(row.get("name", "")),
        meal_types=_parse_meal_types(row.get("meal_types")),
        base_macros=recipe_to_macro_vector(row),
        is_favorite=bool(usage.get("is_favorite", False)),
        days_since_last_use=int(days_raw) if days_raw is not None else None,
        usage_count_last_7_days=int(usage.get("usage_count_last_7_days", 0)),
        usage_count_last_30_days=int(usage.get("usage_count_last_30_days", 0)),
        ingredients=tuple(ingredients),
    )


def _parse_meal_types(raw: object) -> tuple[MealType, ...]:
    """Accept a list or a comma-separated string; unknown names are dropped."""
    if isinstance(raw, str):
        values = [chunk.strip().lower() for chunk in raw.split(",")]
    elif isinstance(raw, list):
        values = [str(chunk).strip().lower() for chunk in raw]
    else:
        return ()
    return tuple(_MEAL_TYPES[value] for value in values if value in _MEAL_TYPES)


def _parse_ingredient(row: dict[str, object]) -> RecipeIngredient:
    group = row.get("binding_group")
    min_scale = row.get("min_scale_factor")
    max_scale = row.get("max_scale_factor")
    return RecipeIngredient(
        food_id=int(row["food_id"]),
        name=str(row.get("name", "")),
        quantity_g=to_float(row.get("quantity_g")),
        ingredient_type=_INGREDIENT_TYPES.get(
            str(row.get("ingredient_type", "")).upper(), IngredientType.SUPPLEMENT
        ),
        binding_group=str(group) if group else None,
        min_scale_factor=to_float(min_scale) if min_scale is not None else None,
        max_scale_factor=to_float(max_scale) if max_scale is not None else None,
    )


def _parse_scalability(row: dict[str, object]) -> RecipeScalability:
    return RecipeScalability(
        recipe_id=int(row["recipe_id"]),
        protein_scalability=to_float(row.get("protein_scalability")),
        carbs_scalability=to_float(row.get("carbs_scalability")),
        fat_scalability=to_float(row.get("fat_scalability")),
        protein_density=to_float(row.get("protein_density", 20.0)),
        carbs_density=to_float(row.get("carbs_density", 50.0)),
        fat_density=to_float(row.get("fat_density", 15.0)),
    )


def _parse_food(row: dict[str, object]) -> FoodNutrition:
    protein = to_float(row.get("protein_100g"))
    carbs = to_float(row.get("carbs_100g"))
    fat = to_float(row.get("fat_100g"))
    calories = row.get("calories_100g")
    per_100g = (
        MacroVector(protein, carbs, fat, to_float(calories))
        if calories is not None
        else MacroVector.from_grams(protein, carbs, fat)
    )
    return FoodNutrition(
        food_id=int(row["id"]), name=str(row.get("name", "")), per_100g=per_100g
    )
