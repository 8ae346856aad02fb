"""Base recipe scoring against a macro target."""

from dataclasses import dataclass, field

from meal_planner.domain.macros import MacroVector
from meal_planner.domain.meal_types import DEFAULT_MEAL_DISTRIBUTIONS, MealType
from meal_planner.domain.recipes import (
    RecipeScalability,
    RecipeScore,
    RecipeWithHistory,
    ScoredRecipe,
)
from meal_planner.services.similarity import calculate_cosine_similarity

SIMILARITY_WEIGHT = 0.4
SCALABILITY_WEIGHT = 0.4
SIZE_WEIGHT = 0.2


def _default_calorie_shares() -> dict[MealType, float]:
    return {
        item.meal_type: item.target_percent / 100 for item in DEFAULT_MEAL_DISTRIBUTIONS
    }


@dataclass
class RecipeScorer:
    """Scores recipes by similarity, scalability and portion size."""

    calorie_shares: dict[MealType, float] = field(
        default_factory=_default_calorie_shares
    )

    def score(
        self,
        recipe: RecipeWithHistory,
        target: MacroVector,
        scalability: RecipeScalability | None,
    ) -> RecipeScore:
        """Return a 0-100 score; missing scalability counts as neutral."""
        profile = scalability or RecipeScalability.neutral(recipe.recipe_id)
        cosine = calculate_cosine_similarity(
            recipe.base_macros, target
        ).normalized_similarity
        weighted = _weighted_scalability(profile, target) * 100
        size = self._size_factor(recipe, target)
        total = (
            SIMILARITY_WEIGHT * cosine
            + SCALABILITY_WEIGHT * weighted
            + SIZE_WEIGHT * size
        )
        return RecipeScore(
            total_score=max(0.0, min(100.0, total)),
            cosine_similarity=cosine,
            weighted_scalability=weighted,
            size_factor=size,
        )

    def score_all(
        self,
        recipes: list[RecipeWithHistory],
        target: MacroVector,
        scalability_data: dict[int, RecipeScalability],
    ) -> list[ScoredRecipe]:
        return [
            ScoredRecipe(
                recipe=recipe,
                score=self.score(
                    recipe, target, scalability_data.get(recipe.recipe_id)
                ),
            )
            for recipe in recipes
        ]

    def _size_factor(self, recipe: RecipeWithHistory, target: MacroVector) -> float:
        category = recipe.category
        share = self.calorie_shares.get(category, 1 / 3) if category else 1 / 3
        category_goal = max(1.0, target.calories * share)
        return min(1.0, recipe.base_macros.calories / category_goal) * 100


def _weighted_scalability(scalability: RecipeScalability, target: MacroVector) -> float:
    """Scalability weighted by the target's protein/carbs/fat proportions."""
    total = max(1e-6, target.protein + target.carbs + target.fat)
    weighted = (
        scalability.protein_scalability * target.protein / total
        + scalability.carbs_scalability * target.carbs / total
        + scalability.fat_scalability * target.fat / total
    )
    return max(0.0, min(1.0, weighted))
