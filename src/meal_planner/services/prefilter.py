"""Pluggable recipe pre-filters run once before scoring."""

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from meal_planner.domain.macros import MacroVector
from meal_planner.domain.recipes import RecipeWithHistory
from meal_planner.services.nutrition import NutritionSource
from meal_planner.services.similarity import calculate_cosine_similarity

_EPSILON = 1e-9

_logger = logging.getLogger(__name__)


class RejectionReason(StrEnum):
    MISSING_AXIS = "missing_axis"
    FAILS_DENSITY = "fails_density"
    FAILS_RATIO = "fails_ratio"
    LOW_SIMILARITY = "low_similarity"


@dataclass(frozen=True)
class Rejection:
    recipe_id: int
    recipe_name: str
    reasons: tuple[RejectionReason, ...]
    details: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PreFilterResult:
    accepted: list[RecipeWithHistory]
    rejections: list[Rejection]


class RecipePreFilter(Protocol):
    """Strategy that narrows the recipe catalog for a target."""

    requires_ingredients: bool

    def filter(
        self, recipes: list[RecipeWithHistory], target: MacroVector
    ) -> PreFilterResult:
        """Split recipes into accepted ones and rejections."""


@dataclass(frozen=True)
class _AxisMaxima:
    carbs_over_rest: float
    protein_over_rest: float
    fat_over_rest: float
    has_protein: bool
    has_carbs: bool
    has_fat: bool

    @property
    def has_all_axes(self) -> bool:
        return self.has_protein and self.has_carbs and self.has_fat


class StrictMacroPreFilter:
    """Rejects recipes whose ingredients cannot steer every macro axis."""

    requires_ingredients = True

    def __init__(
        self,
        nutrition_source: NutritionSource,
        density_threshold: float = 0.6,
        ratio_tolerance: float = 1.0,
        *,
        enforce_axes: bool = True,
        enforce_ratio: bool = True,
    ) -> None:
        self._nutrition_source = nutrition_source
        self._density_threshold = density_threshold
        self._ratio_tolerance = ratio_tolerance
        self._enforce_axes = enforce_axes
        self._enforce_ratio = enforce_ratio

    def filter(
        self, recipes: list[RecipeWithHistory], target: MacroVector
    ) -> PreFilterResult:
        target_cp = target.carbs / max(target.protein, 1.0)
        target_pf = target.protein / max(target.fat, 1.0)
        target_fp = target.fat / max(target.protein, 1.0)

        accepted: list[RecipeWithHistory] = []
        rejections: list[Rejection] = []
        for recipe in recipes:
            reasons: list[RejectionReason] = []
            density = self.recipe_density(recipe)
            if density < self._density_threshold:
                reasons.append(RejectionReason.FAILS_DENSITY)

            axes = self._axis_maxima(recipe)
            if self._enforce_axes and not axes.has_all_axes:
                reasons.append(RejectionReason.MISSING_AXIS)
            if self._enforce_ratio and not (
                axes.carbs_over_rest >= target_cp * self._ratio_tolerance
                and axes.protein_over_rest >= target_pf * self._ratio_tolerance
                and axes.fat_over_rest >= target_fp * self._ratio_tolerance
            ):
                reasons.append(RejectionReason.FAILS_RATIO)

            if not reasons:
                accepted.append(recipe)
                continue
            _logger.info(
                "Pre-filter rejected recipe %s (%s): %s",
                recipe.recipe_id,
                recipe.name,
                ", ".join(reasons),
            )
            rejections.append(
                Rejection(
                    recipe_id=recipe.recipe_id,
                    recipe_name=recipe.name,
                    reasons=tuple(reasons),
                    details={
                        "density": density,
                        "cp_max": axes.carbs_over_rest,
                        "pf_max": axes.protein_over_rest,
                        "fp_max": axes.fat_over_rest,
                    },
                )
            )
        return PreFilterResult(accepted=accepted, rejections=rejections)

    def recipe_density(self, recipe: RecipeWithHistory) -> float:
        """Calorie-weighted independence of a recipe in [0, 1]."""
        total = 0.0
        bound = 0.0
        independent = 0.0
        for ingredient in recipe.ingredients:
            food = self._nutrition_source.get(ingredient.food_id)
            if food is None:
                continue
            calories = food.per_100g.calories * ingredient.quantity_g / 100
            total += calories
            if ingredient.is_bound:
                bound += calories
            else:
                independent += calories
        if total <= 0:
            return 0.0
        original = independent / total * 0.7 + (1 - bound / total) * 0.3
        return max(0.0, min(1.0, original))

    def _axis_maxima(self, recipe: RecipeWithHistory) -> _AxisMaxima:
        cp: list[float] = []
        pf: list[float] = []
        fp: list[float] = []
        for ingredient in recipe.ingredients:
            food = self._nutrition_source.get(ingredient.food_id)
            if food is None:
                continue
            p, c, f = food.per_100g.protein, food.per_100g.carbs, food.per_100g.fat
            if c >= p and c >= f and max(p, f) > _EPSILON:
                cp.append(c / max(p, f))
            if p >= c and p >= f and max(c, f) > _EPSILON:
                pf.append(p / max(c, f))
            if f >= p and f >= c and max(p, c) > _EPSILON:
                fp.append(f / max(p, c))
        return _AxisMaxima(
            carbs_over_rest=max(cp, default=0.0),
            protein_over_rest=max(pf, default=0.0),
            fat_over_rest=max(fp, default=0.0),
            has_protein=bool(pf),
            has_carbs=bool(cp),
            has_fat=bool(fp),
        )


class MacroProfilePreFilter:
    """Keeps recipes whose overall macro profile resembles the target."""

    requires_ingredients = False

    def __init__(self, min_similarity: float = 0.8) -> None:
        self._min_similarity = min_similarity

    def filter(
        self, recipes: list[RecipeWithHistory], target: MacroVector
    ) -> PreFilterResult:
        accepted: list[RecipeWithHistory] = []
        rejections: list[Rejection] = []
        for recipe in recipes:
            similarity = calculate_cosine_similarity(
                recipe.base_macros, target
            ).cosine_similarity
            if similarity >= self._min_similarity:
                accepted.append(recipe)
                continue
            _logger.info(
                "Pre-filter rejected recipe %s (%s): similarity %.2f",
                recipe.recipe_id,
                recipe.name,
                similarity,
            )
            rejections.append(
                Rejection(
                    recipe_id=recipe.recipe_id,
                    recipe_name=recipe.name,
                    reasons=(RejectionReason.LOW_SIMILARITY,),
                    details={"similarity": similarity},
                )
            )
        return PreFilterResult(accepted=accepted, rejections=rejections)


def build_pre_filter(strategy: str, nutrition_source: NutritionSource) -> RecipePreFilter:
    """Return the pre-filter registered under a strategy name."""
    if strategy == "strict":
        return StrictMacroPreFilter(nutrition_source)
    if strategy == "macro_profile":
        return MacroProfilePreFilter()
    raise ValueError(f"Unknown pre-filter strategy: {strategy}")
