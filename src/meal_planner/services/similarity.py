"""Cosine similarity between macro profiles."""

from dataclasses import dataclass

from meal_planner.domain.macros import MacroVector


@dataclass(frozen=True)
class SimilarityResult:
    """Cosine similarity in [0, 1] and the same value on a 0-100 scale."""

    cosine_similarity: float
    normalized_similarity: float


def dot_product(first: MacroVector, second: MacroVector) -> float:
    return sum(a * b for a, b in zip(first.as_tuple(), second.as_tuple(), strict=True))


def normalize_vector(vector: MacroVector) -> MacroVector:
    """Scale a vector to unit length; the zero vector stays zero."""
    magnitude = vector.magnitude()
    if magnitude == 0:
        return MacroVector.zero()
    return vector.scaled(1 / magnitude)


def calculate_cosine_similarity(
    recipe_macros: MacroVector, target_macros: MacroVector
) -> SimilarityResult:
    """Compare a recipe profile against a target profile.

    A zero-magnitude vector on either side never counts as similar, and the
    raw cosine is clamped to [0, 1].
    """
    recipe_magnitude = recipe_macros.magnitude()
    target_magnitude = target_macros.magnitude()
    if recipe_magnitude == 0 or target_magnitude == 0:
        return SimilarityResult(cosine_similarity=0.0, normalized_similarity=0.0)

    cosine = dot_product(recipe_macros, target_macros) / (
        recipe_magnitude * target_magnitude
    )
    clamped = max(0.0, min(1.0, cosine))
    return SimilarityResult(cosine_similarity=clamped, normalized_similarity=clamped * 100)


def calculate_normalized_cosine_similarity(
    recipe_macros: MacroVector, target_macros: MacroVector
) -> SimilarityResult:
    """Cosine similarity of unit-normalized vectors, ignoring portion size."""
    return calculate_cosine_similarity(
        normalize_vector(recipe_macros), normalize_vector(target_macros)
    )
