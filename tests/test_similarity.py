"""Tests for macro profile similarity."""

import pytest

from meal_planner.domain.macros import MacroVector
from meal_planner.services.similarity import (
    calculate_cosine_similarity,
    calculate_normalized_cosine_similarity,
    normalize_vector,
)
from tests.conftest import TARGET


def test_identical_profiles_are_fully_similar() -> None:
    result = calculate_cosine_similarity(TARGET, TARGET)

    assert result.cosine_similarity == pytest.approx(1.0)
    assert result.normalized_similarity == pytest.approx(100.0)


def test_scaled_profile_keeps_similarity() -> None:
    result = calculate_cosine_similarity(TARGET.scaled(0.3), TARGET)

    assert result.cosine_similarity == pytest.approx(1.0)


def test_orthogonal_profiles_have_zero_similarity() -> None:
    result = calculate_cosine_similarity(
        MacroVector(protein=1, carbs=0, fat=0, calories=0),
        MacroVector(protein=0, carbs=1, fat=0, calories=0),
    )

    assert result.cosine_similarity == 0.0
    assert result.normalized_similarity == 0.0


def test_zero_vector_is_never_similar() -> None:
    result = calculate_cosine_similarity(MacroVector.zero(), TARGET)

    assert result.cosine_similarity == 0.0
    assert result.normalized_similarity == 0.0


def test_similarity_stays_in_unit_range() -> None:
    result = calculate_cosine_similarity(
        MacroVector(protein=0, carbs=80, fat=0, calories=320), TARGET
    )

    assert 0.0 <= result.cosine_similarity <= 1.0
    assert result.normalized_similarity == pytest.approx(result.cosine_similarity * 100)


def test_normalize_vector_returns_unit_length() -> None:
    normalized = normalize_vector(TARGET)

    assert normalized.magnitude() == pytest.approx(1.0)
    assert normalize_vector(MacroVector.zero()) == MacroVector.zero()


def test_normalized_similarity_matches_raw_cosine() -> None:
    recipe = MacroVector(protein=40, carbs=20, fat=10, calories=330)

    raw = calculate_cosine_similarity(recipe, TARGET)
    normalized = calculate_normalized_cosine_similarity(recipe, TARGET)

    assert normalized.cosine_similarity == pytest.approx(raw.cosine_similarity)
