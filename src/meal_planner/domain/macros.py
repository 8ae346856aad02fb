"""Macronutrient value objects."""

import math
from collections.abc import Mapping
from dataclasses import dataclass

PROTEIN_KCAL_PER_G = 4.0
CARBS_KCAL_PER_G = 4.0
FAT_KCAL_PER_G = 9.0

MACRO_NAMES = ("protein", "carbs", "fat", "calories")


@dataclass(frozen=True)
class MacroVector:
    """Protein, carbs and fat in grams plus calories in kcal."""

    protein: float
    carbs: float
    fat: float
    calories: float

    @classmethod
    def zero(cls) -> "MacroVector":
        """Return the all-zero vector."""
        return cls(0.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_grams(cls, protein: float, carbs: float, fat: float) -> "MacroVector":
        """Build a vector whose calories follow the 4-4-9 rule."""
        return cls(
            protein=protein,
            carbs=carbs,
            fat=fat,
            calories=calories_from_grams(protein, carbs, fat),
        )

    def get(self, macro: str) -> float:
        """Return a macro by name."""
        return float(getattr(self, macro))

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.protein, self.carbs, self.fat, self.calories)

    def magnitude(self) -> float:
        return math.sqrt(sum(value * value for value in self.as_tuple()))

    def scaled(self, factor: float) -> "MacroVector":
        return MacroVector(
            protein=self.protein * factor,
            carbs=self.carbs * factor,
            fat=self.fat * factor,
            calories=self.calories * factor,
        )

    def __add__(self, other: "MacroVector") -> "MacroVector":
        return MacroVector(
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
            calories=self.calories + other.calories,
        )


@dataclass(frozen=True)
class MacroDeviation:
    """Absolute percentage deviation per macro and their unweighted mean."""

    protein_percent: float
    carbs_percent: float
    fat_percent: float
    calories_percent: float
    total_percent: float

    def get(self, macro: str) -> float:
        """Return the percentage deviation for a macro by name."""
        return float(getattr(self, f"{macro}_percent"))


def calories_from_grams(protein: float, carbs: float, fat: float) -> float:
    """Return kcal for the given macro grams."""
    return (
        protein * PROTEIN_KCAL_PER_G
        + carbs * CARBS_KCAL_PER_G
        + fat * FAT_KCAL_PER_G
    )


def sum_macros(vectors: "list[MacroVector]") -> MacroVector:
    total = MacroVector.zero()
    for vector in vectors:
        total = total + vector
    return total


def percent_deviation(actual: float, target: float) -> float:
    """Return |actual - target| / target * 100, or 0 for a non-positive target."""
    if target <= 0:
        return 0.0
    return abs(actual - target) / target * 100


def compute_deviation(actual: MacroVector, target: MacroVector) -> MacroDeviation:
    """Compare achieved macros against a target."""
    protein = percent_deviation(actual.protein, target.protein)
    carbs = percent_deviation(actual.carbs, target.carbs)
    fat = percent_deviation(actual.fat, target.fat)
    calories = percent_deviation(actual.calories, target.calories)
    return MacroDeviation(
        protein_percent=protein,
        carbs_percent=carbs,
        fat_percent=fat,
        calories_percent=calories,
        total_percent=(protein + carbs + fat + calories) / 4,
    )


def absolute_difference(actual: MacroVector, target: MacroVector) -> MacroVector:
    """Return the per-macro absolute difference."""
    return MacroVector(
        protein=abs(actual.protein - target.protein),
        carbs=abs(actual.carbs - target.carbs),
        fat=abs(actual.fat - target.fat),
        calories=abs(actual.calories - target.calories),
    )


def recipe_to_macro_vector(row: Mapping[str, object]) -> MacroVector:
    """Convert a recipe catalog row to a vector, deriving calories via 4-4-9."""
    return MacroVector.from_grams(
        protein=to_float(row.get("Feherje_g")),
        carbs=to_float(row.get("Szenhidrat_g")),
        fat=to_float(row.get("Zsir_g")),
    )


def to_float(value: object) -> float:
    """Parse numbers and comma-decimal strings, defaulting to 0."""
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", "."))
        except ValueError:
            return 0.0
    return 0.0
