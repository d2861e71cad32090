"""Nutrition domain models."""

import math
from dataclasses import dataclass, fields


@dataclass(frozen=True)
class NutrientProfile:
    """Per-100g nutrient density for a food."""

    calories_per_100g: float
    protein_per_100g: float
    fat_per_100g: float
    carbs_per_100g: float

    def __post_init__(self) -> None:
        for field in fields(self):
            value = getattr(self, field.name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(
                    f"{field.name} must be finite and non-negative, got {value}"
                )

    @classmethod
    def zero(cls) -> "NutrientProfile":
        """Return a profile with every nutrient at zero."""
        return cls(0, 0, 0, 0)


@dataclass(frozen=True)
class MacroTotals:
    """Whole-number macro sums for an item, a meal or a day."""

    kcal: int = 0
    protein: int = 0
    fat: int = 0
    carbs: int = 0

    def __add__(self, other: "MacroTotals") -> "MacroTotals":
        return MacroTotals(
            kcal=self.kcal + other.kcal,
            protein=self.protein + other.protein,
            fat=self.fat + other.fat,
            carbs=self.carbs + other.carbs,
        )


MealTotals = MacroTotals
DayTotals = MacroTotals


@dataclass(frozen=True)
class MacroGoals:
    """Daily macro targets."""

    kcal: int = 2000
    protein: int = 140
    fat: int = 80
    carbs: int = 100
