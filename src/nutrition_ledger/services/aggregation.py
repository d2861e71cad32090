"""Nutrient roll-ups from items to meals to days."""

from collections.abc import Iterable, Mapping

from nutrition_ledger.domain.items import FoodItem
from nutrition_ledger.domain.nutrition import DayTotals, MacroGoals, MealTotals


def aggregate_meal(items: Iterable[FoodItem]) -> MealTotals:
    """Sum displayed nutrients across the items of a meal."""
    total = MealTotals()
    for item in items:
        total = total + item.displayed
    return total


def aggregate_day(meal_totals: Mapping[str, MealTotals]) -> DayTotals:
    """Sum meal totals into a day total."""
    total = DayTotals()
    for meal in meal_totals.values():
        total = total + meal
    return total


def goal_progress(totals: DayTotals, goals: MacroGoals) -> dict[str, float]:
    """Return per-nutrient progress toward daily goals, clamped to 0..1."""
    return {
        "kcal": _fraction(totals.kcal, goals.kcal),
        "protein": _fraction(totals.protein, goals.protein),
        "fat": _fraction(totals.fat, goals.fat),
        "carbs": _fraction(totals.carbs, goals.carbs),
    }


def _fraction(value: int, goal: int) -> float:
    if goal <= 0:
        return 0.0
    return min(max(value / goal, 0.0), 1.0)
