"""Read models published by the day ledger."""

from dataclasses import dataclass

from nutrition_ledger.domain.items import FoodItem
from nutrition_ledger.domain.nutrition import DayTotals, MealTotals


@dataclass(frozen=True)
class LedgerSnapshot:
    """Items and totals for a single date."""

    selected_date: str
    items_by_meal: dict[str, tuple[FoodItem, ...]]
    meal_totals: dict[str, MealTotals]
    day_totals: DayTotals
