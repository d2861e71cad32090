"""Date-keyed meal ledger with synchronously recomputed totals."""

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from uuid import UUID

from nutrition_ledger.domain.errors import InvalidServingSize
from nutrition_ledger.domain.items import FoodItem, rescale
from nutrition_ledger.domain.ledger import LedgerSnapshot
from nutrition_ledger.domain.nutrition import DayTotals, MealTotals
from nutrition_ledger.services.aggregation import aggregate_day, aggregate_meal

DEFAULT_MEAL_NAMES = ("Breakfast", "Lunch", "Dinner", "Snacks", "Drinks")

Subscriber = Callable[[LedgerSnapshot], None]
ItemRef = FoodItem | UUID
DateKey = str | date

_logger = logging.getLogger(__name__)


@dataclass
class _DerivedDay:
    meal_totals: dict[str, MealTotals] = field(default_factory=dict)
    day_totals: DayTotals = field(default_factory=DayTotals)


class DayLedger:
    """Owns the meal items for every date and the totals derived from them.

    Every mutation recomputes the affected date's meal and day totals before
    returning, then publishes the snapshot of the selected date to
    subscribers. Dates are validated and stored as ISO strings; a date
    without items is never kept as an empty entry.
    """

    def __init__(
        self,
        selected_date: DateKey,
        meal_names: Sequence[str] = DEFAULT_MEAL_NAMES,
    ) -> None:
        self._entries: dict[str, dict[str, list[FoodItem]]] = {}
        self._derived: dict[str, _DerivedDay] = {}
        self._selected_date = _date_key(selected_date)
        self._meal_names = tuple(meal_names)
        self._subscribers: list[Subscriber] = []
        # Coarse lock; API handlers may run on worker threads.
        self._lock = threading.RLock()

    @property
    def selected_date(self) -> str:
        """Return the date of the current view."""
        return self._selected_date

    @property
    def meal_names(self) -> tuple[str, ...]:
        """Return the configured meal names."""
        return self._meal_names

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a callback for snapshots; returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe

    def select_date(self, day: DateKey) -> LedgerSnapshot:
        """Switch the current view to another date."""
        with self._lock:
            self._selected_date = _date_key(day)
            return self._publish()

    def shift_date(self, days: int) -> LedgerSnapshot:
        """Move the current view by a number of days."""
        with self._lock:
            current = date.fromisoformat(self._selected_date)
            return self.select_date(current + timedelta(days=days))

    def add_item(self, day: DateKey, meal_name: str, item: FoodItem) -> None:
        """Append an item to a meal, creating the date and meal lazily."""
        key = _date_key(day)
        with self._lock:
            meals = self._entries.setdefault(key, {})
            items = meals.setdefault(meal_name, [])
            items.append(item)
            try:
                self._recompute(key)
            except Exception:
                items.pop()
                self._prune(key, meal_name)
                self._recompute(key)
                raise
            _logger.debug(
                "Added item: date=%s meal=%s item_id=%s barcode=%s",
                key,
                meal_name,
                item.id,
                item.barcode,
            )
            self._publish()

    def remove_item(self, day: DateKey, meal_name: str, item_ref: ItemRef) -> bool:
        """Remove the first item matching the reference; missing items are ignored."""
        key = _date_key(day)
        with self._lock:
            items = self._entries.get(key, {}).get(meal_name)
            index = _find(items, item_ref)
            if items is None or index is None:
                return False
            removed = items.pop(index)
            self._prune(key, meal_name)
            _logger.debug(
                "Removed item: date=%s meal=%s item_id=%s", key, meal_name, removed.id
            )
            self._recompute(key)
            self._publish()
            return True

    def rescale_item(
        self, day: DateKey, meal_name: str, item_ref: ItemRef, new_grams: int
    ) -> FoodItem | None:
        """Change an item's serving size in place; returns None if absent."""
        if new_grams <= 0:
            raise InvalidServingSize(new_grams)
        key = _date_key(day)
        with self._lock:
            items = self._entries.get(key, {}).get(meal_name)
            index = _find(items, item_ref)
            if items is None or index is None:
                return None
            updated = rescale(items[index], new_grams)
            items[index] = updated
            self._recompute(key)
            self._publish()
            return updated

    def get_items_for_meal(self, day: DateKey, meal_name: str) -> tuple[FoodItem, ...]:
        """Return the items of a meal in insertion order."""
        with self._lock:
            return tuple(self._entries.get(_date_key(day), {}).get(meal_name, ()))

    def get_meal_totals(self, day: DateKey, meal_name: str) -> MealTotals:
        """Return cached totals for a meal."""
        with self._lock:
            derived = self._derived.get(_date_key(day))
            if derived is None:
                return MealTotals()
            return derived.meal_totals.get(meal_name, MealTotals())

    def get_day_totals(self, day: DateKey) -> DayTotals:
        """Return cached totals for a date."""
        with self._lock:
            derived = self._derived.get(_date_key(day))
            return derived.day_totals if derived else DayTotals()

    def snapshot(self, day: DateKey | None = None) -> LedgerSnapshot:
        """Return items and totals for a date, defaulting to the selected one."""
        with self._lock:
            key = self._selected_date if day is None else _date_key(day)
            meals = self._entries.get(key, {})
            derived = self._derived.get(key) or _DerivedDay()
            names = list(self._meal_names)
            names.extend(name for name in meals if name not in names)
            return LedgerSnapshot(
                selected_date=key,
                items_by_meal={name: tuple(meals.get(name, ())) for name in names},
                meal_totals={
                    name: derived.meal_totals.get(name, MealTotals()) for name in names
                },
                day_totals=derived.day_totals,
            )

    def _recompute(self, key: str) -> None:
        meals = self._entries.get(key)
        if not meals:
            self._derived.pop(key, None)
            return
        meal_totals = {name: aggregate_meal(items) for name, items in meals.items()}
        self._derived[key] = _DerivedDay(
            meal_totals=meal_totals, day_totals=aggregate_day(meal_totals)
        )

    def _prune(self, key: str, meal_name: str) -> None:
        meals = self._entries[key]
        if not meals[meal_name]:
            del meals[meal_name]
        if not meals:
            del self._entries[key]

    def _publish(self) -> LedgerSnapshot:
        snapshot = self.snapshot()
        for subscriber in list(self._subscribers):
            try:
                subscriber(snapshot)
            except Exception:
                _logger.exception("Ledger subscriber failed")
        return snapshot


def _date_key(day: DateKey) -> str:
    if isinstance(day, date):
        return day.isoformat()
    return date.fromisoformat(day).isoformat()


def _find(items: list[FoodItem] | None, item_ref: ItemRef) -> int | None:
    if not items:
        return None
    item_id = item_ref.id if isinstance(item_ref, FoodItem) else item_ref
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return None
