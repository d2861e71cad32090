"""Barcode-driven item intake."""

import asyncio
import logging
from dataclasses import dataclass, field

from nutrition_ledger.domain.errors import LookupFailed
from nutrition_ledger.domain.items import FoodItem, create_fallback, create_from_lookup
from nutrition_ledger.services.ledger import DateKey, DayLedger
from nutrition_ledger.services.lookup import LookupGateway

_logger = logging.getLogger(__name__)


@dataclass
class BarcodeIntakeService:
    """Adds scanned items to the ledger, degrading to placeholders on failure."""

    ledger: DayLedger
    gateway: LookupGateway
    _pending: set[asyncio.Task[FoodItem]] = field(default_factory=set, init=False)

    async def add_item_from_barcode(
        self, day: DateKey, meal_name: str, barcode: str
    ) -> FoodItem:
        """Look up a barcode and add the resulting item; never raises on lookup."""
        try:
            result = await self.gateway.lookup(barcode)
        except LookupFailed as exc:
            _logger.warning(
                "Barcode lookup failed: barcode=%s kind=%s",
                barcode,
                exc.kind.value,
            )
            item = create_fallback(barcode)
        except Exception:
            _logger.warning(
                "Barcode lookup errored: barcode=%s", barcode, exc_info=True
            )
            item = create_fallback(barcode)
        else:
            item = create_from_lookup(barcode, result.profile, result.name)
        self.ledger.add_item(day, meal_name, item)
        return item

    def schedule_add_from_barcode(
        self, day: DateKey, meal_name: str, barcode: str
    ) -> "asyncio.Task[FoodItem]":
        """Start a barcode add in the background on the running loop."""
        task = asyncio.get_running_loop().create_task(
            self.add_item_from_barcode(day, meal_name, barcode)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending_count(self) -> int:
        """Return the number of background adds still in flight."""
        return len(self._pending)

    async def wait_pending(self) -> None:
        """Wait for all background adds to finish."""
        if self._pending:
            await asyncio.gather(*self._pending)
