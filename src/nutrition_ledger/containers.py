"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from nutrition_ledger.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from nutrition_ledger.config import Settings, parse_meal_names
from nutrition_ledger.domain.nutrition import MacroGoals
from nutrition_ledger.services.barcode import BarcodeIntakeService
from nutrition_ledger.services.cache import InMemoryCache
from nutrition_ledger.services.ledger import DEFAULT_MEAL_NAMES, DayLedger
from nutrition_ledger.services.lookup import LookupGateway, OpenFoodFactsGateway


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ledger: DayLedger
    lookup_gateway: LookupGateway
    barcode_service: BarcodeIntakeService
    goals: MacroGoals
    close_resources: Callable[[], Awaitable[None]]


def today_in(timezone_name: str) -> str:
    """Return today's ISO date in the given timezone."""
    return datetime.now(tz=ZoneInfo(timezone_name)).date().isoformat()


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    ledger = DayLedger(
        selected_date=today_in(resolved_settings.timezone),
        meal_names=parse_meal_names(resolved_settings.meal_names)
        or DEFAULT_MEAL_NAMES,
    )
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.openfoodfacts_base_url,
        user_agent=resolved_settings.openfoodfacts_user_agent,
        timeout_seconds=resolved_settings.lookup_timeout_seconds,
    )
    lookup_gateway = OpenFoodFactsGateway(
        client=off_client,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.lookup_cache_ttl_seconds,
    )
    barcode_service = BarcodeIntakeService(ledger=ledger, gateway=lookup_gateway)

    async def close_resources() -> None:
        await barcode_service.wait_pending()
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        ledger=ledger,
        lookup_gateway=lookup_gateway,
        barcode_service=barcode_service,
        goals=resolved_settings.macro_goals(),
        close_resources=close_resources,
    )
