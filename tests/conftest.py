"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from nutrition_ledger.adapters.openfoodfacts_client import OpenFoodFactsClient
from nutrition_ledger.config import Settings
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.domain.errors import LookupErrorKind, LookupFailed
from nutrition_ledger.domain.nutrition import NutrientProfile
from nutrition_ledger.services.barcode import BarcodeIntakeService
from nutrition_ledger.services.ledger import DayLedger
from nutrition_ledger.services.lookup import LookupGateway, LookupResult

TEST_DATE = "2024-05-01"

YOGURT = NutrientProfile(
    calories_per_100g=250,
    protein_per_100g=10,
    fat_per_100g=5,
    carbs_per_100g=30,
)


@dataclass
class StubLookupGateway(LookupGateway):
    """Gateway returning canned products; unknown barcodes are not found."""

    products: dict[str, LookupResult] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    delays: dict[str, float] = field(default_factory=dict)

    async def lookup(self, barcode: str) -> LookupResult:
        self.calls.append(barcode)
        delay = self.delays.get(barcode)
        if delay:
            await asyncio.sleep(delay)
        product = self.products.get(barcode)
        if product is None:
            raise LookupFailed(barcode, LookupErrorKind.NOT_FOUND)
        return product


@dataclass
class FailingLookupGateway(LookupGateway):
    """Gateway that always fails with the configured error."""

    error: Exception = field(
        default_factory=lambda: LookupFailed(
            "unknown", LookupErrorKind.NETWORK_FAILURE, "connection refused"
        )
    )
    calls: int = 0

    async def lookup(self, barcode: str) -> LookupResult:
        self.calls += 1
        raise self.error


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Open Food Facts client serving payloads from memory."""

    payloads: dict[str, dict[str, object]] = field(default_factory=dict)
    error: Exception | None = None
    calls: int = 0

    async def get_product(self, barcode: str) -> dict[str, object]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payloads.get(barcode, {"status": 0, "code": barcode})


def off_payload(
    name: str | None = "Greek yogurt", **nutriments: object
) -> dict[str, object]:
    """Build an Open Food Facts product response."""
    product: dict[str, object] = {"nutriments": nutriments}
    if name is not None:
        product["product_name"] = name
    return {"status": 1, "code": "123", "product": product}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openfoodfacts_base_url="https://off.test",
        timezone="UTC",
        meal_names="Breakfast,Lunch,Dinner,Snacks,Drinks",
    )


@pytest.fixture
def ledger() -> DayLedger:
    return DayLedger(selected_date=TEST_DATE)


@pytest.fixture
def lookup_gateway() -> StubLookupGateway:
    return StubLookupGateway(
        products={
            "4006381333931": LookupResult(name="Greek yogurt", profile=YOGURT),
        }
    )


@pytest.fixture
def container(
    settings: Settings, ledger: DayLedger, lookup_gateway: StubLookupGateway
) -> AppContainer:
    barcode_service = BarcodeIntakeService(ledger=ledger, gateway=lookup_gateway)

    async def close_resources() -> None:
        await barcode_service.wait_pending()

    return AppContainer(
        settings=settings,
        ledger=ledger,
        lookup_gateway=lookup_gateway,
        barcode_service=barcode_service,
        goals=settings.macro_goals(),
        close_resources=close_resources,
    )
