"""Barcode lookup gateway backed by Open Food Facts."""

import logging
import math
from dataclasses import dataclass
from typing import Protocol

import httpx

from nutrition_ledger.adapters.openfoodfacts_client import OpenFoodFactsClient
from nutrition_ledger.domain.errors import LookupErrorKind, LookupFailed
from nutrition_ledger.domain.nutrition import NutrientProfile
from nutrition_ledger.services.cache import Cache

UNKNOWN_PRODUCT_NAME = "unknown product"

_NUTRIMENT_KEYS = {
    "calories": "energy-kcal_100g",
    "protein": "proteins_100g",
    "fat": "fat_100g",
    "carbs": "carbohydrates_100g",
}

# Atwater factors, kcal per gram.
_KCAL_PER_G_PROTEIN = 4
_KCAL_PER_G_CARBS = 4
_KCAL_PER_G_FAT = 9

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupResult:
    """Product data usable for a food item."""

    name: str
    profile: NutrientProfile


class LookupGateway(Protocol):
    """Resolves a barcode to per-100g nutrient facts."""

    async def lookup(self, barcode: str) -> LookupResult:
        """Return product data or raise LookupFailed."""


@dataclass
class OpenFoodFactsGateway(LookupGateway):
    """Lookup gateway that maps Open Food Facts products to profiles."""

    client: OpenFoodFactsClient
    cache: Cache
    ttl_seconds: int = 86400

    async def lookup(self, barcode: str) -> LookupResult:
        """Look up a barcode, serving repeated scans from the cache."""
        cache_key = f"off:product:{barcode}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, LookupResult):
            return cached

        try:
            payload = await self.client.get_product(barcode)
        except httpx.HTTPError as exc:
            raise LookupFailed(
                barcode, LookupErrorKind.NETWORK_FAILURE, str(exc)
            ) from exc
        except ValueError as exc:
            raise LookupFailed(
                barcode, LookupErrorKind.MALFORMED_RESPONSE, str(exc)
            ) from exc

        result = parse_product(barcode, payload)
        self.cache.set(cache_key, result, ttl_seconds=self.ttl_seconds)
        _logger.info(
            "Barcode lookup succeeded: barcode=%s name=%s", barcode, result.name
        )
        return result


def parse_product(barcode: str, payload: object) -> LookupResult:
    """Map a product payload to a lookup result."""
    if not isinstance(payload, dict):
        raise LookupFailed(
            barcode, LookupErrorKind.MALFORMED_RESPONSE, "not an object"
        )
    product = payload.get("product")
    if payload.get("status") != 1 or not product:
        raise LookupFailed(barcode, LookupErrorKind.NOT_FOUND)
    if not isinstance(product, dict):
        raise LookupFailed(
            barcode, LookupErrorKind.MALFORMED_RESPONSE, "product is not an object"
        )

    nutriments = product.get("nutriments") or {}
    if not isinstance(nutriments, dict):
        raise LookupFailed(
            barcode, LookupErrorKind.MALFORMED_RESPONSE, "nutriments is not an object"
        )
    values = {
        field: _read_amount(barcode, nutriments, key)
        for field, key in _NUTRIMENT_KEYS.items()
    }
    if values["calories"] <= 0:
        values["calories"] = (
            _KCAL_PER_G_CARBS * values["carbs"]
            + _KCAL_PER_G_PROTEIN * values["protein"]
            + _KCAL_PER_G_FAT * values["fat"]
        )

    name = product.get("product_name")
    if not isinstance(name, str) or not name.strip():
        name = UNKNOWN_PRODUCT_NAME
    return LookupResult(
        name=name.strip(),
        profile=NutrientProfile(
            calories_per_100g=values["calories"],
            protein_per_100g=values["protein"],
            fat_per_100g=values["fat"],
            carbs_per_100g=values["carbs"],
        ),
    )


def _read_amount(barcode: str, nutriments: dict[str, object], key: str) -> float:
    raw = nutriments.get(key)
    if raw is None or raw == "":
        return 0.0
    if isinstance(raw, bool):
        raise LookupFailed(barcode, LookupErrorKind.MALFORMED_RESPONSE, key)
    try:
        amount = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise LookupFailed(
            barcode, LookupErrorKind.MALFORMED_RESPONSE, f"{key}={raw!r}"
        ) from exc
    if not math.isfinite(amount) or amount < 0:
        raise LookupFailed(
            barcode, LookupErrorKind.MALFORMED_RESPONSE, f"{key}={raw!r}"
        )
    return amount
