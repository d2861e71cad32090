"""Food items tracked in the ledger."""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from uuid import UUID, uuid4

from nutrition_ledger.domain.errors import InvalidServingSize
from nutrition_ledger.domain.nutrition import MacroTotals, NutrientProfile

DEFAULT_SERVING_GRAMS = 100


@dataclass(frozen=True)
class FoodItem:
    """A scanned or manually entered food with its current serving size.

    The profile is fixed at creation and always holds per-100g values.
    Displayed nutrients are derived from it for the current serving, so
    rescaling never compounds.
    """

    barcode: str
    name: str
    profile: NutrientProfile
    serving_grams: int = DEFAULT_SERVING_GRAMS
    id: UUID = field(default_factory=uuid4)

    @property
    def displayed(self) -> MacroTotals:
        """Nutrients for the current serving, truncated to whole units."""
        return MacroTotals(
            kcal=_scale(self.profile.calories_per_100g, self.serving_grams),
            protein=_scale(self.profile.protein_per_100g, self.serving_grams),
            fat=_scale(self.profile.fat_per_100g, self.serving_grams),
            carbs=_scale(self.profile.carbs_per_100g, self.serving_grams),
        )


def create_from_lookup(
    barcode: str, profile: NutrientProfile, name: str | None = None
) -> FoodItem:
    """Create an item at the default 100g serving from looked-up data."""
    label = (name or "").strip() or barcode
    return FoodItem(barcode=barcode, name=label, profile=profile)


def create_fallback(barcode: str) -> FoodItem:
    """Create a zero-nutrient placeholder named after its barcode."""
    return FoodItem(barcode=barcode, name=barcode, profile=NutrientProfile.zero())


def create_manual(
    name: str,
    profile: NutrientProfile,
    serving_grams: int = DEFAULT_SERVING_GRAMS,
    barcode: str = "",
) -> FoodItem:
    """Create an item from manually entered per-100g values."""
    _ensure_positive(serving_grams)
    return FoodItem(
        barcode=barcode,
        name=name.strip() or barcode,
        profile=profile,
        serving_grams=serving_grams,
    )


def rescale(item: FoodItem, new_grams: int) -> FoodItem:
    """Return a copy of the item with a new serving size."""
    _ensure_positive(new_grams)
    return replace(item, serving_grams=new_grams)


def _ensure_positive(grams: int) -> None:
    if grams <= 0:
        raise InvalidServingSize(grams)


def _scale(per_100g: float, grams: int) -> int:
    # Decimal keeps products like 0.29 * 100 from landing just below an integer.
    return int(Decimal(str(per_100g)) * grams / 100)
