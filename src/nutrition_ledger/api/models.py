"""Pydantic models for ledger API payloads."""

import datetime as dt
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints


class SelectDateRequest(BaseModel):
    """Request to change the selected date."""

    date: dt.date


class ShiftDateRequest(BaseModel):
    """Request to move the selected date by a number of days."""

    days: int


class ManualItemRequest(BaseModel):
    """Manually entered food with per-100g values."""

    name: str = Field(min_length=1)
    barcode: str = ""
    calories_per_100g: float = Field(ge=0, allow_inf_nan=False)
    protein_per_100g: float = Field(default=0, ge=0, allow_inf_nan=False)
    fat_per_100g: float = Field(default=0, ge=0, allow_inf_nan=False)
    carbs_per_100g: float = Field(default=0, ge=0, allow_inf_nan=False)
    serving_grams: int = 100


class ScanRequest(BaseModel):
    """Barcode produced by the scanner."""

    barcode: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class RescaleRequest(BaseModel):
    """New serving size for an item."""

    serving_grams: int
