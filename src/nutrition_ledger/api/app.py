"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, Response, status

from nutrition_ledger.api.models import (
    ManualItemRequest,
    RescaleRequest,
    ScanRequest,
    SelectDateRequest,
    ShiftDateRequest,
)
from nutrition_ledger.app_logging import configure_logging
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.domain.errors import InvalidServingSize
from nutrition_ledger.domain.items import FoodItem, create_manual
from nutrition_ledger.domain.ledger import LedgerSnapshot
from nutrition_ledger.domain.nutrition import MacroGoals, MacroTotals, NutrientProfile
from nutrition_ledger.services.aggregation import goal_progress


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(
        getattr(logging, container.settings.log_level.upper(), logging.INFO)
    )
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Ledger ready: selected_date=%s meals=%s",
            app.state.container.ledger.selected_date,
            ",".join(app.state.container.ledger.meal_names),
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/selection")
    async def get_selection(request: Request) -> dict[str, object]:
        """Return the snapshot of the selected date."""
        state_container: AppContainer = request.app.state.container
        snapshot = state_container.ledger.snapshot()
        return _snapshot_payload(snapshot, state_container.goals)

    @app.put("/selection")
    async def select_date(
        payload: SelectDateRequest, request: Request
    ) -> dict[str, object]:
        """Select a date and return its snapshot."""
        state_container: AppContainer = request.app.state.container
        snapshot = state_container.ledger.select_date(payload.date)
        return _snapshot_payload(snapshot, state_container.goals)

    @app.post("/selection/shift")
    async def shift_date(
        payload: ShiftDateRequest, request: Request
    ) -> dict[str, object]:
        """Move the selected date backwards or forwards."""
        state_container: AppContainer = request.app.state.container
        snapshot = state_container.ledger.shift_date(payload.days)
        return _snapshot_payload(snapshot, state_container.goals)

    @app.get("/days/{day}")
    async def get_day(day: date, request: Request) -> dict[str, object]:
        """Return items and totals for a date without selecting it."""
        state_container: AppContainer = request.app.state.container
        snapshot = state_container.ledger.snapshot(day)
        return _snapshot_payload(snapshot, state_container.goals)

    @app.get("/days/{day}/meals/{meal}/items")
    async def list_items(day: date, meal: str, request: Request) -> dict[str, object]:
        """Return the items of a meal and their totals."""
        state_container: AppContainer = request.app.state.container
        ledger = state_container.ledger
        return {
            "date": day.isoformat(),
            "meal": meal,
            "items": [
                _item_payload(item) for item in ledger.get_items_for_meal(day, meal)
            ],
            "totals": _totals_payload(ledger.get_meal_totals(day, meal)),
        }

    @app.post("/days/{day}/meals/{meal}/items", status_code=status.HTTP_201_CREATED)
    async def add_manual_item(
        day: date, meal: str, payload: ManualItemRequest, request: Request
    ) -> dict[str, object]:
        """Add a manually entered item."""
        state_container: AppContainer = request.app.state.container
        try:
            item = create_manual(
                name=payload.name,
                barcode=payload.barcode,
                serving_grams=payload.serving_grams,
                profile=NutrientProfile(
                    calories_per_100g=payload.calories_per_100g,
                    protein_per_100g=payload.protein_per_100g,
                    fat_per_100g=payload.fat_per_100g,
                    carbs_per_100g=payload.carbs_per_100g,
                ),
            )
        except InvalidServingSize as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        state_container.ledger.add_item(day, meal, item)
        return _item_payload(item)

    @app.post("/days/{day}/meals/{meal}/scans", status_code=status.HTTP_201_CREATED)
    async def add_scanned_item(
        day: date, meal: str, payload: ScanRequest, request: Request
    ) -> dict[str, object]:
        """Add an item from a scanned barcode, falling back to a placeholder."""
        state_container: AppContainer = request.app.state.container
        item = await state_container.barcode_service.add_item_from_barcode(
            day, meal, payload.barcode
        )
        return _item_payload(item)

    @app.patch("/days/{day}/meals/{meal}/items/{item_id}")
    async def rescale_item(
        day: date, meal: str, item_id: UUID, payload: RescaleRequest, request: Request
    ) -> dict[str, object]:
        """Change the serving size of an item."""
        state_container: AppContainer = request.app.state.container
        try:
            item = state_container.ledger.rescale_item(
                day, meal, item_id, payload.serving_grams
            )
        except InvalidServingSize as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        if item is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _item_payload(item)

    @app.delete(
        "/days/{day}/meals/{meal}/items/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def remove_item(
        day: date, meal: str, item_id: UUID, request: Request
    ) -> Response:
        """Remove an item; removing a missing item is not an error."""
        state_container: AppContainer = request.app.state.container
        state_container.ledger.remove_item(day, meal, item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


def _totals_payload(totals: MacroTotals | MacroGoals) -> dict[str, int]:
    return {
        "kcal": totals.kcal,
        "protein": totals.protein,
        "fat": totals.fat,
        "carbs": totals.carbs,
    }


def _item_payload(item: FoodItem) -> dict[str, object]:
    """Serialize an item with its per-100g basis and displayed values."""
    profile = item.profile
    return {
        "id": str(item.id),
        "barcode": item.barcode,
        "name": item.name,
        "serving_grams": item.serving_grams,
        "per_100g": {
            "calories": profile.calories_per_100g,
            "protein": profile.protein_per_100g,
            "fat": profile.fat_per_100g,
            "carbs": profile.carbs_per_100g,
        },
        "displayed": _totals_payload(item.displayed),
    }


def _snapshot_payload(
    snapshot: LedgerSnapshot, goals: MacroGoals
) -> dict[str, object]:
    return {
        "date": snapshot.selected_date,
        "meals": [
            {
                "name": meal,
                "items": [_item_payload(item) for item in items],
                "totals": _totals_payload(snapshot.meal_totals[meal]),
            }
            for meal, items in snapshot.items_by_meal.items()
        ],
        "totals": _totals_payload(snapshot.day_totals),
        "goals": _totals_payload(goals),
        "progress": goal_progress(snapshot.day_totals, goals),
    }
