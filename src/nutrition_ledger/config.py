"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_ledger.domain.nutrition import MacroGoals

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openfoodfacts_base_url: str = "https://world.openfoodfacts.org"
    openfoodfacts_user_agent: str = "nutrition-ledger/0.1"
    lookup_timeout_seconds: float = 8.0
    lookup_cache_ttl_seconds: int = 86400
    timezone: str = "UTC"
    meal_names: str = "Breakfast,Lunch,Dinner,Snacks,Drinks"
    goal_kcal: int = 2000
    goal_protein_g: int = 140
    goal_fat_g: int = 80
    goal_carbs_g: int = 100
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def macro_goals(self) -> MacroGoals:
        """Return the configured daily macro goals."""
        return MacroGoals(
            kcal=self.goal_kcal,
            protein=self.goal_protein_g,
            fat=self.goal_fat_g,
            carbs=self.goal_carbs_g,
        )


def parse_meal_names(raw: str | None) -> tuple[str, ...]:
    """Parse comma-separated meal names, keeping order and dropping repeats."""
    if raw is None:
        return ()
    names: list[str] = []
    for chunk in raw.split(","):
        value = chunk.strip()
        if not value or value in names:
            continue
        names.append(value)
    return tuple(names)
