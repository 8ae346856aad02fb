"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from meal_planner.domain.generation import AlgorithmSettings

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    max_attempts: int = 10
    score_threshold: float = 80.0
    deviation_threshold: float = 12.0
    final_deviation_limit: float = 20.0
    enable_lp_optimization: bool = True
    enable_recipe_swapping: bool = True
    max_swaps: int = 2
    combination_top_n: int = 3
    max_combinations: int = 50
    lp_time_limit_seconds: int = 30
    prefilter_strategy: Literal["strict", "macro_profile"] = "strict"
    excluded_recipe_ids: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def algorithm_settings(self) -> AlgorithmSettings:
        """Return the generation loop settings."""
        return AlgorithmSettings(
            max_attempts=self.max_attempts,
            score_threshold=self.score_threshold,
            deviation_threshold=self.deviation_threshold,
            final_deviation_limit=self.final_deviation_limit,
            enable_lp_optimization=self.enable_lp_optimization,
            enable_recipe_swapping=self.enable_recipe_swapping,
            max_swaps=self.max_swaps,
            combination_top_n=self.combination_top_n,
            max_combinations=self.max_combinations,
            lp_time_limit_seconds=self.lp_time_limit_seconds,
        )


def parse_recipe_ids(raw: str | None) -> frozenset[int]:
    """Parse a comma-separated list of recipe IDs from env."""
    if raw is None:
        return frozenset()
    ids: set[int] = set()
    for chunk in raw.split(","):
        value = chunk.strip()
        if value.isdigit():
            ids.add(int(value))
    return frozenset(ids)
