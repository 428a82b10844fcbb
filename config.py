"""
Runtime configuration.

Values come from the process environment, optionally seeded from a `.env` file
next to this module:
- SUPABASE_URL / SUPABASE_KEY: required by repositories.client
- SCHEDULING_HORIZON_START: first visible timeline day (YYYY-MM-DD). Backward
  cascade shifts never start before it. Unset means no lower bound.
- CORS_ALLOW_ORIGINS: comma-separated origins for the API (default: all)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from domain.dates import parse_local_date

_ENV_PATH = Path(__file__).parent / ".env"


@dataclass(frozen=True, slots=True)
class SupabaseSettings:
    url: str
    key: str


def load_environment() -> None:
    """Load `.env` without overriding variables already set in the environment."""

    load_dotenv(dotenv_path=_ENV_PATH)


def _require(name: str, hint: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}. Set {name} to {hint}.")
    return value


def get_supabase_settings() -> SupabaseSettings:
    """
    Supabase credentials from the environment (after loading `.env`).

    Raises:
        RuntimeError: SUPABASE_URL or SUPABASE_KEY is missing
    """

    load_environment()
    return SupabaseSettings(
        url=_require("SUPABASE_URL", "your Supabase project URL"),
        # Use a server-side key only on the backend.
        key=_require("SUPABASE_KEY", "your Supabase API key"),
    )


def get_horizon_start() -> Optional[date]:
    """
    Configured timeline origin, or None.

    Raises:
        ValueError: SCHEDULING_HORIZON_START is set but is not a YYYY-MM-DD date
    """

    value = os.getenv("SCHEDULING_HORIZON_START")
    if not value:
        return None
    return parse_local_date(value)


def get_cors_origins() -> List[str]:
    value = os.getenv("CORS_ALLOW_ORIGINS", "")
    origins = [origin.strip() for origin in value.split(",") if origin.strip()]
    return origins or ["*"]


__all__ = [
    "SupabaseSettings",
    "get_cors_origins",
    "get_horizon_start",
    "get_supabase_settings",
    "load_environment",
]
