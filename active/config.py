"""
Active — Centralized configuration.

Loads all settings from .env and validates them.
Every module that touches the database or the seeder reads from here.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

# Load .env from project root (two levels up from active/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite
    DATABASE_PATH: str = "data/active.db"

    # Development seed
    SEED_HABIT_COUNT: int = 3
    SEED_SEQUENCE_LENGTH: int = 21

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("SEED_HABIT_COUNT", "SEED_SEQUENCE_LENGTH", mode="before")
    @classmethod
    def parse_positive_int(cls, v: str | int) -> int:
        value = int(v)
        if value < 1:
            raise ValueError(f"must be a positive integer, got {value}")
        return value

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment, exiting on invalid values."""
    try:
        return Settings(
            DATABASE_PATH=os.getenv("DATABASE_PATH", "data/active.db"),
            SEED_HABIT_COUNT=os.getenv("SEED_HABIT_COUNT", "3"),
            SEED_SEQUENCE_LENGTH=os.getenv("SEED_SEQUENCE_LENGTH", "21"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
    except ValidationError as exc:
        print(f"ERROR: invalid settings in .env:\n{exc}", file=sys.stderr)
        sys.exit(1)


# Singleton — imported by all other modules as:
#   from active.config import settings
settings = _load_settings()
