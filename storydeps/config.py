"""Environment-driven settings for storydeps."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .models import TieBreak

LOG_LEVEL_ENV = "STORYDEPS_LOG_LEVEL"
LOG_FILE_ENV = "STORYDEPS_LOG_FILE"
TIE_BREAK_ENV = "STORYDEPS_TIE_BREAK"


@dataclass(slots=True)
class Settings:
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    tie_break: TieBreak = TieBreak.INPUT_ORDER


def load_settings() -> Settings:
    """Read settings from the environment."""
    log_level = os.getenv(LOG_LEVEL_ENV, "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Environment variable {LOG_LEVEL_ENV} has unknown level '{log_level}'.")

    log_file_value = os.getenv(LOG_FILE_ENV)
    log_file = Path(log_file_value).expanduser() if log_file_value else None

    tie_break_value = os.getenv(TIE_BREAK_ENV, TieBreak.INPUT_ORDER.value).strip().lower()
    try:
        tie_break = TieBreak(tie_break_value)
    except ValueError:
        choices = ", ".join(option.value for option in TieBreak)
        raise ValueError(
            f"Environment variable {TIE_BREAK_ENV} must be one of: {choices}; got '{tie_break_value}'."
        ) from None

    return Settings(log_level=log_level, log_file=log_file, tie_break=tie_break)
