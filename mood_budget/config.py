"""Configuration management for the mood budget app.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in mood_budget/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("MOODBUDGET_DATA_DIR", _PROJECT_ROOT / "data"))
LOG_DIR = Path(os.getenv("MOODBUDGET_LOG_DIR", DATA_DIR / "logs"))

# Database
DB_PATH = Path(
    os.getenv("MOODBUDGET_DB_PATH", DATA_DIR / "mood_budget.db")
).resolve()

# Preference cache (UI filters)
CACHE_PATH = DATA_DIR / "persistent_cache.json"

# Session defaults
DEFAULT_USER_ID = os.getenv("MOODBUDGET_USER_ID", "local")
CURRENCY = os.getenv("MOODBUDGET_CURRENCY", "PHP")
CURRENCY_SYMBOL = os.getenv("MOODBUDGET_CURRENCY_SYMBOL", "₱" if CURRENCY == "PHP" else "$")

# Gemini advisor
GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY") or None
CHAT_MODEL = os.getenv("MOODBUDGET_CHAT_MODEL", "gemini-2.0-flash")
SUMMARY_MODEL = os.getenv("MOODBUDGET_SUMMARY_MODEL", "gemini-1.5-flash")

LOG_LEVEL = os.getenv("MOODBUDGET_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, LOG_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def get_db_path() -> str:
    """Get the database path as a string."""
    return str(DB_PATH)


def configure_logging(
    log_file: Optional[Path] = None,
    level: Optional[str] = None,
    max_bytes: int = 5_000_000,
    backup_count: int = 3,
) -> logging.Logger:
    """Attach a rotating file handler and a console handler to the root logger.

    Safe to call on every Streamlit rerun; handlers are only added once.
    """
    root = logging.getLogger()
    root.setLevel(level or LOG_LEVEL)
    if getattr(root, "_mood_budget_configured", False):
        return root

    target = log_file or (LOG_DIR / "mood_budget.log")
    target.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(target, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    root._mood_budget_configured = True  # type: ignore[attr-defined]
    return root
