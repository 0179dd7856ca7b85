"""Configuration loader.

Reads environment variables and `.env` to configure the service.  The CLI
in `main.py` uses these values as its defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load variables from a .env file if present (project root).
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env")


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes")


def _parse_float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def _parse_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value else None
    except ValueError:
        return None


# ---- Core polling config -----------------------------------------------------

# Logging level: DEBUG, INFO, WARNING, ERROR.
LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO")

# YAML file holding the tracked items and their last known stock state.
MATCH_FILE: str = _get_env("MATCH_FILE", "matches.yml")

# Seconds between poll ticks.
UPDATE_PERIOD_S: float = _parse_float(_get_env("UPDATE_PERIOD_S"), 60.0)

# Per-request timeout for product page fetches and Telegram calls.
HTTP_TIMEOUT_SECONDS: float = _parse_float(_get_env("HTTP_TIMEOUT_SECONDS"), 30.0)

# Some vendors serve stripped-down pages to browsers; a curl UA gets the plain HTML.
USER_AGENT: str = _get_env("USER_AGENT", "curl/7.79.1")

# When true, one failing product page no longer cancels the rest of the tick.
ISOLATE_FETCH_FAILURES: bool = _parse_bool(_get_env("ISOLATE_FETCH_FAILURES", "false"), False)

# ---- Telegram ----------------------------------------------------------------

TELEGRAM_BOT_TOKEN: Optional[str] = _get_env("TELEGRAM_BOT_TOKEN") or _get_env("TELOXIDE_TOKEN")

TELEGRAM_CHAT_ID: Optional[int] = _parse_int(_get_env("TELEGRAM_CHAT_ID"))

TELEGRAM_API_BASE: str = _get_env("TELEGRAM_API_BASE", "https://api.telegram.org")

# ---- Validation --------------------------------------------------------------

def validate() -> None:
    """Validate required configuration parameters."""
    if not TELEGRAM_BOT_TOKEN:
        raise RuntimeError(
            "TELEGRAM_BOT_TOKEN must be set. See .env.example for details."
        )


__all__ = [
    "LOG_LEVEL",
    "MATCH_FILE",
    "UPDATE_PERIOD_S",
    "HTTP_TIMEOUT_SECONDS",
    "USER_AGENT",
    "ISOLATE_FETCH_FAILURES",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
    "TELEGRAM_API_BASE",
    "validate",
]
