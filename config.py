"""Centralized configuration for environment variables and external tools.

This module is the single source of truth for configuration used across the
application. Import the getters from here rather than calling os.getenv
directly in multiple places. Getters read the environment on every call so
tests can override values with monkeypatch.
"""

from __future__ import annotations

import os
from typing import Final

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()


# --- Storage ---
DEFAULT_CONTAINERS_PATH: Final[str] = "containers"
CONFIG_FILE_NAME: Final[str] = "config.json"

# --- External tools ---
DEFAULT_OSM_CONVERT_COMMAND: Final[str] = "osmconvert"
DEFAULT_OSM_UPDATE_COMMAND: Final[str] = "pyosmium-up-to-date"

# --- Timeouts (seconds) ---
DEFAULT_FETCH_TIMEOUT: Final[int] = 60 * 60  # snapshots can be several GB
DEFAULT_TOOL_TIMEOUT: Final[int] = 60 * 60  # replication catch-up is slow
FETCH_CONNECT_TIMEOUT: Final[float] = 30.0


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    else:
        return parsed if parsed > 0 else default


def get_containers_path() -> str:
    """Root directory holding one sub-directory per extract."""
    return os.getenv("EXTRACTS_CONTAINERS_PATH", "").strip() or DEFAULT_CONTAINERS_PATH


def get_osm_convert_command() -> str:
    return os.getenv("OSM_CONVERT_COMMAND", "").strip() or DEFAULT_OSM_CONVERT_COMMAND


def get_osm_update_command() -> str:
    return os.getenv("OSM_UPDATE_COMMAND", "").strip() or DEFAULT_OSM_UPDATE_COMMAND


def get_fetch_timeout() -> int:
    return _get_int_env("EXTRACT_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT)


def get_tool_timeout() -> int:
    return _get_int_env("EXTRACT_TOOL_TIMEOUT", DEFAULT_TOOL_TIMEOUT)


def get_cors_origins() -> list[str]:
    """Comma-separated CORS_ALLOWED_ORIGINS, empty when unset."""
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_CONTAINERS_PATH",
    "DEFAULT_FETCH_TIMEOUT",
    "DEFAULT_OSM_CONVERT_COMMAND",
    "DEFAULT_OSM_UPDATE_COMMAND",
    "DEFAULT_TOOL_TIMEOUT",
    "FETCH_CONNECT_TIMEOUT",
    "get_containers_path",
    "get_cors_origins",
    "get_fetch_timeout",
    "get_osm_convert_command",
    "get_osm_update_command",
    "get_tool_timeout",
]
