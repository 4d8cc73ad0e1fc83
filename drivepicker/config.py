"""Environment settings and persistent JSON preferences.

Environment variables carry the API endpoint and credentials; they are
required and missing values raise :class:`MissingEnvironmentError`.
Preferences (sort order, default filters, hover timings) live in a JSON file
and all access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import loguru
from platformdirs import user_config_dir

from .errors import MissingEnvironmentError
from .tree_model import FilterParams, SortOrder, parse_sort_order, parse_status, parse_type

APP_NAME = "drivepicker"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

BACKEND_URL_ENV = "STACK_AI_BACKEND_URL"
ACCESS_TOKEN_ENV = "STACK_AI_ACCESS_TOKEN"
INDEXING_PARAMS_ENV = "DRIVEPICKER_INDEXING_PARAMS"


def get_env(key: str, environ: Mapping[str, str] | None = None) -> str:
    """Return a required environment variable, raising when unset or empty."""
    source = os.environ if environ is None else environ
    value = source.get(key)
    if value is None or value == "":
        raise MissingEnvironmentError(key)
    return value


@dataclass(frozen=True)
class Settings:
    backend_url: str
    access_token: str
    indexing_params: dict[str, object] | None = None


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from the environment.

    ``DRIVEPICKER_INDEXING_PARAMS`` is optional; when present it must decode
    to a JSON object, otherwise it is ignored.
    """
    source = os.environ if environ is None else environ
    backend_url = get_env(BACKEND_URL_ENV, source).rstrip("/")
    access_token = get_env(ACCESS_TOKEN_ENV, source)

    indexing_params: dict[str, object] | None = None
    raw_params = source.get(INDEXING_PARAMS_ENV)
    if raw_params:
        try:
            decoded = json.loads(raw_params)
        except ValueError:
            decoded = None
        if isinstance(decoded, dict):
            indexing_params = decoded
    return Settings(backend_url=backend_url, access_token=access_token, indexing_params=indexing_params)


def load_config() -> dict[str, object]:
    """Return saved preferences, or ``{}`` when nothing usable is on disk."""
    if not CONFIG_PATH.is_file():
        return {}
    try:
        raw = CONFIG_PATH.read_bytes()
        data = json.loads(raw)
    except (OSError, ValueError) as exc:
        loguru.logger.debug(f"Ignoring unreadable preferences at {CONFIG_PATH}: {exc}")
        return {}
    if not isinstance(data, dict):
        loguru.logger.debug(f"Ignoring non-object preferences at {CONFIG_PATH}")
        return {}
    return data


def save_config(data: dict[str, object]) -> None:
    """Write preferences through a sibling temp file so readers never see half a file.

    A failed write is logged and otherwise ignored; preferences are optional.
    """
    staging = CONFIG_PATH.with_name(CONFIG_PATH.name + ".tmp")
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        staging.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        staging.replace(CONFIG_PATH)
    except OSError as exc:
        loguru.logger.warning(f"Could not save preferences to {CONFIG_PATH}: {exc}")


def load_sort_order() -> SortOrder:
    return parse_sort_order(load_config().get("sort_order"))


def save_sort_order(order: str) -> None:
    config = load_config()
    config["sort_order"] = parse_sort_order(order)
    save_config(config)


def load_default_filters() -> FilterParams:
    """Load persisted status/type filters; the search query is never persisted."""
    config = load_config()
    return FilterParams(
        status=parse_status(config.get("status_filter")),
        type=parse_type(config.get("type_filter")),
    )


def save_default_filters(filters: FilterParams) -> None:
    config = load_config()
    config["status_filter"] = parse_status(filters.status)
    config["type_filter"] = parse_type(filters.type)
    save_config(config)


def _load_delay_seconds(key: str, default: float) -> float:
    """Read a millisecond delay in ``[0, 5000]`` and return it in seconds."""
    value = load_config().get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value < 0 or value > 5000:
        return default
    return float(value) / 1000.0


def load_prefetch_delay(default: float) -> float:
    return _load_delay_seconds("prefetch_delay_ms", default)


def load_cancel_debounce(default: float) -> float:
    return _load_delay_seconds("cancel_debounce_ms", default)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "BACKEND_URL_ENV",
    "ACCESS_TOKEN_ENV",
    "INDEXING_PARAMS_ENV",
    "Settings",
    "get_env",
    "load_settings",
    "load_config",
    "save_config",
    "load_sort_order",
    "save_sort_order",
    "load_default_filters",
    "save_default_filters",
    "load_prefetch_delay",
    "load_cancel_debounce",
]
