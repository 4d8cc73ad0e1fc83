"""Exception hierarchy shared by the picker core, API adapters, and CLI.

Every failure the core can surface is scoped and recoverable: validation
errors reject a request before any state changes, fetch errors stay local to
one folder, and API errors roll back optimistic state.
"""

from __future__ import annotations

MISSING_ENV_ERROR_PATTERN = "Missing required environment variable"


class PickerError(Exception):
    """Base class for all drivepicker errors."""


class ValidationError(PickerError):
    """Index/de-index precondition failure; ``str(exc)`` is the reason."""


class FolderFetchError(PickerError):
    """A folder listing could not be loaded."""

    def __init__(self, folder_id: str | None, cause: BaseException) -> None:
        self.folder_id = folder_id
        self.cause = cause
        label = folder_id if folder_id is not None else "<root>"
        super().__init__(f"Failed to load folder {label}: {cause}")


class ApiError(PickerError):
    """Non-success HTTP response from the indexing API."""

    def __init__(self, status_code: int, reason: str, url: str, body: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.url = url
        self.body = body
        super().__init__(f"API error: {status_code} {reason} - {url} - {body}")


class ConnectionNotFoundError(PickerError):
    """No Google Drive connection exists for the account."""


class MissingEnvironmentError(PickerError):
    """A required environment variable is unset or empty."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"{MISSING_ENV_ERROR_PATTERN}: {key}")


def is_missing_env_error(error: object) -> bool:
    """Return whether ``error`` signals missing setup rather than a runtime failure.

    Recognizes :class:`MissingEnvironmentError` and any other exception whose
    message carries the missing-variable marker (e.g. re-raised or wrapped).
    """
    if isinstance(error, MissingEnvironmentError):
        return True
    return isinstance(error, Exception) and MISSING_ENV_ERROR_PATTERN in str(error)


__all__ = [
    "MISSING_ENV_ERROR_PATTERN",
    "PickerError",
    "ValidationError",
    "FolderFetchError",
    "ApiError",
    "ConnectionNotFoundError",
    "MissingEnvironmentError",
    "is_missing_env_error",
]
