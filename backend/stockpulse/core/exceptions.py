"""Custom exception classes for the application."""

from typing import Any, Iterable, Mapping, Optional, Sequence


class StockPulseException(Exception):
    """Base exception for all StockPulse errors."""

    code = "internal_error"

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class InvalidRequestError(StockPulseException):
    """Raised when caller input is missing or malformed. Never retried."""

    code = "invalid_request"


class UnsupportedPlatformError(InvalidRequestError):
    """Raised when a platform identifier has no registered crawler or normalizer."""

    code = "unsupported_platform"

    def __init__(self, platform: str, supported: Optional[Iterable[str]] = None):
        self.platform = platform
        self.supported = sorted(supported or [])
        message = f"Unsupported platform: {platform}"
        if self.supported:
            message += f". Must be one of: {', '.join(self.supported)}"
        super().__init__(message)


class SourceUnavailableError(StockPulseException):
    """Raised inside an adapter when a single page cannot be fetched or parsed.

    Adapters convert this into a failed PageResult; it never escapes a crawl.
    """

    code = "source_unavailable"

    def __init__(self, platform: str, page: int, reason: str):
        self.platform = platform
        self.page = page
        self.reason = reason
        super().__init__(f"{platform} page {page} unavailable: {reason}")


class StorageError(StockPulseException):
    """Raised when the persistence layer fails during upsert or query."""

    code = "storage_failure"


def validation_message(errors: Sequence[Mapping[str, Any]]) -> str:
    """One-line description of the first pydantic/FastAPI validation error."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    # FastAPI prefixes request locations with "body" / "query"
    parts = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    message = first.get("msg", "invalid value")
    return f"{'.'.join(parts)}: {message}" if parts else message
