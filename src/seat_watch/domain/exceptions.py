from __future__ import annotations


class SeatWatchError(Exception):
    """Base exception for all seat tracking errors."""


class HttpError(SeatWatchError):
    """Raised on transport-level failures (DNS, connection refused, timeout)."""


class ParseError(SeatWatchError):
    """Raised when XML/HTML markup is malformed or an expected field is missing."""


class ConfigError(SeatWatchError):
    """Raised when a subscription or query fails validation before any network call."""


class ServiceUnavailableError(SeatWatchError):
    """Raised when the upstream site answers 503; the only retryable condition."""

    def __init__(self, url: str = "") -> None:
        self.url = url
        super().__init__(f"Service temporarily unavailable (503): {url}".rstrip(": "))


class InvalidResponseError(SeatWatchError):
    """Raised when the upstream site returns a non-2xx status other than 503."""

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"Invalid response: HTTP {status_code} for url={url}")


class NotFoundError(SeatWatchError):
    """Raised by repositories when a requested record does not exist."""


class DatabaseError(SeatWatchError):
    """Raised by repositories when the backing store fails."""
