"""
Exception hierarchy for cody_cli.

Transport and protocol failures are kept apart from timeouts and
cancellations so the CLI can offer a targeted /retry only for the latter.
Malformed stream lines are not errors at all; the SSE parser skips them.
"""
from typing import Optional


class CodyError(Exception):
    """Base class for all cody_cli errors."""


class TransportError(CodyError):
    """Non-2xx response or a failure to reach the chat endpoint."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_status(cls, status_code: int, body: str) -> 'TransportError':
        """Build the error for an HTTP status and response body."""
        return cls(f"API Error ({status_code}): {body}", status_code=status_code, body=body)


class ProtocolError(CodyError):
    """A well-formed error envelope received inside the event stream."""


class RetryableError(CodyError):
    """Base for failures the user may retry with /retry."""


class RequestTimeoutError(RetryableError, TimeoutError):
    """No terminal stream event arrived within the configured timeout."""


class RequestCancelledError(RetryableError):
    """The in-flight request was cancelled explicitly."""


class ConfigError(CodyError):
    """Configuration is missing or invalid."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors) if errors else "Invalid configuration")
        self.errors = errors
