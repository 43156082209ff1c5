"""
Exceptions raised by the tag generation pipeline.

Every error carries a human-readable ``message`` that a host application can
display verbatim.
"""

from typing import Optional


class TaggerError(Exception):
    """Base exception for all tag generation errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigurationError(TaggerError):
    """Raised when the provider configuration is incomplete (key, URL or model)."""
    pass


class RequestTimeoutError(TaggerError):
    """Raised when a request attempt exceeds its deadline."""

    status_code = 408

    def __init__(self, message: str = "Request timed out", timeout: Optional[float] = None):
        if timeout is not None:
            message = f"{message} after {timeout:g}s"
        super().__init__(message)
        self.timeout = timeout


class RemoteError(TaggerError):
    """Raised when the provider answers with a non-success HTTP status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        """Server-side failures (5xx) are worth retrying."""
        return self.status_code >= 500

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {self.message}"


class MalformedResponseError(TaggerError):
    """Raised when a response cannot be decoded or lacks the expected text field."""
    pass


class TransportError(TaggerError):
    """Raised when the request never produced an HTTP response (DNS, refused connection)."""
    pass
