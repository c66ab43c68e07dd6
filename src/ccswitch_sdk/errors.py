"""SDK error types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorEnvelope:
    message: str
    status: int | None = None


class CCSwitchSDKError(RuntimeError):
    """Base SDK error."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def to_envelope(self) -> ErrorEnvelope:
        return ErrorEnvelope(message=self.message, status=self.status)


class ValidationError(CCSwitchSDKError, ValueError):
    """Command arguments are missing or invalid; raised before any I/O."""


class UnsupportedCommandError(CCSwitchSDKError):
    """Command has no equivalent on the selected transport."""


class NetworkError(CCSwitchSDKError):
    """API server could not be reached."""


class HttpError(CCSwitchSDKError):
    """API server returned a non-success HTTP response."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        payload: object | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message, status=status)
        self.payload = payload
        self.body = body


class AuthenticationError(HttpError):
    """Password was rejected by the API server."""


class DecodeError(CCSwitchSDKError):
    """Success response body could not be decoded."""


class StorageError(CCSwitchSDKError):
    """Persisted client state could not be read or written."""


class ConfigError(ValueError):
    """Raised when SDK config is invalid."""
