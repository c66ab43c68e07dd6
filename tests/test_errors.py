from __future__ import annotations

from ccswitch_sdk.errors import (
    AuthenticationError,
    CCSwitchSDKError,
    ErrorEnvelope,
    HttpError,
    NetworkError,
    ValidationError,
)


def test_every_error_exposes_an_envelope() -> None:
    assert NetworkError("Connection failed").to_envelope() == ErrorEnvelope("Connection failed", None)
    err = HttpError("Provider not found", status=404, payload={"message": "Provider not found"})
    assert err.to_envelope() == ErrorEnvelope("Provider not found", 404)


def test_error_hierarchy() -> None:
    assert issubclass(ValidationError, ValueError)
    assert issubclass(ValidationError, CCSwitchSDKError)
    assert issubclass(AuthenticationError, HttpError)
    assert str(AuthenticationError("Incorrect password", status=401)) == "Incorrect password"
