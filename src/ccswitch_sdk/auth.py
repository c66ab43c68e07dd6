"""Login and logout against the remote API server."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from ccswitch_sdk.client import HttpTransport
from ccswitch_sdk.commands import CommandDescriptor
from ccswitch_sdk.credentials import (
    TransportContext,
    clear_credentials,
    clear_csrf_token,
    encode_basic_secret,
    get_api_base,
    get_stored_api_base,
    set_api_base_override,
    set_credentials,
    set_csrf_token,
)
from ccswitch_sdk.errors import AuthenticationError, CCSwitchSDKError, ValidationError
from ccswitch_sdk.responses import build_http_error, normalize
from ccswitch_sdk.security import get_api_base_validation_error, normalize_api_base

logger = structlog.get_logger()

VERIFY_PATH = "/settings"
CSRF_TOKEN_PATH = "/system/csrf-token"


@dataclass(frozen=True)
class LoginResult:
    api_base: str
    csrf_token: str | None


def _fetch_csrf_token(transport: HttpTransport, *, base: str, secret: str) -> str | None:
    response = transport.execute(CommandDescriptor("GET", CSRF_TOKEN_PATH), base=base, secret=secret)
    data = normalize(response)
    if isinstance(data, dict):
        token = data.get("csrfToken")
        if isinstance(token, str) and token:
            return token
    return None


def login(transport: HttpTransport, password: str, *, api_base: str | None = None) -> LoginResult:
    """Verify ``password`` against the server and persist the session.

    ``api_base`` optionally points the client at another server; it is only
    stored once the password has been accepted there. Credentials tied to a
    different base are dropped before the attempt. Without ``api_base`` the
    password is checked against the current base, and any stored override is
    kept.
    """
    ctx = transport.context
    trimmed = (password or "").strip()
    if not trimmed:
        raise ValidationError("Password is required")

    base_error = get_api_base_validation_error(api_base or "", page_protocol=ctx.page_protocol)
    if base_error is not None:
        raise ValidationError(base_error)

    requested_base = normalize_api_base(api_base)
    if requested_base is not None and get_stored_api_base(ctx) != requested_base:
        clear_credentials(ctx)

    effective_base = requested_base or get_api_base(ctx)
    secret = encode_basic_secret(trimmed)
    response = transport.execute(CommandDescriptor("GET", VERIFY_PATH), base=effective_base, secret=secret)

    if response.status_code == 401:
        raise AuthenticationError("Incorrect password", status=401, body=response.text)
    if not response.ok:
        raise build_http_error(response)

    if requested_base:
        set_api_base_override(ctx, requested_base)
    set_credentials(ctx, trimmed)

    csrf_token: str | None = None
    try:
        csrf_token = _fetch_csrf_token(transport, base=effective_base, secret=secret)
    except CCSwitchSDKError as exc:
        logger.warning("csrf_token_fetch_failed", error=type(exc).__name__, status=exc.status)
    else:
        if csrf_token:
            set_csrf_token(ctx, csrf_token)
        else:
            clear_csrf_token(ctx)

    logger.info("login_succeeded", api_base=effective_base, csrf_token_present=bool(csrf_token))
    return LoginResult(api_base=effective_base, csrf_token=csrf_token)


def logout(ctx: TransportContext) -> None:
    clear_credentials(ctx)
    logger.info("logged_out")
