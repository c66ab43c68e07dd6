"""Credential store: Basic-Auth secret, CSRF token and API base override.

All state lives in the stores held by a ``TransportContext``; the functions in
this module are the only writers, so every transition is explicit.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from urllib.parse import urlsplit

import structlog

from ccswitch_sdk.config import DEFAULT_API_BASE, DEFAULT_PAGE_ORIGIN, SDKConfig
from ccswitch_sdk.security import (
    get_api_base_validation_error,
    is_relative_api_base,
    is_valid_api_base,
    normalize_api_base,
)
from ccswitch_sdk.storage import JsonFileStorage, MemoryStorage, Storage

logger = structlog.get_logger()

WEB_AUTH_STORAGE_KEY = "cc-switch-web-auth"
WEB_CSRF_STORAGE_KEY = "cc-switch-csrf-token"
WEB_API_BASE_STORAGE_KEY = "cc-switch-web-api-base"

BASIC_AUTH_USER = "admin"


@dataclass(frozen=True)
class Credentials:
    basic_auth_secret: str | None = None
    csrf_token: str | None = None


@dataclass
class InjectedTokens:
    """Token bag supplied by the hosting environment (e.g. an auto-login page)."""

    csrf_token: str | None = None
    notice_shown: bool = False


@dataclass
class TransportContext:
    session_storage: Storage = field(default_factory=MemoryStorage)
    local_storage: Storage = field(default_factory=MemoryStorage)
    page_origin: str = DEFAULT_PAGE_ORIGIN
    default_api_base: str = DEFAULT_API_BASE
    injected_tokens: InjectedTokens | None = None

    @property
    def page_protocol(self) -> str:
        return urlsplit(self.page_origin).scheme.lower()

    @classmethod
    def from_config(
        cls,
        config: SDKConfig,
        *,
        session_storage: Storage | None = None,
        local_storage: Storage | None = None,
        injected_tokens: InjectedTokens | None = None,
    ) -> "TransportContext":
        return cls(
            session_storage=session_storage if session_storage is not None else MemoryStorage(),
            local_storage=(
                local_storage if local_storage is not None else JsonFileStorage(config.storage_path)
            ),
            page_origin=config.page_origin,
            default_api_base=config.api_base,
            injected_tokens=injected_tokens,
        )


def encode_basic_secret(password: str) -> str:
    raw = f"{BASIC_AUTH_USER}:{password}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def set_credentials(ctx: TransportContext, password: str) -> None:
    ctx.session_storage.set_item(WEB_AUTH_STORAGE_KEY, encode_basic_secret(password))


def get_basic_auth_secret(ctx: TransportContext) -> str | None:
    return ctx.session_storage.get_item(WEB_AUTH_STORAGE_KEY) or None


def set_csrf_token(ctx: TransportContext, token: str) -> None:
    ctx.session_storage.set_item(WEB_CSRF_STORAGE_KEY, token)


def clear_csrf_token(ctx: TransportContext) -> None:
    ctx.session_storage.remove_item(WEB_CSRF_STORAGE_KEY)


def get_stored_csrf_token(ctx: TransportContext) -> str | None:
    return ctx.session_storage.get_item(WEB_CSRF_STORAGE_KEY) or None


def get_stored_credentials(ctx: TransportContext) -> Credentials:
    return Credentials(
        basic_auth_secret=get_basic_auth_secret(ctx),
        csrf_token=get_stored_csrf_token(ctx),
    )


def get_request_csrf_token(ctx: TransportContext) -> str | None:
    """CSRF token for the next request: the injected bag wins over the stored token."""
    tokens = ctx.injected_tokens
    if tokens is not None and tokens.csrf_token:
        if not tokens.notice_shown:
            logger.info("injected_csrf_token_applied")
            tokens.notice_shown = True
        return tokens.csrf_token
    return get_stored_csrf_token(ctx)


def clear_credentials(ctx: TransportContext) -> None:
    ctx.session_storage.remove_item(WEB_AUTH_STORAGE_KEY)
    ctx.session_storage.remove_item(WEB_CSRF_STORAGE_KEY)


def _resolve_api_base(ctx: TransportContext, value: object) -> str | None:
    normalized = normalize_api_base(value)
    if normalized is None:
        return None
    if not is_valid_api_base(normalized, page_protocol=ctx.page_protocol):
        return None
    return normalized


def get_stored_api_base(ctx: TransportContext) -> str | None:
    value = ctx.local_storage.get_item(WEB_API_BASE_STORAGE_KEY)
    if not value:
        return None
    resolved = _resolve_api_base(ctx, value)
    if resolved is None:
        logger.warning("stored_api_base_discarded")
        ctx.local_storage.remove_item(WEB_API_BASE_STORAGE_KEY)
        return None
    return resolved


def clear_api_base_override(ctx: TransportContext) -> None:
    if ctx.local_storage.get_item(WEB_API_BASE_STORAGE_KEY) is None:
        return
    ctx.local_storage.remove_item(WEB_API_BASE_STORAGE_KEY)
    clear_credentials(ctx)


def set_api_base_override(ctx: TransportContext, raw: str | None) -> str | None:
    """Persist a new API base override.

    Returns a validation message when ``raw`` is rejected (nothing is stored in
    that case), otherwise None. A blank value removes the override. Moving to a
    different base drops the stored credentials so they are never sent to
    another backend.
    """
    normalized = normalize_api_base(raw)
    if normalized is None:
        clear_api_base_override(ctx)
        return None

    error = get_api_base_validation_error(normalized, page_protocol=ctx.page_protocol)
    if error is not None:
        logger.warning("api_base_rejected", reason=error)
        return error

    previous = get_stored_api_base(ctx)
    ctx.local_storage.set_item(WEB_API_BASE_STORAGE_KEY, normalized)
    if previous != normalized:
        clear_credentials(ctx)
        logger.info("api_base_changed", previous=previous, current=normalized)
    return None


def get_api_base(ctx: TransportContext) -> str:
    stored = get_stored_api_base(ctx)
    if stored:
        return stored
    fallback = _resolve_api_base(ctx, ctx.default_api_base)
    return fallback or DEFAULT_API_BASE


def build_api_url(ctx: TransportContext, path: str, *, base: str | None = None) -> str:
    api_base = base if base is not None else get_api_base(ctx)
    trimmed_path = path.strip()
    if not trimmed_path:
        return api_base
    normalized_base = api_base.rstrip("/")
    normalized_path = trimmed_path if trimmed_path.startswith("/") else f"/{trimmed_path}"
    return f"{normalized_base}{normalized_path}"


def resolve_absolute_url(ctx: TransportContext, url: str) -> str:
    """Anchor a relative API URL on the page origin."""
    if is_relative_api_base(url):
        return f"{ctx.page_origin.rstrip('/')}{url}"
    return url
