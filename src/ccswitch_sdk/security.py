"""URL and scheme guards applied before navigation or persisting an API base."""

from __future__ import annotations

from urllib.parse import SplitResult, urlsplit

ALLOWED_URL_SCHEMES = ("http", "https")

INVALID_API_BASE_MESSAGE = "Invalid API base URL: use an http(s) URL or a path starting with /"
MIXED_CONTENT_MESSAGE = "The page is served over HTTPS; the API base must use https or a relative path"


def normalize_api_base(value: object) -> str | None:
    """Trim and strip trailing slashes; a bare ``/`` is kept as-is."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    if trimmed == "/":
        return "/"
    normalized = trimmed.rstrip("/")
    return normalized or None


def is_relative_api_base(value: str) -> bool:
    return value.startswith("/") and not value.startswith("//")


def parse_http_url(value: str) -> SplitResult | None:
    """Return the split URL when ``value`` is an absolute http(s) URL."""
    try:
        parsed = urlsplit(value)
    except ValueError:
        return None
    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        return None
    if not parsed.netloc or not parsed.hostname:
        return None
    return parsed


def _mixed_content_error(value: str, page_protocol: str | None) -> str | None:
    if (page_protocol or "").rstrip(":").lower() != "https":
        return None
    parsed = parse_http_url(value)
    if parsed is not None and parsed.scheme.lower() == "http":
        return MIXED_CONTENT_MESSAGE
    return None


def get_api_base_validation_error(value: object, *, page_protocol: str | None = None) -> str | None:
    """Describe why ``value`` cannot be used as an API base, or return None.

    Blank input is not an error: it means "no override". Relative paths are
    accepted; absolute URLs must be http(s), and plain http is refused when the
    hosting page is served over https.
    """
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    normalized = normalize_api_base(trimmed)
    if normalized is None:
        return INVALID_API_BASE_MESSAGE
    if is_relative_api_base(normalized):
        return None
    if parse_http_url(normalized) is None:
        return INVALID_API_BASE_MESSAGE
    return _mixed_content_error(normalized, page_protocol)


def is_valid_api_base(value: str, *, page_protocol: str | None = None) -> bool:
    trimmed = value.strip()
    if not trimmed:
        return False
    if is_relative_api_base(trimmed):
        return True
    if parse_http_url(trimmed) is None:
        return False
    return _mixed_content_error(trimmed, page_protocol) is None


def is_allowed_external_url(value: object) -> bool:
    """Only absolute http(s) URLs may be handed to a browser navigation."""
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if not trimmed:
        return False
    return parse_http_url(trimmed) is not None
