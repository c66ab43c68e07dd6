"""Decode API responses into values or structured errors."""

from __future__ import annotations

import json
from typing import Any

import requests

from ccswitch_sdk.errors import DecodeError, HttpError

_MESSAGE_FIELDS = ("message", "error", "detail")


def _is_json(response: requests.Response) -> bool:
    content_type = response.headers.get("content-type") or ""
    return "application/json" in content_type.lower()


def _pick_message(obj: dict[str, Any]) -> str:
    for key in _MESSAGE_FIELDS:
        candidate = obj.get(key)
        if candidate is not None:
            if isinstance(candidate, str) and candidate.strip():
                return candidate
            return ""
    return ""


def get_error_message(payload: object) -> str:
    """Extract a human-readable message from a decoded error body.

    Looks at ``message``/``error``/``detail`` on the top level, then inside a
    nested ``payload`` (which may itself be a plain string). Returns an empty
    string when nothing usable is found.
    """
    if not payload:
        return ""
    if isinstance(payload, str):
        return payload
    if not isinstance(payload, dict):
        return ""
    message = _pick_message(payload)
    if message:
        return message
    nested = payload.get("payload")
    if isinstance(nested, str) and nested.strip():
        return nested
    if isinstance(nested, dict):
        return _pick_message(nested)
    return ""


def build_http_error(response: requests.Response) -> HttpError:
    status = response.status_code
    raw_text = response.text or ""
    fallback = f"Request failed with status {status}"

    payload: object | None = None
    if _is_json(response) and raw_text.strip():
        try:
            payload = json.loads(raw_text)
        except ValueError:
            payload = None

    if payload is not None:
        message = get_error_message(payload) or fallback
        return HttpError(message, status=status, payload=payload, body=raw_text)

    message = raw_text if raw_text.strip() else fallback
    return HttpError(message, status=status, body=raw_text)


def normalize(response: requests.Response) -> Any:
    """Return the decoded success value of ``response`` or raise ``HttpError``.

    204 decodes to None whatever the body says; JSON content types are parsed;
    anything else comes back as text.
    """
    if not response.ok:
        raise build_http_error(response)

    if response.status_code == 204:
        return None

    if _is_json(response):
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(
                f"Invalid JSON in response (status {response.status_code})",
                status=response.status_code,
            ) from exc

    return response.text
