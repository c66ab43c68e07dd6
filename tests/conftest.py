from __future__ import annotations

import json
import types

import pytest
import structlog

_ENV_VARS = (
    "CCSWITCH_MODE",
    "CCSWITCH_API_BASE",
    "CCSWITCH_PAGE_ORIGIN",
    "CCSWITCH_FETCH_TIMEOUT",
    "CCSWITCH_FETCH_RETRIES",
    "CCSWITCH_FETCH_RETRY_DELAY",
    "CCSWITCH_STATE_DIR",
    "CCSWITCH_LOG_LEVEL",
    "CCSWITCH_PASSWORD",
)


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CCSWITCH_STATE_DIR", str(tmp_path / "state"))
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_response():
    def _make(status=200, payload=None, *, text=None, content_type="application/json"):
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        headers = {"content-type": content_type} if content_type else {}
        return types.SimpleNamespace(
            status_code=status,
            ok=status < 400,
            headers=headers,
            text=text,
            json=lambda: json.loads(text),
        )

    return _make
