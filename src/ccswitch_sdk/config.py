"""Configuration loading for the ccswitch SDK and CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ccswitch_sdk.errors import ConfigError
from ccswitch_sdk.security import normalize_api_base, parse_http_url

DEFAULT_STATE_DIR = Path.home() / ".ccswitch"
DEFAULT_CONFIG_PATH = DEFAULT_STATE_DIR / "config.toml"
DEFAULT_API_BASE = "/api"
DEFAULT_PAGE_ORIGIN = "http://127.0.0.1:3000"
DEFAULT_FETCH_TIMEOUT = 180.0
DEFAULT_FETCH_RETRIES = 1
DEFAULT_FETCH_RETRY_DELAY = 0.5

MODE_ENV_VAR = "CCSWITCH_MODE"
API_BASE_ENV_VAR = "CCSWITCH_API_BASE"
PAGE_ORIGIN_ENV_VAR = "CCSWITCH_PAGE_ORIGIN"
FETCH_TIMEOUT_ENV_VAR = "CCSWITCH_FETCH_TIMEOUT"
FETCH_RETRIES_ENV_VAR = "CCSWITCH_FETCH_RETRIES"
FETCH_RETRY_DELAY_ENV_VAR = "CCSWITCH_FETCH_RETRY_DELAY"
STATE_DIR_ENV_VAR = "CCSWITCH_STATE_DIR"
LOG_LEVEL_ENV_VAR = "CCSWITCH_LOG_LEVEL"

_MODES = ("auto", "web", "native")
_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclass(frozen=True)
class SDKConfig:
    mode: str = "auto"
    api_base: str = DEFAULT_API_BASE
    page_origin: str = DEFAULT_PAGE_ORIGIN
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    max_retries: int = DEFAULT_FETCH_RETRIES
    retry_delay: float = DEFAULT_FETCH_RETRY_DELAY
    state_dir: str = str(DEFAULT_STATE_DIR)
    log_level: str = "warning"

    @property
    def storage_path(self) -> Path:
        return Path(self.state_dir) / "storage.json"


def _load_toml(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")

    try:  # Python 3.11+
        import tomllib  # type: ignore[attr-defined]
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    except ModuleNotFoundError:
        try:
            import tomli
        except ModuleNotFoundError as exc:
            raise ConfigError("toml parser unavailable; install tomli for Python < 3.11") from exc
        try:
            return tomli.loads(raw)
        except tomli.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc


def _pick(source: dict[str, Any], key: str, env_var: str, default: Any) -> Any:
    env_value = os.getenv(env_var)
    if env_value is not None and env_value.strip():
        return env_value.strip()
    return source.get(key, default)


def _to_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a number")
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be a number") from exc
    if parsed != parsed or parsed < 0:
        raise ConfigError(f"{field_name} must be >= 0")
    return parsed


def _to_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be an integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc
    if parsed < 0:
        raise ConfigError(f"{field_name} must be >= 0")
    return parsed


def _resolve_default_api_base(value: Any) -> str:
    # An unusable default falls back to the compiled-in base rather than failing startup.
    normalized = normalize_api_base(value)
    if normalized is None:
        return DEFAULT_API_BASE
    if normalized.startswith("/") and not normalized.startswith("//"):
        return normalized
    if parse_http_url(normalized) is None:
        return DEFAULT_API_BASE
    return normalized


def load_config(path: str | Path | None = None) -> SDKConfig:
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    parsed: dict[str, Any] = _load_toml(config_path) if config_path.exists() else {}

    section = parsed.get("sdk")
    if isinstance(section, dict):
        source = section
    elif section is None:
        source = parsed
    else:
        raise ConfigError("[sdk] must be a table")

    mode = str(_pick(source, "mode", MODE_ENV_VAR, "auto")).strip().lower()
    if mode not in _MODES:
        raise ConfigError("mode must be one of: auto, web, native")

    api_base = _resolve_default_api_base(
        _pick(source, "api_base", API_BASE_ENV_VAR, DEFAULT_API_BASE)
    )

    page_origin = str(_pick(source, "page_origin", PAGE_ORIGIN_ENV_VAR, DEFAULT_PAGE_ORIGIN))
    page_origin = page_origin.strip().rstrip("/")
    if parse_http_url(page_origin) is None:
        raise ConfigError("page_origin must be an absolute http(s) URL")

    fetch_timeout = _to_float(
        _pick(source, "fetch_timeout", FETCH_TIMEOUT_ENV_VAR, DEFAULT_FETCH_TIMEOUT),
        "fetch_timeout",
    )
    max_retries = _to_int(
        _pick(source, "max_retries", FETCH_RETRIES_ENV_VAR, DEFAULT_FETCH_RETRIES),
        "max_retries",
    )
    retry_delay = _to_float(
        _pick(source, "retry_delay", FETCH_RETRY_DELAY_ENV_VAR, DEFAULT_FETCH_RETRY_DELAY),
        "retry_delay",
    )

    state_dir = str(_pick(source, "state_dir", STATE_DIR_ENV_VAR, str(DEFAULT_STATE_DIR))).strip()
    if not state_dir:
        raise ConfigError("state_dir must not be empty")

    log_level = str(_pick(source, "log_level", LOG_LEVEL_ENV_VAR, "warning")).strip().lower()
    if log_level not in _LOG_LEVELS:
        raise ConfigError("log_level must be one of: debug, info, warning, error, critical")

    return SDKConfig(
        mode=mode,
        api_base=api_base,
        page_origin=page_origin,
        fetch_timeout=fetch_timeout,
        max_retries=max_retries,
        retry_delay=retry_delay,
        state_dir=state_dir,
        log_level=log_level,
    )
