"""Command-line interface for ccswitch."""

from __future__ import annotations

import argparse
import json
import os
import re
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from typing import Any, Sequence

from ccswitch_sdk.auth import login, logout
from ccswitch_sdk.client import HttpTransport
from ccswitch_sdk.config import SDKConfig, load_config
from ccswitch_sdk.credentials import (
    TransportContext,
    clear_api_base_override,
    get_api_base,
    get_basic_auth_secret,
    get_stored_api_base,
    set_api_base_override,
)
from ccswitch_sdk.dispatcher import Dispatcher
from ccswitch_sdk.errors import (
    AuthenticationError,
    CCSwitchSDKError,
    ConfigError,
    HttpError,
    NetworkError,
    StorageError,
)
from ccswitch_sdk.log import configure_logging
from ccswitch_sdk.storage import JsonFileStorage, MemoryStorage, Storage

EXIT_SUCCESS = 0
EXIT_VALIDATION_ERROR = 1
EXIT_NETWORK_ERROR = 2
EXIT_AUTH_ERROR = 3

PASSWORD_ENV_VAR = "CCSWITCH_PASSWORD"

_SENSITIVE_FIELDS = (
    "password",
    "secret",
    "token",
    "csrf",
    "authorization",
    "api_key",
    "apikey",
)


def _sdk_version() -> str:
    try:
        return pkg_version("ccswitch-sdk")
    except PackageNotFoundError:
        return "0.0.0+local"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ccswitch")
    parser.add_argument(
        "--version",
        action="version",
        version=f"ccswitch {_sdk_version()}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config TOML (default: ~/.ccswitch/config.toml)",
    )
    parser.add_argument(
        "--session-file",
        default=None,
        help="Keep login state in this JSON file instead of process memory",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    version = sub.add_parser("version", help="Show CLI version and effective API base")
    version.add_argument("--json", action="store_true")

    invoke = sub.add_parser("invoke", help="Run a named command against the API server")
    invoke.add_argument("name", help="Command name, e.g. get_providers")
    invoke.add_argument(
        "--args",
        dest="command_args",
        default=None,
        help='Command arguments as a JSON object, e.g. \'{"app": "claude"}\'',
    )

    login_parser = sub.add_parser("login", help="Verify the password and store the session")
    login_parser.add_argument(
        "--password",
        default=None,
        help=f"Server password (default: ${PASSWORD_ENV_VAR})",
    )
    login_parser.add_argument("--api-base", default=None, help="API base URL or path to log in to")
    login_parser.add_argument("--json", action="store_true")

    sub.add_parser("logout", help="Forget stored credentials")

    api_base = sub.add_parser("api-base", help="Inspect or change the API base override")
    api_base_sub = api_base.add_subparsers(dest="api_base_command", required=True)
    api_base_show = api_base_sub.add_parser("show", help="Show the effective API base")
    api_base_show.add_argument("--json", action="store_true")
    api_base_set = api_base_sub.add_parser("set", help="Store an API base override")
    api_base_set.add_argument("value")
    api_base_sub.add_parser("clear", help="Remove the API base override")

    return parser


def _sanitize_error_text(value: str) -> str:
    redacted = re.sub(r"(?i)(Basic\s+)([A-Za-z0-9+/=]+)", r"\1[REDACTED]", value)
    for field in _SENSITIVE_FIELDS:
        redacted = re.sub(
            rf"(?i)({field}\s*[=:]\s*)([^,\s]+)",
            r"\1[REDACTED]",
            redacted,
        )
    return redacted


def _print_error(stderr, prefix: str, message: str, *, code: int) -> int:
    print(f"{prefix}: {_sanitize_error_text(message)}", file=stderr)
    return code


def _print_sdk_error(stderr, exc: CCSwitchSDKError) -> int:
    if isinstance(exc, AuthenticationError):
        return _print_error(stderr, "auth error", exc.message, code=EXIT_AUTH_ERROR)
    if isinstance(exc, HttpError):
        if exc.status == 401:
            return _print_error(
                stderr,
                "auth error",
                "not logged in or session expired; run `ccswitch login`",
                code=EXIT_AUTH_ERROR,
            )
        return _print_error(stderr, f"api error ({exc.status})", exc.message, code=EXIT_NETWORK_ERROR)
    if isinstance(exc, NetworkError):
        return _print_error(stderr, "network error", exc.message, code=EXIT_NETWORK_ERROR)
    return _print_error(stderr, "error", exc.message, code=EXIT_VALIDATION_ERROR)


def _build_context(args, config: SDKConfig) -> TransportContext:
    session_storage: Storage
    if args.session_file:
        session_storage = JsonFileStorage(args.session_file)
    else:
        session_storage = MemoryStorage()
    return TransportContext.from_config(config, session_storage=session_storage)


def _print_json(stdout, payload: Any) -> None:
    print(json.dumps(payload, sort_keys=True, indent=2, ensure_ascii=False), file=stdout)


def _run_version(*, ctx: TransportContext, as_json: bool, stdout) -> int:
    payload = {
        "cli": "ccswitch",
        "sdk_version": _sdk_version(),
        "api_base": get_api_base(ctx),
        "page_origin": ctx.page_origin,
    }
    if as_json:
        print(json.dumps(payload, sort_keys=True), file=stdout)
    else:
        print(f"ccswitch {payload['sdk_version']}", file=stdout)
        print(f"api base: {payload['api_base']}", file=stdout)
        print(f"page origin: {payload['page_origin']}", file=stdout)
    return EXIT_SUCCESS


def _run_invoke(*, args, dispatcher: Dispatcher, stdout, stderr) -> int:
    command_args: dict[str, Any] = {}
    if args.command_args:
        try:
            command_args = json.loads(args.command_args)
        except json.JSONDecodeError as exc:
            return _print_error(
                stderr, "invoke error", f"--args is not valid JSON: {exc.msg}", code=EXIT_VALIDATION_ERROR
            )
        if not isinstance(command_args, dict):
            return _print_error(
                stderr, "invoke error", "--args must be a JSON object", code=EXIT_VALIDATION_ERROR
            )

    result = dispatcher.invoke(args.name, command_args)
    _print_json(stdout, result)
    return EXIT_SUCCESS


def _run_login(*, args, transport: HttpTransport, stdout, stderr) -> int:
    password = args.password if args.password is not None else os.getenv(PASSWORD_ENV_VAR, "")
    result = login(transport, password, api_base=args.api_base)
    payload = {
        "api_base": result.api_base,
        "csrf_token_stored": bool(result.csrf_token),
    }
    if args.json:
        print(json.dumps(payload, sort_keys=True), file=stdout)
        return EXIT_SUCCESS
    print(f"logged in: {payload['api_base']}", file=stdout)
    if not payload["csrf_token_stored"]:
        print("warning: server did not issue a CSRF token; mutations may be rejected", file=stderr)
    return EXIT_SUCCESS


def _run_api_base(*, args, ctx: TransportContext, stdout, stderr) -> int:
    if args.api_base_command == "show":
        payload = {
            "api_base": get_api_base(ctx),
            "override": get_stored_api_base(ctx),
            "logged_in": get_basic_auth_secret(ctx) is not None,
        }
        if args.json:
            print(json.dumps(payload, sort_keys=True), file=stdout)
        else:
            print(f"api_base: {payload['api_base']}", file=stdout)
            print(f"override: {payload['override'] or '(none)'}", file=stdout)
        return EXIT_SUCCESS

    if args.api_base_command == "set":
        error = set_api_base_override(ctx, args.value)
        if error is not None:
            return _print_error(stderr, "api-base error", error, code=EXIT_VALIDATION_ERROR)
        print(f"api_base: {get_api_base(ctx)}", file=stdout)
        return EXIT_SUCCESS

    clear_api_base_override(ctx)
    print("api_base: cleared", file=stdout)
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None, *, stdout=sys.stdout, stderr=sys.stderr) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_VALIDATION_ERROR)

    configure_logging(config.log_level, stream=stderr)
    ctx = _build_context(args, config)
    transport = HttpTransport.from_config(ctx, config)

    try:
        if args.command == "version":
            return _run_version(ctx=ctx, as_json=args.json, stdout=stdout)

        if args.command == "invoke":
            dispatcher = Dispatcher.from_config(config, ctx, http=transport)
            return _run_invoke(args=args, dispatcher=dispatcher, stdout=stdout, stderr=stderr)

        if args.command == "login":
            return _run_login(args=args, transport=transport, stdout=stdout, stderr=stderr)

        if args.command == "logout":
            logout(ctx)
            print("logged out", file=stdout)
            return EXIT_SUCCESS

        if args.command == "api-base":
            return _run_api_base(args=args, ctx=ctx, stdout=stdout, stderr=stderr)
    except ConfigError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_VALIDATION_ERROR)
    except StorageError as exc:
        return _print_error(stderr, "storage error", exc.message, code=EXIT_VALIDATION_ERROR)
    except CCSwitchSDKError as exc:
        return _print_sdk_error(stderr, exc)

    print("unknown command", file=stderr)
    return EXIT_VALIDATION_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
