"""Single entry point for issuing commands over either transport."""

from __future__ import annotations

import enum
import webbrowser
from typing import Any, Callable, Mapping, Protocol

import structlog

from ccswitch_sdk.client import HttpTransport
from ccswitch_sdk.commands import BaseCommand, OpenExternal, parse_command, resolve
from ccswitch_sdk.config import SDKConfig
from ccswitch_sdk.credentials import TransportContext
from ccswitch_sdk.errors import ConfigError, UnsupportedCommandError
from ccswitch_sdk.security import is_allowed_external_url

logger = structlog.get_logger()


class TransportKind(enum.Enum):
    NATIVE = "native"
    HTTP = "http"


class NativeBridge(Protocol):
    """In-process host bridge with the same command semantics as the HTTP API."""

    def invoke(self, command: str, args: dict[str, Any]) -> Any: ...


def detect_transport_kind(config: SDKConfig, bridge: NativeBridge | None = None) -> TransportKind:
    """Pick the transport once, at startup."""
    if config.mode == "web":
        return TransportKind.HTTP
    if config.mode == "native":
        if bridge is None:
            raise ConfigError("mode is native but no native bridge is available")
        return TransportKind.NATIVE
    return TransportKind.NATIVE if bridge is not None else TransportKind.HTTP


# Commands the remote server cannot perform; callers get an error instead of a 404.
WEB_UNSUPPORTED_COMMANDS: dict[str, str] = {
    "test_api_endpoints": "Endpoint speed tests are not available in web mode; use the desktop app.",
    "get_custom_endpoints": "Reading VSCode custom endpoints is not available in web mode; use the desktop app.",
    "add_custom_endpoint": "Adding VSCode custom endpoints is not available in web mode; use the desktop app.",
    "remove_custom_endpoint": "Removing VSCode custom endpoints is not available in web mode; use the desktop app.",
    "update_endpoint_last_used": "Endpoint usage tracking is not available in web mode; use the desktop app.",
    "parse_deeplink": "Deeplink parsing is not available in web mode; use the desktop app.",
    "import_from_deeplink": "Deeplink import is not available in web mode; use the desktop app.",
}

# Commands with no meaningful remote behaviour resolve to fixed local values.
SHORT_CIRCUIT_RESULTS: dict[str, Callable[[], Any]] = {
    "update_tray_menu": lambda: True,
    "check_for_updates": lambda: None,
    "restart_app": lambda: None,
    "is_portable_mode": lambda: False,
    "check_env_conflicts": lambda: [],
    "delete_env_vars": lambda: {"backupPath": "", "timestamp": "", "conflicts": []},
    "restore_env_backup": lambda: None,
    "get_env_var": lambda: None,
    "set_env_var": lambda: None,
}


class Dispatcher:
    def __init__(
        self,
        context: TransportContext,
        transport_kind: TransportKind,
        *,
        http: HttpTransport | None = None,
        bridge: NativeBridge | None = None,
        opener: Callable[[str], Any] = webbrowser.open_new_tab,
    ) -> None:
        if transport_kind is TransportKind.NATIVE and bridge is None:
            raise ConfigError("native transport requires a bridge")
        self.context = context
        self.transport_kind = transport_kind
        self.http = http if http is not None else HttpTransport(context=context)
        self.bridge = bridge
        self.opener = opener
        self._unsupported_noticed: set[str] = set()

    @classmethod
    def from_config(
        cls,
        config: SDKConfig,
        context: TransportContext | None = None,
        *,
        http: HttpTransport | None = None,
        bridge: NativeBridge | None = None,
        opener: Callable[[str], Any] = webbrowser.open_new_tab,
    ) -> "Dispatcher":
        ctx = context if context is not None else TransportContext.from_config(config)
        return cls(
            ctx,
            detect_transport_kind(config, bridge),
            http=http if http is not None else HttpTransport.from_config(ctx, config),
            bridge=bridge,
            opener=opener,
        )

    def invoke(self, command: str, args: Mapping[str, Any] | None = None) -> Any:
        """Run ``command`` with a loosely-typed argument bag."""
        bag = dict(args or {})
        if self.transport_kind is TransportKind.NATIVE:
            return self.bridge.invoke(command, bag)

        if command in WEB_UNSUPPORTED_COMMANDS:
            self._reject_unsupported(command)
        if command == "open_external":
            return self._open_external(bag.get("url"))
        if command in SHORT_CIRCUIT_RESULTS:
            return SHORT_CIRCUIT_RESULTS[command]()

        return self.http.request(resolve(parse_command(command, bag)))

    def dispatch(self, command: BaseCommand) -> Any:
        """Run an already-typed command."""
        if self.transport_kind is TransportKind.NATIVE:
            return self.bridge.invoke(command.command, command.to_args())
        if isinstance(command, OpenExternal):
            return self._open_external(command.url)
        if command.command in SHORT_CIRCUIT_RESULTS:
            return SHORT_CIRCUIT_RESULTS[command.command]()
        return self.http.request(resolve(command))

    def _reject_unsupported(self, command: str) -> None:
        message = WEB_UNSUPPORTED_COMMANDS[command]
        first_notice = command not in self._unsupported_noticed
        self._unsupported_noticed.add(command)
        logger.warning("command_unsupported", command=command, first_notice=first_notice)
        raise UnsupportedCommandError(message)

    def _open_external(self, url: object) -> bool:
        # Reports success even when navigation is refused; callers treat this as fire-and-forget.
        if isinstance(url, str):
            trimmed = url.strip()
            if is_allowed_external_url(trimmed):
                self.opener(trimmed)
            else:
                logger.warning("open_external_blocked", reason="unsafe url")
        return True


__all__ = [
    "Dispatcher",
    "NativeBridge",
    "TransportKind",
    "detect_transport_kind",
    "SHORT_CIRCUIT_RESULTS",
    "WEB_UNSUPPORTED_COMMANDS",
]
