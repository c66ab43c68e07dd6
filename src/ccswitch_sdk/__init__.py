"""ccswitch SDK public surface."""

from ccswitch_sdk.auth import LoginResult, login, logout
from ccswitch_sdk.client import HttpTransport
from ccswitch_sdk.commands import (
    COMMAND_TYPES,
    BaseCommand,
    Command,
    CommandDescriptor,
    parse_command,
    resolve,
    resolve_name,
)
from ccswitch_sdk.config import SDKConfig, load_config
from ccswitch_sdk.credentials import (
    InjectedTokens,
    TransportContext,
    build_api_url,
    clear_api_base_override,
    clear_credentials,
    get_api_base,
    get_basic_auth_secret,
    get_request_csrf_token,
    set_api_base_override,
    set_credentials,
    set_csrf_token,
)
from ccswitch_sdk.dispatcher import Dispatcher, NativeBridge, TransportKind, detect_transport_kind
from ccswitch_sdk.errors import (
    AuthenticationError,
    CCSwitchSDKError,
    ConfigError,
    DecodeError,
    ErrorEnvelope,
    HttpError,
    NetworkError,
    StorageError,
    UnsupportedCommandError,
    ValidationError,
)
from ccswitch_sdk.log import configure_logging
from ccswitch_sdk.responses import get_error_message, normalize
from ccswitch_sdk.security import (
    get_api_base_validation_error,
    is_allowed_external_url,
    is_valid_api_base,
    normalize_api_base,
)
from ccswitch_sdk.storage import JsonFileStorage, MemoryStorage, Storage

__all__ = [
    "CCSwitchSDKError",
    "ErrorEnvelope",
    "ValidationError",
    "UnsupportedCommandError",
    "NetworkError",
    "HttpError",
    "AuthenticationError",
    "DecodeError",
    "StorageError",
    "ConfigError",
    "SDKConfig",
    "load_config",
    "configure_logging",
    "Storage",
    "MemoryStorage",
    "JsonFileStorage",
    "TransportContext",
    "InjectedTokens",
    "set_credentials",
    "set_csrf_token",
    "clear_credentials",
    "get_basic_auth_secret",
    "get_request_csrf_token",
    "get_api_base",
    "set_api_base_override",
    "clear_api_base_override",
    "build_api_url",
    "normalize_api_base",
    "get_api_base_validation_error",
    "is_valid_api_base",
    "is_allowed_external_url",
    "BaseCommand",
    "Command",
    "CommandDescriptor",
    "COMMAND_TYPES",
    "parse_command",
    "resolve",
    "resolve_name",
    "HttpTransport",
    "normalize",
    "get_error_message",
    "Dispatcher",
    "NativeBridge",
    "TransportKind",
    "detect_transport_kind",
    "LoginResult",
    "login",
    "logout",
]
