"""HTTP transport for commands routed to the remote API server."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urlsplit, urlunsplit

import requests
import structlog
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ccswitch_sdk.commands import IDEMPOTENT_METHODS, CommandDescriptor
from ccswitch_sdk.config import (
    DEFAULT_FETCH_RETRIES,
    DEFAULT_FETCH_RETRY_DELAY,
    DEFAULT_FETCH_TIMEOUT,
    SDKConfig,
)
from ccswitch_sdk.credentials import (
    TransportContext,
    build_api_url,
    get_basic_auth_secret,
    get_request_csrf_token,
    resolve_absolute_url,
)
from ccswitch_sdk.errors import NetworkError
from ccswitch_sdk.responses import normalize

logger = structlog.get_logger()

# Failures where no complete HTTP response was obtained; error statuses never land here.
TRANSPORT_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
    requests.exceptions.ChunkedEncodingError,
    requests.exceptions.ContentDecodingError,
)


def _url_for_log(url: str) -> str:
    parsed = urlsplit(url)
    return urlunsplit((parsed.scheme, parsed.netloc, parsed.path, "", ""))


@dataclass
class HttpTransport:
    context: TransportContext
    timeout: float = DEFAULT_FETCH_TIMEOUT
    max_retries: int = DEFAULT_FETCH_RETRIES
    retry_delay: float = DEFAULT_FETCH_RETRY_DELAY
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        self._session = requests.Session()
        # Retries are owned by execute(); the adapter must never replay a request itself.
        adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False))
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    @classmethod
    def from_config(cls, context: TransportContext, config: SDKConfig) -> "HttpTransport":
        return cls(
            context=context,
            timeout=config.fetch_timeout,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
        )

    @property
    def session(self) -> requests.Session:
        return self._session

    def build_headers(self, descriptor: CommandDescriptor, *, secret: str | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        csrf_token = get_request_csrf_token(self.context)
        if csrf_token:
            headers["X-CSRF-Token"] = csrf_token
        auth_secret = secret if secret is not None else get_basic_auth_secret(self.context)
        if auth_secret:
            headers["Authorization"] = f"Basic {auth_secret}"
        if descriptor.method != "GET" and descriptor.body is not None:
            headers["Content-Type"] = "application/json"
        return headers

    def execute(
        self,
        descriptor: CommandDescriptor,
        *,
        base: str | None = None,
        secret: str | None = None,
    ) -> requests.Response:
        """Send ``descriptor`` and return the raw response.

        The context is read here, at call time, so a login or base change made
        after this transport was built is honoured. Reads (GET/HEAD) are
        retried after ``retry_delay`` when the request fails before a complete HTTP
        response arrives; error statuses are returned, never retried.
        """
        url = resolve_absolute_url(self.context, build_api_url(self.context, descriptor.path, base=base))
        headers = self.build_headers(descriptor, secret=secret)
        send_body = descriptor.method != "GET" and descriptor.body is not None
        timeout = self.timeout if self.timeout > 0 else None
        max_attempts = 1 + (max(0, self.max_retries) if descriptor.method in IDEMPOTENT_METHODS else 0)
        safe_url = _url_for_log(url)

        for attempt in range(max_attempts):
            try:
                response = self._session.request(
                    descriptor.method,
                    url,
                    json=descriptor.body if send_body else None,
                    headers=headers,
                    timeout=timeout,
                )
            except TRANSPORT_ERRORS as exc:
                will_retry = attempt < max_attempts - 1
                logger.warning(
                    "request_transport_error",
                    method=descriptor.method,
                    url=safe_url,
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                    will_retry=will_retry,
                    error=type(exc).__name__,
                )
                if not will_retry:
                    raise NetworkError(f"Connection failed: {exc}") from exc
                if self.retry_delay > 0:
                    self.sleep(self.retry_delay)
                continue
            except requests.RequestException as exc:
                logger.warning(
                    "request_failed",
                    method=descriptor.method,
                    url=safe_url,
                    attempt=attempt + 1,
                    error=type(exc).__name__,
                )
                raise NetworkError(f"Request failed: {exc}") from exc
            logger.debug(
                "request_completed",
                method=descriptor.method,
                url=safe_url,
                attempt=attempt + 1,
                status=response.status_code,
            )
            return response

        raise NetworkError("Request failed after retries")

    def request(self, descriptor: CommandDescriptor) -> Any:
        return normalize(self.execute(descriptor))


__all__ = ["HttpTransport", "TRANSPORT_ERRORS"]
