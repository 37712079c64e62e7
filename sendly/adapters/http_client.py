from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional

import httpx
import structlog

from sendly._version import __version__
from sendly.errors import ErrorKind, SendlyError, classify, configuration_error
from sendly.utils.config import DEFAULT_BASE_URL, DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT_S
from sendly.utils.credentials import is_test_key, validate_api_key, validate_base_url
from sendly.utils.rate_limit import RateLimitInfo, parse_rate_limit_headers
from sendly.utils.retry import Sleep, backoff_delay, retry_async


logger = structlog.get_logger(__name__)

USER_AGENT = f"sendly-python/{__version__}"

# Statuses that are never retried whatever the error code says
_NON_RETRYABLE_STATUSES = frozenset({400, 401, 402, 403, 404})
_NON_RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.AUTHENTICATION,
        ErrorKind.VALIDATION,
        ErrorKind.NOT_FOUND,
        ErrorKind.INSUFFICIENT_CREDITS,
        ErrorKind.CONFIGURATION,
    }
)

Method = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
QueryValue = Optional[str | int | float | bool]


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    # Seconds allowed per attempt
    timeout: float = DEFAULT_TIMEOUT_S
    max_retries: int = DEFAULT_MAX_RETRIES


@dataclass(frozen=True)
class RequestOptions:
    method: Method
    path: str
    body: Optional[Mapping[str, Any]] = None
    query: Optional[Mapping[str, QueryValue]] = None
    headers: Optional[Mapping[str, str]] = None


def is_retryable(exc: Exception) -> bool:
    if not isinstance(exc, SendlyError):
        return False
    if exc.kind in _NON_RETRYABLE_KINDS:
        return False
    return exc.status_code not in _NON_RETRYABLE_STATUSES


class HttpClient:
    """Executes API requests: auth headers, timeouts, retries, rate-limit tracking.

    One instance is shared by every resource of a client. The only state it
    mutates is the rate-limit snapshot, replaced whole on each response that
    carries the X-RateLimit-* headers.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Sleep] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        validate_api_key(config.api_key)
        validate_base_url(config.base_url)
        if isinstance(config.timeout, bool) or not isinstance(config.timeout, (int, float)) or config.timeout <= 0:
            raise configuration_error("timeout must be a positive number of seconds")
        if isinstance(config.max_retries, bool) or not isinstance(config.max_retries, int) or config.max_retries < 0:
            raise configuration_error("max_retries must be a non-negative integer")

        self.config = config
        self._sleep: Sleep = sleep or asyncio.sleep
        self._rng = rng
        self._rate_limit: Optional[RateLimitInfo] = None
        self._client = httpx.AsyncClient(timeout=config.timeout, transport=transport)

    def is_test_mode(self) -> bool:
        return is_test_key(self.config.api_key)

    def get_rate_limit_info(self) -> Optional[RateLimitInfo]:
        return self._rate_limit

    def build_url(self, path: str, query: Optional[Mapping[str, QueryValue]] = None) -> httpx.URL:
        base = self.config.base_url.rstrip("/")
        url = httpx.URL(f"{base}/{path.lstrip('/')}")
        if query:
            params = {key: value for key, value in query.items() if value is not None}
            if params:
                url = url.copy_merge_params(params)
        return url

    def build_headers(self, extra: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        if extra:
            headers.update(extra)
        return headers

    async def request(self, options: RequestOptions) -> Any:
        """Run ``options`` to completion and return the parsed body.

        Raises:
            SendlyError: classified API error, timeout or network failure,
                after retries where the policy allows them.
        """
        url = self.build_url(options.path, options.query)
        headers = self.build_headers(options.headers)

        def on_retry(attempt: int, delay_s: float, exc: Exception) -> None:
            logger.warning(
                "sendly_request_retry",
                method=options.method,
                path=options.path,
                attempt=attempt,
                delay_s=round(delay_s, 3),
                error_kind=getattr(getattr(exc, "kind", None), "value", None),
                status_code=getattr(exc, "status_code", None),
                error_code=getattr(exc, "code", None),
            )

        try:
            return await retry_async(
                self._attempt,
                options.method,
                url,
                headers,
                options.body,
                attempts=1 + self.config.max_retries,
                is_retryable=is_retryable,
                delay_for=self._retry_delay,
                on_retry=on_retry,
                sleep=self._sleep,
            )
        except SendlyError as exc:
            logger.error(
                "sendly_request_failed",
                method=options.method,
                path=options.path,
                error_kind=exc.kind.value,
                status_code=exc.status_code,
                error_code=exc.code,
                error=exc.message,
            )
            raise

    def _retry_delay(self, attempt: int, exc: Exception) -> float:
        if isinstance(exc, SendlyError) and exc.kind is ErrorKind.RATE_LIMIT and exc.retry_after is not None:
            return float(exc.retry_after)
        return backoff_delay(attempt, rng=self._rng)

    async def _attempt(
        self,
        method: str,
        url: httpx.URL,
        headers: Mapping[str, str],
        body: Optional[Mapping[str, Any]],
    ) -> Any:
        response = await self._send(method, url, headers, body)

        snapshot = parse_rate_limit_headers(response.headers)
        if snapshot is not None:
            self._rate_limit = snapshot

        data = self._parse_body(response)
        if response.is_success:
            return data
        raise classify(response.status_code, data)

    async def _send(
        self,
        method: str,
        url: httpx.URL,
        headers: Mapping[str, str],
        body: Optional[Mapping[str, Any]],
    ) -> httpx.Response:
        timeout = self.config.timeout
        try:
            return await asyncio.wait_for(
                self._client.request(
                    method,
                    url,
                    headers=headers,
                    json=dict(body) if body is not None else None,
                ),
                timeout=timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as ex:
            raise SendlyError(
                f"Request timed out after {timeout}s", kind=ErrorKind.TIMEOUT
            ) from ex
        except httpx.HTTPError as ex:
            raise SendlyError(
                f"Network request failed: {ex}", kind=ErrorKind.NETWORK
            ) from ex

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text

    async def aclose(self) -> None:
        await self._client.aclose()
