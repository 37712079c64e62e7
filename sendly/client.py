from __future__ import annotations

import random
from datetime import datetime
from typing import Any, Callable, Optional

import httpx

from sendly.adapters.http_client import ClientConfig, HttpClient
from sendly.resources.account import AccountResource
from sendly.resources.messages import MessagesResource
from sendly.resources.templates import TemplatesResource
from sendly.resources.verify import VerifyResource
from sendly.resources.webhooks import WebhooksResource
from sendly.utils.config import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_S,
    Settings,
    get_settings,
)
from sendly.utils.rate_limit import RateLimitInfo
from sendly.utils.retry import Sleep


class Sendly:
    """Async client for the Sendly SMS API.

    Usage:
        async with Sendly("sk_live_v1_...") as sendly:
            message = await sendly.messages.send("+15551234567", "Hello!")

    Every resource shares a single HttpClient, so the rate-limit snapshot
    reflects the most recent response from any of them.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_S,
        max_retries: int = DEFAULT_MAX_RETRIES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Sleep] = None,
        rng: Optional[random.Random] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        config = ClientConfig(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )
        self._http = HttpClient(config, transport=transport, sleep=sleep, rng=rng)

        self.messages = MessagesResource(self._http, now=now)
        self.webhooks = WebhooksResource(self._http)
        self.verify = VerifyResource(self._http)
        self.templates = TemplatesResource(self._http)
        self.account = AccountResource(self._http)

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "Sendly":
        return cls(
            config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            **kwargs,
        )

    @classmethod
    def from_env(cls, settings: Optional[Settings] = None, **kwargs: Any) -> "Sendly":
        """Build a client from SENDLY_* environment variables (or a .env file)."""
        settings = settings or get_settings()
        return cls(
            settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            **kwargs,
        )

    @property
    def config(self) -> ClientConfig:
        return self._http.config

    def is_test_mode(self) -> bool:
        return self._http.is_test_mode()

    def get_rate_limit_info(self) -> Optional[RateLimitInfo]:
        return self._http.get_rate_limit_info()

    def get_base_url(self) -> str:
        return self._http.config.base_url

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "Sendly":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
