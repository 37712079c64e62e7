from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional
from urllib.parse import quote

from sendly.adapters.http_client import HttpClient, RequestOptions
from sendly.errors import invalid_response, validation_error
from sendly.models import (
    Webhook,
    WebhookCreated,
    WebhookDelivery,
    WebhookSecretRotation,
    WebhookTestResult,
)
from sendly.utils.validation import (
    validate_resource_id,
    validate_webhook_events,
    validate_webhook_url,
)


WEBHOOK_MODES = ("all", "test", "live")


def _webhook_path(webhook_id: str, suffix: str = "") -> str:
    validate_resource_id(webhook_id, "webhook ID", prefix="whk_")
    return f"/v1/webhooks/{quote(webhook_id, safe='')}{suffix}"


def _as_list(data: Any, expected: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise invalid_response(expected, data)
    return data


def _validate_mode(mode: Optional[str]) -> None:
    if mode is not None and mode not in WEBHOOK_MODES:
        raise validation_error(f"Invalid webhook mode: {mode}. Expected one of: {', '.join(WEBHOOK_MODES)}")


class WebhooksResource:
    """Manage webhook endpoints receiving message status events.

    The signing secret is only returned by ``create`` and ``rotate_secret``.
    """

    def __init__(self, http: HttpClient):
        self._http = http

    async def create(
        self,
        url: str,
        events: Iterable[str],
        *,
        description: Optional[str] = None,
        mode: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> WebhookCreated:
        validate_webhook_url(url)
        event_types = validate_webhook_events(events)
        _validate_mode(mode)

        body: dict[str, Any] = {"url": url, "events": event_types}
        if description:
            body["description"] = description
        if mode:
            body["mode"] = mode
        if metadata:
            body["metadata"] = dict(metadata)

        data = await self._http.request(RequestOptions(method="POST", path="/v1/webhooks", body=body))
        return WebhookCreated.from_api(data)

    async def list(self) -> list[Webhook]:
        data = await self._http.request(RequestOptions(method="GET", path="/v1/webhooks"))
        return [Webhook.from_api(item) for item in _as_list(data, "webhooks")]

    async def get(self, webhook_id: str) -> Webhook:
        data = await self._http.request(RequestOptions(method="GET", path=_webhook_path(webhook_id)))
        return Webhook.from_api(data)

    async def update(
        self,
        webhook_id: str,
        *,
        url: Optional[str] = None,
        events: Optional[Iterable[str]] = None,
        description: Optional[str] = None,
        mode: Optional[str] = None,
        is_active: Optional[bool] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Webhook:
        path = _webhook_path(webhook_id)
        if url is not None:
            validate_webhook_url(url)
        _validate_mode(mode)

        body: dict[str, Any] = {}
        if url is not None:
            body["url"] = url
        if events is not None:
            body["events"] = list(events)
        if description is not None:
            body["description"] = description
        if mode is not None:
            body["mode"] = mode
        if is_active is not None:
            body["is_active"] = is_active
        if metadata is not None:
            body["metadata"] = dict(metadata)

        data = await self._http.request(RequestOptions(method="PATCH", path=path, body=body))
        return Webhook.from_api(data)

    async def delete(self, webhook_id: str) -> None:
        await self._http.request(RequestOptions(method="DELETE", path=_webhook_path(webhook_id)))

    async def test(self, webhook_id: str) -> WebhookTestResult:
        data = await self._http.request(
            RequestOptions(method="POST", path=_webhook_path(webhook_id, "/test"))
        )
        return WebhookTestResult.from_api(data)

    async def rotate_secret(self, webhook_id: str) -> WebhookSecretRotation:
        """Issue a new signing secret; the old one stays valid for 24 hours."""
        data = await self._http.request(
            RequestOptions(method="POST", path=_webhook_path(webhook_id, "/rotate-secret"))
        )
        return WebhookSecretRotation.from_api(data)

    async def get_deliveries(self, webhook_id: str) -> list[WebhookDelivery]:
        data = await self._http.request(
            RequestOptions(method="GET", path=_webhook_path(webhook_id, "/deliveries"))
        )
        return [WebhookDelivery.from_api(item) for item in _as_list(data, "deliveries")]

    async def retry_delivery(self, webhook_id: str, delivery_id: str) -> None:
        path = _webhook_path(webhook_id)
        validate_resource_id(delivery_id, "delivery ID", prefix="del_")
        await self._http.request(
            RequestOptions(
                method="POST",
                path=f"{path}/deliveries/{quote(delivery_id, safe='')}/retry",
            )
        )

    async def list_event_types(self) -> list[str]:
        data = await self._http.request(RequestOptions(method="GET", path="/v1/webhooks/event-types"))
        return [str(item) for item in _as_list(data, "event types")]
