from __future__ import annotations

from datetime import datetime
from typing import Any, AsyncIterator, Callable, Mapping, Optional, Sequence
from urllib.parse import quote

from sendly.adapters.http_client import HttpClient, RequestOptions
from sendly.models import (
    Batch,
    BatchList,
    CancelledMessage,
    Message,
    MessageList,
    ScheduledMessage,
    ScheduledMessageList,
)
from sendly.utils.validation import (
    validate_batch_messages,
    validate_limit,
    validate_message_id,
    validate_message_text,
    validate_message_type,
    validate_offset,
    validate_resource_id,
    validate_scheduled_at,
    validate_sender_id,
)
from sendly.utils.phone import validate_phone_number


MAX_PAGE_SIZE = 100


class MessagesResource:
    """Send, list and fetch SMS messages, including scheduled and batch sends."""

    def __init__(self, http: HttpClient, *, now: Optional[Callable[[], datetime]] = None):
        self._http = http
        self._now = now

    async def send(
        self,
        to: str,
        text: str,
        *,
        from_: Optional[str] = None,
        message_type: Optional[str] = None,
    ) -> Message:
        validate_phone_number(to)
        validate_message_text(text)
        validate_sender_id(from_)
        validate_message_type(message_type)

        body: dict[str, Any] = {"to": to, "text": text}
        if from_:
            body["from"] = from_
        if message_type:
            body["messageType"] = message_type

        data = await self._http.request(RequestOptions(method="POST", path="/v1/messages", body=body))
        return Message.from_api(data)

    async def list(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        status: Optional[str] = None,
    ) -> MessageList:
        validate_limit(limit)
        validate_offset(offset)
        data = await self._http.request(
            RequestOptions(
                method="GET",
                path="/v1/messages",
                query={"limit": limit, "offset": offset, "status": status},
            )
        )
        return MessageList.from_api(data)

    async def get(self, message_id: str) -> Message:
        validate_message_id(message_id)
        data = await self._http.request(
            RequestOptions(method="GET", path=f"/v1/messages/{quote(message_id, safe='')}")
        )
        return Message.from_api(data)

    async def list_all(
        self,
        *,
        limit: Optional[int] = None,
        status: Optional[str] = None,
    ) -> AsyncIterator[Message]:
        """Yield every message, fetching one page per ``limit`` items (max 100).

        Stops after the first page shorter than the page size.
        """
        validate_limit(limit)
        page_size = min(limit or MAX_PAGE_SIZE, MAX_PAGE_SIZE)
        offset = 0
        while True:
            data = await self._http.request(
                RequestOptions(
                    method="GET",
                    path="/v1/messages",
                    query={"limit": page_size, "offset": offset, "status": status},
                )
            )
            page = MessageList.from_api(data)
            for message in page.data:
                yield message
            if len(page.data) < page_size:
                return
            offset += page_size

    # Scheduled messages

    async def schedule(
        self,
        to: str,
        text: str,
        scheduled_at: str | datetime,
        *,
        from_: Optional[str] = None,
        message_type: Optional[str] = None,
    ) -> ScheduledMessage:
        validate_phone_number(to)
        validate_message_text(text)
        validate_sender_id(from_)
        validate_message_type(message_type)
        when = validate_scheduled_at(scheduled_at, now=self._now)

        body: dict[str, Any] = {
            "to": to,
            "text": text,
            "scheduledAt": scheduled_at if isinstance(scheduled_at, str) else when.isoformat(),
        }
        if from_:
            body["from"] = from_
        if message_type:
            body["messageType"] = message_type

        data = await self._http.request(
            RequestOptions(method="POST", path="/v1/messages/schedule", body=body)
        )
        return ScheduledMessage.from_api(data)

    async def list_scheduled(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        status: Optional[str] = None,
    ) -> ScheduledMessageList:
        validate_limit(limit)
        validate_offset(offset)
        data = await self._http.request(
            RequestOptions(
                method="GET",
                path="/v1/messages/scheduled",
                query={"limit": limit, "offset": offset, "status": status},
            )
        )
        return ScheduledMessageList.from_api(data)

    async def get_scheduled(self, message_id: str) -> ScheduledMessage:
        validate_message_id(message_id)
        data = await self._http.request(
            RequestOptions(method="GET", path=f"/v1/messages/scheduled/{quote(message_id, safe='')}")
        )
        return ScheduledMessage.from_api(data)

    async def cancel_scheduled(self, message_id: str) -> CancelledMessage:
        validate_message_id(message_id)
        data = await self._http.request(
            RequestOptions(method="DELETE", path=f"/v1/messages/scheduled/{quote(message_id, safe='')}")
        )
        return CancelledMessage.from_api(data)

    # Batches

    async def send_batch(
        self,
        messages: Sequence[Mapping[str, str]],
        *,
        from_: Optional[str] = None,
        message_type: Optional[str] = None,
    ) -> Batch:
        """Send up to 1000 messages given as {'to': ..., 'text': ...} mappings."""
        validate_batch_messages(messages)
        validate_sender_id(from_)
        validate_message_type(message_type)

        body: dict[str, Any] = {
            "messages": [{"to": item["to"], "text": item["text"]} for item in messages],
        }
        if from_:
            body["from"] = from_
        if message_type:
            body["messageType"] = message_type

        data = await self._http.request(
            RequestOptions(method="POST", path="/v1/messages/batch", body=body)
        )
        return Batch.from_api(data)

    async def get_batch(self, batch_id: str) -> Batch:
        validate_resource_id(batch_id, "batch ID", prefix="batch_")
        data = await self._http.request(
            RequestOptions(method="GET", path=f"/v1/messages/batch/{quote(batch_id, safe='')}")
        )
        return Batch.from_api(data)

    async def list_batches(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        status: Optional[str] = None,
    ) -> BatchList:
        validate_limit(limit)
        validate_offset(offset)
        data = await self._http.request(
            RequestOptions(
                method="GET",
                path="/v1/messages/batches",
                query={"limit": limit, "offset": offset, "status": status},
            )
        )
        return BatchList.from_api(data)
