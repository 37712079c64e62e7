"""Verify and parse webhook events delivered by Sendly.

Requests carry an ``X-Sendly-Signature`` header of the form ``sha256=<hex>``:
the HMAC-SHA256 of the raw body keyed by the endpoint secret. When the
``X-Sendly-Timestamp`` header is present the signed string is
``"<timestamp>.<body>"`` and the timestamp must be within ``tolerance``
seconds of now.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Literal, Mapping, Optional, Union

import structlog

from sendly.utils.validation import parse_timestamp


logger = structlog.get_logger(__name__)

SIGNATURE_HEADER = "X-Sendly-Signature"
TIMESTAMP_HEADER = "X-Sendly-Timestamp"
SIGNATURE_PREFIX = "sha256="
DEFAULT_TOLERANCE_S = 300

EVENT_TYPES = (
    "message.queued",
    "message.sent",
    "message.delivered",
    "message.failed",
    "message.undelivered",
)

SignatureErrorReason = Literal["invalid_signature", "malformed_payload", "missing_fields"]
Payload = Union[str, bytes]
Timestamp = Union[str, int, None]


class WebhookSignatureError(Exception):
    """Raised when a webhook cannot be trusted or decoded."""

    def __init__(
        self,
        message: str = "Invalid webhook signature",
        *,
        reason: SignatureErrorReason = "invalid_signature",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason


@dataclass(frozen=True)
class WebhookMessageData:
    message_id: str
    status: str
    to: Optional[str] = None
    from_: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    delivered_at: Optional[str] = None
    failed_at: Optional[str] = None
    segments: int = 1
    credits_used: int = 0


@dataclass(frozen=True)
class WebhookEvent:
    id: str
    type: str
    data: WebhookMessageData
    created_at: datetime
    api_version: Optional[str] = None
    # "legacy" for flat data.message_id payloads, "nested" for data.object
    shape: Literal["legacy", "nested"] = "legacy"
    livemode: Optional[bool] = None


def _as_bytes(payload: Payload) -> bytes:
    # The HMAC covers the raw body; only str input is encoded
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)


def _signed_content(payload: bytes, timestamp: Timestamp) -> bytes:
    if timestamp is None:
        return payload
    return f"{timestamp}.".encode("utf-8") + payload


def generate_signature(payload: Payload, secret: str, timestamp: Timestamp = None) -> str:
    """Sign ``payload`` the way Sendly does; useful for testing handlers."""
    content = _signed_content(_as_bytes(payload), timestamp)
    digest = hmac.new(secret.encode("utf-8"), content, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def _timestamp_in_window(timestamp: Timestamp, tolerance: int, now: Callable[[], float]) -> bool:
    try:
        ts = int(timestamp)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False
    return abs(now() - ts) <= tolerance


def verify_signature(
    payload: Payload,
    signature: Optional[str],
    secret: Optional[str],
    *,
    timestamp: Timestamp = None,
    tolerance: int = DEFAULT_TOLERANCE_S,
    now: Optional[Callable[[], float]] = None,
) -> bool:
    if not payload or not signature or not secret:
        return False
    if not isinstance(signature, str) or not isinstance(secret, str):
        return False
    if timestamp is not None and not _timestamp_in_window(timestamp, tolerance, now or time.time):
        return False

    expected = generate_signature(payload, secret, timestamp)
    # Hash both sides so compare_digest always sees equal lengths
    return hmac.compare_digest(
        hashlib.sha256(signature.encode("utf-8")).digest(),
        hashlib.sha256(expected.encode("utf-8")).digest(),
    )


def _message_data(data: Mapping[str, Any], shape: str) -> WebhookMessageData:
    if shape == "nested":
        source = data["object"]
        message_id = source.get("id") or source.get("message_id")
    else:
        source = data
        message_id = source.get("message_id")
    if not isinstance(message_id, str) or not message_id:
        raise WebhookSignatureError(
            "Webhook payload is missing the message id", reason="missing_fields"
        )
    return WebhookMessageData(
        message_id=message_id,
        status=source.get("status", ""),
        to=source.get("to"),
        from_=source.get("from"),
        error=source.get("error"),
        error_code=source.get("error_code"),
        delivered_at=source.get("delivered_at"),
        failed_at=source.get("failed_at"),
        segments=source.get("segments", 1),
        credits_used=source.get("credits_used", 0),
    )


def _created_at(event: Mapping[str, Any]) -> Optional[datetime]:
    if "created_at" in event:
        return parse_timestamp(event["created_at"])
    created = event.get("created")
    if isinstance(created, (int, float)) and not isinstance(created, bool):
        return datetime.fromtimestamp(created, tz=timezone.utc)
    return None


def decode_event(payload: Payload) -> WebhookEvent:
    """Decode an already-verified payload into a WebhookEvent."""
    try:
        raw = json.loads(_as_bytes(payload))
    except (ValueError, UnicodeDecodeError) as ex:
        raise WebhookSignatureError(
            f"Failed to parse webhook payload: {ex}", reason="malformed_payload"
        ) from ex
    if not isinstance(raw, Mapping):
        raise WebhookSignatureError(
            "Webhook payload must be a JSON object", reason="malformed_payload"
        )

    data = raw.get("data")
    created_at = _created_at(raw)
    if not raw.get("id") or not raw.get("type") or not isinstance(data, Mapping) or created_at is None:
        raise WebhookSignatureError("Invalid event structure", reason="missing_fields")

    shape = "nested" if isinstance(data.get("object"), Mapping) else "legacy"
    return WebhookEvent(
        id=raw["id"],
        type=raw["type"],
        data=_message_data(data, shape),
        created_at=created_at,
        api_version=raw.get("api_version"),
        shape=shape,
        livemode=raw.get("livemode"),
    )


def parse_event(
    payload: Payload,
    signature: Optional[str],
    secret: Optional[str],
    *,
    timestamp: Timestamp = None,
    tolerance: int = DEFAULT_TOLERANCE_S,
    now: Optional[Callable[[], float]] = None,
) -> WebhookEvent:
    """Verify the signature, then decode the event.

    Raises:
        WebhookSignatureError: ``reason`` tells a bad signature apart from a
            payload that is not JSON or lacks id, type, data or creation time.
    """
    if not verify_signature(
        payload, signature, secret, timestamp=timestamp, tolerance=tolerance, now=now
    ):
        logger.warning("sendly_webhook_auth_failed", has_timestamp=timestamp is not None)
        raise WebhookSignatureError()

    event = decode_event(payload)
    logger.info("sendly_webhook_received", event_id=event.id, event_type=event.type, shape=event.shape)
    return event


class Webhooks:
    """Holds an endpoint secret for repeated verification."""

    def __init__(self, secret: str, *, tolerance: int = DEFAULT_TOLERANCE_S):
        if not secret:
            raise ValueError("Webhook secret is required")
        self._secret = secret
        self.tolerance = tolerance

    def verify(self, payload: Payload, signature: Optional[str], timestamp: Timestamp = None) -> bool:
        return verify_signature(payload, signature, self._secret, timestamp=timestamp, tolerance=self.tolerance)

    def parse(self, payload: Payload, signature: Optional[str], timestamp: Timestamp = None) -> WebhookEvent:
        return parse_event(payload, signature, self._secret, timestamp=timestamp, tolerance=self.tolerance)

    def sign(self, payload: Payload, timestamp: Timestamp = None) -> str:
        return generate_signature(payload, self._secret, timestamp)
