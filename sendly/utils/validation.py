from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Mapping

import structlog

from sendly.errors import validation_error
from sendly.utils.phone import (
    CREDITS_PER_SMS,
    get_country_from_phone,
    get_pricing_tier,
    validate_phone_number,
)


logger = structlog.get_logger(__name__)

LONG_MESSAGE_CHARS = 1600
GSM_SINGLE_LIMIT = 160
GSM_MULTI_LIMIT = 153
UCS2_SINGLE_LIMIT = 70
UCS2_MULTI_LIMIT = 67

MIN_SCHEDULE_LEAD = timedelta(minutes=1)
MAX_BATCH_MESSAGES = 1000
MESSAGE_TYPES = ("marketing", "transactional")

_SENDER_ID_RE = re.compile(r"[A-Za-z0-9]{2,11}")
_UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)
_ALNUM_RE = re.compile(r"[A-Za-z0-9]+")


def is_unicode_text(text: str) -> bool:
    """True when any character falls outside 7-bit ASCII (UCS-2 encoding)."""
    return any(ord(ch) > 0x7F for ch in text)


def calculate_segments(text: str) -> int:
    """Number of SMS segments needed for ``text``."""
    if is_unicode_text(text):
        single, multi = UCS2_SINGLE_LIMIT, UCS2_MULTI_LIMIT
    else:
        single, multi = GSM_SINGLE_LIMIT, GSM_MULTI_LIMIT
    if len(text) <= single:
        return 1
    return math.ceil(len(text) / multi)


def estimate_credits(to: str, text: str) -> int | None:
    """Credits a send would cost, or None when the destination is unsupported."""
    country = get_country_from_phone(to)
    tier = get_pricing_tier(country) if country else None
    if tier is None:
        return None
    return calculate_segments(text) * CREDITS_PER_SMS[tier]


def validate_message_text(text: Any) -> None:
    if not text:
        raise validation_error("Message text is required")
    if not isinstance(text, str):
        raise validation_error("Message text must be a string")
    if len(text) > LONG_MESSAGE_CHARS:
        logger.warning(
            "message_text_long",
            length=len(text),
            segments=calculate_segments(text),
        )


def validate_sender_id(sender: str | None) -> None:
    """Sender is optional; '+...' must be a phone number, otherwise 2-11 alphanumerics."""
    if not sender:
        return
    if sender.startswith("+"):
        validate_phone_number(sender)
        return
    if not _SENDER_ID_RE.fullmatch(sender):
        raise validation_error(
            f"Invalid sender ID: {sender}. Must be 2-11 alphanumeric characters or a valid phone number."
        )


def validate_limit(limit: Any) -> None:
    if limit is None:
        return
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise validation_error("Limit must be an integer")
    if limit < 1 or limit > 100:
        raise validation_error("Limit must be between 1 and 100")


def validate_offset(offset: Any) -> None:
    if offset is None:
        return
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise validation_error("Offset must be a non-negative integer")


def validate_message_id(message_id: Any) -> None:
    """Message ids are UUIDs or msg_<alphanumeric>."""
    if not message_id:
        raise validation_error("Message ID is required")
    if not isinstance(message_id, str):
        raise validation_error("Message ID must be a string")
    if _UUID_RE.fullmatch(message_id):
        return
    if message_id.startswith("msg_") and _ALNUM_RE.fullmatch(message_id[4:]):
        return
    raise validation_error(f"Invalid message ID format: {message_id}")


def validate_resource_id(value: Any, label: str, *, prefix: str | None = None) -> None:
    """Check a path identifier: non-empty, and ``prefix`` + alphanumerics when a prefix is given."""
    if not value or not isinstance(value, str):
        raise validation_error(f"{label} is required")
    if prefix is None:
        return
    if not value.startswith(prefix) or not _ALNUM_RE.fullmatch(value[len(prefix):]):
        raise validation_error(f"Invalid {label} format: {value}")


def validate_message_type(message_type: str | None) -> None:
    if message_type is None:
        return
    if message_type not in MESSAGE_TYPES:
        raise validation_error(
            f"Invalid message type: {message_type}. Expected one of: {', '.join(MESSAGE_TYPES)}"
        )


def validate_batch_messages(messages: Any) -> None:
    if not messages or not isinstance(messages, (list, tuple)):
        raise validation_error("messages must be a non-empty list")
    if len(messages) > MAX_BATCH_MESSAGES:
        raise validation_error(f"Maximum {MAX_BATCH_MESSAGES} messages per batch")
    for item in messages:
        if not isinstance(item, Mapping):
            raise validation_error("Each batch message must be a mapping with 'to' and 'text'")
        validate_phone_number(item.get("to"))
        validate_message_text(item.get("text"))


def validate_webhook_url(url: Any) -> None:
    if not url or not isinstance(url, str) or not url.startswith("https://"):
        raise validation_error("Webhook URL must be HTTPS")


def validate_webhook_events(events: Iterable[str] | None) -> list[str]:
    """Return the event types as a list; iterators are consumed exactly once."""
    event_types = list(events or [])
    if not event_types:
        raise validation_error("At least one event type is required")
    return event_types


def validate_int_range(value: Any, label: str, low: int, high: int) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise validation_error(f"{label} must be an integer between {low} and {high}")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 string or datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_scheduled_at(
    value: Any,
    *,
    now: Callable[[], datetime] | None = None,
) -> datetime:
    """Return the parsed send time; it must be later than now + one minute."""
    scheduled = parse_timestamp(value)
    if scheduled is None:
        raise validation_error("Invalid scheduledAt format. Use ISO 8601 format.")
    current = now() if now is not None else datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    if scheduled <= current + MIN_SCHEDULE_LEAD:
        raise validation_error("scheduledAt must be at least 1 minute in the future.")
    return scheduled
