"""Typed API responses.

Each model decodes its wire payload field by field in ``from_api``. Message
endpoints answer in camelCase; webhook, verify, template and account
endpoints answer in snake_case. A body that is not a JSON object, or lacks
a required field, raises ``SendlyError`` with code ``invalid_response``.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, TypeVar

from sendly.errors import invalid_response


T = TypeVar("T")


def _decodes(func: Callable[[Any, Mapping[str, Any]], T]) -> Callable[[Any, Any], T]:
    @functools.wraps(func)
    def wrapper(cls: Any, data: Any) -> T:
        if not isinstance(data, Mapping):
            raise invalid_response(cls.__name__, data)
        try:
            return func(cls, data)
        except (KeyError, TypeError, ValueError, AttributeError) as ex:
            raise invalid_response(cls.__name__, data) from ex

    return wrapper


def _items(data: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    value = data.get(key) or []
    return [item for item in value if isinstance(item, Mapping)]


# Messages


@dataclass(frozen=True)
class Message:
    id: str
    status: str
    to: Optional[str] = None
    from_: Optional[str] = None
    text: Optional[str] = None
    direction: str = "outbound"
    error: Optional[str] = None
    segments: int = 1
    credits_used: int = 0
    is_sandbox: bool = False
    sender_type: Optional[str] = None
    telnyx_message_id: Optional[str] = None
    warning: Optional[str] = None
    sender_note: Optional[str] = None
    created_at: Optional[str] = None
    delivered_at: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "Message":
        return cls(
            id=data["id"],
            status=data.get("status", "queued"),
            to=data.get("to"),
            from_=data.get("from"),
            text=data.get("text"),
            direction=data.get("direction") or "outbound",
            error=data.get("error"),
            segments=data.get("segments", 1),
            credits_used=data.get("creditsUsed", 0),
            is_sandbox=bool(data.get("isSandbox", False)),
            sender_type=data.get("senderType"),
            telnyx_message_id=data.get("telnyxMessageId"),
            warning=data.get("warning"),
            sender_note=data.get("senderNote"),
            created_at=data.get("createdAt"),
            delivered_at=data.get("deliveredAt"),
        )


@dataclass(frozen=True)
class MessageList:
    data: list[Message]
    count: int

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "MessageList":
        items = [Message.from_api(item) for item in _items(data, "data")]
        return cls(data=items, count=data.get("count", len(items)))


@dataclass(frozen=True)
class ScheduledMessage:
    id: str
    status: str
    to: Optional[str] = None
    from_: Optional[str] = None
    text: Optional[str] = None
    scheduled_at: Optional[str] = None
    credits_reserved: int = 0
    error: Optional[str] = None
    created_at: Optional[str] = None
    cancelled_at: Optional[str] = None
    sent_at: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "ScheduledMessage":
        return cls(
            id=data["id"],
            status=data.get("status", "scheduled"),
            to=data.get("to"),
            from_=data.get("from"),
            text=data.get("text"),
            scheduled_at=data.get("scheduledAt"),
            credits_reserved=data.get("creditsReserved", 0),
            error=data.get("error"),
            created_at=data.get("createdAt"),
            cancelled_at=data.get("cancelledAt"),
            sent_at=data.get("sentAt"),
        )


@dataclass(frozen=True)
class ScheduledMessageList:
    data: list[ScheduledMessage]
    count: int

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "ScheduledMessageList":
        items = [ScheduledMessage.from_api(item) for item in _items(data, "data")]
        return cls(data=items, count=data.get("count", len(items)))


@dataclass(frozen=True)
class CancelledMessage:
    id: str
    status: str
    credits_refunded: int = 0
    cancelled_at: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "CancelledMessage":
        return cls(
            id=data["id"],
            status=data.get("status", "cancelled"),
            credits_refunded=data.get("creditsRefunded", 0),
            cancelled_at=data.get("cancelledAt"),
        )


@dataclass(frozen=True)
class BatchMessageResult:
    to: str
    status: str
    id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "BatchMessageResult":
        return cls(
            to=data.get("to", ""),
            status=data.get("status", "queued"),
            id=data.get("id"),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class Batch:
    batch_id: str
    status: str
    total: int = 0
    queued: int = 0
    sent: int = 0
    failed: int = 0
    credits_used: int = 0
    messages: list[BatchMessageResult] = field(default_factory=list)
    created_at: Optional[str] = None
    completed_at: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "Batch":
        return cls(
            batch_id=data["batchId"],
            status=data.get("status", "processing"),
            total=data.get("total", 0),
            queued=data.get("queued", 0),
            sent=data.get("sent", 0),
            failed=data.get("failed", 0),
            credits_used=data.get("creditsUsed", 0),
            messages=[BatchMessageResult.from_api(item) for item in _items(data, "messages")],
            created_at=data.get("createdAt"),
            completed_at=data.get("completedAt"),
        )


@dataclass(frozen=True)
class BatchList:
    data: list[Batch]
    count: int

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "BatchList":
        items = [Batch.from_api(item) for item in _items(data, "data")]
        return cls(data=items, count=data.get("count", len(items)))


# Webhooks


@dataclass(frozen=True)
class Webhook:
    id: str
    url: str
    events: list[str] = field(default_factory=list)
    description: Optional[str] = None
    mode: str = "all"
    is_active: bool = True
    failure_count: int = 0
    last_failure_at: Optional[str] = None
    circuit_state: str = "closed"
    circuit_opened_at: Optional[str] = None
    api_version: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    total_deliveries: int = 0
    successful_deliveries: int = 0
    success_rate: float = 0
    last_delivery_at: Optional[str] = None

    @classmethod
    def _fields(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return dict(
            id=data["id"],
            url=data.get("url", ""),
            events=list(data.get("events") or []),
            description=data.get("description"),
            mode=data.get("mode") or "all",
            is_active=bool(data.get("is_active", True)),
            failure_count=data.get("failure_count", 0),
            last_failure_at=data.get("last_failure_at"),
            circuit_state=data.get("circuit_state") or "closed",
            circuit_opened_at=data.get("circuit_opened_at"),
            api_version=data.get("api_version"),
            metadata=dict(data.get("metadata") or {}),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            total_deliveries=data.get("total_deliveries", 0),
            successful_deliveries=data.get("successful_deliveries", 0),
            success_rate=data.get("success_rate", 0),
            last_delivery_at=data.get("last_delivery_at"),
        )

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "Webhook":
        return cls(**cls._fields(data))


@dataclass(frozen=True)
class WebhookCreated(Webhook):
    # Signing secret, returned only once at creation
    secret: str = ""

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "WebhookCreated":
        return cls(**cls._fields(data), secret=data.get("secret", ""))


@dataclass(frozen=True)
class WebhookDelivery:
    id: str
    webhook_id: Optional[str] = None
    event_id: Optional[str] = None
    event_type: Optional[str] = None
    attempt_number: int = 1
    max_attempts: int = 0
    status: str = "pending"
    response_status_code: Optional[int] = None
    response_time_ms: Optional[int] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    next_retry_at: Optional[str] = None
    created_at: Optional[str] = None
    delivered_at: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "WebhookDelivery":
        return cls(
            id=data["id"],
            webhook_id=data.get("webhook_id"),
            event_id=data.get("event_id"),
            event_type=data.get("event_type"),
            attempt_number=data.get("attempt_number", 1),
            max_attempts=data.get("max_attempts", 0),
            status=data.get("status", "pending"),
            response_status_code=data.get("response_status_code"),
            response_time_ms=data.get("response_time_ms"),
            error_message=data.get("error_message"),
            error_code=data.get("error_code"),
            next_retry_at=data.get("next_retry_at"),
            created_at=data.get("created_at"),
            delivered_at=data.get("delivered_at"),
        )


@dataclass(frozen=True)
class WebhookTestResult:
    success: bool
    status_code: Optional[int] = None
    response_time_ms: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "WebhookTestResult":
        return cls(
            success=bool(data.get("success", False)),
            status_code=data.get("status_code"),
            response_time_ms=data.get("response_time_ms"),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class WebhookSecretRotation:
    webhook: Webhook
    new_secret: str
    old_secret_expires_at: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "WebhookSecretRotation":
        return cls(
            webhook=Webhook.from_api(data["webhook"]),
            new_secret=data.get("new_secret", ""),
            old_secret_expires_at=data.get("old_secret_expires_at"),
            message=data.get("message"),
        )


# Verify


@dataclass(frozen=True)
class VerificationSent:
    id: str
    status: str
    phone: str
    expires_at: Optional[str] = None
    sandbox: bool = False
    # OTP code echoed back in sandbox mode only
    sandbox_code: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "VerificationSent":
        return cls(
            id=data["id"],
            status=data.get("status", "pending"),
            phone=data.get("phone", ""),
            expires_at=data.get("expires_at"),
            sandbox=bool(data.get("sandbox", False)),
            sandbox_code=data.get("sandbox_code"),
            message=data.get("message"),
        )


@dataclass(frozen=True)
class VerificationCheck:
    id: str
    status: str
    phone: str
    verified_at: Optional[str] = None
    remaining_attempts: Optional[int] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "VerificationCheck":
        return cls(
            id=data["id"],
            status=data.get("status", "pending"),
            phone=data.get("phone", ""),
            verified_at=data.get("verified_at"),
            remaining_attempts=data.get("remaining_attempts"),
        )


@dataclass(frozen=True)
class Verification:
    id: str
    status: str
    phone: str
    delivery_status: Optional[str] = None
    attempts: int = 0
    max_attempts: int = 0
    expires_at: Optional[str] = None
    verified_at: Optional[str] = None
    created_at: Optional[str] = None
    sandbox: bool = False
    app_name: Optional[str] = None
    template_id: Optional[str] = None
    profile_id: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "Verification":
        return cls(
            id=data["id"],
            status=data.get("status", "pending"),
            phone=data.get("phone", ""),
            delivery_status=data.get("delivery_status"),
            attempts=data.get("attempts", 0),
            max_attempts=data.get("max_attempts", 0),
            expires_at=data.get("expires_at"),
            verified_at=data.get("verified_at"),
            created_at=data.get("created_at"),
            sandbox=bool(data.get("sandbox", False)),
            app_name=data.get("app_name"),
            template_id=data.get("template_id"),
            profile_id=data.get("profile_id"),
        )


@dataclass(frozen=True)
class VerificationList:
    verifications: list[Verification]
    limit: int
    has_more: bool

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "VerificationList":
        items = [Verification.from_api(item) for item in _items(data, "verifications")]
        pagination = data.get("pagination") or {}
        return cls(
            verifications=items,
            limit=pagination.get("limit", len(items)),
            has_more=bool(pagination.get("has_more", False)),
        )


# Templates


@dataclass(frozen=True)
class TemplateVariable:
    key: str
    type: str = "string"
    fallback: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "TemplateVariable":
        return cls(key=data["key"], type=data.get("type", "string"), fallback=data.get("fallback"))


@dataclass(frozen=True)
class Template:
    id: str
    name: str
    text: str
    variables: list[TemplateVariable] = field(default_factory=list)
    is_preset: bool = False
    preset_slug: Optional[str] = None
    status: str = "draft"
    version: int = 1
    published_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "Template":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            text=data.get("text", ""),
            variables=[TemplateVariable.from_api(v) for v in _items(data, "variables")],
            is_preset=bool(data.get("is_preset", False)),
            preset_slug=data.get("preset_slug"),
            status=data.get("status", "draft"),
            version=data.get("version", 1),
            published_at=data.get("published_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass(frozen=True)
class TemplatePreview:
    id: str
    name: str
    original_text: str
    preview_text: str
    variables: list[TemplateVariable] = field(default_factory=list)

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "TemplatePreview":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            original_text=data.get("original_text", ""),
            preview_text=data.get("preview_text", ""),
            variables=[TemplateVariable.from_api(v) for v in _items(data, "variables")],
        )


# Account


@dataclass(frozen=True)
class Account:
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "Account":
        return cls(
            id=data["id"],
            email=data.get("email"),
            name=data.get("name"),
            created_at=data.get("created_at"),
        )


@dataclass(frozen=True)
class Credits:
    balance: int
    reserved_balance: int = 0
    available_balance: int = 0

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "Credits":
        balance = data.get("balance", 0)
        reserved = data.get("reserved_balance", 0)
        return cls(
            balance=balance,
            reserved_balance=reserved,
            available_balance=data.get("available_balance", balance - reserved),
        )


@dataclass(frozen=True)
class CreditTransaction:
    id: str
    type: str
    amount: int
    balance_after: Optional[int] = None
    description: Optional[str] = None
    message_id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "CreditTransaction":
        return cls(
            id=data["id"],
            type=data.get("type", "usage"),
            amount=data.get("amount", 0),
            balance_after=data.get("balance_after"),
            description=data.get("description"),
            message_id=data.get("message_id"),
            created_at=data.get("created_at"),
        )


@dataclass(frozen=True)
class ApiKey:
    id: str
    name: str
    type: str
    prefix: Optional[str] = None
    last_four: Optional[str] = None
    permissions: list[str] = field(default_factory=list)
    created_at: Optional[str] = None
    last_used_at: Optional[str] = None
    expires_at: Optional[str] = None
    is_revoked: bool = False

    @classmethod
    @_decodes
    def from_api(cls, data: Mapping[str, Any]) -> "ApiKey":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=data.get("type", "test"),
            prefix=data.get("prefix"),
            last_four=data.get("last_four"),
            permissions=list(data.get("permissions") or []),
            created_at=data.get("created_at"),
            last_used_at=data.get("last_used_at"),
            expires_at=data.get("expires_at"),
            is_revoked=bool(data.get("is_revoked", False)),
        )
