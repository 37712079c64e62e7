from __future__ import annotations

from enum import Enum
from typing import Any, Mapping


DEFAULT_ERROR_MESSAGE = "An unknown error occurred"
DEFAULT_ERROR_CODE = "internal_error"
DEFAULT_RETRY_AFTER_S = 60

_AUTHENTICATION_CODES = frozenset(
    {
        "unauthorized",
        "invalid_auth_format",
        "invalid_key_format",
        "invalid_api_key",
        "api_key_required",
        "key_revoked",
        "key_expired",
        "insufficient_permissions",
    }
)
_VALIDATION_CODES = frozenset({"invalid_request", "unsupported_destination"})


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    INSUFFICIENT_CREDITS = "insufficient_credits"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    TIMEOUT = "timeout"
    GENERIC = "generic"


class SendlyError(Exception):
    """Raised for every failure surfaced by the client.

    Callers branch on ``kind`` rather than on the message text.

    Attributes:
        kind: ErrorKind discriminator
        code: machine-readable API code ('internal_error' when the API gave none)
        status_code: HTTP status when the error came from a response
        response: raw error body, when one was parsed
        retry_after: seconds to wait (rate_limit only)
        credits_needed: credits the request required (insufficient_credits only)
        current_balance: balance at the time of the request (insufficient_credits only)
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.GENERIC,
        code: str = DEFAULT_ERROR_CODE,
        status_code: int | None = None,
        response: Mapping[str, Any] | None = None,
        retry_after: float | None = None,
        credits_needed: int | None = None,
        current_balance: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.code = code
        self.status_code = status_code
        self.response = response
        self.retry_after = retry_after
        self.credits_needed = credits_needed
        self.current_balance = current_balance

    def __repr__(self) -> str:
        return (
            f"SendlyError(kind={self.kind.value!r}, code={self.code!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


def configuration_error(message: str) -> SendlyError:
    return SendlyError(message, kind=ErrorKind.CONFIGURATION, code="configuration_error")


def validation_error(message: str) -> SendlyError:
    return SendlyError(message, kind=ErrorKind.VALIDATION, code="invalid_request")


def invalid_response(expected: str, body: Any) -> SendlyError:
    """A success response whose body cannot be decoded as ``expected``."""
    return SendlyError(
        f"Unexpected response from the API: cannot decode {expected}",
        kind=ErrorKind.GENERIC,
        code="invalid_response",
        response=body if isinstance(body, Mapping) else None,
    )


def classify(status_code: int | None, body: Any) -> SendlyError:
    """Map a failed response onto a SendlyError.

    Total over its inputs: any status and any body (dict, text, None) yields
    exactly one error, unknown codes becoming ``ErrorKind.GENERIC``.
    """
    payload: Mapping[str, Any] | None = body if isinstance(body, Mapping) else None
    data: Mapping[str, Any] = payload or {}

    code = data.get("error") or DEFAULT_ERROR_CODE
    if not isinstance(code, str):
        code = str(code)
    message = data.get("message") or DEFAULT_ERROR_MESSAGE
    if not isinstance(message, str):
        message = str(message)

    common: dict[str, Any] = {"code": code, "status_code": status_code, "response": payload}

    if code in _AUTHENTICATION_CODES:
        return SendlyError(message, kind=ErrorKind.AUTHENTICATION, **common)
    if code == "rate_limit_exceeded":
        retry_after = _number(data.get("retryAfter")) or DEFAULT_RETRY_AFTER_S
        return SendlyError(message, kind=ErrorKind.RATE_LIMIT, retry_after=retry_after, **common)
    if code == "insufficient_credits":
        return SendlyError(
            message,
            kind=ErrorKind.INSUFFICIENT_CREDITS,
            credits_needed=_number(data.get("creditsNeeded")) or 0,
            current_balance=_number(data.get("currentBalance")) or 0,
            **common,
        )
    if code in _VALIDATION_CODES:
        return SendlyError(message, kind=ErrorKind.VALIDATION, **common)
    if code == "not_found":
        return SendlyError(message, kind=ErrorKind.NOT_FOUND, **common)
    return SendlyError(message, kind=ErrorKind.GENERIC, **common)


def _number(value: Any) -> int | float | None:
    # bool is an int subclass; a JSON true is not a count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value
