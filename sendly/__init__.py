"""Sendly Python SDK."""

from ._version import __version__
from .adapters.http_client import ClientConfig, RequestOptions
from .client import Sendly
from .errors import ErrorKind, SendlyError
from .utils.rate_limit import RateLimitInfo
from .webhooks import WebhookEvent, WebhookSignatureError, Webhooks

__all__ = [
    "__version__",
    "Sendly",
    "ClientConfig",
    "RequestOptions",
    "ErrorKind",
    "SendlyError",
    "RateLimitInfo",
    "Webhooks",
    "WebhookEvent",
    "WebhookSignatureError",
]
