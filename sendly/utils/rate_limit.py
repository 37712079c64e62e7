from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


LIMIT_HEADER = "X-RateLimit-Limit"
REMAINING_HEADER = "X-RateLimit-Remaining"
RESET_HEADER = "X-RateLimit-Reset"


@dataclass(frozen=True)
class RateLimitInfo:
    limit: int
    remaining: int
    # Seconds until the window resets
    reset: int


def parse_rate_limit_headers(headers: Mapping[str, str]) -> RateLimitInfo | None:
    """Return the snapshot carried by ``headers``, or None.

    All three headers must be present and integral; a partial set leaves
    the caller's previous snapshot untouched.
    """
    raw = (headers.get(LIMIT_HEADER), headers.get(REMAINING_HEADER), headers.get(RESET_HEADER))
    if any(value is None or value == "" for value in raw):
        return None
    try:
        limit, remaining, reset = (int(str(value).strip()) for value in raw)
    except ValueError:
        return None
    return RateLimitInfo(limit=limit, remaining=remaining, reset=reset)
