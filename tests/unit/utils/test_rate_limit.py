import httpx

from sendly.utils.rate_limit import RateLimitInfo, parse_rate_limit_headers


def test_all_headers_present():
    headers = httpx.Headers({"x-ratelimit-limit": "100", "x-ratelimit-remaining": "42", "x-ratelimit-reset": "17"})
    assert parse_rate_limit_headers(headers) == RateLimitInfo(limit=100, remaining=42, reset=17)


def test_missing_header_yields_none():
    headers = httpx.Headers({"X-RateLimit-Limit": "100", "X-RateLimit-Remaining": "42"})
    assert parse_rate_limit_headers(headers) is None


def test_non_integral_header_yields_none():
    headers = httpx.Headers({"X-RateLimit-Limit": "100", "X-RateLimit-Remaining": "4.5", "X-RateLimit-Reset": "17"})
    assert parse_rate_limit_headers(headers) is None


def test_empty_header_yields_none():
    headers = {"X-RateLimit-Limit": "", "X-RateLimit-Remaining": "1", "X-RateLimit-Reset": "1"}
    assert parse_rate_limit_headers(headers) is None
