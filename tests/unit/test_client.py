import anyio
import httpx
import pytest
import respx
from httpx import Response

from sendly import ClientConfig, ErrorKind, RateLimitInfo, Sendly, SendlyError
from sendly.utils.config import Settings


BASE = "https://sendly.live/api"


@pytest.mark.asyncio
@respx.mock
async def test_send_message_end_to_end(sendly, sleeps):
    route = respx.post(f"{BASE}/v1/messages").mock(
        return_value=Response(
            200,
            json={"id": "msg_abc123", "to": "+15551234567", "text": "Hello!", "status": "queued", "creditsUsed": 1},
            headers={"X-RateLimit-Limit": "60", "X-RateLimit-Remaining": "59", "X-RateLimit-Reset": "60"},
        )
    )
    message = await sendly.messages.send("+15551234567", "Hello!")
    assert route.call_count == 1
    assert sleeps == []
    assert message.id == "msg_abc123"
    assert message.status == "queued"
    assert sendly.is_test_mode() is True
    assert sendly.get_rate_limit_info() == RateLimitInfo(limit=60, remaining=59, reset=60)


@pytest.mark.asyncio
@respx.mock
async def test_resources_share_one_rate_limit_snapshot(sendly):
    respx.get(f"{BASE}/v1/credits").mock(
        return_value=Response(
            200,
            json={"balance": 5},
            headers={"X-RateLimit-Limit": "60", "X-RateLimit-Remaining": "10", "X-RateLimit-Reset": "5"},
        )
    )
    await sendly.account.get_credits()
    assert sendly.get_rate_limit_info() == RateLimitInfo(limit=60, remaining=10, reset=5)


def test_defaults_and_config(sendly):
    assert sendly.get_base_url() == BASE
    assert sendly.config == ClientConfig(api_key="sk_test_v1_abc123")
    assert sendly.config.timeout == 30.0
    assert sendly.config.max_retries == 3
    assert sendly.get_rate_limit_info() is None


def test_live_key_is_not_test_mode():
    assert Sendly("sk_live_v1_abc123").is_test_mode() is False


def test_plain_http_base_url_rejected():
    with pytest.raises(SendlyError) as exc:
        Sendly("sk_test_v1_abc123", base_url="http://sendly.live/api")
    assert exc.value.kind is ErrorKind.CONFIGURATION


def test_localhost_base_url_allowed():
    client = Sendly("sk_test_v1_abc123", base_url="http://localhost:3000/api")
    assert client.get_base_url() == "http://localhost:3000/api"


def test_bad_api_key_rejected():
    with pytest.raises(SendlyError, match="Invalid API key format"):
        Sendly("not-a-key")


def test_api_key_with_trailing_newline_rejected():
    with pytest.raises(SendlyError) as exc:
        Sendly("sk_test_v1_abc123\n")
    assert exc.value.kind is ErrorKind.CONFIGURATION


def test_from_config():
    config = ClientConfig(api_key="sk_live_v1_abc123", timeout=5.0, max_retries=0)
    client = Sendly.from_config(config)
    assert client.config == config


def test_from_env(monkeypatch):
    monkeypatch.setenv("SENDLY_API_KEY", "sk_live_v1_fromenv")
    monkeypatch.setenv("SENDLY_MAX_RETRIES", "1")
    client = Sendly.from_env()
    assert client.config.api_key == "sk_live_v1_fromenv"
    assert client.config.max_retries == 1


def test_from_env_with_explicit_settings():
    settings = Settings(_env_file=None, SENDLY_API_KEY="sk_test_v1_explicit", SENDLY_TIMEOUT=2)
    client = Sendly.from_env(settings)
    assert client.config.timeout == 2.0
    assert client.is_test_mode()


@pytest.mark.asyncio
async def test_injected_transport_and_context_manager(fake_sleep, no_jitter, sleeps):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            return httpx.Response(503, json={"error": "service_unavailable"})
        return httpx.Response(200, json={"id": "acc_1"})

    async with Sendly(
        "sk_test_v1_abc123",
        max_retries=2,
        transport=httpx.MockTransport(handler),
        sleep=fake_sleep,
        rng=no_jitter,
    ) as client:
        account = await client.account.get()

    assert account.id == "acc_1"
    assert calls == 2
    assert sleeps == [1.0]


@pytest.mark.asyncio
async def test_zero_retries_makes_single_attempt(fake_sleep):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(500, json={"error": "internal_error"})

    client = Sendly("sk_test_v1_abc123", max_retries=0, transport=httpx.MockTransport(handler), sleep=fake_sleep)
    with pytest.raises(SendlyError):
        await client.account.get()
    assert calls == 1
    await client.aclose()


def test_client_driven_from_sync_code():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["message.sent", "message.delivered"])

    async def _list_events() -> list[str]:
        async with Sendly("sk_test_v1_abc123", transport=httpx.MockTransport(handler)) as client:
            return await client.webhooks.list_event_types()

    assert anyio.run(_list_events) == ["message.sent", "message.delivered"]
