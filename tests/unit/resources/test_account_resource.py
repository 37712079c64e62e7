import pytest
import respx
from httpx import Response

from sendly.errors import ErrorKind, SendlyError


BASE = "https://sendly.live/api"


@pytest.mark.asyncio
@respx.mock
async def test_account_and_credits(sendly):
    respx.get(f"{BASE}/v1/account").mock(
        return_value=Response(200, json={"id": "acc_1", "email": "ops@example.com", "name": "Ops"})
    )
    respx.get(f"{BASE}/v1/credits").mock(
        return_value=Response(200, json={"balance": 100, "reserved_balance": 10})
    )
    account = await sendly.account.get()
    assert account.email == "ops@example.com"

    credits = await sendly.account.get_credits()
    assert (credits.balance, credits.reserved_balance, credits.available_balance) == (100, 10, 90)


@pytest.mark.asyncio
@respx.mock
async def test_credit_transactions_paginate(sendly):
    route = respx.get(f"{BASE}/v1/credits/transactions").mock(
        return_value=Response(
            200,
            json=[{"id": "txn_1", "type": "usage", "amount": -1, "balance_after": 99, "message_id": "msg_1"}],
        )
    )
    transactions = await sendly.account.get_credit_transactions(limit=10, offset=20)
    params = route.calls.last.request.url.params
    assert (params["limit"], params["offset"]) == ("10", "20")
    assert transactions[0].amount == -1
    assert transactions[0].balance_after == 99


@pytest.mark.asyncio
@respx.mock
async def test_list_api_keys_accepts_wrapped_payload(sendly):
    respx.get(f"{BASE}/v1/keys").mock(
        return_value=Response(
            200,
            json={"keys": [{"id": "key_1", "name": "CI", "type": "test", "last_four": "c123", "permissions": ["sms:send"]}]},
        )
    )
    keys = await sendly.account.list_api_keys()
    assert keys[0].last_four == "c123"
    assert keys[0].permissions == ["sms:send"]


@pytest.mark.asyncio
@respx.mock
async def test_non_json_success_bodies_raise_invalid_response(sendly):
    respx.get(f"{BASE}/v1/keys").mock(return_value=Response(200, text="ok"))
    respx.get(f"{BASE}/v1/account").mock(return_value=Response(200, json=["acc_1"]))
    with pytest.raises(SendlyError) as exc:
        await sendly.account.list_api_keys()
    assert (exc.value.kind, exc.value.code) == (ErrorKind.GENERIC, "invalid_response")
    with pytest.raises(SendlyError) as exc:
        await sendly.account.get()
    assert exc.value.code == "invalid_response"
