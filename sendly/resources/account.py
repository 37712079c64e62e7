from __future__ import annotations

from typing import Any, Mapping, Optional

from sendly.adapters.http_client import HttpClient, RequestOptions
from sendly.errors import invalid_response
from sendly.models import Account, ApiKey, CreditTransaction, Credits
from sendly.utils.validation import validate_limit, validate_offset


def _list_payload(data: Any, key: str) -> list[Mapping[str, Any]]:
    # Collections come back either bare or wrapped under ``key``
    items = data.get(key) if isinstance(data, Mapping) else data
    if items is None:
        return []
    if not isinstance(items, list):
        raise invalid_response(key, data)
    return [item for item in items if isinstance(item, Mapping)]


class AccountResource:
    def __init__(self, http: HttpClient):
        self._http = http

    async def get(self) -> Account:
        data = await self._http.request(RequestOptions(method="GET", path="/v1/account"))
        return Account.from_api(data)

    async def get_credits(self) -> Credits:
        data = await self._http.request(RequestOptions(method="GET", path="/v1/credits"))
        return Credits.from_api(data)

    async def get_credit_transactions(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[CreditTransaction]:
        validate_limit(limit)
        validate_offset(offset)
        data = await self._http.request(
            RequestOptions(
                method="GET",
                path="/v1/credits/transactions",
                query={"limit": limit, "offset": offset},
            )
        )
        return [CreditTransaction.from_api(item) for item in _list_payload(data, "transactions")]

    async def list_api_keys(self) -> list[ApiKey]:
        data = await self._http.request(RequestOptions(method="GET", path="/v1/keys"))
        return [ApiKey.from_api(item) for item in _list_payload(data, "keys")]
