from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

from sendly.adapters.http_client import HttpClient, RequestOptions
from sendly.errors import validation_error
from sendly.models import Verification, VerificationCheck, VerificationList, VerificationSent
from sendly.utils.phone import validate_phone_number
from sendly.utils.validation import validate_int_range, validate_limit, validate_resource_id


MIN_TIMEOUT_SECS = 60
MAX_TIMEOUT_SECS = 3600
MIN_CODE_LENGTH = 4
MAX_CODE_LENGTH = 10


def _verification_path(verification_id: str, suffix: str = "") -> str:
    validate_resource_id(verification_id, "verification ID")
    return f"/v1/verify/{quote(verification_id, safe='')}{suffix}"


class VerifyResource:
    """One-time password verification over SMS."""

    def __init__(self, http: HttpClient):
        self._http = http

    async def send(
        self,
        to: str,
        *,
        template_id: Optional[str] = None,
        profile_id: Optional[str] = None,
        app_name: Optional[str] = None,
        timeout_secs: Optional[int] = None,
        code_length: Optional[int] = None,
    ) -> VerificationSent:
        """Send an OTP code to ``to``.

        In sandbox mode the response carries the code in ``sandbox_code``.
        """
        validate_phone_number(to)
        validate_int_range(timeout_secs, "timeout_secs", MIN_TIMEOUT_SECS, MAX_TIMEOUT_SECS)
        validate_int_range(code_length, "code_length", MIN_CODE_LENGTH, MAX_CODE_LENGTH)

        body: dict[str, Any] = {"to": to}
        if template_id:
            body["template_id"] = template_id
        if profile_id:
            body["profile_id"] = profile_id
        if app_name:
            body["app_name"] = app_name
        if timeout_secs is not None:
            body["timeout_secs"] = timeout_secs
        if code_length is not None:
            body["code_length"] = code_length

        data = await self._http.request(RequestOptions(method="POST", path="/v1/verify", body=body))
        return VerificationSent.from_api(data)

    async def check(self, verification_id: str, code: str) -> VerificationCheck:
        path = _verification_path(verification_id, "/check")
        if not code or not isinstance(code, str):
            raise validation_error("Verification code is required")
        data = await self._http.request(RequestOptions(method="POST", path=path, body={"code": code}))
        return VerificationCheck.from_api(data)

    async def get(self, verification_id: str) -> Verification:
        data = await self._http.request(
            RequestOptions(method="GET", path=_verification_path(verification_id))
        )
        return Verification.from_api(data)

    async def list(self, *, limit: Optional[int] = None, status: Optional[str] = None) -> VerificationList:
        validate_limit(limit)
        data = await self._http.request(
            RequestOptions(method="GET", path="/v1/verify", query={"limit": limit, "status": status})
        )
        return VerificationList.from_api(data)
