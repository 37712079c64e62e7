from __future__ import annotations

import re

import phonenumbers

from sendly.errors import validation_error


_E164_RE = re.compile(r"\+[1-9]\d{0,14}")

# Credits charged per SMS segment by destination tier
CREDITS_PER_SMS: dict[str, int] = {
    "domestic": 1,
    "tier1": 8,
    "tier2": 12,
    "tier3": 16,
}

SUPPORTED_COUNTRIES: dict[str, tuple[str, ...]] = {
    "domestic": ("US", "CA"),
    "tier1": ("GB", "PL", "PT", "RO", "CZ", "HU", "CN", "KR", "IN", "PH", "TH", "VN"),
    "tier2": (
        "FR", "ES", "SE", "NO", "DK", "FI", "IE", "JP", "AU", "NZ",
        "SG", "HK", "MY", "ID", "BR", "AR", "CL", "CO", "ZA", "GR",
    ),
    "tier3": (
        "DE", "IT", "NL", "BE", "AT", "CH", "MX", "IL", "AE", "SA",
        "EG", "NG", "KE", "TW", "PK", "TR",
    ),
}

ALL_SUPPORTED_COUNTRIES: frozenset[str] = frozenset(
    code for codes in SUPPORTED_COUNTRIES.values() for code in codes
)

# Sandbox numbers scripting specific outcomes when used with sk_test_ keys
SANDBOX_TEST_NUMBERS: dict[str, str] = {
    "SUCCESS": "+15005550000",
    "INVALID": "+15005550001",
    "UNROUTABLE": "+15005550002",
    "QUEUE_FULL": "+15005550003",
    "RATE_LIMITED": "+15005550004",
    "CARRIER_VIOLATION": "+15005550006",
}


def is_e164(number: str | None) -> bool:
    return isinstance(number, str) and bool(_E164_RE.fullmatch(number))


def validate_phone_number(number: str | None) -> None:
    """Raise a validation error unless ``number`` is E.164 (+ and 1-15 digits)."""
    if not number:
        raise validation_error("Phone number is required")
    if not is_e164(number):
        raise validation_error(
            f"Invalid phone number format: {number}. Expected E.164 format (e.g., +15551234567)"
        )


def get_country_from_phone(number: str | None) -> str | None:
    """Return the ISO region code for an E.164 number, or None if unknown.

    Numbers in the +1 plan are reported as US.
    """
    if not is_e164(number):
        return None
    try:
        parsed = phonenumbers.parse(number, None)
    except phonenumbers.NumberParseException:
        return None
    if parsed.country_code == 1:
        return "US"
    region = phonenumbers.region_code_for_country_code(parsed.country_code)
    if not region or region == phonenumbers.UNKNOWN_REGION:
        return None
    return region


def is_country_supported(country_code: str) -> bool:
    return country_code.upper() in ALL_SUPPORTED_COUNTRIES


def get_pricing_tier(country_code: str) -> str | None:
    code = country_code.upper()
    for tier, codes in SUPPORTED_COUNTRIES.items():
        if code in codes:
            return tier
    return None
