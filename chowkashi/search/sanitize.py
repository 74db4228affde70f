from __future__ import annotations

import re

# ASCII digits only; str patterns would otherwise accept any Unicode digit
_POSTAL_CODE_RE = re.compile(r"[0-9]{6}")
_INDIAN_MOBILE_RE = re.compile(r"\+91[6-9][0-9]{9}")

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_IFRAME_RE = re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE)
_JS_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+\s*=", re.IGNORECASE)
_QUERY_STRIP_RE = re.compile(r"[<>'\"%;()&+]")
_WHITESPACE_RE = re.compile(r"\s+")

MAX_QUERY_LENGTH = 100


def sanitize_text(value: str | None) -> str:
    if not value:
        return ""
    value = _SCRIPT_RE.sub("", value)
    value = _IFRAME_RE.sub("", value)
    value = _JS_PROTOCOL_RE.sub("", value)
    value = _EVENT_HANDLER_RE.sub("", value)
    return value.strip()


def sanitize_search_query(query: str | None) -> str:
    """Strip injection-prone characters, collapse whitespace, cap the length."""
    if not query:
        return ""
    cleaned = _QUERY_STRIP_RE.sub("", query)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    return cleaned[:MAX_QUERY_LENGTH]


def normalize_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value).strip()


def validate_postal_code(postal_code: str) -> bool:
    return _POSTAL_CODE_RE.fullmatch(postal_code) is not None


def sanitize_phone_number(phone: str | None) -> str:
    if not phone:
        return ""
    return re.sub(r"[^\d+\-()\s]", "", phone).strip()


def normalize_phone_number(phone: str | None) -> str | None:
    """Return an Indian mobile number as ``+91XXXXXXXXXX`` or ``None``."""
    digits = re.sub(r"[^0-9]", "", sanitize_phone_number(phone))
    if len(digits) == 12 and digits.startswith("91"):
        digits = digits[2:]
    elif len(digits) == 11 and digits.startswith("0"):
        digits = digits[1:]
    candidate = f"+91{digits}"
    return candidate if _INDIAN_MOBILE_RE.fullmatch(candidate) else None


def validate_and_sanitize_price(price: str | float | int | None) -> float | None:
    if price is None or isinstance(price, bool):
        return None
    if isinstance(price, (int, float)):
        return float(price) if price >= 0 else None
    cleaned = re.sub(r"[^\d.]", "", str(price))
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if value >= 0 else None
