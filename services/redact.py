# services/redact.py
# Masking of sensitive fields before anything is logged.
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Optional
import re

SENSITIVE_FIELDS = (
    "email",
    "guestEmail",
    "phone",
    "guestPhone",
    "password",
    "token",
    "apiKey",
    "creditCard",
    "ssn",
)

REDACTED = "[REDACTED]"

_SENSITIVE_LOWER = tuple(f.lower() for f in SENSITIVE_FIELDS)


def is_sensitive_key(key) -> bool:
    lower = str(key).lower()
    return any(field in lower for field in _SENSITIVE_LOWER)


def redact_sensitive_data(obj: Any) -> Any:
    """
    Returns a copy of obj where every mapping key that contains a sensitive
    field name (case-insensitive) has its value replaced by [REDACTED].
    Nested mappings and sequences (not strings) are walked; mappings come back
    as dicts, tuples as tuples, other sequences as lists.
    The input is never mutated.
    """
    if isinstance(obj, Mapping):
        redacted = {}
        for key, value in obj.items():
            if is_sensitive_key(key):
                redacted[key] = REDACTED
            else:
                redacted[key] = redact_sensitive_data(value)
        return redacted
    if isinstance(obj, tuple):
        return tuple(redact_sensitive_data(item) for item in obj)
    if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes, bytearray)):
        return [redact_sensitive_data(item) for item in obj]
    return obj


def redact_log(message: str, data: Any = None) -> Dict[str, Any]:
    if data is not None:
        return {"message": message, "data": redact_sensitive_data(data)}
    return {"message": message}


def mask_email(email: Optional[str]) -> str:
    """'john@x.com' -> 'jo***@x.com'; one-letter local part -> '***@x.com'."""
    if not email or "@" not in email:
        return "[INVALID_EMAIL]"
    username, domain = email.split("@", 1)
    masked = f"{username[:2]}***" if len(username) >= 2 else "***"
    return f"{masked}@{domain}"


def mask_phone(phone: Optional[str]) -> str:
    if not phone:
        return "[NO_PHONE]"
    digits = re.sub(r"\D", "", phone)
    if len(digits) >= 10:
        return f"***-***-{digits[-4:]}"
    return "***-***-****"
