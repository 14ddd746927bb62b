"""Contact field validation.

Email addresses are checked with pydantic's EmailStr. Phone numbers support
a single locale: North American Numbering Plan numbers, with an optional
+1 country code and the usual separators. Valid numbers are normalized to
"(NNN) NNN-NNNN".
"""

import re

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

_EMAIL_ADAPTER: TypeAdapter[str] = TypeAdapter(EmailStr)

# Optional +1, then area code (optionally parenthesized), exchange, line.
# Area code and exchange cannot start with 0 or 1.
_NANP_PHONE_PATTERN = re.compile(
    r"^(?:\+?1[\s.-]?)?"
    r"\(?([2-9]\d{2})\)?[\s.-]?"
    r"([2-9]\d{2})[\s.-]?"
    r"(\d{4})$"
)


def normalize_email(value: str) -> str | None:
    """Validate and normalize an email address.

    Args:
        value: Raw email input.

    Returns:
        Lowercased address, or None if the value is not a valid email.
    """
    candidate = value.strip() if value else ""
    if not candidate:
        return None
    try:
        return str(_EMAIL_ADAPTER.validate_python(candidate)).lower()
    except PydanticValidationError:
        return None


def normalize_phone(value: str) -> str | None:
    """Validate and normalize a phone number.

    Args:
        value: Raw phone input, e.g. "555-234-5678" or "+1 (555) 234 5678".

    Returns:
        Phone formatted as "(NNN) NNN-NNNN", or None if it does not match
        the supported pattern.
    """
    match = _NANP_PHONE_PATTERN.match(value.strip()) if value else None
    if match is None:
        return None
    area, exchange, line = match.groups()
    return f"({area}) {exchange}-{line}"
