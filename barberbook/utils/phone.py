# barberbook/utils/phone.py
import re

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: str) -> str:
    """
    Normalize a phone number to E.164.

    Ten-digit numbers are assumed to be US numbers and get a +1 prefix;
    anything else keeps its digits behind a single leading +.
    """
    if not phone or not phone.strip():
        raise ValueError("Phone number is required")

    digits = _NON_DIGITS.sub("", phone)
    if not digits:
        raise ValueError(f"Phone number has no digits: {phone!r}")
    if len(digits) == 10:
        return f"+1{digits}"
    return f"+{digits}"
