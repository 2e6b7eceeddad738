import re

_PHONE_PATTERN = re.compile(r'^\+?\d{7,15}$')
_OTP_PATTERN = re.compile(r'^\d{6}$')


def validate_phone_number(phone_number: str) -> str:
    """
    Validate a phone number as entered by the user.

    Accepts digits with an optional leading '+', 7 to 15 digits long
    (E.164 upper bound). Surrounding whitespace is dropped; the number is
    otherwise kept exactly as given since it is the account identifier.
    """
    value = (phone_number or "").strip()
    if not _PHONE_PATTERN.match(value):
        raise ValueError("Invalid phone number")
    return value


def validate_otp_code(code: str) -> str:
    """OTP codes are exactly 6 decimal digits"""
    value = (code or "").strip()
    if not _OTP_PATTERN.match(value):
        raise ValueError("OTP code must be exactly 6 digits")
    return value


def validate_required(value: str, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{field} is required")
    return value
