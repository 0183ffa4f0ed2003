import html
import re
from typing import Dict, Tuple

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Indian mobile numbers: 10 digits, leading 6-9
_PHONE = re.compile(r"^[6-9]\d{9}$")
# NMAMIT university seat numbers
_USN = re.compile(r"^(NNM|NU)", re.IGNORECASE)
_NON_DIGIT = re.compile(r"\D")

REGISTRANT_REQUIRED_FIELDS = ("name", "email", "phone", "branch", "year", "usn")

MAX_INPUT_LENGTH = 100


def is_valid_email(value) -> bool:
    return isinstance(value, str) and bool(_EMAIL.match(value))


def is_valid_phone(value) -> bool:
    return isinstance(value, str) and bool(_PHONE.match(value))


def is_valid_usn(value) -> bool:
    return isinstance(value, str) and bool(_USN.match(value))


def _is_blank(value) -> bool:
    return value is None or str(value).strip() == ""


def validate_fields(fields: dict, required=()) -> Tuple[bool, Dict[str, str]]:
    """
    Checks the given fields. Format rules only apply to fields that are
    present, so partial updates (profile completion) can reuse them.
    Returns (valid, errors) with errors keyed by field name.
    """
    errors: Dict[str, str] = {}
    fields = fields or {}

    for field in required:
        if _is_blank(fields.get(field)):
            errors[field] = f"{field} is required"

    email = fields.get("email")
    if "email" not in errors and not _is_blank(email) and not is_valid_email(str(email).strip()):
        errors["email"] = "Invalid email format"

    phone = fields.get("phone")
    if "phone" not in errors and not _is_blank(phone) and not is_valid_phone(str(phone).strip()):
        errors["phone"] = "Invalid phone number (10 digits starting with 6-9)"

    usn = fields.get("usn")
    if "usn" not in errors and not _is_blank(usn) and not is_valid_usn(str(usn).strip()):
        errors["usn"] = "Invalid USN format (must start with NNM or NU)"

    return (len(errors) == 0), errors


def validate_registrant(fields: dict) -> Tuple[bool, Dict[str, str]]:
    return validate_fields(fields, required=REGISTRANT_REQUIRED_FIELDS)


def clean_text(value: str) -> str:
    return value.strip()[:MAX_INPUT_LENGTH]


def sanitize_input(value: str) -> str:
    return html.escape(clean_text(value), quote=True)


def sanitize_phone(value) -> str:
    """
    Normalizes what people type for a mobile number to 10 digits:
    drops separators, a trunk "0" and a "91" country code.
    """
    if not value:
        return ""
    digits = _NON_DIGIT.sub("", str(value))
    if digits.startswith("0"):
        digits = digits[1:]
    if digits.startswith("91") and len(digits) > 10:
        digits = digits[2:]
    return digits[:10]


def sanitize_fields(fields: dict) -> dict:
    return {
        key: sanitize_input(value) if isinstance(value, str) else value
        for key, value in (fields or {}).items()
    }
