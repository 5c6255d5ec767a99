"""
Israeli phone number validation
"""
import re
from typing import NamedTuple, Optional

ISRAELI_PATTERN = re.compile(r"^0(5[0-9]|7[0-9])\d{7}$")
INTERNATIONAL_PATTERN = re.compile(r"^\+?972((?:5[0-9]|7[0-9])\d{7})$")

VALID_MOBILE_PREFIXES = frozenset({
    "50", "51", "52", "53", "54", "55", "58",
    "72", "73", "74", "76", "77", "78", "79",
})

MISSING_PHONE = "מספר טלפון חסר"
INVALID_FORMAT = "מספר טלפון לא תקין. פורמט נכון: 050-1234567 או +972-50-1234567"
INVALID_PREFIX = "קידומת טלפון לא תקינה. יש להזין מספר סלולרי ישראלי"


class PhoneValidationResult(NamedTuple):
    is_valid: bool
    normalized: Optional[str] = None  # 05XXXXXXXX
    error: Optional[str] = None


def validate_israeli_phone(phone: Optional[str]) -> PhoneValidationResult:
    """
    Validate and normalize an Israeli mobile number
    
    Accepts 050-1234567, 0501234567, 050 1234567, +972-50-1234567,
    972-50-1234567 and +972501234567. The international forms are converted
    to the national 0-prefixed form.
    """
    if not phone or not phone.strip():
        return PhoneValidationResult(False, error=MISSING_PHONE)
    
    clean = re.sub(r"[-\s]", "", phone)
    
    normalized = None
    if ISRAELI_PATTERN.match(clean):
        normalized = clean
    else:
        match = INTERNATIONAL_PATTERN.match(clean)
        if match:
            normalized = "0" + match.group(1)
    
    if normalized is None:
        return PhoneValidationResult(False, error=INVALID_FORMAT)
    
    if normalized[1:3] not in VALID_MOBILE_PREFIXES:
        return PhoneValidationResult(False, error=INVALID_PREFIX)
    
    return PhoneValidationResult(True, normalized=normalized)


def format_phone_for_display(phone: Optional[str]) -> str:
    """Format a normalized number as 0XX-XXXXXXX"""
    if not phone:
        return ""
    clean = re.sub(r"[-\s]", "", phone)
    if len(clean) == 10 and clean.startswith("0"):
        return f"{clean[:3]}-{clean[3:]}"
    return phone
