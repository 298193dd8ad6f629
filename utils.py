# utils.py
"""
Utility functions for the practice application.
"""

import random
import re
import unicodedata
from typing import Optional

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat, ValidationResult

# Loose E.164 shape accepted when libphonenumber rejects a number
E164_FALLBACK_PATTERN = re.compile(r'^\+[0-9]{1,14}$')

PATIENT_ID_PREFIX = 'PT-'


def clean_phone_input(raw) -> str:
    """
    Strip everything except digits and a leading '+'.

    Decimal digits from other scripts (fullwidth, Arabic-Indic, ...) are
    folded to ASCII 0-9; other digit-like characters such as superscripts
    are dropped.

    Args:
        raw: Phone input of any type (spreadsheet cells may be numbers)

    Returns:
        Cleaned string, possibly empty
    """
    if raw is None:
        return ''
    text = str(raw).strip()
    digits = ''.join(str(unicodedata.decimal(ch)) for ch in text if ch.isdecimal())
    if not digits:
        return ''
    return f"+{digits}" if text.startswith('+') else digits


def normalize_phone(raw, default_region: str = 'US') -> Optional[str]:
    """
    Normalize a phone number to E.164 format (+<country><digits>).

    Args:
        raw: Phone number input
        default_region: Region used when the number has no country code

    Returns:
        Canonical phone string or None if the input is not a phone number
    """
    cleaned = clean_phone_input(raw)
    if not cleaned:
        return None

    try:
        parsed = phonenumbers.parse(cleaned, default_region)
        if phonenumbers.is_possible_number_with_reason(parsed) == ValidationResult.IS_POSSIBLE:
            return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)
    except NumberParseException:
        pass

    if E164_FALLBACK_PATTERN.match(cleaned):
        return cleaned

    return None


def generate_patient_id(rng=None) -> str:
    """
    Generate a candidate patient identifier of the form PT-####.

    Args:
        rng: Optional random.Random instance (tests pass a seeded one)

    Returns:
        Candidate id; callers must check it for collisions
    """
    rng = rng or random
    return f"{PATIENT_ID_PREFIX}{rng.randint(1000, 9999)}"
