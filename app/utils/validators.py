"""Custom validators and sanitizers"""

import re
from typing import Optional
import bleach

# MM/YY with a real month
EXPIRY_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/\d{2}$")

CVV_PATTERN = re.compile(r"^\d{3,4}$")

CARD_MIN_DIGITS = 13
CARD_MAX_DIGITS = 19


def normalize_card_number(card_number: str) -> str:
    """Drop the spaces and dashes people type between digit groups"""
    return re.sub(r"[\s-]", "", card_number)


def is_valid_card_number(card_number: str) -> bool:
    """
    Mod-10 (Luhn) checksum

    Starting from the rightmost digit, every second digit is doubled and
    9 subtracted when the result exceeds 9; the total must be divisible by 10.
    """
    digits = normalize_card_number(card_number)
    if not digits.isdigit():
        return False
    if not CARD_MIN_DIGITS <= len(digits) <= CARD_MAX_DIGITS:
        return False

    total = 0
    for index, char in enumerate(reversed(digits)):
        digit = int(char)
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def card_last_four(card_number: str) -> str:
    return normalize_card_number(card_number)[-4:]


def validate_expiry_date(value: str) -> str:
    """Validate MM/YY format"""
    value = value.strip()
    if not EXPIRY_PATTERN.match(value):
        raise ValueError("Invalid expiry format (MM/YY)")
    return value


def validate_cvv(value: str) -> str:
    value = value.strip()
    if not CVV_PATTERN.match(value):
        raise ValueError("Invalid CVV")
    return value


def sanitize_html(html: str, allowed_tags: Optional[list] = None) -> str:
    """Sanitize HTML content"""
    if allowed_tags is None:
        allowed_tags = ['b', 'em', 'i', 'li', 'ol', 'strong', 'ul', 'p', 'br']

    return bleach.clean(html, tags=allowed_tags, attributes={}, strip=True)


def normalize_text(text: str) -> str:
    """Normalize text input"""
    # Remove zero-width characters
    text = re.sub(r'[​‌‍﻿]', '', text)

    # Collapse whitespace
    return " ".join(text.split())
