"""Utilities package"""

from .validators import is_valid_card_number, card_last_four, normalize_text
from .helpers import generate_slug, image_url
from .dependencies import get_session_id, get_optional_session_id

__all__ = [
    "is_valid_card_number",
    "card_last_four",
    "normalize_text",
    "generate_slug",
    "image_url",
    "get_session_id",
    "get_optional_session_id",
]
