"""
Helper utilities
"""

from typing import Optional
import slugify as python_slugify

from app.core.config import settings


def generate_slug(text: str) -> str:
    """
    Generate URL-friendly slug from text

    Args:
        text: Input text

    Returns:
        Slug
    """
    return python_slugify.slugify(text)


def image_url(image_key: Optional[str]) -> Optional[str]:
    """Public URL of a stored product image"""
    if not image_key:
        return None
    return f"{settings.IMAGE_URL_PREFIX}/{image_key}"
