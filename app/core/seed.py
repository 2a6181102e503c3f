"""
Demo data for local runs and QA practice

Users are created with a legacy-format credential and are migrated to the
salted-hash format the first time they log in.
"""

from decimal import Decimal
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.models import User, UserRole, Product
from app.utils.helpers import generate_slug

logger = logging.getLogger(__name__)

# Not a hash this service can verify; login falls back to the legacy table
LEGACY_CREDENTIAL_PLACEHOLDER = "$2a$10$N9qo8uLOickgx2ZMRZoMyeIjZAgcfl7p92ldGxad68LJZdL17lhWy"

DEMO_USERS = [
    ("standard_user", UserRole.STANDARD, "standard@example.com"),
    ("locked_user", UserRole.LOCKED, "locked@example.com"),
    ("admin_user", UserRole.ADMIN, "admin@example.com"),
]

DEMO_PRODUCTS = [
    ("Wireless Headphones", "Over-ear headphones with noise cancellation", "149.99", 25, "wireless-headphones.jpg"),
    ("Mechanical Keyboard", "Tenkeyless keyboard with hot-swappable switches", "89.50", 40, "mechanical-keyboard.jpg"),
    ("USB-C Hub", "7-in-1 hub with HDMI and card reader", "39.99", 8, "usb-c-hub.jpg"),
    ("Laptop Stand", "Adjustable aluminium stand", "29.00", 60, None),
    ("Webcam HD", "1080p webcam with privacy shutter", "54.95", 3, "webcam-hd.jpg"),
    ("Desk Lamp", "LED lamp with dimmer", "24.99", 0, None),
]


async def seed_demo_data(db: AsyncSession) -> None:
    """Insert demo users and catalog; existing rows are left alone"""
    existing_users = set((await db.execute(select(User.username))).scalars().all())
    for username, role, email in DEMO_USERS:
        if username in existing_users:
            continue
        db.add(User(
            username=username,
            password_hash=LEGACY_CREDENTIAL_PLACEHOLDER,
            user_type=role.value,
            email=email,
        ))
        logger.info(f"Seeded user {username} ({role.value})")

    existing_slugs = set((await db.execute(select(Product.slug))).scalars().all())
    for name, description, price, stock, image_key in DEMO_PRODUCTS:
        slug = generate_slug(name)
        if slug in existing_slugs:
            continue
        db.add(Product(
            name=name,
            slug=slug,
            description=description,
            price=Decimal(price),
            stock=stock,
            image_key=image_key,
            is_active=True,
        ))

    await db.commit()
