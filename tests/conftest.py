"""
Shared fixtures

The app is driven in-process through httpx; the relational store is a
throwaway SQLite file and the key-value store is fakeredis.
"""

import base64
import os
import tempfile
from decimal import Decimal

# Settings are read at import time
_TMP_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"

import fakeredis
import httpx
import pytest

from app.core.cache import cache
from app.core.database import AsyncSessionLocal, engine, get_db_context
from app.core.security import SecurityUtils
from app.core.seed import seed_demo_data
from app.main import app
from app.models import Base, Product, User, UserRole
from app.utils.helpers import generate_slug

VALID_CARD = "4111111111111111"

PASSWORDS = {
    "standard_user": "standard123",
    "locked_user": "locked123",
    "admin_user": "admin123",
}


def checkout_payload(card_number: str = VALID_CARD, expiry_date: str = "12/30") -> dict:
    return {
        "shipping": {
            "firstName": "Jane",
            "lastName": "Doe",
            "address": "1 Test Street, Springfield",
        },
        "payment": {
            "cardNumber": card_number,
            "expiryDate": expiry_date,
            "cvv": "123",
            "cardholderName": "Jane Doe",
        },
    }


def basic_auth(username: str, password: str) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
async def database():
    """Fresh schema with demo users and catalog for every test"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with get_db_context() as db:
        await seed_demo_data(db)

    yield engine

    await engine.dispose()


@pytest.fixture
async def kv():
    """Key-value store backed by fakeredis"""
    cache.redis_client = fakeredis.FakeAsyncRedis(decode_responses=True)
    yield cache
    await cache.redis_client.flushall()
    await cache.disconnect()


@pytest.fixture
async def client(database, kv):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
async def db(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def make_product(database):
    """Factory inserting a product and returning it"""

    async def _make(name: str, price: str = "10.00", stock: int = 5, is_active: bool = True) -> Product:
        async with AsyncSessionLocal() as session:
            product = Product(
                name=name,
                slug=generate_slug(name),
                description=f"{name} for tests",
                price=Decimal(price),
                stock=stock,
                is_active=is_active,
            )
            session.add(product)
            await session.commit()
            await session.refresh(product)
            return product

    return _make


@pytest.fixture
def make_user(database):
    """Factory inserting a user with a hash-format credential"""

    async def _make(username: str, password: str, role: UserRole = UserRole.STANDARD) -> User:
        async with AsyncSessionLocal() as session:
            user = User(
                username=username,
                password_hash=SecurityUtils.hash_password(password),
                user_type=role.value,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


@pytest.fixture
def login(client):
    """Log in through the API and return Bearer headers"""

    async def _login(username: str = "standard_user", password: str = None) -> dict:
        response = await client.post(
            "/api/auth/login",
            json={"username": username, "password": password or PASSWORDS[username]},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['data']['accessToken']}"}

    return _login


@pytest.fixture
def session_headers():
    return {"X-Session-ID": "session-test-1"}
