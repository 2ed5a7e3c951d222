# tests/conftest.py

import asyncio
import sys
import time
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.deps import (
    get_barcode_client,
    get_google_client,
    get_paypal_client,
    get_storage,
)
from app.clients.google import GoogleOAuthClient
from app.clients.paypal import PayPalClient
from app.clients.upcitemdb import BarcodeLookupClient
from app.core.security import create_access_token, get_password_hash
from app.database import create_engine_from_url, create_tables
from app.main import app
from app.models.user import User
from app.schemas.user import UserCreate
from app.storage import DatabaseStorage, MemStorage

LOOKUP_URL = "https://api.upcitemdb.test/prod/trial/lookup"
PAYPAL_URL = "https://api-m.sandbox.paypal.test"
TEST_PASSWORD = "testpassword123"

# Set event loop policy for Windows
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


@pytest.fixture
def mem_storage() -> MemStorage:
    return MemStorage()


@pytest_asyncio.fixture
async def db_storage() -> AsyncGenerator[DatabaseStorage, None]:
    """Relational storage on a private in-memory sqlite database."""
    storage = DatabaseStorage(create_engine_from_url("sqlite+aiosqlite:///:memory:"))
    await create_tables(storage.engine)
    yield storage
    await storage.close()


@pytest.fixture(params=["mem_storage", "db_storage"])
def storage_backend(request):
    """Run a test once per storage backend."""
    return request.getfixturevalue(request.param)


@pytest.fixture
def barcode_client() -> BarcodeLookupClient:
    return BarcodeLookupClient(lookup_url=LOOKUP_URL)


@pytest.fixture
def google_client() -> GoogleOAuthClient:
    return GoogleOAuthClient(
        client_id="google-client-id",
        client_secret="google-client-secret",
        redirect_uri="http://test/api/auth/google/callback",
    )


@pytest.fixture
def paypal_client() -> PayPalClient:
    return PayPalClient(
        base_url=PAYPAL_URL,
        client_id="paypal-client-id",
        client_secret="paypal-client-secret",
    )


@pytest_asyncio.fixture
async def client(
        mem_storage: MemStorage,
        barcode_client: BarcodeLookupClient,
        google_client: GoogleOAuthClient,
        paypal_client: PayPalClient,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    app.dependency_overrides[get_storage] = lambda: mem_storage
    app.dependency_overrides[get_barcode_client] = lambda: barcode_client
    app.dependency_overrides[get_google_client] = lambda: google_client
    app.dependency_overrides[get_paypal_client] = lambda: paypal_client

    transport = ASGITransport(app=app)
    async with AsyncClient(
            transport=transport,
            base_url="http://test",
            follow_redirects=True,
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    await barcode_client.close()
    await google_client.close()
    await paypal_client.close()


@pytest_asyncio.fixture
async def test_user(mem_storage: MemStorage) -> User:
    """Create test user."""
    return await mem_storage.create_user(
        UserCreate(
            id="user-1",
            email="test@example.com",
            first_name="Test",
            last_name="User",
            password_hash=get_password_hash(TEST_PASSWORD),
        )
    )


@pytest_asyncio.fixture
async def other_user(mem_storage: MemStorage) -> User:
    return await mem_storage.create_user(
        UserCreate(
            id="user-2",
            email="other@example.com",
            password_hash=get_password_hash(TEST_PASSWORD),
        )
    )


@pytest_asyncio.fixture
async def google_user(mem_storage: MemStorage) -> User:
    """OAuth-only user without a password."""
    return await mem_storage.create_user(
        UserCreate(
            id="google-sub-1",
            email="google@example.com",
            google_id="google-sub-1",
        )
    )


@pytest.fixture
def auth_headers(test_user: User) -> dict[str, str]:
    """Create authentication headers."""
    access_token = create_access_token(test_user.id)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def other_headers(other_user: User) -> dict[str, str]:
    access_token = create_access_token(other_user.id)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def upstream_item() -> dict:
    """UPCitemdb item with two offers priced 12.00 and 9.50."""
    now = int(time.time())
    return {
        "ean": "9780201379624",
        "title": "Design Patterns",
        "upc": "9780201379624",
        "description": "Elements of Reusable Object-Oriented Software",
        "brand": "Addison-Wesley",
        "model": "",
        "category": "Media > Books",
        "images": ["https://images.example.com/design-patterns.jpg"],
        "lowest_recorded_price": 8.99,
        "highest_recorded_price": 59.99,
        "offers": [
            {
                "merchant": "Bookshop",
                "domain": "bookshop.example.com",
                "currency": "",
                "price": 12.0,
                "availability": "",
                "link": "https://bookshop.example.com/dp",
                "updated_t": now - 3600,
            },
            {
                "merchant": "Paperbacks",
                "domain": "paperbacks.example.com",
                "currency": "USD",
                "price": 9.5,
                "availability": "Out of Stock",
                "link": "https://paperbacks.example.com/dp",
                "updated_t": now - 60,
            },
        ],
    }


@pytest.fixture
def upstream_response(upstream_item) -> dict:
    return {"code": "OK", "total": 1, "offset": 0, "items": [upstream_item]}
