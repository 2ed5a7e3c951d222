# tests/test_config.py

import logging

import pytest
from pydantic import ValidationError

from app.config import Settings
from app.storage import DatabaseStorage, MemStorage, create_storage


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults():
    settings = make_settings()

    assert settings.database_url is None
    assert settings.jwt_access_token_expire_minutes == 7 * 24 * 60
    assert settings.barcode_api_url.endswith("/prod/trial/lookup")
    assert not settings.google_oauth_enabled
    assert not settings.paypal_enabled
    assert not settings.is_production


def test_empty_database_url_means_memory():
    assert make_settings(database_url="").database_url is None


def test_postgres_url_uses_asyncpg():
    settings = make_settings(database_url="postgresql://user:pw@localhost/pricescan")

    assert settings.async_database_url == "postgresql+asyncpg://user:pw@localhost/pricescan"


def test_rejects_unknown_database():
    with pytest.raises(ValidationError):
        make_settings(database_url="mysql://localhost/pricescan")


def test_rejects_short_jwt_secret():
    with pytest.raises(ValidationError):
        make_settings(jwt_secret_key="too-short")


def test_rejects_unknown_environment():
    with pytest.raises(ValidationError):
        make_settings(environment="qa")


@pytest.mark.parametrize(
    "environment, expected",
    [("sandbox", "https://api-m.sandbox.paypal.com"), ("production", "https://api-m.paypal.com")],
)
def test_paypal_base_url(environment, expected):
    assert make_settings(paypal_environment=environment).paypal_base_url == expected


def test_create_storage_without_database():
    assert isinstance(create_storage(make_settings()), MemStorage)


@pytest.mark.asyncio
async def test_create_storage_with_database():
    storage = create_storage(make_settings(database_url="sqlite+aiosqlite:///:memory:"))

    assert isinstance(storage, DatabaseStorage)
    await storage.close()


@pytest.mark.asyncio
async def test_postgres_storage_uses_asyncpg():
    storage = create_storage(make_settings(database_url="postgresql://user:pw@localhost/pricescan"))

    assert storage.engine.url.drivername == "postgresql+asyncpg"
    await storage.close()


@pytest.mark.asyncio
async def test_startup_warns_about_missing_credentials(mocker, caplog):
    from app import main

    mocker.patch.object(
        main,
        "settings",
        make_settings(google_client_id="google-id", google_client_secret="google-secret"),
    )

    with caplog.at_level(logging.WARNING, logger="app.main"):
        async with main.lifespan(main.app):
            assert main.app.state.google_client.configured
            assert not main.app.state.paypal_client.configured

    assert "PayPal credentials not set" in caplog.text
    assert "Google credentials not set" not in caplog.text
