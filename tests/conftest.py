import asyncio

import pytest
from fastapi.testclient import TestClient

from marketplace_auth.settings import settings
from marketplace_auth.storage import sqlite_base
from marketplace_auth.marketplace import storage as marketplace_storage

TEST_CLIENT_ID = "test-client-id"
TEST_CLIENT_SECRET = "test-client-secret"
TEST_REDIRECT_URI = "http://localhost:7071/api/callback"
TEST_WEBHOST = "http://localhost:8888"
TEST_ADMIN_API_KEY = "test-admin-key"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Fresh sqlite file and known OAuth app credentials for every test."""
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "marketplace_auth_test.sqlite3"))
    monkeypatch.setattr(settings, "storage_backend", "sqlite")
    monkeypatch.setattr(settings, "client_id", TEST_CLIENT_ID)
    monkeypatch.setattr(settings, "client_secret", TEST_CLIENT_SECRET)
    monkeypatch.setattr(settings, "redirect_uri", TEST_REDIRECT_URI)
    monkeypatch.setattr(settings, "webhost", TEST_WEBHOST)
    monkeypatch.setattr(settings, "admin_api_key", TEST_ADMIN_API_KEY)
    monkeypatch.setattr(sqlite_base, "_db_connection", None)
    monkeypatch.setattr(marketplace_storage, "_marketplace_store_instance", None)
    yield settings
    asyncio.run(sqlite_base.close_sqlite_db_connection())


@pytest.fixture()
def client():
    from marketplace_auth.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def marketplace_store():
    from marketplace_auth.marketplace.sqlite_marketplace_store import SQLiteMarketplaceStore

    store = SQLiteMarketplaceStore()
    asyncio.run(store.initialize())
    return store


@pytest.fixture()
def make_purchase():
    return purchase_payload


def purchase_payload(account_id=1001, login="octocat", account_type="User", plan_id=7):
    return {
        "billing_cycle": "monthly",
        "next_billing_date": None,
        "on_free_trial": False,
        "account": {
            "login": login,
            "id": account_id,
            "url": f"https://api.github.com/users/{login}",
            "type": account_type,
        },
        "plan": {
            "url": f"https://api.github.com/marketplace_listing/plans/{plan_id}",
            "id": plan_id,
            "number": 1,
            "name": "Open Source",
            "monthly_price_in_cents": 0,
        },
    }
