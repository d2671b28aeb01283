# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Replaces the Supabase client with an in-memory fake
# - Records outgoing HTTP calls (email API) and Stripe checkout sessions
#   instead of sending them
# - Provides seeded suppliers, sauces and judges
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("COMPETITION_YEAR", "2026")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from types import SimpleNamespace
from uuid import uuid4

import httpx
import pytest
import stripe

from lib.supabase_client import SupabaseClient
from tests.fake_stripe import FakeStripe
from tests.fake_supabase import FakeSupabase


# =============================================================================
# Fakes
# =============================================================================

class FakeHttp:
    """
    Records httpx.post calls and answers them.

    Every call gets {"success": true} unless a test overrides the URL
    fragment.
    """

    def __init__(self):
        self.calls: list[SimpleNamespace] = []
        self.responses: dict[str, tuple[int, dict]] = {}
        self.errors: dict[str, Exception] = {}

    def post(self, url: str, **kwargs) -> httpx.Response:
        self.calls.append(SimpleNamespace(url=url, **kwargs))
        request = httpx.Request("POST", url)

        for fragment, error in self.errors.items():
            if fragment in url:
                raise error
        for fragment, (status, body) in self.responses.items():
            if fragment in url:
                return httpx.Response(status, json=body, request=request)

        return httpx.Response(200, json={"success": True}, request=request)

    def calls_to(self, fragment: str) -> list[SimpleNamespace]:
        return [call for call in self.calls if fragment in call.url]

    @property
    def emails(self) -> list[dict]:
        """Bodies posted to the email API."""
        return [call.json for call in self.calls_to("/api/send-email")]


@pytest.fixture
def db(monkeypatch) -> FakeSupabase:
    """Fresh in-memory database installed as the Supabase singleton."""
    fake = FakeSupabase()
    monkeypatch.setattr(SupabaseClient, "_instance", fake)
    return fake


@pytest.fixture(autouse=True)
def http(monkeypatch) -> FakeHttp:
    """Intercept outgoing HTTP so no test talks to the network."""
    fake = FakeHttp()
    monkeypatch.setattr(httpx, "post", fake.post)
    return fake


@pytest.fixture(autouse=True)
def stripe_api(monkeypatch) -> FakeStripe:
    """Answer stripe.checkout.Session.create without calling Stripe."""
    fake = FakeStripe()
    monkeypatch.setattr(stripe.checkout.Session, "create", fake.create)
    return fake


# =============================================================================
# Seed Data
# =============================================================================

@pytest.fixture
def admin(db):
    """An admin judge."""
    return db.seed("judges", email="admin@heatawards.eu", name="Organiser", type="admin", active=True)


@pytest.fixture
def supplier(db):
    """A supplier with no sauces yet."""
    return db.seed(
        "suppliers",
        email="hello@fierysauce.co",
        brand_name="Fiery Sauce Co",
        contact_name="Maria Lopez",
        address="Calle Mayor 1, Madrid",
    )


@pytest.fixture
def make_sauce(db, supplier):
    """Factory for sauces owned by the default supplier."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "supplier_id": supplier["id"],
            "name": f"Sauce {counter['n']}",
            "category": "Hot Chili Sauce",
            "ingredients": "Habanero, vinegar",
            "allergens": "None",
            "sauce_code": f"H{counter['n']:03d}",
            "status": "registered",
            "payment_status": "pending_payment",
        }
        values.update(overrides)
        return db.seed("sauces", **values)

    return _make


@pytest.fixture
def pro_judge(db):
    """An active pro judge."""
    return db.seed(
        "judges",
        email="chef@example.com",
        name="Chef Anna",
        type="pro",
        active=True,
        address="Main Street 5",
        city="Berlin",
        postal_code="10115",
        country="Germany",
    )


# =============================================================================
# API Client
# =============================================================================

@pytest.fixture
def api(db):
    """
    TestClient plus a helper to log in as an email.

    Example:
        api.login("admin@heatawards.eu")
        api.client.get("/api/v1/admin/packing-status")
    """
    from fastapi.testclient import TestClient

    from app.auth import AuthUser, get_current_user
    from app.main import app

    def login(email: str | None):
        user = AuthUser(id=uuid4(), email=email)
        app.dependency_overrides[get_current_user] = lambda: user

    with TestClient(app) as client:
        yield SimpleNamespace(client=client, login=login)

    app.dependency_overrides.clear()
