import pytest
import stripe
from fastapi.testclient import TestClient

from app.deps import get_checkout_service, get_content_cache, get_content_client, get_pricing
from app.main import app
from app.services.checkout import CheckoutService
from app.services.pricing import default_pricing
from cms.cache import VersionedCache
from cms.client import ContentClient
from tests.mocks import API_URL, FakeSession, FakeStripeSessions


@pytest.fixture
def pricing():
    return default_pricing()


@pytest.fixture
def cms_session():
    return FakeSession()


@pytest.fixture
def content_cache():
    return VersionedCache(ttl_seconds=60, version="test-1")


@pytest.fixture
def cms_client(cms_session):
    return ContentClient(API_URL, timeout=5, session=cms_session)


@pytest.fixture
def fake_stripe(monkeypatch):
    sessions = FakeStripeSessions()
    monkeypatch.setattr(stripe.checkout.Session, "create", sessions.create)
    monkeypatch.setattr(stripe.checkout.Session, "retrieve", sessions.retrieve)
    return sessions


@pytest.fixture
def checkout_service():
    return CheckoutService("sk_test_123", base_url="https://puntifurbi.test")


@pytest.fixture
def client(pricing, cms_client, content_cache, checkout_service):
    app.dependency_overrides[get_pricing] = lambda: pricing
    app.dependency_overrides[get_content_cache] = lambda: content_cache
    app.dependency_overrides[get_content_client] = lambda: cms_client
    app.dependency_overrides[get_checkout_service] = lambda: checkout_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
