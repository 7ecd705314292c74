from unittest import mock

import pytest
from django.test import Client

from wedly.firebase_service import firestore_service
from wedly.flows.base import reset_genai_client
from wedly.rate_limit import rate_limiter

from .factories import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture(autouse=True)
def no_sleep():
    """Retries back off through time.sleep; tests should not wait."""
    with mock.patch("wedly.retry.time.sleep") as sleep:
        yield sleep


@pytest.fixture(autouse=True)
def _locmem_email(settings):
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    settings.DEFAULT_FROM_EMAIL = "no-reply@wedly.app"


@pytest.fixture(autouse=True)
def _genai_client():
    reset_genai_client()
    yield
    reset_genai_client()


@pytest.fixture
def client():
    return Client()


@pytest.fixture
def stripe_env(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", STRIPE_SECRET_KEY)
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", STRIPE_WEBHOOK_SECRET)


@pytest.fixture
def user():
    """A verified Firebase user; any bearer token decodes to it."""
    decoded = {"uid": "user_olivia", "email": "olivia@example.com"}
    with mock.patch.object(firestore_service, "verify_id_token", return_value=decoded):
        yield decoded


@pytest.fixture
def auth_headers():
    return {"HTTP_AUTHORIZATION": "Bearer test-id-token"}


@pytest.fixture
def fake_db():
    """
    A MagicMock standing in for the Firestore client. collection()/document()
    return the same child mock whatever their arguments, so assertions look
    at call args.
    """
    db = mock.MagicMock(name="firestore")
    db.collection.return_value.document.return_value.get.return_value.exists = False
    with mock.patch.object(firestore_service, "_db", db):
        yield db
