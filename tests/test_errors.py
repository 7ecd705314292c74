import json

import pytest
import stripe
from django.test import RequestFactory
from google.api_core import exceptions as google_exceptions

from wedly.errors import (
    AppError,
    ConfigurationError,
    ErrorCategory,
    RequestContext,
    classify_error,
    error_response,
)


@pytest.mark.parametrize("exc, status, category, retryable", [
    (stripe.RateLimitError("slow down"), 429, ErrorCategory.RATE_LIMIT, True),
    (stripe.AuthenticationError("bad key"), 500, ErrorCategory.CONFIGURATION, False),
    (stripe.APIConnectionError("network down"), 503, ErrorCategory.EXTERNAL_SERVICE, True),
    (stripe.APIError("stripe broke"), 503, ErrorCategory.EXTERNAL_SERVICE, True),
    (stripe.CardError("declined", "card", "card_declined"), 402, ErrorCategory.PAYMENT, False),
    (stripe.InvalidRequestError("no such price", "price"), 400, ErrorCategory.PAYMENT, False),
    (google_exceptions.PermissionDenied("denied"), 500, ErrorCategory.DATABASE, False),
    (google_exceptions.ServiceUnavailable("down"), 500, ErrorCategory.DATABASE, True),
    (google_exceptions.DeadlineExceeded("slow"), 500, ErrorCategory.DATABASE, True),
    (ConnectionError("reset"), 503, ErrorCategory.EXTERNAL_SERVICE, True),
    (KeyError("oops"), 500, ErrorCategory.INTERNAL, False),
])
def test_classify_error(exc, status, category, retryable):
    app_error = classify_error(exc)

    assert app_error.status_code == status
    assert app_error.category == category
    assert app_error.retryable is retryable


def test_app_error_passes_through():
    error = AppError("nope", ErrorCategory.AUTHORIZATION, 403, "Forbidden")

    assert classify_error(error) is error


def test_user_message_defaults_to_message():
    assert AppError("plain").to_dict() == {"error": "plain", "category": "internal"}


def test_configuration_error_message():
    error = ConfigurationError("Stripe secret key is not configured")

    assert error.status_code == 500
    assert error.user_message == "Configuration error: Stripe secret key is not configured"


def test_error_response_body():
    request = RequestFactory().post("/api/create-checkout-session", HTTP_X_REQUEST_ID="req-123")
    context = RequestContext.from_request(request, "/api/create-checkout-session")

    response = error_response(stripe.AuthenticationError("bad key"), context)

    assert response.status_code == 500
    assert json.loads(response.content) == {
        "error": "Payment service configuration error.",
        "category": "configuration",
        "requestId": "req-123",
    }


def test_request_context_prefers_forwarded_ip():
    request = RequestFactory().get("/api/health", HTTP_X_FORWARDED_FOR="203.0.113.7, 10.0.0.1")

    context = RequestContext.from_request(request, "/api/health")

    assert context.ip == "203.0.113.7"
    assert context.method == "GET"
    assert context.request_id
