"""
Application errors and their mapping to JSON responses.

Views raise AppError (or let SDK exceptions propagate) and convert them with
error_response(). classify_error() knows how Stripe, Google API and Firebase
Auth exceptions should surface to clients.
"""
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import stripe
from django.http import JsonResponse
from google.api_core import exceptions as google_exceptions

logger = logging.getLogger("wedly")


class ErrorCategory(str, Enum):
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    PAYMENT = "payment"
    DATABASE = "database"
    EXTERNAL_SERVICE = "external_service"
    CONFIGURATION = "configuration"
    RATE_LIMIT = "rate_limit"
    INTERNAL = "internal"


class AppError(Exception):
    """An error with an HTTP status and a message that is safe to show users."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        status_code: int = 500,
        user_message: Optional[str] = None,
        retryable: bool = False,
        **context: Any,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.status_code = status_code
        self.user_message = user_message or message
        self.retryable = retryable
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.user_message,
            "category": self.category.value,
        }


class ConfigurationError(AppError):
    def __init__(self, message: str, **context: Any):
        super().__init__(
            message,
            ErrorCategory.CONFIGURATION,
            500,
            f"Configuration error: {message}",
            **context,
        )


@dataclass
class RequestContext:
    """Per-request data attached to log lines and error bodies."""
    endpoint: str
    method: str = "POST"
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    ip: Optional[str] = None
    user_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_request(cls, request, endpoint: str) -> "RequestContext":
        from .http import client_ip

        return cls(
            endpoint=endpoint,
            method=request.method,
            request_id=request.headers.get("X-Request-ID") or uuid.uuid4().hex,
            ip=client_ip(request),
        )


def classify_error(exc: Exception) -> AppError:
    """Map an arbitrary exception onto an AppError."""
    if isinstance(exc, AppError):
        return exc

    # Stripe
    if isinstance(exc, stripe.RateLimitError):
        return AppError(str(exc), ErrorCategory.RATE_LIMIT, 429,
                        "Payment provider rate limit reached. Please try again later.",
                        retryable=True)
    if isinstance(exc, stripe.AuthenticationError):
        return AppError(str(exc), ErrorCategory.CONFIGURATION, 500,
                        "Payment service configuration error.")
    if isinstance(exc, (stripe.APIConnectionError, stripe.APIError)):
        return AppError(str(exc), ErrorCategory.EXTERNAL_SERVICE, 503,
                        "Payment service temporarily unavailable. Please try again.",
                        retryable=True)
    if isinstance(exc, stripe.CardError):
        return AppError(str(exc), ErrorCategory.PAYMENT, 402,
                        f"Payment error: {exc.user_message or exc}")
    if isinstance(exc, stripe.InvalidRequestError):
        return AppError(str(exc), ErrorCategory.PAYMENT, 400,
                        f"Invalid payment request: {exc.user_message or exc}")
    if isinstance(exc, stripe.StripeError):
        return AppError(str(exc), ErrorCategory.PAYMENT, 500,
                        "Payment processing failed. Please try again.")

    # Google Cloud / Firestore
    if isinstance(exc, (google_exceptions.PermissionDenied, google_exceptions.Unauthenticated)):
        return AppError(str(exc), ErrorCategory.DATABASE, 500,
                        "Database permission error. Please contact support.")
    if isinstance(exc, (google_exceptions.ServiceUnavailable,
                        google_exceptions.DeadlineExceeded,
                        google_exceptions.ResourceExhausted)):
        return AppError(str(exc), ErrorCategory.DATABASE, 500,
                        "Database error: service unavailable. Please try again.",
                        retryable=True)
    if isinstance(exc, google_exceptions.GoogleAPICallError):
        return AppError(str(exc), ErrorCategory.DATABASE, 500,
                        "Database error. Please try again.")

    if isinstance(exc, (ConnectionError, TimeoutError)):
        return AppError(str(exc), ErrorCategory.EXTERNAL_SERVICE, 503,
                        "Service temporarily unavailable. Please try again.",
                        retryable=True)

    return AppError(str(exc), ErrorCategory.INTERNAL, 500,
                    "An unexpected error occurred. Please try again.")


def error_response(exc: Exception, context: Optional[RequestContext] = None) -> JsonResponse:
    app_error = classify_error(exc)
    tag = f"[{context.endpoint}]" if context else "[ERROR]"
    log_data = {
        "category": app_error.category.value,
        "status": app_error.status_code,
        "requestId": context.request_id if context else None,
        "userId": context.user_id if context else None,
        **app_error.context,
    }
    if app_error.status_code >= 500:
        logger.error(f"{tag} {type(exc).__name__}: {app_error.message} {log_data}")
    else:
        logger.warning(f"{tag} {type(exc).__name__}: {app_error.message} {log_data}")

    body = app_error.to_dict()
    if context:
        body["requestId"] = context.request_id
    return JsonResponse(body, status=app_error.status_code)
