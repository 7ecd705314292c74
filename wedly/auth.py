import logging
from functools import wraps
from typing import Any, Dict

from firebase_admin import auth as fb_auth

from .errors import AppError, ErrorCategory, RequestContext, error_response
from .firebase_service import firestore_service
from .retry import with_retry

logger = logging.getLogger("wedly")


def bearer_token(request) -> str:
    authorization = request.headers.get("Authorization", "")
    if not authorization.startswith("Bearer "):
        raise AppError(
            "Authorization header missing or invalid format",
            ErrorCategory.AUTHENTICATION,
            401,
            "Authorization header missing or invalid format. Please log in and try again.",
        )
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AppError(
            "Bearer token missing from authorization header",
            ErrorCategory.AUTHENTICATION,
            401,
            "Invalid token format. Please log in again.",
        )
    return token


def verify_request(request) -> Dict[str, Any]:
    """Verify the request's Firebase ID token and return its decoded claims."""
    id_token = bearer_token(request)
    try:
        decoded = with_retry(
            lambda: firestore_service.verify_id_token(id_token),
            max_attempts=2,
            base_delay=0.5,
            retryable_keywords=("network", "timeout", "connection"),
            label="verify_id_token",
        )
    except AppError:
        raise
    except fb_auth.ExpiredIdTokenError as e:
        raise AppError(
            f"Firebase token expired: {e}",
            ErrorCategory.AUTHENTICATION,
            401,
            "Token expired. Please log in again.",
        ) from e
    except (fb_auth.RevokedIdTokenError, fb_auth.UserDisabledError) as e:
        raise AppError(
            f"Firebase token revoked: {e}",
            ErrorCategory.AUTHENTICATION,
            401,
            "Invalid token: session revoked. Please log in again.",
        ) from e
    except (fb_auth.InvalidIdTokenError, ValueError) as e:
        raise AppError(
            f"Firebase token verification failed: {e}",
            ErrorCategory.AUTHENTICATION,
            401,
            "Invalid token. Please log in again.",
        ) from e
    except fb_auth.CertificateFetchError as e:
        raise AppError(
            f"Could not fetch Firebase certificates: {e}",
            ErrorCategory.EXTERNAL_SERVICE,
            503,
            "Authentication service error. Please try again later.",
            retryable=True,
        ) from e

    if not decoded.get("uid"):
        raise AppError("Token has no uid", ErrorCategory.AUTHENTICATION, 401, "Invalid token.")
    return decoded


def firebase_user_required(endpoint: str):
    """
    Decorator for views that need a signed-in user. The wrapped view receives
    (request, user, context, ...) where user is the decoded token.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            context = RequestContext.from_request(request, endpoint)
            try:
                user = verify_request(request)
            except Exception as e:
                return error_response(e, context)
            context.user_id = user["uid"]
            return view(request, user, context, *args, **kwargs)
        return wrapper
    return decorator
