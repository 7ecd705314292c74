import logging
import re

from django.conf import settings
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt

from ..auth import firebase_user_required
from ..errors import error_response
from ..firebase_service import firestore_service
from ..http import allowed_methods, request_origin, require_env
from ..rate_limit import rate_limited
from ..retry import with_retry
from ..stripe_service import stripe_service
from .serializers import serialize

logger = logging.getLogger("wedly")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@csrf_exempt
@allowed_methods("POST")
@rate_limited("payment")
@firebase_user_required("/api/create-checkout-session")
def create_checkout_session(request, user, context):
    """
    Create a Stripe Checkout session for the signed-in user and return its id
    for redirectToCheckout.
    """
    logger.info(f"[CHECKOUT] {request.method} from {context.ip} user={user['uid']}")

    missing = require_env("STRIPE_SECRET_KEY")
    if missing:
        logger.error("[CHECKOUT] STRIPE_SECRET_KEY is not set")
        return missing

    email = user.get("email")
    if not email or not EMAIL_PATTERN.match(email):
        return JsonResponse({
            "error": "A valid email address is required for checkout",
            "category": "validation",
            "requestId": context.request_id,
        }, status=400)

    origin = request_origin(request, settings.APP_ORIGIN)
    try:
        session = with_retry(
            lambda: stripe_service.create_checkout_session(
                user_id=user["uid"],
                user_email=email,
                success_url=f"{origin}/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{origin}/?payment_cancelled=true",
                metadata={"requestId": context.request_id},
            ),
            max_attempts=3,
            label="create checkout session",
        )
    except Exception as e:
        return error_response(e, context)

    logger.info(f"[CHECKOUT] Session {session.id} created for user {user['uid']}")
    return JsonResponse({
        "sessionId": session.id,
        "url": session.url,
        "requestId": context.request_id,
        "timestamp": timezone.now().isoformat(),
    })


@csrf_exempt
@allowed_methods("GET")
@firebase_user_required("/api/checkout-session")
def checkout_session_detail(request, user, context, session_id):
    """Session summary for the success page. Only the paying user may read it."""
    try:
        session = stripe_service.retrieve_checkout_session(session_id)
    except Exception as e:
        return error_response(e, context)

    metadata = getattr(session, "metadata", None)
    owner = getattr(session, "client_reference_id", None) or getattr(metadata, "userId", None)
    if owner != user["uid"]:
        logger.warning(f"[CHECKOUT] User {user['uid']} asked for session {session_id} owned by {owner}")
        return JsonResponse({
            "error": "You do not have access to this checkout session",
            "category": "authorization",
            "requestId": context.request_id,
        }, status=403)

    return JsonResponse({
        "id": session.id,
        "paymentStatus": getattr(session, "payment_status", None),
        "status": getattr(session, "status", None),
        "amountTotal": getattr(session, "amount_total", None),
        "currency": getattr(session, "currency", None),
        "customerEmail": getattr(session, "customer_email", None),
        "productName": getattr(metadata, "productName", None),
    })


@csrf_exempt
@allowed_methods("GET")
@firebase_user_required("/api/purchases")
def purchases(request, user, context):
    try:
        records = firestore_service.list_purchases(user["uid"])
    except Exception as e:
        return error_response(e, context)

    return JsonResponse({"purchases": serialize(records)})


@csrf_exempt
@allowed_methods("GET")
@firebase_user_required("/api/subscription")
def subscription(request, user, context):
    try:
        is_premium = firestore_service.is_premium(user["uid"])
    except Exception as e:
        return error_response(e, context)
    return JsonResponse({"isPremium": is_premium})
