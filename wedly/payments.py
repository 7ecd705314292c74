"""
Webhook side of the payment flow: record the purchase, grant premium,
send the confirmation email.
"""
import logging
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict

from django.utils import timezone

from .constants import PRICE_CURRENCY, PRODUCT_NAME, PURCHASE_STATUS_COMPLETED
from .email_service import EmailData, format_currency, format_email_date, send_purchase_confirmation_email
from .firebase_service import firestore_service
from .retry import with_database_retry
from .stripe_service import WebhookEventData

logger = logging.getLogger("wedly")


def build_purchase_record(data: WebhookEventData) -> Dict[str, Any]:
    now = timezone.now()
    return {
        "userId": data.user_id,
        "userEmail": data.user_email,
        "amount": data.amount,
        "currency": data.currency or PRICE_CURRENCY,
        "status": PURCHASE_STATUS_COMPLETED,
        "productName": data.metadata.get("productName", PRODUCT_NAME),
        "stripeSessionId": data.session_id,
        "stripePaymentIntentId": data.payment_intent_id,
        "stripeEventId": data.event_id,
        "createdAt": now,
        "updatedAt": now,
    }


def handle_checkout_completed(data: WebhookEventData) -> Dict[str, Any]:
    """
    Grant premium, then create purchases/{session_id} atomically. The purchase
    document exists only after the grant, so a redelivery following a failed
    grant retries it. Only the delivery that creates the document sends the
    email. Firestore errors propagate after the database retry so the webhook
    answers 5xx and Stripe redelivers; email failures are only logged.
    """
    session_id = data.session_id
    existing = firestore_service.get_purchase(session_id)
    if existing is not None:
        logger.info(f"[WEBHOOK] Purchase {session_id} already recorded, skipping duplicate event")
        return {"duplicate": True, "emailSent": False}

    if data.user_id:
        with_database_retry(
            lambda: firestore_service.grant_premium(data.user_id),
            label=f"grant premium {data.user_id}",
        )
    else:
        logger.warning(f"[WEBHOOK] Purchase {session_id} has no user id; premium not granted")

    purchase = build_purchase_record(data)
    created = with_database_retry(
        lambda: firestore_service.create_purchase(session_id, purchase),
        label=f"create purchase {session_id}",
    )
    if not created:
        logger.info(f"[WEBHOOK] Purchase {session_id} recorded by a concurrent delivery")
        return {"duplicate": True, "emailSent": False}

    email_sent = False
    if data.user_email:
        purchased_at = (
            datetime.fromtimestamp(data.created, tz=dt_timezone.utc)
            if data.created else purchase["createdAt"]
        )
        result = send_purchase_confirmation_email(EmailData(
            user_email=data.user_email,
            transaction_id=data.payment_intent_id or session_id,
            amount=format_currency(data.amount or 0, data.currency or PRICE_CURRENCY),
            purchase_date=format_email_date(purchased_at),
            product_name=purchase["productName"],
        ))
        email_sent = result.success
        if not result.success:
            logger.error(f"[WEBHOOK] Confirmation email failed for {session_id}: {result.error}")
    else:
        logger.warning(f"[WEBHOOK] Purchase {session_id} has no email; confirmation not sent")

    return {"duplicate": False, "emailSent": email_sent}
