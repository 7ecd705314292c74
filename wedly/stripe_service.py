"""
Stripe service: checkout session creation and webhook verification.

Secrets come from STRIPE_SECRET_KEY and STRIPE_WEBHOOK_SECRET. The one-off
Wedly payment is a fixed $49.99 AUD line item.
"""
import json
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import stripe

from .constants import (
    CHECKOUT_SESSION_TTL_SECONDS,
    PRICE_AMOUNT_CENTS,
    PRICE_CURRENCY,
    PRODUCT_DESCRIPTION,
    PRODUCT_NAME,
    STRIPE_API_VERSION,
)
from .errors import AppError, ConfigurationError, ErrorCategory

logger = logging.getLogger("wedly")


@dataclass
class WebhookEventData:
    """The parts of a Stripe event that the webhook acts on"""
    event_id: str
    event_type: str
    session_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    customer_email: Optional[str] = None
    amount: Optional[int] = None
    currency: Optional[str] = None
    payment_status: Optional[str] = None
    client_reference_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created: Optional[int] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.client_reference_id or self.metadata.get("userId")

    @property
    def user_email(self) -> Optional[str]:
        return self.customer_email or self.metadata.get("userEmail")


class StripeService:
    """Thin wrapper around the stripe SDK using module-level configuration."""

    def __init__(self):
        self._configured_key = None

    @property
    def secret_key(self) -> Optional[str]:
        return os.environ.get("STRIPE_SECRET_KEY")

    @property
    def webhook_secret(self) -> Optional[str]:
        return os.environ.get("STRIPE_WEBHOOK_SECRET")

    def is_configured(self) -> bool:
        return bool(self.secret_key)

    def _client(self):
        key = self.secret_key
        if not key:
            raise ConfigurationError("Stripe secret key is not configured")
        if self._configured_key != key:
            stripe.api_key = key
            stripe.api_version = STRIPE_API_VERSION
            self._configured_key = key
            logger.info("Stripe server instance initialized")
        return stripe

    # =========================================================================
    # Checkout
    # =========================================================================

    def create_checkout_session(
        self,
        user_id: str,
        user_email: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ):
        """Create a hosted Checkout session for the one-off Wedly payment."""
        if not user_email:
            raise AppError("User email is required for checkout session creation",
                           ErrorCategory.VALIDATION, 400)
        if not success_url or not cancel_url:
            raise AppError("Success and cancel URLs are required",
                           ErrorCategory.VALIDATION, 400)

        client = self._client()
        session_metadata = {
            "userId": user_id,
            "userEmail": user_email,
            "productName": PRODUCT_NAME,
            **(metadata or {}),
        }

        logger.info(
            f"[STRIPE] Creating checkout session: user={user_id}, "
            f"amount={PRICE_AMOUNT_CENTS}, currency={PRICE_CURRENCY}"
        )
        session = client.checkout.Session.create(
            payment_method_types=["card"],
            mode="payment",
            customer_email=user_email,
            client_reference_id=user_id,
            success_url=success_url,
            cancel_url=cancel_url,
            line_items=[{
                "price_data": {
                    "currency": PRICE_CURRENCY,
                    "product_data": {
                        "name": PRODUCT_NAME,
                        "description": PRODUCT_DESCRIPTION,
                    },
                    "unit_amount": PRICE_AMOUNT_CENTS,
                },
                "quantity": 1,
            }],
            metadata=session_metadata,
            automatic_tax={"enabled": False},
            expires_at=int(time.time()) + CHECKOUT_SESSION_TTL_SECONDS,
        )
        logger.info(f"[STRIPE] Checkout session created: {session.id}")
        return session

    def retrieve_checkout_session(self, session_id: str):
        if not session_id:
            raise AppError("Session ID is required", ErrorCategory.VALIDATION, 400)
        return self._client().checkout.Session.retrieve(
            session_id, expand=["line_items", "payment_intent"]
        )

    def retrieve_payment_intent(self, payment_intent_id: str):
        if not payment_intent_id:
            raise AppError("Payment intent ID is required", ErrorCategory.VALIDATION, 400)
        return self._client().PaymentIntent.retrieve(payment_intent_id)

    # =========================================================================
    # Webhooks
    # =========================================================================

    def construct_event(self, payload: bytes, signature: str):
        """
        Verify the stripe-signature header and return the event as a plain dict.

        Raises AppError(400) for a malformed body or a bad signature and
        ConfigurationError when secrets are missing.
        """
        if not self.webhook_secret:
            raise ConfigurationError("Stripe webhook secret is not configured")
        client = self._client()

        try:
            client.Webhook.construct_event(payload, signature, self.webhook_secret)
            event = json.loads(payload)
        except ValueError as e:
            raise AppError(f"Invalid webhook payload: {e}", ErrorCategory.VALIDATION, 400,
                           "Invalid request body") from e
        except stripe.SignatureVerificationError as e:
            message = str(e)
            if "Timestamp outside the tolerance zone" in message:
                user_message = "Webhook Error: timestamp too old"
            elif "Unable to extract timestamp and signatures" in message:
                user_message = "Webhook Error: malformed signature"
            else:
                user_message = "Webhook Error: invalid signature"
            raise AppError(f"Webhook signature verification failed: {message}",
                           ErrorCategory.VALIDATION, 400, user_message) from e

        logger.info(f"[WEBHOOK] Signature verified: id={event.get('id')}, type={event.get('type')}")
        return event


def extract_webhook_event_data(event) -> Optional[WebhookEventData]:
    """
    Pull the fields we act on out of a verified event. Returns None for
    unsupported event types and for checkout sessions that are not paid.
    """
    if not event or not event.get("type"):
        raise AppError("Invalid event object", ErrorCategory.VALIDATION, 400, "Invalid request body")

    event_type = event["type"]
    obj = event.get("data", {}).get("object", {}) or {}

    if event_type == "checkout.session.completed":
        if obj.get("payment_status") != "paid":
            logger.info(
                f"[WEBHOOK] Checkout session not paid, skipping: "
                f"{obj.get('id')} status={obj.get('payment_status')}"
            )
            return None
        return WebhookEventData(
            event_id=event.get("id", ""),
            event_type=event_type,
            session_id=obj.get("id"),
            payment_intent_id=obj.get("payment_intent"),
            customer_email=obj.get("customer_email")
            or (obj.get("customer_details") or {}).get("email"),
            amount=obj.get("amount_total"),
            currency=obj.get("currency"),
            payment_status=obj.get("payment_status"),
            client_reference_id=obj.get("client_reference_id"),
            metadata=dict(obj.get("metadata") or {}),
            created=obj.get("created"),
        )

    if event_type == "payment_intent.succeeded":
        return WebhookEventData(
            event_id=event.get("id", ""),
            event_type=event_type,
            payment_intent_id=obj.get("id"),
            amount=obj.get("amount"),
            currency=obj.get("currency"),
            payment_status=obj.get("status"),
            metadata=dict(obj.get("metadata") or {}),
            created=obj.get("created"),
        )

    logger.info(f"[WEBHOOK] Unsupported event type: {event_type}")
    return None


# Singleton instance
stripe_service = StripeService()
