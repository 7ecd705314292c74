import hashlib
import hmac
import json
import time

STRIPE_SECRET_KEY = "sk_test_wedly"
STRIPE_WEBHOOK_SECRET = "whsec_test_wedly"


def sign_payload(payload: bytes, secret: str = STRIPE_WEBHOOK_SECRET, timestamp: int = None) -> str:
    """Build a stripe-signature header the way Stripe does."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_completed_event(session_id="cs_test_a1b2c3", payment_status="paid", **overrides):
    session = {
        "id": session_id,
        "object": "checkout.session",
        "amount_total": 4999,
        "currency": "aud",
        "customer_email": "olivia@example.com",
        "client_reference_id": "user_olivia",
        "payment_intent": "pi_test_123",
        "payment_status": payment_status,
        "created": 1705311000,
        "metadata": {
            "userId": "user_olivia",
            "userEmail": "olivia@example.com",
            "productName": "Wedly Service",
        },
    }
    session.update(overrides)
    return {
        "id": "evt_test_1",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": session},
    }


def encode_event(event) -> bytes:
    return json.dumps(event).encode("utf-8")
