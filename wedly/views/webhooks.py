import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..errors import RequestContext, error_response
from ..http import allowed_methods
from ..payments import handle_checkout_completed
from ..rate_limit import rate_limited
from ..stripe_service import extract_webhook_event_data, stripe_service

logger = logging.getLogger("wedly")


@csrf_exempt
@allowed_methods("POST")
@rate_limited("webhook", skip_successful=True)
def stripe_webhook(request):
    """
    Stripe webhook. Verifies the signature on the raw body, records paid
    checkout sessions and acknowledges everything else with 200.
    """
    context = RequestContext.from_request(request, "/api/webhooks/stripe")
    logger.info(f"[WEBHOOK] {request.method} from {context.ip}")

    signature = request.headers.get("Stripe-Signature")
    if not signature:
        logger.warning("[WEBHOOK] Missing stripe-signature header")
        return JsonResponse({
            "error": "Missing stripe-signature header",
            "category": "validation",
            "requestId": context.request_id,
        }, status=400)

    try:
        event = stripe_service.construct_event(request.body, signature)
        context.extra["eventId"] = event["id"]
        data = extract_webhook_event_data(event)

        if data is None:
            return JsonResponse({"received": True})

        if data.event_type == "checkout.session.completed":
            context.user_id = data.user_id
            result = handle_checkout_completed(data)
            logger.info(f"[WEBHOOK] checkout.session.completed {data.session_id}: {result}")
        elif data.event_type == "payment_intent.succeeded":
            logger.info(
                f"[WEBHOOK] PaymentIntent succeeded: {data.payment_intent_id} "
                f"amount={data.amount} {data.currency}"
            )
    except Exception as e:
        return error_response(e, context)

    return JsonResponse({"received": True})
