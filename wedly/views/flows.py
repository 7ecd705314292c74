import logging

from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt

from ..auth import firebase_user_required
from ..errors import error_response
from ..firebase_service import firestore_service
from ..flows import FLOWS, ask_wedding_assistant
from ..http import allowed_methods, json_body
from ..rate_limit import rate_limited
from ..retry import with_retry

logger = logging.getLogger("wedly")


@csrf_exempt
@allowed_methods("POST")
@rate_limited("assistant")
@firebase_user_required("/api/flows")
def run_flow(request, user, context, flow_name):
    flow = FLOWS.get(flow_name)
    if flow is None:
        return JsonResponse({"error": f"Unknown flow: {flow_name}"}, status=404)

    data, error = json_body(request)
    if error:
        return error

    logger.info(f"[FLOW] {flow.name} requested by {user['uid']}")
    try:
        if flow.premium and not firestore_service.is_premium(user["uid"]):
            return JsonResponse({
                "error": "This feature requires Wedly premium. Upgrade to unlock it.",
                "category": "payment",
                "requestId": context.request_id,
            }, status=402)
        output = flow(data)
    except Exception as e:
        return error_response(e, context)

    return JsonResponse(output.model_dump(by_alias=True))


@csrf_exempt
@allowed_methods("POST")
@rate_limited("assistant")
@firebase_user_required("/api/wedding-assistant")
def wedding_assistant(request, user, context):
    data, error = json_body(request)
    if error:
        return error

    question = data.get("question")
    logger.info(
        f"[ASSISTANT] Request from {user['uid']}: "
        f"questionLength={len(question) if isinstance(question, str) else 0}"
    )
    try:
        flow_input = ask_wedding_assistant.parse_input({"question": question, "userId": user["uid"]})
        result = with_retry(
            lambda: ask_wedding_assistant.run(flow_input),
            max_attempts=2,
            base_delay=1.0,
            retryable_keywords=("network", "timeout", "connection"),
            label="wedding assistant",
        )
    except Exception as e:
        return error_response(e, context)

    return JsonResponse({
        **result.model_dump(by_alias=True),
        "requestId": context.request_id,
        "timestamp": timezone.now().isoformat(),
    })
