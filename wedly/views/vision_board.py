import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..auth import firebase_user_required
from ..errors import error_response
from ..firebase_service import firestore_service
from ..http import allowed_methods, json_body

logger = logging.getLogger("wedly")


def _hint(text: str) -> str:
    return " ".join(text.split(" ")[:2])


@csrf_exempt
@allowed_methods("GET", "POST")
@firebase_user_required("/api/vision-board")
def vision_board(request, user, context):
    """List the board, or add a generated image: {src, prompt}."""
    if request.method == "GET":
        try:
            images = firestore_service.list_vision_images(user["uid"])
        except Exception as e:
            return error_response(e, context)
        return JsonResponse({"images": images})

    data, error = json_body(request)
    if error:
        return error

    src = data.get("src")
    prompt = data.get("prompt") or ""
    if not src:
        return JsonResponse({"error": "missing_fields", "required": ["src", "prompt"]}, status=400)

    try:
        image = firestore_service.add_vision_image(user["uid"], src, prompt, _hint(prompt))
    except Exception as e:
        return error_response(e, context)
    return JsonResponse(image, status=201)


@csrf_exempt
@allowed_methods("POST")
@firebase_user_required("/api/vision-board/unsplash")
def vision_board_unsplash(request, user, context):
    """Add an Unsplash search result: {image: {urls: {regular}, alt_description}}."""
    data, error = json_body(request)
    if error:
        return error

    image = data.get("image") or {}
    src = (image.get("urls") or {}).get("regular")
    if not src:
        return JsonResponse({"error": "missing_fields", "required": ["image.urls.regular"]}, status=400)

    description = image.get("alt_description")
    alt = description or "Unsplash image"
    hint = _hint(description) if description else "wedding"

    try:
        added = firestore_service.add_vision_image(user["uid"], src, alt, hint)
    except Exception as e:
        return error_response(e, context)
    return JsonResponse(added, status=201)


@csrf_exempt
@allowed_methods("POST")
@firebase_user_required("/api/vision-board/reorder")
def vision_board_reorder(request, user, context):
    data, error = json_body(request)
    if error:
        return error

    ids = data.get("ids")
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        return JsonResponse({"error": "ids must be a list of image ids"}, status=400)

    try:
        unknown = firestore_service.reorder_vision_images(user["uid"], ids)
    except Exception as e:
        return error_response(e, context)
    if unknown:
        logger.warning(f"[VISION_BOARD] Reorder by {user['uid']} rejected, unknown ids: {unknown}")
        return JsonResponse({"error": "unknown_images", "ids": unknown}, status=404)
    return JsonResponse({"ids": ids})
