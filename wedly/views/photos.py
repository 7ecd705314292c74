from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..auth import firebase_user_required
from ..constants import PLACEHOLDER_PHOTOS
from ..errors import error_response
from ..firebase_service import firestore_service
from ..http import allowed_methods, json_body
from .serializers import serialize


@csrf_exempt
@allowed_methods("GET", "POST")
@firebase_user_required("/api/photos")
def photos(request, user, context):
    if request.method == "GET":
        try:
            items = firestore_service.list_photos(user["uid"])
        except Exception as e:
            return error_response(e, context)
        if not items:
            # Empty album shows placeholders
            items = [{**photo, "id": f"placeholder-{i}"} for i, photo in enumerate(PLACEHOLDER_PHOTOS, 1)]
            return JsonResponse({"photos": items, "placeholder": True})
        return JsonResponse({"photos": serialize(items), "placeholder": False})

    data, error = json_body(request)
    if error:
        return error

    src = data.get("src")
    if not src:
        return JsonResponse({"error": "missing_fields", "required": ["src"]}, status=400)

    try:
        photo = firestore_service.add_photo(
            user["uid"], src, data.get("alt") or "Guest photo", data.get("hint") or "wedding"
        )
    except Exception as e:
        return error_response(e, context)
    return JsonResponse(serialize(photo), status=201)
