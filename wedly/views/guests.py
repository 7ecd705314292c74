from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..auth import firebase_user_required
from ..constants import RSVP_PENDING, RSVP_VALUES
from ..errors import error_response
from ..firebase_service import firestore_service
from ..http import allowed_methods, json_body


def _invalid_rsvp(rsvp):
    return JsonResponse({
        "error": f"invalid_rsvp: {rsvp}",
        "allowed": list(RSVP_VALUES),
    }, status=400)


@csrf_exempt
@allowed_methods("GET", "POST")
@firebase_user_required("/api/guests")
def guests(request, user, context):
    if request.method == "GET":
        try:
            items = firestore_service.list_guests(user["uid"])
        except Exception as e:
            return error_response(e, context)
        return JsonResponse({"guests": items})

    data, error = json_body(request)
    if error:
        return error

    name = (data.get("name") or "").strip()
    group = (data.get("group") or "").strip()
    rsvp = data.get("rsvp", RSVP_PENDING)
    table = data.get("table")

    if not name:
        return JsonResponse({"error": "missing_fields", "required": ["name"]}, status=400)
    if rsvp not in RSVP_VALUES:
        return _invalid_rsvp(rsvp)
    if table is not None and (isinstance(table, bool) or not isinstance(table, int)):
        return JsonResponse({"error": "table must be an integer"}, status=400)

    try:
        guest = firestore_service.add_guest(user["uid"], name, group, rsvp, table)
    except Exception as e:
        return error_response(e, context)
    return JsonResponse(guest, status=201)


@csrf_exempt
@allowed_methods("PATCH", "DELETE")
@firebase_user_required("/api/guests")
def guest_detail(request, user, context, guest_id):
    if request.method == "DELETE":
        try:
            found = firestore_service.delete_guest(user["uid"], guest_id)
        except Exception as e:
            return error_response(e, context)
        if not found:
            return JsonResponse({"error": "guest_not_found"}, status=404)
        return JsonResponse({"id": guest_id, "deleted": True})

    data, error = json_body(request)
    if error:
        return error

    rsvp = data.get("rsvp")
    if rsvp not in RSVP_VALUES:
        return _invalid_rsvp(rsvp)

    try:
        found = firestore_service.update_guest_rsvp(user["uid"], guest_id, rsvp)
    except Exception as e:
        return error_response(e, context)
    if not found:
        return JsonResponse({"error": "guest_not_found"}, status=404)
    return JsonResponse({"id": guest_id, "rsvp": rsvp})
