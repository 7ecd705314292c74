from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..auth import firebase_user_required
from ..errors import error_response
from ..firebase_service import firestore_service
from ..http import allowed_methods, json_body
from .serializers import serialize


@csrf_exempt
@allowed_methods("GET", "POST")
@firebase_user_required("/api/tasks")
def tasks(request, user, context):
    if request.method == "GET":
        try:
            items = firestore_service.list_tasks(user["uid"])
        except Exception as e:
            return error_response(e, context)
        return JsonResponse({"tasks": serialize(items)})

    data, error = json_body(request)
    if error:
        return error

    title = (data.get("title") or "").strip()
    if not title:
        return JsonResponse({"error": "missing_fields", "required": ["title"]}, status=400)

    try:
        task = firestore_service.add_task(user["uid"], title)
    except Exception as e:
        return error_response(e, context)
    return JsonResponse(serialize(task), status=201)


@csrf_exempt
@allowed_methods("PATCH")
@firebase_user_required("/api/tasks")
def task_detail(request, user, context, task_id):
    data, error = json_body(request)
    if error:
        return error

    completed = data.get("completed")
    if not isinstance(completed, bool):
        return JsonResponse({"error": "completed must be a boolean"}, status=400)

    try:
        found = firestore_service.set_task_completed(user["uid"], task_id, completed)
    except Exception as e:
        return error_response(e, context)
    if not found:
        return JsonResponse({"error": "task_not_found"}, status=404)
    return JsonResponse({"id": task_id, "completed": completed})
