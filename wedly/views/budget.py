from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..auth import firebase_user_required
from ..constants import BUDGET_CATEGORIES
from ..errors import error_response
from ..firebase_service import firestore_service
from ..http import allowed_methods, json_body
from .serializers import serialize


def _number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


@csrf_exempt
@allowed_methods("GET", "PUT")
@firebase_user_required("/api/budget")
def budget(request, user, context):
    if request.method == "GET":
        try:
            summary = firestore_service.get_budget_summary(user["uid"])
            expenses = firestore_service.list_expenses(user["uid"])
        except Exception as e:
            return error_response(e, context)
        return JsonResponse({
            "total": summary["total"],
            "spent": summary["spent"],
            "remaining": summary["total"] - summary["spent"],
            "expenses": serialize(expenses),
        })

    data, error = json_body(request)
    if error:
        return error

    total = _number(data.get("total"))
    if total is None or total < 0:
        return JsonResponse({"error": "total must be a non-negative number"}, status=400)

    try:
        firestore_service.set_budget_total(user["uid"], total)
    except Exception as e:
        return error_response(e, context)
    return JsonResponse({"total": total})


@csrf_exempt
@allowed_methods("POST")
@firebase_user_required("/api/budget/expenses")
def expenses(request, user, context):
    data, error = json_body(request)
    if error:
        return error

    category = data.get("category")
    vendor = (data.get("vendor") or "").strip()
    actual = _number(data.get("actual"))
    due_date = data.get("dueDate")

    missing = [name for name, value in (
        ("category", category), ("vendor", vendor), ("actual", actual), ("dueDate", due_date),
    ) if value in (None, "")]
    if missing:
        return JsonResponse({"error": "missing_fields", "required": missing}, status=400)
    if category not in BUDGET_CATEGORIES:
        return JsonResponse({"error": f"invalid_category: {category}",
                             "allowed": list(BUDGET_CATEGORIES)}, status=400)
    if actual < 0:
        return JsonResponse({"error": "actual must be a non-negative number"}, status=400)

    try:
        expense = firestore_service.add_expense(user["uid"], category, vendor, actual, due_date)
    except Exception as e:
        return error_response(e, context)
    return JsonResponse(serialize(expense), status=201)


@csrf_exempt
@allowed_methods("POST")
@firebase_user_required("/api/budget/expenses/toggle-paid")
def expense_toggle_paid(request, user, context, expense_id):
    try:
        result = firestore_service.toggle_expense_paid(user["uid"], expense_id)
    except Exception as e:
        return error_response(e, context)
    if result is None:
        return JsonResponse({"error": "expense_not_found"}, status=404)
    return JsonResponse(result)


@csrf_exempt
@allowed_methods("POST")
@firebase_user_required("/api/budget/expenses/toggle-reminder")
def expense_toggle_reminder(request, user, context, expense_id):
    try:
        reminder = firestore_service.toggle_expense_reminder(user["uid"], expense_id)
    except Exception as e:
        return error_response(e, context)
    if reminder is None:
        return JsonResponse({"error": "expense_not_found"}, status=404)
    return JsonResponse({"id": expense_id, "reminder": reminder})
