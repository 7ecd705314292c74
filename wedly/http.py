import json
import os
from functools import wraps
from typing import Tuple

from django.http import JsonResponse


def json_body(request) -> Tuple[dict, JsonResponse]:
    try:
        body = request.body.decode("utf-8") if request.body else "{}"
        data = json.loads(body)
        if not isinstance(data, dict):
            raise ValueError("JSON body must be an object")
        return data, None
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
        return None, JsonResponse({"error": f"invalid_json: {exc}"}, status=400)


def require_env(*keys):
    missing = [key for key in keys if not os.environ.get(key)]
    if missing:
        return JsonResponse({
            "error": "Configuration error: missing environment variables",
            "missing": missing,
        }, status=500)
    return None


def method_not_allowed(allowed):
    response = JsonResponse({"error": "Method not allowed", "allowed": list(allowed)}, status=405)
    response["Allow"] = ", ".join(allowed)
    return response


def client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "unknown")


def request_origin(request, default: str) -> str:
    return request.headers.get("Origin") or default


def allowed_methods(*methods):
    """Answer other HTTP methods with a JSON 405 before the view runs."""
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            if request.method not in methods:
                return method_not_allowed(methods)
            return view(request, *args, **kwargs)
        return wrapper
    return decorator
