import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..auth import firebase_user_required
from ..errors import error_response
from ..firebase_service import firestore_service
from ..http import allowed_methods

logger = logging.getLogger("wedly")


@csrf_exempt
@allowed_methods("POST")
@firebase_user_required("/api/set-admin")
def set_admin(request, user, context):
    """Give the caller the isAdmin custom claim. Takes effect on their next token refresh."""
    try:
        firestore_service.set_admin_claim(user["uid"])
    except Exception as e:
        return error_response(e, context)
    logger.info(f"[ADMIN] isAdmin claim set for {user['uid']}")
    return JsonResponse({"message": f"Success! User {user['uid']} has been made an admin."})
