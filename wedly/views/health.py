from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..firebase_service import firestore_service
from ..http import allowed_methods
from ..stripe_service import stripe_service


@csrf_exempt
@allowed_methods("GET")
def health(request):
    firestore_ok = firestore_service.is_available()

    return JsonResponse({
        "status": "ok",
        "firestore": "connected" if firestore_ok else "not_configured",
        "stripe": "configured" if stripe_service.is_configured() else "not_configured",
    })
