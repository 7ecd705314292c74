"""
Firebase service for Django - Firestore and Auth integration for Wedly.

Firestore Collections:
- users/{uid}: Profile (email, name1, name2, photoURL) and premium flag
- users/{uid}/tasks, guests, expenses: Planner data owned by the user
- users/{uid}/budget/summary: Budget totals {total, spent}
- purchases/{checkoutSessionId}: One document per paid Stripe checkout
- visionboard/{id}: Vision board images, owner in userId
- photos/{id}: Album photos, owner in userId
"""
import json
import logging
import os
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional

import firebase_admin
from django.utils import timezone
from firebase_admin import auth as fb_auth
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions

from .constants import (
    BUDGET_SUBCOLLECTION,
    BUDGET_SUMMARY_DOC,
    EXPENSES_SUBCOLLECTION,
    GUESTS_SUBCOLLECTION,
    INITIAL_TASKS,
    PHOTOS_COLLECTION,
    PURCHASES_COLLECTION,
    RSVP_VALUES,
    TASKS_SUBCOLLECTION,
    USERS_COLLECTION,
    VISIONBOARD_COLLECTION,
)
from .errors import AppError, ErrorCategory

logger = logging.getLogger("wedly")

# Firebase Admin initialization
_firebase_app = None
_firestore_client = None
_firebase_init_attempted = False


def _build_credential():
    """Service account from FIREBASE_SERVICE_ACCOUNT(_PATH) or the split FIREBASE_* vars."""
    service_account_json = os.environ.get("FIREBASE_SERVICE_ACCOUNT")
    service_account_path = os.environ.get("FIREBASE_SERVICE_ACCOUNT_PATH")

    if service_account_json:
        try:
            cred = credentials.Certificate(json.loads(service_account_json))
            logger.info("Using FIREBASE_SERVICE_ACCOUNT env var")
            return cred
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Invalid FIREBASE_SERVICE_ACCOUNT JSON: {e}")
            return None

    if service_account_path and os.path.exists(service_account_path):
        logger.info(f"Using service account from {service_account_path}")
        return credentials.Certificate(service_account_path)

    project_id = os.environ.get("FIREBASE_PROJECT_ID")
    client_email = os.environ.get("FIREBASE_CLIENT_EMAIL")
    private_key = os.environ.get("FIREBASE_PRIVATE_KEY")
    if project_id and client_email and private_key:
        try:
            cred = credentials.Certificate({
                "type": "service_account",
                "project_id": project_id,
                "client_email": client_email,
                # Env vars can't hold real newlines
                "private_key": private_key.replace("\\n", "\n"),
                "token_uri": "https://oauth2.googleapis.com/token",
            })
            logger.info("Using FIREBASE_PROJECT_ID/CLIENT_EMAIL/PRIVATE_KEY env vars")
            return cred
        except ValueError as e:
            logger.error(f"Invalid Firebase private key: {e}")
            return None

    return None


def get_firebase_app():
    """Get or initialize Firebase Admin app"""
    global _firebase_app, _firebase_init_attempted

    if _firebase_app is not None:
        return _firebase_app

    if _firebase_init_attempted:
        # Already tried and failed
        return None

    _firebase_init_attempted = True

    use_emulator = os.environ.get("FIREBASE_USE_EMULATOR", "false").lower() == "true"
    project_id = os.environ.get("FIREBASE_PROJECT_ID")

    logger.info(f"Firebase init: use_emulator={use_emulator}, project_id={project_id}")

    if use_emulator:
        firestore_host = os.environ.get("FIRESTORE_EMULATOR_HOST", "localhost:8080")
        os.environ["FIRESTORE_EMULATOR_HOST"] = firestore_host
        os.environ.setdefault("FIREBASE_AUTH_EMULATOR_HOST", "localhost:9099")
        try:
            _firebase_app = firebase_admin.initialize_app(
                credential=None,
                options={"projectId": project_id or "demo-wedly"},
            )
            logger.info(f"Firebase Admin initialized with EMULATOR (Firestore: {firestore_host})")
        except ValueError:
            # Already initialized
            _firebase_app = firebase_admin.get_app()
        return _firebase_app

    cred = _build_credential()
    if cred is None:
        logger.warning("Firebase credentials not found - Firestore operations will fail")
        return None

    try:
        options = {"projectId": project_id} if project_id else None
        _firebase_app = firebase_admin.initialize_app(cred, options=options)
        logger.info("Firebase Admin initialized (production)")
    except ValueError:
        _firebase_app = firebase_admin.get_app()

    return _firebase_app


def get_firestore():
    """Get Firestore client"""
    global _firestore_client

    if _firestore_client is not None:
        return _firestore_client

    app = get_firebase_app()
    if app is None:
        return None

    try:
        _firestore_client = firestore.client(app)
        return _firestore_client
    except Exception as e:
        logger.error(f"Failed to get Firestore client: {e}")
        return None


def _with_id(doc) -> Dict[str, Any]:
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data


class FirestoreService:
    """Service class for Firestore and Firebase Auth operations"""

    def __init__(self):
        self._db = None

    @property
    def db(self):
        """Lazy initialization of Firestore client"""
        if self._db is None:
            self._db = get_firestore()
        return self._db

    def is_available(self) -> bool:
        """Check if Firestore is available"""
        return self.db is not None

    def _require_db(self):
        db = self.db
        if db is None:
            raise AppError(
                "Firestore is not configured",
                ErrorCategory.CONFIGURATION,
                503,
                "Database unavailable. Please try again later.",
            )
        return db

    def _user_ref(self, user_id: str):
        return self._require_db().collection(USERS_COLLECTION).document(user_id)

    # =========================================================================
    # Auth
    # =========================================================================

    def verify_id_token(self, id_token: str) -> Dict[str, Any]:
        """Decode a Firebase ID token. Raises firebase_admin.auth errors on failure."""
        app = get_firebase_app()
        if app is None:
            raise AppError(
                "Firebase Admin is not configured",
                ErrorCategory.CONFIGURATION,
                500,
                "Authentication service error. Please try again later.",
            )
        return fb_auth.verify_id_token(id_token, app=app)

    def set_admin_claim(self, user_id: str) -> None:
        fb_auth.set_custom_user_claims(user_id, {"isAdmin": True}, app=get_firebase_app())
        logger.info(f"Set isAdmin claim for user {user_id}")

    # =========================================================================
    # Users
    # =========================================================================

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        doc = self._user_ref(user_id).get()
        if not doc.exists:
            return None
        return doc.to_dict()

    def is_premium(self, user_id: str) -> bool:
        user = self.get_user(user_id)
        return bool(user and user.get("premium"))

    def grant_premium(self, user_id: str) -> None:
        self._user_ref(user_id).set({
            "premium": True,
            "premiumSince": timezone.now(),
        }, merge=True)
        logger.info(f"Granted premium access to user: {user_id}")

    # =========================================================================
    # Purchases
    # =========================================================================

    def get_purchase(self, session_id: str) -> Optional[Dict[str, Any]]:
        doc = self._require_db().collection(PURCHASES_COLLECTION).document(session_id).get()
        if not doc.exists:
            return None
        return doc.to_dict()

    def create_purchase(self, session_id: str, purchase: Dict[str, Any]) -> bool:
        """Create purchases/{session_id}. Returns False if it already exists."""
        try:
            self._require_db().collection(PURCHASES_COLLECTION).document(session_id).create(purchase)
        except google_exceptions.AlreadyExists:
            logger.info(f"Purchase record already exists: {session_id}")
            return False
        logger.info(f"Created purchase record: {session_id}")
        return True

    def list_purchases(self, user_id: str) -> List[Dict[str, Any]]:
        query = (
            self._require_db().collection(PURCHASES_COLLECTION)
            .where("userId", "==", user_id)
            .order_by("createdAt", direction=firestore.Query.DESCENDING)
        )
        return [_with_id(doc) for doc in query.stream()]

    # =========================================================================
    # Tasks
    # =========================================================================

    def list_tasks(self, user_id: str) -> List[Dict[str, Any]]:
        """Tasks ordered by createdAt; a user's first read seeds the starter checklist."""
        tasks_ref = self._user_ref(user_id).collection(TASKS_SUBCOLLECTION)
        docs = list(tasks_ref.order_by("createdAt").stream())
        if docs:
            return [_with_id(doc) for doc in docs]

        batch = self._require_db().batch()
        now = timezone.now()
        seeded = []
        for index, task in enumerate(INITIAL_TASKS):
            task_ref = tasks_ref.document()
            # Offset createdAt so the checklist keeps its order
            data = {**task, "createdAt": now + timedelta(milliseconds=index)}
            batch.set(task_ref, data)
            seeded.append({**data, "id": task_ref.id})
        batch.commit()
        logger.info(f"Seeded {len(seeded)} starter tasks for user {user_id}")
        return seeded

    def list_incomplete_tasks(self, user_id: str) -> List[Dict[str, Any]]:
        query = (
            self._user_ref(user_id).collection(TASKS_SUBCOLLECTION)
            .where("completed", "==", False)
        )
        return [_with_id(doc) for doc in query.stream()]

    def add_task(self, user_id: str, title: str) -> Dict[str, Any]:
        data = {
            "title": title,
            "dueDate": "Just added",
            "completed": False,
            "createdAt": timezone.now(),
        }
        _, task_ref = self._user_ref(user_id).collection(TASKS_SUBCOLLECTION).add(data)
        return {**data, "id": task_ref.id}

    def set_task_completed(self, user_id: str, task_id: str, completed: bool) -> bool:
        task_ref = self._user_ref(user_id).collection(TASKS_SUBCOLLECTION).document(task_id)
        if not task_ref.get().exists:
            return False
        task_ref.update({"completed": completed})
        return True

    # =========================================================================
    # Guests
    # =========================================================================

    def list_guests(self, user_id: str) -> List[Dict[str, Any]]:
        guests_ref = self._user_ref(user_id).collection(GUESTS_SUBCOLLECTION)
        return [_with_id(doc) for doc in guests_ref.order_by("name").stream()]

    def add_guest(self, user_id: str, name: str, group: str, rsvp: str,
                  table: Optional[int] = None) -> Dict[str, Any]:
        data = {"name": name, "group": group, "rsvp": rsvp, "table": table}
        _, guest_ref = self._user_ref(user_id).collection(GUESTS_SUBCOLLECTION).add(data)
        return {**data, "id": guest_ref.id}

    def update_guest_rsvp(self, user_id: str, guest_id: str, rsvp: str) -> bool:
        guest_ref = self._user_ref(user_id).collection(GUESTS_SUBCOLLECTION).document(guest_id)
        if not guest_ref.get().exists:
            return False
        guest_ref.update({"rsvp": rsvp})
        return True

    def delete_guest(self, user_id: str, guest_id: str) -> bool:
        guest_ref = self._user_ref(user_id).collection(GUESTS_SUBCOLLECTION).document(guest_id)
        if not guest_ref.get().exists:
            return False
        guest_ref.delete()
        return True

    def guest_rsvp_counts(self, user_id: str) -> Dict[str, int]:
        guests_ref = self._user_ref(user_id).collection(GUESTS_SUBCOLLECTION)
        counts = {rsvp: 0 for rsvp in RSVP_VALUES}
        for rsvp in RSVP_VALUES:
            counts[rsvp] = sum(1 for _ in guests_ref.where("rsvp", "==", rsvp).stream())
        return counts

    # =========================================================================
    # Vision board
    # =========================================================================

    def list_vision_images(self, user_id: str) -> List[Dict[str, Any]]:
        query = (
            self._require_db().collection(VISIONBOARD_COLLECTION)
            .where("userId", "==", user_id)
            .order_by("order")
        )
        return [_with_id(doc) for doc in query.stream()]

    def add_vision_image(self, user_id: str, src: str, alt: str, hint: str) -> Dict[str, Any]:
        """Append an image after the user's current last one."""
        existing = self.list_vision_images(user_id)
        order = max(image.get("order", 0) for image in existing) + 1 if existing else 0
        data = {
            "src": src,
            "alt": alt,
            "hint": hint,
            "order": order,
            "userId": user_id,
        }
        _, image_ref = self._require_db().collection(VISIONBOARD_COLLECTION).add(data)
        return {**data, "id": image_ref.id}

    def reorder_vision_images(self, user_id: str, image_ids: Iterable[str]) -> List[str]:
        """
        Set order=index for each id. Returns the ids that are not the user's
        images; nothing is written when that list is non-empty.
        """
        image_ids = list(image_ids)
        owned = {image["id"] for image in self.list_vision_images(user_id)}
        unknown = [image_id for image_id in image_ids if image_id not in owned]
        if unknown:
            return unknown

        collection = self._require_db().collection(VISIONBOARD_COLLECTION)
        for index, image_id in enumerate(image_ids):
            collection.document(image_id).set({"order": index}, merge=True)
        return []

    # =========================================================================
    # Photos
    # =========================================================================

    def list_photos(self, user_id: str) -> List[Dict[str, Any]]:
        query = (
            self._require_db().collection(PHOTOS_COLLECTION)
            .where("userId", "==", user_id)
            .order_by("createdAt", direction=firestore.Query.DESCENDING)
        )
        return [_with_id(doc) for doc in query.stream()]

    def add_photo(self, user_id: str, src: str, alt: str, hint: str) -> Dict[str, Any]:
        data = {
            "src": src,
            "alt": alt,
            "hint": hint,
            "userId": user_id,
            "createdAt": timezone.now(),
        }
        _, photo_ref = self._require_db().collection(PHOTOS_COLLECTION).add(data)
        return {**data, "id": photo_ref.id}

    # =========================================================================
    # Budget
    # =========================================================================

    def _budget_ref(self, user_id: str):
        return self._user_ref(user_id).collection(BUDGET_SUBCOLLECTION).document(BUDGET_SUMMARY_DOC)

    def get_budget_summary(self, user_id: str) -> Dict[str, float]:
        doc = self._budget_ref(user_id).get()
        data = doc.to_dict() if doc.exists else {}
        return {
            "total": (data or {}).get("total", 0) or 0,
            "spent": (data or {}).get("spent", 0) or 0,
        }

    def set_budget_total(self, user_id: str, total: float) -> None:
        self._budget_ref(user_id).set({"total": total}, merge=True)

    def list_expenses(self, user_id: str) -> List[Dict[str, Any]]:
        expenses_ref = self._user_ref(user_id).collection(EXPENSES_SUBCOLLECTION)
        return [_with_id(doc) for doc in expenses_ref.order_by("dueDate").stream()]

    def add_expense(self, user_id: str, category: str, vendor: str, actual: float,
                    due_date) -> Dict[str, Any]:
        data = {
            "category": category,
            "vendor": vendor,
            "actual": actual,
            "estimated": actual,
            "dueDate": due_date,
            "paid": False,
            "reminder": False,
        }
        _, expense_ref = self._user_ref(user_id).collection(EXPENSES_SUBCOLLECTION).add(data)
        return {**data, "id": expense_ref.id}

    def toggle_expense_paid(self, user_id: str, expense_id: str) -> Optional[Dict[str, Any]]:
        """
        Flip an expense's paid flag and move its amount in or out of the
        budget's spent total in one transaction. Returns None if the expense
        does not exist.
        """
        db = self._require_db()
        budget_ref = self._budget_ref(user_id)
        expense_ref = self._user_ref(user_id).collection(EXPENSES_SUBCOLLECTION).document(expense_id)

        @firestore.transactional
        def _txn(transaction):
            expense = expense_ref.get(transaction=transaction)
            if not expense.exists:
                return None
            summary = budget_ref.get(transaction=transaction)
            spent = (summary.to_dict() or {}).get("spent", 0) if summary.exists else 0

            expense_data = expense.to_dict() or {}
            amount = expense_data.get("actual", 0) or 0
            paid = bool(expense_data.get("paid"))
            new_spent = spent - amount if paid else spent + amount

            transaction.set(budget_ref, {"spent": new_spent}, merge=True)
            transaction.update(expense_ref, {"paid": not paid})
            return {"id": expense_id, "paid": not paid, "spent": new_spent}

        return _txn(db.transaction())

    def toggle_expense_reminder(self, user_id: str, expense_id: str) -> Optional[bool]:
        expense_ref = self._user_ref(user_id).collection(EXPENSES_SUBCOLLECTION).document(expense_id)
        doc = expense_ref.get()
        if not doc.exists:
            return None
        reminder = not bool((doc.to_dict() or {}).get("reminder"))
        expense_ref.update({"reminder": reminder})
        return reminder


# Singleton instance
firestore_service = FirestoreService()
