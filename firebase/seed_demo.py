"""
Firestore seed script (demo planner data)
Run with (after pip install -e .): python3 firebase/seed_demo.py --uid <firebase uid> [--reset] [--premium]

Writes a believable wedding plan for one user: starter checklist, guest
list, budget summary with expenses, and a vision board. Works against the
emulator when FIREBASE_USE_EMULATOR=true.
"""

import argparse
import json
import os
import sys
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import firebase_admin
from firebase_admin import credentials, firestore

from wedly.constants import (
    BUDGET_SUBCOLLECTION,
    BUDGET_SUMMARY_DOC,
    EXPENSES_SUBCOLLECTION,
    GUESTS_SUBCOLLECTION,
    INITIAL_TASKS,
    TASKS_SUBCOLLECTION,
    USERS_COLLECTION,
    VISIONBOARD_COLLECTION,
)


def _require_env(name):
    value = os.environ.get(name)
    if not value:
        print(f"Missing env: {name}", file=sys.stderr)
        sys.exit(1)
    return value


def _init_firebase():
    project_id = _require_env("FIREBASE_PROJECT_ID")

    if os.environ.get("FIREBASE_USE_EMULATOR", "").lower() == "true":
        os.environ.setdefault("FIRESTORE_EMULATOR_HOST", "127.0.0.1:8080")
        firebase_admin.initialize_app(options={"projectId": project_id})
        return

    service_account_json = os.environ.get("FIREBASE_SERVICE_ACCOUNT")
    service_account_path = os.environ.get("FIREBASE_SERVICE_ACCOUNT_PATH")

    if service_account_json:
        try:
            cred = credentials.Certificate(json.loads(service_account_json))
        except json.JSONDecodeError as exc:
            print(f"Invalid FIREBASE_SERVICE_ACCOUNT JSON: {exc}", file=sys.stderr)
            sys.exit(1)
    elif service_account_path and os.path.exists(service_account_path):
        cred = credentials.Certificate(service_account_path)
    else:
        print(
            "Provide FIREBASE_SERVICE_ACCOUNT or FIREBASE_SERVICE_ACCOUNT_PATH, "
            "or set FIREBASE_USE_EMULATOR=true.",
            file=sys.stderr,
        )
        sys.exit(1)

    firebase_admin.initialize_app(cred, options={"projectId": project_id})


def _clear_collection(collection_ref):
    for doc in collection_ref.stream():
        doc.reference.delete()


def clear_user(db, uid):
    print(f"🧹 Clearing planner data for {uid}...")
    user_ref = db.collection(USERS_COLLECTION).document(uid)
    for name in (TASKS_SUBCOLLECTION, GUESTS_SUBCOLLECTION, EXPENSES_SUBCOLLECTION, BUDGET_SUBCOLLECTION):
        _clear_collection(user_ref.collection(name))
    for doc in db.collection(VISIONBOARD_COLLECTION).where("userId", "==", uid).stream():
        doc.reference.delete()
    print("✅ Clear completed")


def seed(db, uid, premium=False):
    print(f"🌱 Seeding demo wedding plan for {uid}...")

    now = datetime.now(ZoneInfo("Australia/Sydney"))
    user_ref = db.collection(USERS_COLLECTION).document(uid)

    user_ref.set({
        "uid": uid,
        "name1": "Olivia",
        "name2": "James",
        "premium": premium,
        "createdAt": now,
    }, merge=True)

    for i, task in enumerate(INITIAL_TASKS):
        user_ref.collection(TASKS_SUBCOLLECTION).add({
            **task,
            "createdAt": now + timedelta(milliseconds=i),
        })

    guests = [
        {"name": "Charlotte Nguyen", "group": "Bride's Family", "rsvp": "Confirmed", "table": 1},
        {"name": "Henry Nguyen", "group": "Bride's Family", "rsvp": "Confirmed", "table": 1},
        {"name": "Amelia Clarke", "group": "Groom's Family", "rsvp": "Pending", "table": None},
        {"name": "Jack Clarke", "group": "Groom's Family", "rsvp": "Confirmed", "table": 2},
        {"name": "Mia Thompson", "group": "University Friends", "rsvp": "Declined", "table": None},
        {"name": "Noah Patel", "group": "University Friends", "rsvp": "Pending", "table": None},
        {"name": "Isla Robinson", "group": "Work", "rsvp": "Confirmed", "table": 3},
    ]
    for guest in guests:
        user_ref.collection(GUESTS_SUBCOLLECTION).add(guest)

    expenses = [
        {"category": "Venue", "vendor": "Harbourside Pavilion", "actual": 12000, "paid": True, "days": -30},
        {"category": "Catering", "vendor": "Fig & Olive Catering", "actual": 9500, "paid": False, "days": 45},
        {"category": "Photography", "vendor": "Golden Hour Studio", "actual": 3800, "paid": True, "days": -10},
        {"category": "Flowers", "vendor": "Wildflower Lane", "actual": 1600, "paid": False, "days": 60},
    ]
    spent = 0
    for e in expenses:
        if e["paid"]:
            spent += e["actual"]
        user_ref.collection(EXPENSES_SUBCOLLECTION).add({
            "category": e["category"],
            "vendor": e["vendor"],
            "estimated": e["actual"],
            "actual": e["actual"],
            "dueDate": now + timedelta(days=e["days"]),
            "paid": e["paid"],
            "reminder": not e["paid"],
        })

    user_ref.collection(BUDGET_SUBCOLLECTION).document(BUDGET_SUMMARY_DOC).set({
        "total": 40000,
        "spent": spent,
    })

    vision = [
        ("https://placehold.co/600x400.png", "Rustic barn reception with fairy lights"),
        ("https://placehold.co/400x600.png", "Blush and ivory bouquet"),
        ("https://placehold.co/600x400.png", "Sunset beach ceremony arch"),
    ]
    for order, (src, alt) in enumerate(vision):
        db.collection(VISIONBOARD_COLLECTION).add({
            "src": src,
            "alt": alt,
            "hint": " ".join(alt.split(" ")[:2]),
            "order": order,
            "userId": uid,
        })

    print(
        f"✅ Seed completed: {len(INITIAL_TASKS)} tasks, {len(guests)} guests, "
        f"{len(expenses)} expenses, {len(vision)} vision images"
    )


def main():
    parser = argparse.ArgumentParser(description="Seed demo wedding planner data for one user")
    parser.add_argument("--uid", required=True, help="Firebase Auth uid to seed")
    parser.add_argument("--reset", action="store_true", help="Clear the user's planner data first")
    parser.add_argument("--premium", action="store_true", help="Mark the user as premium")
    args = parser.parse_args()

    _init_firebase()
    db = firestore.client()

    if args.reset:
        clear_user(db, args.uid)

    seed(db, args.uid, premium=args.premium)


if __name__ == "__main__":
    main()
