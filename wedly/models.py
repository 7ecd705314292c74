# Data lives in Firebase Firestore, not the Django DB.
#
# Firestore Collections:
# - users/{uid}: profile plus premium flag (premium, premiumSince)
#   - tasks, guests, expenses subcollections
#   - budget/summary: {total, spent}
# - purchases/{stripeSessionId}: completed one-off payments
# - photos/{id}, visionboard/{id}: owned through their userId field
#
# See firebase_service.py for Firestore operations.
