import os

# One-off payment: $49.99 AUD
PRODUCT_NAME = "Wedly Service"
PRODUCT_DESCRIPTION = "One-time payment for Wedly service access"
PRICE_AMOUNT_CENTS = 4999
PRICE_CURRENCY = "aud"
CHECKOUT_SESSION_TTL_SECONDS = 24 * 60 * 60
STRIPE_API_VERSION = "2023-10-16"

# Firestore collections
USERS_COLLECTION = "users"
PURCHASES_COLLECTION = "purchases"
PHOTOS_COLLECTION = "photos"
VISIONBOARD_COLLECTION = "visionboard"
TASKS_SUBCOLLECTION = "tasks"
GUESTS_SUBCOLLECTION = "guests"
EXPENSES_SUBCOLLECTION = "expenses"
BUDGET_SUBCOLLECTION = "budget"
BUDGET_SUMMARY_DOC = "summary"

PURCHASE_STATUS_COMPLETED = "completed"

RSVP_CONFIRMED = "Confirmed"
RSVP_PENDING = "Pending"
RSVP_DECLINED = "Declined"
RSVP_VALUES = (RSVP_CONFIRMED, RSVP_PENDING, RSVP_DECLINED)

VOW_TONES = ("humorous", "romantic", "sentimental", "traditional")

BUDGET_CATEGORIES = (
    "Venue",
    "Catering",
    "Photography",
    "Videography",
    "Attire",
    "Flowers",
    "Decorations",
    "Entertainment",
    "Stationery",
    "Wedding Favors",
)

# Starter checklist written on a user's first task read
INITIAL_TASKS = (
    {"title": "Set a date and book venue", "dueDate": "12 months out", "completed": True},
    {"title": "Finalize guest list", "dueDate": "10 months out", "completed": True},
    {"title": "Book photographer and videographer", "dueDate": "9 months out", "completed": True},
    {"title": "Hire a caterer", "dueDate": "8 months out", "completed": False},
    {"title": "Send save-the-dates", "dueDate": "6-8 months out", "completed": False},
    {"title": "Purchase wedding attire", "dueDate": "6 months out", "completed": True},
    {"title": "Book entertainment", "dueDate": "5 months out", "completed": False},
    {"title": "Order invitations", "dueDate": "4 months out", "completed": False},
    {"title": "Finalize menu and floral selections", "dueDate": "3 months out", "completed": False},
    {"title": "Apply for marriage license", "dueDate": "1 month out", "completed": False},
    {"title": "Confirm final details with vendors", "dueDate": "1-2 weeks out", "completed": False},
)

# Shown while a user's album is still empty
PLACEHOLDER_PHOTOS = (
    {"src": "https://placehold.co/600x400.png", "alt": "Guest photo 1", "hint": "wedding guests"},
    {"src": "https://placehold.co/400x600.png", "alt": "Guest photo 2", "hint": "bride groom"},
    {"src": "https://placehold.co/600x400.png", "alt": "Guest photo 3", "hint": "wedding dance"},
    {"src": "https://placehold.co/600x400.png", "alt": "Guest photo 4", "hint": "wedding toast"},
    {"src": "https://placehold.co/400x600.png", "alt": "Guest photo 5", "hint": "wedding cake"},
    {"src": "https://placehold.co/600x400.png", "alt": "Guest photo 6", "hint": "newlyweds kissing"},
)

# Gemini models
TEXT_MODEL = os.environ.get("WEDLY_TEXT_MODEL", "gemini-2.0-flash")
IMAGE_MODEL = os.environ.get("WEDLY_IMAGE_MODEL", "gemini-2.0-flash-preview-image-generation")

# Unsplash
UNSPLASH_API_URL = os.environ.get("UNSPLASH_API_URL", "https://api.unsplash.com")
UNSPLASH_PER_PAGE = 20
UNSPLASH_ORIENTATION = "squarish"

# Rate limits: (max requests, window seconds)
RATE_LIMITS = {
    "payment": (5, 15 * 60),
    "webhook": (100, 60),
    "assistant": (20, 60),
}
