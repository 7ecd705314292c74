from .admin import set_admin
from .budget import budget, expense_toggle_paid, expense_toggle_reminder, expenses
from .checkout import checkout_session_detail, create_checkout_session, purchases, subscription
from .flows import run_flow, wedding_assistant
from .guests import guest_detail, guests
from .health import health
from .photos import photos
from .tasks import task_detail, tasks
from .vision_board import vision_board, vision_board_reorder, vision_board_unsplash
from .webhooks import stripe_webhook

__all__ = [
    "health",
    "create_checkout_session",
    "checkout_session_detail",
    "purchases",
    "subscription",
    "stripe_webhook",
    "run_flow",
    "wedding_assistant",
    "tasks",
    "task_detail",
    "guests",
    "guest_detail",
    "vision_board",
    "vision_board_unsplash",
    "vision_board_reorder",
    "photos",
    "budget",
    "expenses",
    "expense_toggle_paid",
    "expense_toggle_reminder",
    "set_admin",
]
