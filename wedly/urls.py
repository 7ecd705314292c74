from django.urls import path
from . import views

urlpatterns = [
    # Health check
    path("health", views.health, name="health"),

    # Payments
    path("create-checkout-session", views.create_checkout_session, name="create_checkout_session"),
    path("checkout-session/<str:session_id>", views.checkout_session_detail, name="checkout_session_detail"),
    path("webhooks/stripe", views.stripe_webhook, name="stripe_webhook"),
    path("purchases", views.purchases, name="purchases"),
    path("subscription", views.subscription, name="subscription"),

    # AI flows
    path("flows/<slug:flow_name>", views.run_flow, name="run_flow"),
    path("wedding-assistant", views.wedding_assistant, name="wedding_assistant"),

    # Planner data, scoped to the token's uid
    path("tasks", views.tasks, name="tasks"),
    path("tasks/<str:task_id>", views.task_detail, name="task_detail"),
    path("guests", views.guests, name="guests"),
    path("guests/<str:guest_id>", views.guest_detail, name="guest_detail"),
    path("vision-board", views.vision_board, name="vision_board"),
    path("vision-board/unsplash", views.vision_board_unsplash, name="vision_board_unsplash"),
    path("vision-board/reorder", views.vision_board_reorder, name="vision_board_reorder"),
    path("photos", views.photos, name="photos"),
    path("budget", views.budget, name="budget"),
    path("budget/expenses", views.expenses, name="expenses"),
    path("budget/expenses/<str:expense_id>/toggle-paid", views.expense_toggle_paid, name="expense_toggle_paid"),
    path("budget/expenses/<str:expense_id>/toggle-reminder", views.expense_toggle_reminder, name="expense_toggle_reminder"),

    # Admin
    path("set-admin", views.set_admin, name="set_admin"),
]
