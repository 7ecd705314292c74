"""
Purchase confirmation emails, sent through Django's mail framework.

SMTP settings come from EMAIL_HOST / EMAIL_PORT / EMAIL_USER / EMAIL_PASS /
EMAIL_SECURE / EMAIL_FROM (see config/settings.py). Sending never raises:
callers get an EmailResult and decide what to do with a failure.
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.utils.html import escape

from .constants import PRODUCT_NAME

logger = logging.getLogger("wedly")

EMAIL_TIMEZONE = ZoneInfo("Australia/Sydney")
SMTP_BACKEND = "django.core.mail.backends.smtp.EmailBackend"


@dataclass
class EmailData:
    user_email: str
    transaction_id: str
    amount: str
    purchase_date: str
    user_name: str = "Valued Customer"
    product_name: str = PRODUCT_NAME
    receipt_url: Optional[str] = None


@dataclass
class EmailResult:
    success: bool
    user_email: str
    transaction_id: str
    duration_ms: int
    message_id: Optional[str] = None
    error: Optional[str] = None


def format_currency(amount_in_cents: int, currency: str = "AUD") -> str:
    """4999, "aud" -> "$49.99 AUD"."""
    return f"${amount_in_cents / 100:,.2f} {currency.upper()}"


def format_email_date(value: Union[datetime, int, float]) -> str:
    """Render a datetime or unix timestamp as e.g. "January 15, 2024 at 10:30 AM" Sydney time."""
    if isinstance(value, (int, float)):
        value = datetime.fromtimestamp(value, tz=EMAIL_TIMEZONE)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=ZoneInfo("UTC"))
    local = value.astimezone(EMAIL_TIMEZONE)
    return f"{local:%B} {local.day}, {local.year} at {local:%I:%M %p}"


def _missing_smtp_settings():
    if settings.EMAIL_BACKEND != SMTP_BACKEND:
        return []
    required = {
        "EMAIL_HOST": settings.EMAIL_HOST,
        "EMAIL_USER": settings.EMAIL_HOST_USER,
        "EMAIL_PASS": settings.EMAIL_HOST_PASSWORD,
    }
    return [name for name, value in required.items() if not value]


def render_html(data: EmailData) -> str:
    user_name = escape(data.user_name)
    product_name = escape(data.product_name)
    amount = escape(data.amount)
    transaction_id = escape(data.transaction_id)
    purchase_date = escape(data.purchase_date)
    user_email = escape(data.user_email)

    receipt_html = ""
    if data.receipt_url:
        receipt_html = f"""
        <div style="text-align:center;">
          <a href="{escape(data.receipt_url)}" style="display:inline-block;background:#007bff;color:#fff;padding:12px 24px;text-decoration:none;border-radius:6px;margin:20px 0;">View Receipt</a>
        </div>"""

    row = '<tr><td style="padding:6px 0;font-weight:600;color:#495057;">{label}</td><td style="padding:6px 0;color:#2c3e50;">{value}</td></tr>'
    rows = "".join([
        row.format(label="Product:", value=product_name),
        row.format(label="Amount:", value=f'<strong style="color:#28a745;">{amount}</strong>'),
        row.format(label="Transaction ID:", value=transaction_id),
        row.format(label="Purchase Date:", value=purchase_date),
        row.format(label="Email:", value=user_email),
    ])

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Purchase Confirmation - Wedly</title>
</head>
<body style="font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;line-height:1.6;color:#333;background:#f9f9f9;margin:0;padding:20px;">
  <div style="max-width:600px;margin:0 auto;background:#fff;border-radius:8px;padding:30px;box-shadow:0 2px 10px rgba(0,0,0,0.1);">
    <div style="text-align:center;border-bottom:2px solid #e9ecef;padding-bottom:20px;margin-bottom:30px;">
      <div style="font-size:28px;font-weight:bold;color:#2c3e50;">Wedly</div>
      <h1 style="font-size:24px;color:#2c3e50;">Payment Confirmed!</h1>
      <p style="color:#6c757d;">Thank you for your purchase</p>
    </div>
    <p>Hi {user_name},</p>
    <p>We're excited to confirm that your payment has been successfully processed. Here are the details of your purchase:</p>
    <table style="width:100%;margin:30px 0;padding:20px;background:#f8f9fa;border-left:4px solid #28a745;">{rows}</table>{receipt_html}
    <p>Your purchase has been recorded in your account, and you can view your purchase history anytime by logging into your Wedly account.</p>
    <div style="margin-top:20px;padding:15px;background:#e3f2fd;border-radius:6px;font-size:14px;">
      <strong>Need Help?</strong><br>
      If you have any questions about your purchase, please contact our support team.
    </div>
    <div style="margin-top:40px;padding-top:20px;border-top:1px solid #e9ecef;text-align:center;color:#6c757d;font-size:14px;">
      <p>Thank you for choosing Wedly!</p>
      <p>This email was sent to {user_email}</p>
      <p style="font-size:12px;">This is an automated message. Please do not reply to this email.</p>
    </div>
  </div>
</body>
</html>"""


def render_text(data: EmailData) -> str:
    lines = [
        "WEDLY - PAYMENT CONFIRMATION",
        "",
        f"Hi {data.user_name},",
        "",
        "We're excited to confirm that your payment has been successfully processed!",
        "",
        "PURCHASE DETAILS:",
        f"- Product: {data.product_name}",
        f"- Amount: {data.amount}",
        f"- Transaction ID: {data.transaction_id}",
        f"- Purchase Date: {data.purchase_date}",
        f"- Email: {data.user_email}",
        "",
    ]
    if data.receipt_url:
        lines += [f"View your receipt: {data.receipt_url}", ""]
    lines += [
        "Your purchase has been recorded in your account, and you can view your purchase "
        "history anytime by logging into your Wedly account.",
        "",
        "Thank you for choosing Wedly!",
        "",
        "---",
        f"This email was sent to {data.user_email}",
        "This is an automated message. Please do not reply to this email.",
    ]
    return "\n".join(lines)


def send_purchase_confirmation_email(data: EmailData) -> EmailResult:
    started = time.monotonic()

    def _result(success, message_id=None, error=None):
        return EmailResult(
            success=success,
            user_email=data.user_email,
            transaction_id=data.transaction_id,
            duration_ms=int((time.monotonic() - started) * 1000),
            message_id=message_id,
            error=error,
        )

    missing_fields = [
        name for name, value in (
            ("user_email", data.user_email),
            ("transaction_id", data.transaction_id),
            ("amount", data.amount),
        ) if not value
    ]
    if missing_fields:
        logger.error(f"[EMAIL] Invalid email data, missing: {missing_fields}")
        return _result(False, error=f"Invalid email data: missing {', '.join(missing_fields)}")

    missing_settings = _missing_smtp_settings()
    if missing_settings:
        logger.error(f"[EMAIL] Email configuration missing: {missing_settings}")
        return _result(False, error=f"Email configuration missing: {', '.join(missing_settings)}")

    message_id = f"<purchase-{data.transaction_id}@wedly.app>"
    message = EmailMultiAlternatives(
        subject=f"Purchase Confirmation - {data.product_name} - {data.transaction_id}",
        body=render_text(data),
        from_email=f"Wedly <{settings.DEFAULT_FROM_EMAIL}>",
        to=[data.user_email],
        headers={"Message-ID": message_id},
        connection=get_connection(fail_silently=False),
    )
    message.attach_alternative(render_html(data), "text/html")

    logger.info(f"[EMAIL] Sending purchase confirmation to {data.user_email} for {data.transaction_id}")
    try:
        message.send()
    except Exception as e:
        result = _result(False, error=str(e))
        logger.error(
            f"[EMAIL] Failed to send purchase confirmation after {result.duration_ms}ms: "
            f"{type(e).__name__}: {e} (host={settings.EMAIL_HOST}, port={settings.EMAIL_PORT})"
        )
        return result

    result = _result(True, message_id=message_id)
    logger.info(f"[EMAIL] Purchase confirmation sent in {result.duration_ms}ms: {message_id}")
    return result


def check_email_configuration() -> EmailResult:
    """Open and close an SMTP connection to check the configured server."""
    started = time.monotonic()
    missing_settings = _missing_smtp_settings()
    if missing_settings:
        return EmailResult(False, "", "", 0, error=f"Email configuration missing: {', '.join(missing_settings)}")
    try:
        connection = get_connection(fail_silently=False)
        connection.open()
        connection.close()
    except Exception as e:
        return EmailResult(False, "", "", int((time.monotonic() - started) * 1000), error=str(e))
    return EmailResult(True, "", "", int((time.monotonic() - started) * 1000))
