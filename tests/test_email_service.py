from datetime import datetime, timezone
from unittest import mock

from wedly.email_service import (
    SMTP_BACKEND,
    EmailData,
    check_email_configuration,
    format_currency,
    format_email_date,
    render_html,
    send_purchase_confirmation_email,
)


def _data(**overrides):
    values = dict(
        user_email="olivia@example.com",
        transaction_id="pi_test_123",
        amount="$49.99 AUD",
        purchase_date="January 16, 2024 at 10:30 AM",
    )
    values.update(overrides)
    return EmailData(**values)


def test_format_currency():
    assert format_currency(4999, "aud") == "$49.99 AUD"
    assert format_currency(125000, "usd") == "$1,250.00 USD"


def test_format_email_date_uses_sydney_time():
    # 23:30 UTC in January is 10:30 the next morning in Sydney (AEDT)
    value = datetime(2024, 1, 15, 23, 30, tzinfo=timezone.utc)

    assert format_email_date(value) == "January 16, 2024 at 10:30 AM"


def test_format_email_date_accepts_timestamps():
    assert format_email_date(1705361400) == "January 16, 2024 at 10:30 AM"


def test_sends_text_and_html(mailoutbox):
    result = send_purchase_confirmation_email(_data())

    assert result.success
    assert result.message_id == "<purchase-pi_test_123@wedly.app>"
    message = mailoutbox[0]
    assert message.from_email == "Wedly <no-reply@wedly.app>"
    assert message.extra_headers["Message-ID"] == result.message_id
    html, mimetype = message.alternatives[0]
    assert mimetype == "text/html"
    assert "Payment Confirmed!" in html
    assert "pi_test_123" in message.body


def test_receipt_link_is_optional(mailoutbox):
    send_purchase_confirmation_email(_data(receipt_url="https://pay.stripe.com/receipts/abc"))

    assert "View your receipt: https://pay.stripe.com/receipts/abc" in mailoutbox[0].body


def test_missing_fields_are_reported(mailoutbox):
    result = send_purchase_confirmation_email(_data(user_email="", amount=""))

    assert not result.success
    assert result.error == "Invalid email data: missing user_email, amount"
    assert mailoutbox == []


def test_missing_smtp_configuration(settings, mailoutbox):
    settings.EMAIL_BACKEND = SMTP_BACKEND
    settings.EMAIL_HOST = ""
    settings.EMAIL_HOST_USER = "mailer"
    settings.EMAIL_HOST_PASSWORD = ""

    result = send_purchase_confirmation_email(_data())

    assert not result.success
    assert result.error == "Email configuration missing: EMAIL_HOST, EMAIL_PASS"


def test_send_failure_is_returned_not_raised():
    with mock.patch("wedly.email_service.EmailMultiAlternatives.send",
                    side_effect=ConnectionRefusedError("Connection refused")):
        result = send_purchase_confirmation_email(_data())

    assert not result.success
    assert "Connection refused" in result.error


def test_html_escapes_user_values():
    html = render_html(_data(user_name="<script>alert(1)</script>"))

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_check_email_configuration_reports_missing_settings(settings):
    settings.EMAIL_BACKEND = SMTP_BACKEND
    settings.EMAIL_HOST = ""
    settings.EMAIL_HOST_USER = ""
    settings.EMAIL_HOST_PASSWORD = ""

    result = check_email_configuration()

    assert not result.success
    assert result.error.startswith("Email configuration missing")
