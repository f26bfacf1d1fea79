"""
Email Tests

MJML templates and the SMTP / Resend dispatch path.
"""

import asyncio

import pytest
import resend

from vtc_booking import config, email_service
from vtc_booking.email_service import EmailNotifier, send_booking_confirmation, send_booking_notification, send_email
from vtc_booking.email_templates import (
    booking_confirmation_template,
    booking_notification_template,
    format_date_fr,
)
from vtc_booking.exceptions import NotificationError


@pytest.fixture
def booking():
    return {
        "id": 12,
        "pickup": "Gare de Lyon, Paris",
        "destination": "Orly <Terminal 4>",
        "date": "2099-06-15",
        "time": "14:30",
        "passengers": 2,
        "serviceType": "premium",
        "name": "<script>alert(1)</script>",
        "phone": "06 12 34 56 78",
        "email": "camille@example.com",
        "notes": None,
    }


@pytest.fixture
def sent(monkeypatch):
    """Route Resend calls into a list and skip MJML compilation"""
    calls = []
    monkeypatch.setattr(config, "SMTP_HOST", None)
    monkeypatch.setattr(config, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(email_service, "mjml_to_html", lambda mjml: {"html": "<html></html>", "errors": []})

    def fake_send(params):
        calls.append(params)
        return {"id": f"email-{len(calls)}"}

    monkeypatch.setattr(resend.Emails, "send", fake_send)
    return calls


class TestTemplates:
    def test_confirmation_contains_ride_details(self, booking):
        mjml = booking_confirmation_template(booking)

        assert "#12" in mjml
        assert "15/06/2099" in mjml
        assert "Premium" in mjml
        assert "Orly &lt;Terminal 4&gt;" in mjml

    def test_confirmation_omits_contact_details(self, booking):
        mjml = booking_confirmation_template(booking)

        assert booking["phone"] not in mjml

    def test_notification_escapes_customer_text(self, booking):
        mjml = booking_notification_template(booking)

        assert "<script>" not in mjml
        assert "&lt;script&gt;" in mjml
        assert booking["phone"] in mjml
        assert "Aucune" in mjml

    def test_format_date_fr(self):
        assert format_date_fr("2026-10-20") == "20/10/2026"
        assert format_date_fr("garbage") == "garbage"


class TestDispatch:
    def test_resend_used_without_smtp(self, sent):
        asyncio.run(send_email("camille@example.com", "Sujet", "<mjml></mjml>"))

        assert len(sent) == 1
        assert sent[0]["to"] == ["camille@example.com"]
        assert sent[0]["html"] == "<html></html>"
        assert sent[0]["from"] == config.EMAIL_FROM_ADDRESS

    def test_no_transport_configured(self, monkeypatch):
        monkeypatch.setattr(config, "SMTP_HOST", None)
        monkeypatch.setattr(config, "RESEND_API_KEY", None)
        monkeypatch.setattr(email_service, "mjml_to_html", lambda mjml: {"html": "", "errors": []})

        with pytest.raises(NotificationError):
            asyncio.run(send_email("camille@example.com", "Sujet", "<mjml></mjml>"))

    def test_resend_failure_raises_notification_error(self, sent, monkeypatch):
        def boom(params):
            raise RuntimeError("quota exceeded")

        monkeypatch.setattr(resend.Emails, "send", boom)

        with pytest.raises(NotificationError):
            asyncio.run(send_email("camille@example.com", "Sujet", "<mjml></mjml>"))

    def test_smtp_preferred_when_configured(self, sent, monkeypatch):
        smtp_calls = []
        monkeypatch.setattr(config, "SMTP_HOST", "smtp.example.com")
        monkeypatch.setattr(
            email_service,
            "send_via_smtp",
            lambda **kwargs: smtp_calls.append(kwargs) or {"success": True},
        )

        asyncio.run(send_email("camille@example.com", "Sujet", "<mjml></mjml>"))

        assert len(smtp_calls) == 1
        assert sent == []


class TestBookingEmails:
    def test_confirmation_goes_to_customer(self, sent, booking):
        asyncio.run(send_booking_confirmation(booking))

        assert sent[0]["to"] == ["camille@example.com"]
        assert sent[0]["subject"] == "Confirmation de votre réservation"

    def test_confirmation_skipped_without_email(self, sent, booking):
        booking["email"] = None

        assert asyncio.run(send_booking_confirmation(booking)) is None
        assert sent == []

    def test_notification_goes_to_operator(self, sent, booking, monkeypatch):
        monkeypatch.setattr(config, "ADMIN_EMAIL", "operator@example.com")

        asyncio.run(send_booking_notification(booking))

        assert sent[0]["to"] == ["operator@example.com"]
        assert sent[0]["subject"] == "Nouvelle réservation #12"

    def test_notification_skipped_without_operator_address(self, sent, booking, monkeypatch):
        monkeypatch.setattr(config, "ADMIN_EMAIL", None)

        assert asyncio.run(send_booking_notification(booking)) is None
        assert sent == []

    def test_email_notifier(self, sent, booking, monkeypatch):
        monkeypatch.setattr(config, "ADMIN_EMAIL", "operator@example.com")
        notifier = EmailNotifier()

        asyncio.run(notifier.send_customer_confirmation(booking))
        asyncio.run(notifier.send_operator_notification(booking))

        assert [call["to"] for call in sent] == [["camille@example.com"], ["operator@example.com"]]
