"""
Booking emails: MJML templates compiled to HTML, then sent through the
operator's SMTP server when SMTP_HOST is set, or through Resend otherwise.
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from . import config
from .email_templates import booking_confirmation_template, booking_notification_template
from .exceptions import NotificationError
from .models import utcnow

logger = logging.getLogger(__name__)


def _build_message(recipients: list[str], subject: str, html_content: str, from_address: str) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(recipients)
    msg.attach(MIMEText(html_content, "html", "utf-8"))
    return msg


def _open_smtp() -> smtplib.SMTP:
    """Port 465 is implicit TLS; any other port gets STARTTLS unless SMTP_USE_TLS is off"""
    port = config.SMTP_PORT or 587
    if port == 465:
        return smtplib.SMTP_SSL(config.SMTP_HOST, port, context=ssl.create_default_context(), timeout=30)

    server = smtplib.SMTP(config.SMTP_HOST, port, timeout=30)
    if config.SMTP_USE_TLS:
        server.starttls(context=ssl.create_default_context())
    return server


def send_via_smtp(recipients: list[str], subject: str, html_content: str, from_address: str) -> dict:
    """Send through the configured SMTP server (e.g. a Gmail app password)"""
    msg = _build_message(recipients, subject, html_content, from_address)
    envelope_from = parseaddr(from_address)[1] or from_address

    try:
        with _open_smtp() as server:
            if config.SMTP_USERNAME:
                server.login(config.SMTP_USERNAME, config.SMTP_PASSWORD or "")
            server.sendmail(envelope_from, recipients, msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"❌ SMTP send via {config.SMTP_HOST} failed: {e}")
        raise NotificationError(f"SMTP failed: {e}") from e

    logger.info(f"✅ SMTP email sent to {recipients} via {config.SMTP_HOST}")
    return {"id": f"smtp-{utcnow().timestamp()}", "success": True}


def send_via_resend(recipients: list[str], subject: str, html_content: str, from_address: str) -> dict:
    """Send through the Resend API"""
    resend.api_key = config.RESEND_API_KEY
    try:
        response = resend.Emails.send(
            {
                "from": from_address,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
    except Exception as e:
        logger.error(f"❌ Resend send to {recipients} failed: {e}")
        raise NotificationError(f"Failed to send email: {e}") from e

    logger.info(f"✅ Email sent to {recipients} via Resend: {response}")
    return response


def compile_mjml_to_html(mjml_content: str) -> str:
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise NotificationError(f"Failed to compile MJML template: {e}") from e

    # The mjml package returns a dict-like result with html and errors
    if isinstance(result, dict):
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    return getattr(result, "html", str(result))


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Compile `mjml_content` and send it.

    SMTP is used when SMTP_HOST is set, Resend otherwise.

    Raises:
        NotificationError: no transport configured, or the transport failed
    """
    if not config.SMTP_HOST and not config.RESEND_API_KEY:
        logger.error("❌ No email transport configured (set SMTP_HOST or RESEND_API_KEY)")
        raise NotificationError("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else list(to)
    sender = from_address or config.EMAIL_FROM_ADDRESS

    if config.SMTP_HOST:
        return send_via_smtp(recipients=recipients, subject=subject, html_content=html_content, from_address=sender)
    return send_via_resend(recipients=recipients, subject=subject, html_content=html_content, from_address=sender)


# ============================================
# Booking emails
# ============================================


async def send_booking_confirmation(booking: dict) -> Optional[dict]:
    """Send the confirmation email to the customer. Skipped when no email was given."""
    if not booking.get("email"):
        logger.info(f"⚠️ No customer email for booking #{booking['id']}, confirmation not sent")
        return None

    return await send_email(
        to=booking["email"],
        subject="Confirmation de votre réservation",
        mjml_content=booking_confirmation_template(booking),
    )


async def send_booking_notification(booking: dict) -> Optional[dict]:
    """Send the new booking alert to the operator mailbox"""
    if not config.ADMIN_EMAIL:
        logger.info(f"⚠️ ADMIN_EMAIL not set, operator notification for booking #{booking['id']} not sent")
        return None

    return await send_email(
        to=config.ADMIN_EMAIL,
        subject=f"Nouvelle réservation #{booking['id']}",
        mjml_content=booking_notification_template(booking),
    )


class EmailNotifier:
    """Notifier backed by the email functions above"""

    async def send_customer_confirmation(self, booking: dict) -> Optional[dict]:
        return await send_booking_confirmation(booking)

    async def send_operator_notification(self, booking: dict) -> Optional[dict]:
        return await send_booking_notification(booking)
