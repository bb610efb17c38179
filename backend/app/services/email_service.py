"""Email service using SendGrid."""

import logging
from html import escape

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.config import Settings

logger = logging.getLogger(__name__)


class EmailService:
    """Sends transactional emails via SendGrid.

    Every ``send_*`` method returns whether the provider accepted the message
    and never raises: a failed delivery must not fail the request that
    triggered it.
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.sendgrid_api_key
        self._from = (settings.email_from_address, settings.email_from_name)
        self._app_name = settings.email_from_name
        self._frontend_url = settings.frontend_url.rstrip("/")

    def _send_email(self, to_email: str, subject: str, html_content: str) -> bool:
        """Send email via SendGrid. Returns True if successful."""
        if not self._api_key:
            logger.warning("SendGrid API key not configured, skipping email send")
            return False

        message = Mail(
            from_email=self._from,
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
        )

        try:
            sg = SendGridAPIClient(self._api_key)
            response = sg.send(message)
            logger.info(f"Email sent to {to_email}, status: {response.status_code}")
            return response.status_code in (200, 201, 202)
        except Exception:
            logger.exception(f"Failed to send email to {to_email}")
            return False

    def send_verification_email(self, email: str, nick: str, token: str) -> bool:
        """Send email verification link."""
        verify_url = f"{self._frontend_url}/verify-email?token={token}"
        html = f"""
        <h2>Hi {escape(nick)}, please verify your email</h2>
        <p>Click the link below to verify your email address:</p>
        <p><a href="{verify_url}">{verify_url}</a></p>
        <p>This link expires in 24 hours.</p>
        <p>If you didn't create an account, you can ignore this email.</p>
        """
        return self._send_email(email, f"Verify Your Email - {self._app_name}", html)

    def send_welcome_email(self, email: str, nick: str) -> bool:
        """Send welcome email after verification."""
        events_url = f"{self._frontend_url}/events"
        html = f"""
        <h2>Welcome to {self._app_name}, {escape(nick)}!</h2>
        <p>Your email has been verified and you are now signed in.</p>
        <p><a href="{events_url}">Browse upcoming events</a></p>
        """
        return self._send_email(email, f"Welcome to {self._app_name}!", html)

    def send_password_reset_email(self, email: str, nick: str, token: str) -> bool:
        """Send password reset link."""
        reset_url = f"{self._frontend_url}/reset-password?token={token}"
        html = f"""
        <h2>Hi {escape(nick)}, reset your password</h2>
        <p>Click the link below to reset your password:</p>
        <p><a href="{reset_url}">{reset_url}</a></p>
        <p>This link expires in 1 hour.</p>
        <p>If you didn't request this, you can ignore this email.</p>
        """
        return self._send_email(email, f"Reset Your Password - {self._app_name}", html)
