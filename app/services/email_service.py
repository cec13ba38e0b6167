"""
app/services/email_service.py

Purpose: Transactional email delivery over SMTP

- Renders a registered template with branding
- Sends via SMTP (STARTTLS on 587, implicit TLS on 465)
- Logs and drops messages when SMTP is not configured (local development)
"""

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from typing import Any, Optional

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import ExternalServiceError
from app.core.logging import get_logger
from app.services.email_templates import RenderedEmail, render_template

logger = get_logger(__name__)


class EmailService:
    """Service for sending templated emails via SMTP"""

    def __init__(self, config: Optional[Settings] = None):
        config = config or default_settings
        self.host = config.SMTP_HOST
        self.port = config.SMTP_PORT
        self.user = config.SMTP_USER
        self.password = config.SMTP_PASS
        self.timeout = config.SMTP_TIMEOUT
        self.sender = config.EMAIL_FROM
        self.brand_name = config.BRAND_NAME
        self.frontend_url = config.FRONTEND_URL

        if self.host and not (self.user and self.password):
            logger.warning("SMTP host set without SMTP_USER/SMTP_PASS; sending unauthenticated")

    def is_configured(self) -> bool:
        """Check if SMTP is configured"""
        return bool(self.host)

    def _build_message(self, to: str, rendered: RenderedEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = rendered.subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content(rendered.text)
        msg.add_alternative(rendered.html, subtype="html")
        return msg

    def _open_connection(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.port == 465:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context)

        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        server.starttls(context=context)
        return server

    def _deliver(self, msg: EmailMessage) -> None:
        with self._open_connection() as server:
            if self.user and self.password:
                server.login(self.user, self.password)
            server.send_message(msg)

    async def send_template(self, key: str, to: str, subject: Optional[str] = None, **params: Any) -> None:
        """
        Renders template `key` and sends it to `to`.

        Raises:
            ValueError: If the template key is unknown
            ExternalServiceError: If the SMTP relay fails
        """
        rendered = render_template(
            key,
            {"brand_name": self.brand_name, "frontend_url": self.frontend_url, **params},
        )
        if subject:
            rendered = RenderedEmail(subject=subject, html=rendered.html, text=rendered.text)

        if not self.is_configured():
            # Development fallback: never log the link, it carries a token
            logger.info(f"SMTP not configured; '{key}' email to {to} not sent")
            return

        msg = self._build_message(to, rendered)
        try:
            logger.info(f"Sending '{key}' email to {to}")
            await asyncio.to_thread(self._deliver, msg)
            logger.info(f"Email sent successfully to {to}")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{key}' email to {to}: {e}")
            raise ExternalServiceError("Email sending failed") from e

    async def test_connection(self) -> bool:
        """
        Opens (and authenticates) an SMTP connection without sending anything.
        """
        if not self.is_configured():
            logger.warning("Email connection test skipped: SMTP_HOST not set")
            return False

        def _probe():
            with self._open_connection() as server:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.noop()

        try:
            logger.info(f"Testing SMTP connection to {self.host}:{self.port}")
            await asyncio.to_thread(_probe)
            logger.info("Email connection test successful")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email connection test failed: {e}")
            return False


_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get or create the global email service instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
