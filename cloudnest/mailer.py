# Filename: cloudnest/mailer.py
"""Outgoing mail for activation and password-reset links.

Delivery never decides the outcome of the request that triggered it:
failures are logged and swallowed here.
"""

import logging
import smtplib
from html import escape
from email.message import EmailMessage

from .config import settings

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, host=None, port=587, user=None, password=None, sender=settings.smtp_sender):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender

    @classmethod
    def from_settings(cls) -> "Mailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            sender=settings.smtp_sender,
        )

    def send(self, to: str, subject: str, html: str) -> bool:
        """Send an HTML message. Returns False if it could not be delivered."""
        if not self.host:
            logger.info("SMTP not configured, mail to %s not sent: %s\n%s", to, subject, html)
            return False

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(html, subtype="html")
        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls()
                    smtp.ehlo()
                if self.user:
                    smtp.login(self.user, self.password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.exception("Email to %s failed (non-blocking)", to)
            return False
        logger.info("Email sent to %s: %s", to, subject)
        return True

    def send_activation(self, to: str, first_name: str, link: str) -> bool:
        html = (
            f"<h2>Welcome {escape(first_name)}</h2>"
            "<p>Click below to activate your account:</p>"
            f'<a href="{link}">{link}</a>'
            f"<p>This link expires in {settings.activation_token_expire_minutes} minutes.</p>"
        )
        return self.send(to, "Activate your account", html)

    def send_password_reset(self, to: str, link: str) -> bool:
        html = (
            "<h2>Password Reset</h2>"
            "<p>Click below to reset your password:</p>"
            f'<a href="{link}">{link}</a>'
            f"<p>This link expires in {settings.reset_token_expire_minutes} minutes.</p>"
        )
        return self.send(to, "Reset your password", html)
