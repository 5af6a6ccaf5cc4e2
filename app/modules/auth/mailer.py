"""Outbound mail for password reset links."""
import logging
import smtplib
from email.message import EmailMessage
from html import escape
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: str = "support@example.com",
        enabled: bool = False,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.enabled = enabled

    def send_password_reset(self, user: Dict[str, Any], reset_link: str) -> None:
        """Mail the reset link, or log it when SMTP delivery is disabled (non-production)."""
        if not self.enabled:
            logger.info(f"[DEV] Password reset link for {user['email']}: {reset_link}")
            return

        if not self.host:
            raise RuntimeError("SMTP host must be configured to send mail")

        name = user.get("name") or ""
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = user["email"]
        message["Subject"] = "Password Reset Instructions"
        message.set_content(
            f"Hello {name},\n\n"
            f"You requested a password reset. Open the link below to set a new password:\n\n"
            f"{reset_link}\n\n"
            f"If you did not request this, you can ignore this email.\n"
        )
        link = escape(reset_link, quote=True)
        message.add_alternative(
            f"<p>Hello {escape(name)},</p>"
            f"<p>You requested a password reset. Click the link below to set a new password:</p>"
            f'<p><a href="{link}">{link}</a></p>'
            f"<p>If you did not request this, you can ignore this email.</p>",
            subtype="html",
        )

        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls()
                smtp.ehlo()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(message)
        logger.info(f"Password reset mail sent to user {user['id']}")
