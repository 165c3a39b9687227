# salesup/services/email.py
from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional

from salesup.core.config import Settings, settings

logger = logging.getLogger(__name__)

INVITE_EXPIRY_DAYS = 7


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    text: str
    html: str


def _page(title: str, header_color: str, heading: str, body: str, footer: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: {header_color}; color: white; padding: 20px; border-radius: 8px 8px 0 0; text-align: center;">
      <h1>{heading}</h1>
    </div>
    <div style="background: #f9fafb; padding: 30px; border-radius: 0 0 8px 8px;">
{body}
    </div>
    <div style="text-align: center; margin-top: 30px; color: #6b7280; font-size: 14px;">
      <p>{footer}</p>
    </div>
  </div>
</body>
</html>
"""


def render_invitation(first_name: str, invited_by_name: str, invite_url: str) -> RenderedEmail:
    first = escape(first_name)
    inviter = escape(invited_by_name)
    url = escape(invite_url, quote=True)

    body = f"""      <h2>Hi {first}!</h2>
      <p>Great news! <strong>{inviter}</strong> has invited you to join SalesUp as a Sales Agent.</p>
      <p>As a Sales Agent, you'll be able to:</p>
      <ul>
        <li>📊 Track your daily sales performance</li>
        <li>📈 Monitor your insurance rates and upgrade metrics</li>
        <li>🎯 Set and achieve your sales goals</li>
        <li>🤖 Get feedback and recommendations on your numbers</li>
      </ul>
      <p style="text-align: center;">
        <a href="{url}" style="display: inline-block; background: #2563eb; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; font-weight: bold;">Create My Account</a>
      </p>
      <p><small>This invitation will expire in {INVITE_EXPIRY_DAYS} days. If the button doesn't work, copy and paste this link into your browser:</small></p>
      <p><small style="word-break: break-all; color: #6b7280;">{url}</small></p>
      <p>Welcome to the team!</p>"""

    text = (
        f"Hi {first_name}!\n\n"
        f"{invited_by_name} has invited you to join SalesUp as a Sales Agent.\n\n"
        "SalesUp is a platform to track your sales performance and reach your goals.\n\n"
        f"Create your account here: {invite_url}\n\n"
        f"This invitation expires in {INVITE_EXPIRY_DAYS} days.\n\n"
        "Welcome to the team!\n"
    )

    return RenderedEmail(
        subject="You're invited to join SalesUp as a Sales Agent",
        text=text,
        html=_page(
            "Join SalesUp",
            "#2563eb",
            "🚀 Welcome to SalesUp!",
            body,
            "This email was sent by SalesUp. If you received this email by mistake, please ignore it.",
        ),
    )


def render_welcome(first_name: str, login_url: str) -> RenderedEmail:
    first = escape(first_name)
    url = escape(login_url, quote=True)

    body = f"""      <h2>Welcome aboard, {first}!</h2>
      <p>Your SalesUp account has been created successfully. You can now start tracking your sales performance and reaching your goals!</p>
      <p><strong>💡 Quick Start Tips:</strong><br>
        1. Log in to your dashboard<br>
        2. Fill your first daily entry<br>
        3. Check your performance analysis after a few days</p>
      <p style="text-align: center;">
        <a href="{url}" style="display: inline-block; background: #16a34a; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; font-weight: bold;">Access Dashboard</a>
      </p>
      <p>Happy selling!</p>"""

    text = (
        f"Welcome aboard, {first_name}!\n\n"
        "Your SalesUp account has been created successfully.\n\n"
        f"Log in here: {login_url}\n\n"
        "Quick start: fill your first daily entry today!\n\n"
        "Happy selling!\n"
        "The SalesUp Team\n"
    )

    return RenderedEmail(
        subject=f"Welcome to SalesUp, {first_name}! 🎉",
        text=text,
        html=_page("Welcome to SalesUp", "#16a34a", "🎉 Account Created Successfully!", body, "The SalesUp Team"),
    )


class EmailService:
    """
    SMTP delivery with STARTTLS. Every send returns a bool and never raises;
    callers run it from BackgroundTasks so a mail outage cannot fail a request.
    """

    def __init__(self, config: Optional[Settings] = None):
        cfg = config or settings
        self.smtp_host = cfg.SMTP_HOST
        self.smtp_port = cfg.SMTP_PORT
        self.smtp_user = cfg.SMTP_USER
        self.smtp_password = cfg.SMTP_PASSWORD
        self.from_email = cfg.FROM_EMAIL
        self.from_name = cfg.FROM_NAME
        self.base_url = cfg.APP_BASE_URL.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    def invite_url(self, token: str) -> str:
        return f"{self.base_url}/invite/{token}"

    def login_url(self) -> str:
        return f"{self.base_url}/auth/signin"

    def send(self, to_email: str, message: RenderedEmail) -> bool:
        if not self.is_configured:
            logger.warning("SMTP not configured; email to %s not sent: %s", to_email, message.subject)
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(message.text, "plain", "utf-8"))
        msg.attach(MIMEText(message.html, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                server.starttls()
                server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s: %s", to_email, message.subject)
            return False

        logger.info("Email sent to %s: %s", to_email, message.subject)
        return True

    def send_invitation_email(
        self,
        *,
        email: str,
        first_name: str,
        invited_by_name: str,
        token: str,
    ) -> bool:
        return self.send(email, render_invitation(first_name, invited_by_name, self.invite_url(token)))

    def send_welcome_email(self, *, email: str, first_name: str) -> bool:
        return self.send(email, render_welcome(first_name, self.login_url()))


_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """FastAPI dependency; tests override it with a recording fake."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
