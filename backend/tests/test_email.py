# tests/test_email.py
from __future__ import annotations

from salesup.core.config import settings
from salesup.services.email import EmailService, render_invitation, render_welcome


def test_invitation_email_escapes_names_and_links():
    msg = render_invitation("<Nia>", "Grace & Co", "https://salesup.test/invite/abc?x=1&y=2")

    assert "&lt;Nia&gt;" in msg.html
    assert "Grace &amp; Co" in msg.html
    assert 'href="https://salesup.test/invite/abc?x=1&amp;y=2"' in msg.html
    assert "<Nia>" in msg.text
    assert "7 days" in msg.text


def test_welcome_email_mentions_login_link():
    msg = render_welcome("Nia", "https://salesup.test/auth/signin")

    assert msg.subject.startswith("Welcome to SalesUp, Nia")
    assert "https://salesup.test/auth/signin" in msg.text


def test_unconfigured_service_does_not_send():
    cfg = settings.model_copy(update={"SMTP_USER": "", "SMTP_PASSWORD": "", "APP_BASE_URL": "https://salesup.test/"})
    service = EmailService(cfg)

    assert service.is_configured is False
    assert service.invite_url("tok") == "https://salesup.test/invite/tok"
    assert service.send_welcome_email(email="nia@example.com", first_name="Nia") is False
