import asyncio

import aiosmtplib

from whisperbox.database.core import mailer as mailer_module
from whisperbox.database.core.mailer import VerificationMailer, build_verification_message


def configured(settings):
    settings.SENDER_EMAIL = "noreply@whisperbox.test"
    settings.APP_PASSWORD = "app-password"
    return VerificationMailer(settings)


def test_message_carries_code_and_recipient():
    msg = build_verification_message("noreply@whisperbox.test", "a@x.com", "alice", "123456")
    assert msg["To"] == "a@x.com"
    assert "noreply@whisperbox.test" in msg["From"]
    bodies = [part.get_payload(decode=True).decode() for part in msg.get_payload()]
    assert len(bodies) == 2
    assert all("123456" in body and "alice" in body for body in bodies)


def test_send_uses_starttls_on_587(settings, monkeypatch):
    calls = []

    async def fake_send(message, **kwargs):
        calls.append(kwargs)

    monkeypatch.setattr(mailer_module.aiosmtplib, "send", fake_send)
    result = asyncio.run(configured(settings).send_verification_email("a@x.com", "alice", "123456"))

    assert result.success is True
    assert calls[0]["start_tls"] is True
    assert calls[0]["use_tls"] is False
    assert calls[0]["username"] == "noreply@whisperbox.test"


def test_smtp_failure_is_reported_not_raised(settings, monkeypatch):
    async def failing_send(message, **kwargs):
        raise aiosmtplib.SMTPConnectError("connection refused")

    monkeypatch.setattr(mailer_module.aiosmtplib, "send", failing_send)
    result = asyncio.run(configured(settings).send_verification_email("a@x.com", "alice", "123456"))

    assert result.success is False
    assert result.message == "Failed to send verification email"


def test_missing_sender_is_reported(settings):
    settings.SENDER_EMAIL = ""
    result = asyncio.run(VerificationMailer(settings).send_verification_email("a@x.com", "alice", "123456"))
    assert result.success is False
