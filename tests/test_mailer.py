"""
Tests for the SMTP mailer.
"""
from unittest.mock import MagicMock, patch

import pytest

from bloglytics.infrastructure import mailer as mailer_module
from bloglytics.infrastructure.mailer import KIND_OTP, KIND_PASSWORD_RESET, Mailer, build_reset_link


@pytest.fixture
def smtp_mailer():
    mailer = Mailer()
    mailer.enabled = True
    mailer.host = "smtp.test"
    mailer.port = 2525
    mailer.username = "bot"
    mailer.password = "pw"
    mailer.use_tls = True
    return mailer


def test_otp_message_mentions_code_and_validity(smtp_mailer):
    subject, body = smtp_mailer.render(KIND_OTP, {"name": "Bea", "code": "123456", "valid_minutes": 10})

    assert "verification code" in subject
    assert "123456" in body
    assert "valid for 10 minutes" in body


def test_reset_message_carries_link(smtp_mailer):
    link = build_reset_link("a@b.com", "tok")
    subject, body = smtp_mailer.render(KIND_PASSWORD_RESET, {"name": "Bea", "reset_link": link, "valid_hours": 1})

    assert subject == "Password Reset Request"
    assert link in body
    assert "expires in 1 hour" in body


def test_reset_link_encodes_query():
    link = build_reset_link("a+b@example.com", "abc")
    assert link.endswith("/api/auth/reset-password?email=a%2Bb%40example.com&token=abc")


def test_unknown_kind_is_rejected(smtp_mailer):
    with pytest.raises(ValueError):
        smtp_mailer.render("newsletter", {})
    assert smtp_mailer.send("newsletter", "a@b.com", {}) is False


def test_send_uses_tls_and_login(smtp_mailer):
    with patch.object(mailer_module.smtplib, "SMTP") as smtp_cls:
        server = MagicMock()
        smtp_cls.return_value.__enter__.return_value = server

        assert smtp_mailer.send(KIND_OTP, "to@example.com", {"code": "654321"}) is True

    smtp_cls.assert_called_once_with("smtp.test", 2525, timeout=30)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("bot", "pw")
    message = server.send_message.call_args.args[0]
    assert message["To"] == "to@example.com"
    assert "Bloglytics" in message["From"]


def test_send_skips_login_without_username(smtp_mailer):
    smtp_mailer.username = ""
    with patch.object(mailer_module.smtplib, "SMTP") as smtp_cls:
        server = MagicMock()
        smtp_cls.return_value.__enter__.return_value = server

        assert smtp_mailer.send(KIND_OTP, "to@example.com", {"code": "654321"}) is True

    server.login.assert_not_called()


def test_send_failure_returns_false(smtp_mailer):
    with patch.object(mailer_module.smtplib, "SMTP", side_effect=OSError("connection refused")):
        assert smtp_mailer.send(KIND_OTP, "to@example.com", {"code": "654321"}) is False


def test_disabled_mailer_reports_success_without_connecting(smtp_mailer):
    smtp_mailer.enabled = False
    with patch.object(mailer_module.smtplib, "SMTP") as smtp_cls:
        assert smtp_mailer.send(KIND_OTP, "to@example.com", {"code": "654321"}) is True
    smtp_cls.assert_not_called()
