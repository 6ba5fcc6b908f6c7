"""Outbound email over SMTP.

Two message kinds are supported:
- "otp": six-digit registration code, valid for OTP_EXPIRATION_MINUTES
- "password_reset": link carrying a reset token, valid for PASSWORD_RESET_EXPIRATION_HOURS

Delivery is attempted once. `send` reports success as a bool and never raises.
"""

import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any, Dict, Tuple
from urllib.parse import urlencode

import structlog

from bloglytics.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)

KIND_OTP = "otp"
KIND_PASSWORD_RESET = "password_reset"


def build_reset_link(email: str, token: str) -> str:
    query = urlencode({"email": email, "token": token})
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/api/auth/reset-password?{query}"


def _render_otp(data: Dict[str, Any]) -> Tuple[str, str]:
    minutes = data.get("valid_minutes", settings.OTP_EXPIRATION_MINUTES)
    body = f"""
        <div style='font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;'>
            <h2 style='color: #667eea;'>Welcome to Bloglytics, {data.get("name", "")}!</h2>
            <p>Use the code below to verify your email address:</p>
            <div style='font-size: 32px; font-weight: bold; letter-spacing: 8px; padding: 20px;
                        background: #f4f4f4; text-align: center;'>{data["code"]}</div>
            <p>This code is valid for {minutes} minutes.</p>
            <p>If you did not sign up, you can ignore this email.</p>
        </div>
    """
    return "Your Bloglytics verification code", body


def _render_password_reset(data: Dict[str, Any]) -> Tuple[str, str]:
    hours = data.get("valid_hours", settings.PASSWORD_RESET_EXPIRATION_HOURS)
    unit = "hour" if hours == 1 else "hours"
    body = f"""
        <div style='font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;'>
            <h2 style='color: #667eea;'>Password Reset Request</h2>
            <p>Hi {data.get("name", "")},</p>
            <p>We received a request to reset your password. Click the button below to reset it:</p>
            <p><a href='{data["reset_link"]}' style='background: #667eea; color: white; padding: 12px 24px;
                  text-decoration: none; border-radius: 4px;'>Reset Password</a></p>
            <p>This link expires in {hours} {unit}.</p>
            <p>If you didn't request a password reset, please ignore this email.</p>
        </div>
    """
    return "Password Reset Request", body


RENDERERS = {
    KIND_OTP: _render_otp,
    KIND_PASSWORD_RESET: _render_password_reset,
}


class Mailer:
    """SMTP client for transactional email."""

    def __init__(self):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME
        self.password = settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS
        self.sender = formataddr((settings.MAIL_FROM_NAME, settings.MAIL_FROM))
        self.enabled = settings.MAIL_ENABLED

    def render(self, kind: str, template_data: Dict[str, Any]) -> Tuple[str, str]:
        renderer = RENDERERS.get(kind)
        if renderer is None:
            raise ValueError(f"Unknown mail kind: {kind}")
        return renderer(template_data)

    def send(self, kind: str, recipient: str, template_data: Dict[str, Any]) -> bool:
        """Render and deliver one message. Returns False on any failure."""
        try:
            subject, body = self.render(kind, template_data)

            if not self.enabled:
                logger.info("Mail disabled, message not sent", kind=kind, recipient=recipient)
                return True

            msg = MIMEMultipart()
            msg["From"] = self.sender
            msg["To"] = recipient
            msg["Subject"] = subject
            msg.attach(MIMEText(body, "html"))

            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                if self.use_tls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)

            logger.info("Mail sent", kind=kind, recipient=recipient)
            return True
        except Exception as e:
            logger.error("Mail delivery failed", kind=kind, recipient=recipient, error=str(e))
            return False


_mailer: Mailer | None = None


def get_mailer() -> Mailer:
    """FastAPI dependency returning the process-wide mailer."""
    global _mailer
    if _mailer is None:
        _mailer = Mailer()
    return _mailer
