# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transactional email over async SMTP.

Every message is sent as ``multipart/alternative`` with a plain text and an
HTML part. When SMTP is not configured sends are skipped and logged, which
keeps local development usable without a mail server.
"""

import html
import logging
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import TYPE_CHECKING, Optional

import aiosmtplib

if TYPE_CHECKING:
    from collegehub.core.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class EmailResult:
    """Outcome of a send attempt."""

    sent: bool
    skipped: bool = False
    error: Optional[str] = None


class EmailSender:
    """Builds and sends the application's emails.

    Attributes:
        settings: Application settings, SMTP configuration is read from
            ``settings.smtp``.
    """

    def __init__(self, settings: "Settings") -> None:
        self.settings = settings

    @property
    def is_enabled(self) -> bool:
        return self.settings.smtp.is_configured

    async def send(
        self,
        to: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> EmailResult:
        """Send a message.

        Args:
            to: Recipient address.
            subject: Subject line.
            text_body: Plain text body.
            html_body: HTML body, derived from the text body when omitted.

        Returns:
            EmailResult describing the outcome. SMTP failures are logged
            and reported in the result rather than raised.
        """
        if not self.is_enabled:
            logger.warning("SMTP not configured, skipping email to %s: %s", to, subject)
            return EmailResult(sent=False, skipped=True)

        smtp = self.settings.smtp
        message = self._build_message(to, subject, text_body, html_body)

        try:
            await aiosmtplib.send(
                message,
                hostname=smtp.host,
                port=smtp.port,
                username=smtp.username,
                password=smtp.password.get_secret_value(),
                start_tls=smtp.use_tls,
            )
        except aiosmtplib.SMTPException as e:
            logger.error("Failed to send email to %s: %s", to, str(e), exc_info=True)
            return EmailResult(sent=False, error=str(e))

        logger.info("Email sent to %s: %s", to, subject)
        return EmailResult(sent=True)

    def _build_message(
        self,
        to: str,
        subject: str,
        text_body: str,
        html_body: Optional[str],
    ) -> MIMEMultipart:
        smtp = self.settings.smtp
        message = MIMEMultipart("alternative")
        message["From"] = f"{smtp.from_name} <{smtp.from_email}>"
        message["To"] = to
        message["Subject"] = subject

        if html_body is None:
            paragraphs = "".join(
                f"<p>{_escape(p)}</p>" for p in text_body.split("\n\n") if p.strip()
            )
            html_body = _wrap_html(subject, paragraphs)

        message.attach(MIMEText(text_body, "plain", "utf-8"))
        message.attach(MIMEText(html_body, "html", "utf-8"))
        return message

    async def send_otp(self, to: str, name: str, otp: str, ttl_seconds: int) -> EmailResult:
        """Send a one-time login code."""
        minutes = max(1, ttl_seconds // 60)
        text_body = (
            f"Hello {name},\n\n"
            f"Your login code is {otp}. It is valid for {minutes} minutes.\n\n"
            "If you did not request this code you can ignore this email."
        )
        body = (
            f"<p>Hello {_escape(name)},</p>"
            f'<p>Your login code is <strong style="font-size:20px;letter-spacing:4px">'
            f"{_escape(otp)}</strong></p>"
            f"<p>It is valid for {minutes} minutes.</p>"
            "<p>If you did not request this code you can ignore this email.</p>"
        )
        return await self.send(to, "Your login code", text_body, _wrap_html("Login code", body))

    async def send_password_reset(
        self, to: str, name: str, code: str, ttl_seconds: int
    ) -> EmailResult:
        """Send a password reset code."""
        minutes = max(1, ttl_seconds // 60)
        text_body = (
            f"Hello {name},\n\n"
            f"Your password reset code is {code}. It expires in {minutes} minutes.\n\n"
            "If you did not ask to reset your password, please contact your administrator."
        )
        return await self.send(to, "Password reset code", text_body)

    async def send_certificate_issued(
        self, to: str, name: str, certificate_name: str
    ) -> EmailResult:
        """Tell a student that a certificate was assigned to them."""
        text_body = (
            f"Hello {name},\n\n"
            f"A {certificate_name} certificate has been assigned to you. "
            "It will be available for download once the payment is completed."
        )
        return await self.send(to, f"{certificate_name} certificate", text_body)

    async def send_welcome(self, to: str, name: str, initial_password: str) -> EmailResult:
        """Send the initial credentials of a newly registered account."""
        text_body = (
            f"Hello {name},\n\n"
            f"An account has been created for you. Sign in with {to} and the "
            f"temporary password {initial_password}, then change it from your profile."
        )
        return await self.send(to, "Your account has been created", text_body)


def _escape(text: str) -> str:
    return html.escape(text, quote=True)


def _wrap_html(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{_escape(title)}</title></head>"
        '<body style="font-family:Arial,sans-serif;color:#333;max-width:600px;margin:0 auto">'
        f"{body}</body></html>"
    )
