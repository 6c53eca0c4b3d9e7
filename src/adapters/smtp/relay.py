"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers messages through an SMTP relay with STARTTLS. Transport errors
propagate to the caller; the domain decides whether a failure is fatal.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Implements EmailSender protocol via smtplib."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        starttls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._starttls = starttls
        self._timeout = timeout

    def send_verification_code(self, email: str, code: str) -> None:
        self._send(
            email,
            "Your OTP Code",
            f"Your OTP code is {code}\n\n"
            "It expires shortly. Do not share this code with anyone.\n"
            "If you did not try to sign up, ignore this email.",
        )

    def send_password_reset_link(self, email: str, reset_url: str) -> None:
        self._send(email, "Your Password Reset Request", f"Your password reset link is {reset_url}")

    def send_password_reset_confirmation(self, email: str) -> None:
        self._send(email, "Password Reset Successful", "Your password reset was successful.")

    def _send(self, to_email: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self._sender
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)

        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            if self._starttls:
                server.starttls(context=ssl.create_default_context())
            if self._username:
                server.login(self._username, self._password)
            server.send_message(msg)
        logger.info("Email %r sent to %s", subject, to_email)
