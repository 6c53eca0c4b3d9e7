"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging codes and links for development and demos.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints OTPs and reset links.
    """

    def send_verification_code(self, email: str, code: str) -> None:
        """
        Log the signup OTP (simulates email delivery).

        The code is logged at INFO level to be visible in container logs.

        Args:
            email: Recipient email address (normalized by domain layer)
            code: Numeric OTP
        """
        logger.info("[VERIFICATION] Email: %s Code: %s", email, code)

    def send_password_reset_link(self, email: str, reset_url: str) -> None:
        logger.info("[PASSWORD RESET] Email: %s Link: %s", email, reset_url)

    def send_password_reset_confirmation(self, email: str) -> None:
        logger.info("[PASSWORD RESET CONFIRMED] Email: %s", email)
