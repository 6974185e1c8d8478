"""
Console email sender adapter for local development.

Writes verification codes to the application log at INFO instead of
delivering mail.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Delivery cannot fail, so MailDeliveryFailed is never raised.
    """

    def __init__(self, code_ttl_minutes: int = 3) -> None:
        self._code_ttl_minutes = code_ttl_minutes

    def send_verification_code(self, email: str, code: str) -> None:
        logger.info(
            "[VERIFICATION] Email: %s Code: %s (expires in %d minutes)",
            email,
            code,
            self._code_ttl_minutes,
        )
