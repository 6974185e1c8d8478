"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers verification codes through an SMTP relay using the standard
library ``smtplib``. Connection and protocol failures surface as
MailDeliveryFailed; retries are left to the relay.
"""

import logging
import smtplib
from email.message import EmailMessage

from src.domain.exceptions import MailDeliveryFailed

logger = logging.getLogger(__name__)

SUBJECT = "Your verification code"

BODY_TEMPLATE = """\
Your verification code is: {code}

The code expires in {minutes} minutes. If you did not request it, ignore this email.
"""


class SmtpEmailSender:
    """
    Implements EmailSender protocol via SMTP.

    Uses structural subtyping - no explicit inheritance from Protocol.
    A new connection is opened per message.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
        code_ttl_minutes: int = 3,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout
        self._code_ttl_minutes = code_ttl_minutes

    def build_message(self, email: str, code: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = email
        message["Subject"] = SUBJECT
        message.set_content(BODY_TEMPLATE.format(code=code, minutes=self._code_ttl_minutes))
        return message

    def send_verification_code(self, email: str, code: str) -> None:
        """
        Send the verification code to ``email``.

        Raises:
            MailDeliveryFailed: On connection, TLS, auth or send failure
        """
        message = self.build_message(email, code)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                if self._use_tls:
                    smtp.starttls()
                if self._username:
                    smtp.login(self._username, self._password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP delivery to %s failed: %s", email, e)
            raise MailDeliveryFailed() from e

        logger.info("Verification email sent to %s", email)
