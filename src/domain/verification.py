"""
Email verification domain service - code issue and verification.

Verification Record Lifecycle
=============================

    (none) --issue--> UNVERIFIED (expiry = now + 3 min)
    UNVERIFIED --issue--> UNVERIFIED (new code, new expiry)
    UNVERIFIED --verify--> VERIFIED (expiry = now + 10 min)
    VERIFIED --issue--> UNVERIFIED (re-issue resets verification)
    VERIFIED --privileged action--> (deleted)

The privileged actions (account creation, password change) live in
``registration.py``; they consume the record atomically through the
repository so a verified record authorizes at most one of them.
"""

import logging
import random
import string
from dataclasses import dataclass, field
from datetime import timedelta

from .clock import Clock, utc_now
from .exceptions import InvalidEmailFormat, MailDeliveryFailed, TokenExpired, TokenMismatchOrMissing
from .ports import EmailSender, VerificationRepository
from .validators import is_email_valid, normalize_email

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_letters + string.digits
CODE_LENGTH = 6
CODE_TTL = timedelta(minutes=3)
VERIFIED_WINDOW = timedelta(minutes=10)


@dataclass
class VerificationService:
    """
    Domain service for issuing and checking email verification codes.

    Orchestrates code generation, record upsert, mail dispatch and
    code verification against the verification repository.
    """

    repository: VerificationRepository
    email_sender: EmailSender
    clock: Clock = utc_now
    code_ttl: timedelta = CODE_TTL
    verified_window: timedelta = VERIFIED_WINDOW
    allowed_email_domains: tuple[str, ...] = field(default_factory=tuple)

    def issue_verification(self, email: str) -> str:
        """
        Issue a fresh verification code for an email address.

        Any previous code for the email is overwritten and the record
        is reset to unverified.

        Args:
            email: User's email address (will be normalized)

        Returns:
            Normalized email address

        Raises:
            InvalidEmailFormat: If the email is malformed or not allowed
            MailDeliveryFailed: If the code could not be sent
        """
        normalized_email = normalize_email(email)
        if not is_email_valid(normalized_email, self.allowed_email_domains):
            raise InvalidEmailFormat()

        code = self._generate_verification_code()
        expiry = self.clock() + self.code_ttl
        self.repository.upsert(normalized_email, code, expiry)

        try:
            self.email_sender.send_verification_code(normalized_email, code)
        except MailDeliveryFailed:
            # Leaves a record rewritten by a concurrent issue in place
            self.repository.delete_if_token(normalized_email, code)
            logger.warning("Verification code delivery failed for %s", normalized_email)
            raise

        logger.info("Verification code issued for %s", normalized_email)
        return normalized_email

    def verify_code(self, email: str, code: str) -> bool:
        """
        Verify a submitted code and open the verified window.

        A wrong code and a missing record are reported identically.

        Args:
            email: User's email (will be normalized)
            code: Code the user received by email

        Returns:
            True on success

        Raises:
            TokenMismatchOrMissing: No record matches (email, code)
            TokenExpired: The code matched but has expired
        """
        normalized_email = normalize_email(email)
        record = self.repository.find_by_email_and_token(normalized_email, code)
        if record is None:
            raise TokenMismatchOrMissing()

        now = self.clock()
        if now > record.expiry:
            raise TokenExpired()

        # Fails if a concurrent re-issue replaced the code in between
        if not self.repository.mark_verified(normalized_email, code, now + self.verified_window):
            raise TokenMismatchOrMissing()

        logger.info("Email verified for %s", normalized_email)
        return True

    def _generate_verification_code(self) -> str:
        """
        Generate a 6-character alphanumeric verification code.

        Uses the non-cryptographic ``random`` module: codes are single-use,
        expire within minutes and are only delivered by email.
        """
        return "".join(random.choices(CODE_ALPHABET, k=CODE_LENGTH))
