"""
Registration domain service - privileged actions gated by verification.

Account creation and password change both require a verified,
unexpired verification record for the email. The guard runs in a
fixed order, each step raising its own error:

1. A record exists for the email          -> VerificationRequired
2. The record is verified                 -> VerificationRequired
3. now <= record.expiry                   -> ReverificationRequired
4. len(password) >= 8                     -> PasswordTooShort
5. password contains a special character  -> PasswordMissingSpecialChar

Once every check passes the record is consumed through
``VerificationRepository.consume_if_verified``, a single atomic
delete-returning operation. Of two concurrent privileged actions for
the same email only one receives the record; the other fails with
VerificationRequired. The record is consumed before the mutation runs,
so a verified record never authorizes two actions.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from .clock import Clock, utc_now
from .exceptions import (
    EmailAlreadyRegistered,
    InvalidEmailFormat,
    PasswordMissingSpecialChar,
    PasswordTooShort,
    ReverificationRequired,
    UserNotFound,
    VerificationRequired,
)
from .ports import PasswordHasher, User, UserRepository, VerificationRepository
from .validators import MIN_PASSWORD_LENGTH, is_email_valid, is_password_valid, normalize_email

logger = logging.getLogger(__name__)


@dataclass
class RegistrationService:
    """
    Domain service for user registration and password change.

    Orchestrates email normalization, verification checks, password
    policy, password hashing and single-use consumption of the
    verification record.
    """

    verifications: VerificationRepository
    users: UserRepository
    password_hasher: PasswordHasher
    clock: Clock = utc_now
    allowed_email_domains: tuple[str, ...] = field(default_factory=tuple)

    def check_duplicate_email(self, email: str) -> bool:
        """
        Check that an email can be used for a new account.

        Returns:
            True if the email is well-formed and not registered

        Raises:
            InvalidEmailFormat: If the email is malformed or not allowed
            EmailAlreadyRegistered: If an account already uses the email
        """
        normalized_email = normalize_email(email)
        if not is_email_valid(normalized_email, self.allowed_email_domains):
            raise InvalidEmailFormat()
        if self.users.find_by_email(normalized_email) is not None:
            raise EmailAlreadyRegistered()
        return True

    def register_user(self, email: str, nickname: str, password: str) -> User:
        """
        Create an account for a verified email.

        Args:
            email: User's email address (will be normalized)
            nickname: Display name
            password: Plaintext password (will be hashed)

        Returns:
            The created user

        Raises:
            VerificationRequired: No verified record, or it was consumed
            ReverificationRequired: The verified window has elapsed
            PasswordTooShort: Password shorter than 8 characters
            PasswordMissingSpecialChar: Password has no special character
            EmailAlreadyRegistered: An account already uses the email
        """
        normalized_email = normalize_email(email)
        now = self.clock()
        self._check_verified(normalized_email, now)
        self._check_password(password)

        if self.users.find_by_email(normalized_email) is not None:
            raise EmailAlreadyRegistered()

        password_hash = self.password_hasher.hash(password)
        self._consume_verification(normalized_email, now)

        user = self.users.create(normalized_email, nickname, password_hash)
        logger.info("User registered: id=%s email=%s", user.id, normalized_email)
        return user

    def change_password(self, email: str, new_password: str) -> None:
        """
        Replace the password of an existing account with a verified email.

        Args:
            email: Account email (will be normalized)
            new_password: New plaintext password (will be hashed)

        Raises:
            UserNotFound: No account uses the email
            VerificationRequired: No verified record, or it was consumed
            ReverificationRequired: The verified window has elapsed
            PasswordTooShort: Password shorter than 8 characters
            PasswordMissingSpecialChar: Password has no special character
        """
        normalized_email = normalize_email(email)
        if self.users.find_by_email(normalized_email) is None:
            raise UserNotFound()

        now = self.clock()
        self._check_verified(normalized_email, now)
        self._check_password(new_password)

        password_hash = self.password_hasher.hash(new_password)
        self._consume_verification(normalized_email, now)

        if not self.users.update_password_hash(normalized_email, password_hash):
            raise UserNotFound()
        logger.info("Password changed for %s", normalized_email)

    def _check_verified(self, email: str, now: datetime) -> None:
        record = self.verifications.find_by_email(email)
        if record is None or not record.verified:
            raise VerificationRequired()
        if now > record.expiry:
            raise ReverificationRequired()

    def _check_password(self, password: str) -> None:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise PasswordTooShort()
        if not is_password_valid(password):
            raise PasswordMissingSpecialChar()

    def _consume_verification(self, email: str, now: datetime) -> None:
        """Delete the verified record, failing if another request took it."""
        if self.verifications.consume_if_verified(email, now) is None:
            logger.info("Verification record already consumed for %s", email)
            raise VerificationRequired()
