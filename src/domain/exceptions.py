"""
Domain exceptions - Semantic error types for registration and posting.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Every exception carries a user-facing message as its first argument.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class RegistrationError(DomainError):
    """Base class for registration and verification errors."""

    pass


class InvalidEmailFormat(RegistrationError):
    """Email is malformed or its domain is not allowed."""

    default_message = "Invalid email format"


class EmailAlreadyRegistered(RegistrationError):
    """An account already exists for this email."""

    default_message = "Email is already registered"


class TokenMismatchOrMissing(RegistrationError):
    """No record matches the submitted (email, code) pair."""

    default_message = "Verification code does not match"


class TokenExpired(RegistrationError):
    """The submitted code matched but its expiry has passed."""

    default_message = "Verification code has expired"


class VerificationRequired(RegistrationError):
    """No verified record exists for the email."""

    default_message = "Email verification is required"


class ReverificationRequired(RegistrationError):
    """The record is verified but the grace window has elapsed."""

    default_message = "Verification window elapsed, please verify your email again"


class PasswordTooShort(RegistrationError):
    default_message = "Password must be at least 8 characters long"


class PasswordMissingSpecialChar(RegistrationError):
    default_message = "Password must contain a special character"


class UserNotFound(RegistrationError):
    default_message = "User does not exist"


class MailDeliveryFailed(RegistrationError):
    """The mail sender could not deliver the verification code."""

    default_message = "Verification email could not be delivered"


class PostError(DomainError):
    """Base class for posting errors."""

    pass


class PostNotFound(PostError):
    default_message = "Post does not exist"


class NotPostAuthor(PostError):
    """Only the author may delete a post."""

    default_message = "Only the author can delete this post"
