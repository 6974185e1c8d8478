"""
Domain layer - Pure business logic with zero framework imports.

This package contains the email verification lifecycle, the
registration guard and the posting rules. It defines its own port
interfaces for infrastructure abstraction, ensuring true hexagonal
architecture decoupling.
"""

from .exceptions import (
    DomainError,
    EmailAlreadyRegistered,
    InvalidEmailFormat,
    MailDeliveryFailed,
    NotPostAuthor,
    PasswordMissingSpecialChar,
    PasswordTooShort,
    PostError,
    PostNotFound,
    RegistrationError,
    ReverificationRequired,
    TokenExpired,
    TokenMismatchOrMissing,
    UserNotFound,
    VerificationRequired,
)
from .ports import (
    EmailSender,
    PasswordHasher,
    Post,
    PostPage,
    PostRepository,
    User,
    UserRepository,
    VerificationRecord,
    VerificationRepository,
)
from .posts import PostService
from .registration import RegistrationService
from .verification import VerificationService

__all__ = [
    "DomainError",
    "EmailAlreadyRegistered",
    "EmailSender",
    "InvalidEmailFormat",
    "MailDeliveryFailed",
    "NotPostAuthor",
    "PasswordHasher",
    "PasswordMissingSpecialChar",
    "PasswordTooShort",
    "Post",
    "PostError",
    "PostNotFound",
    "PostPage",
    "PostRepository",
    "PostService",
    "RegistrationError",
    "RegistrationService",
    "ReverificationRequired",
    "TokenExpired",
    "TokenMismatchOrMissing",
    "User",
    "UserNotFound",
    "UserRepository",
    "VerificationRecord",
    "VerificationRepository",
    "VerificationService",
]
