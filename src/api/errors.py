"""
Domain error translation - maps domain exceptions to HTTP responses.
"""

from fastapi import HTTPException, status

from src.domain.exceptions import (
    DomainError,
    EmailAlreadyRegistered,
    InvalidEmailFormat,
    MailDeliveryFailed,
    NotPostAuthor,
    PasswordMissingSpecialChar,
    PasswordTooShort,
    PostNotFound,
    ReverificationRequired,
    TokenExpired,
    TokenMismatchOrMissing,
    UserNotFound,
    VerificationRequired,
)

STATUS_BY_ERROR: dict[type[DomainError], int] = {
    InvalidEmailFormat: status.HTTP_400_BAD_REQUEST,
    EmailAlreadyRegistered: status.HTTP_409_CONFLICT,
    TokenMismatchOrMissing: status.HTTP_400_BAD_REQUEST,
    TokenExpired: status.HTTP_400_BAD_REQUEST,
    VerificationRequired: status.HTTP_403_FORBIDDEN,
    ReverificationRequired: status.HTTP_403_FORBIDDEN,
    PasswordTooShort: status.HTTP_400_BAD_REQUEST,
    PasswordMissingSpecialChar: status.HTTP_400_BAD_REQUEST,
    UserNotFound: status.HTTP_404_NOT_FOUND,
    MailDeliveryFailed: status.HTTP_502_BAD_GATEWAY,
    PostNotFound: status.HTTP_404_NOT_FOUND,
    NotPostAuthor: status.HTTP_403_FORBIDDEN,
}


def to_http_exception(error: DomainError) -> HTTPException:
    """Build the HTTPException for a domain error; unknown kinds map to 400."""
    status_code = STATUS_BY_ERROR.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=error.message)
