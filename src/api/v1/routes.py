"""
API v1 user routes.

Defines REST endpoints for email verification, account creation
and password change.
"""

from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_registration_service, get_verification_service
from src.api.errors import to_http_exception
from src.api.models import (
    ChangePasswordRequest,
    CreateUserRequest,
    EmailCheckResponse,
    EmailRequest,
    ErrorResponse,
    UserResponse,
    VerificationIssuedResponse,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from src.config.settings import get_settings
from src.domain.exceptions import RegistrationError
from src.domain.registration import RegistrationService
from src.domain.validators import normalize_email
from src.domain.verification import VerificationService

router = APIRouter(prefix="/users", tags=["v1"])


@router.post(
    "/email/check",
    response_model=EmailCheckResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email format"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
    summary="Check email availability",
)
async def check_email(
    request_data: EmailRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> EmailCheckResponse:
    """Check that an email is well-formed and not yet registered."""
    try:
        service.check_duplicate_email(request_data.email)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return EmailCheckResponse(email=normalize_email(request_data.email), available=True)


@router.post(
    "/email/verification",
    response_model=VerificationIssuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email format"},
        502: {"model": ErrorResponse, "description": "Verification email could not be delivered"},
    },
    summary="Send a verification code",
    description="Issue a 6-character verification code and send it to the email. "
    "Any previously issued code for the email stops working.",
)
async def issue_verification(
    request_data: EmailRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerificationIssuedResponse:
    try:
        normalized_email = service.issue_verification(request_data.email)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return VerificationIssuedResponse(
        message="Verification code sent",
        email=normalized_email,
        expires_in_seconds=get_settings().code_ttl_seconds,
    )


@router.post(
    "/email/verify",
    response_model=VerifyCodeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Code mismatch or expired"},
        422: {"description": "Validation error"},
    },
    summary="Verify an email with its code",
    description="Verify the code received by email. On success the email stays "
    "verified for a limited window in which the account can be created or the "
    "password changed.",
)
async def verify_code(
    request_data: VerifyCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerifyCodeResponse:
    try:
        verified = service.verify_code(request_data.email, request_data.code)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return VerifyCodeResponse(
        verified=verified,
        expires_in_seconds=get_settings().verified_window_seconds,
    )


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Password policy violation"},
        403: {"model": ErrorResponse, "description": "Email verification required"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
    summary="Create an account",
    description="Create an account for a verified email. The verification is "
    "consumed and cannot be reused.",
)
async def create_user(
    request_data: CreateUserRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> UserResponse:
    """
    Create an account.

    - **email**: Email verified via /v1/users/email/verify
    - **nickname**: Display name
    - **password**: At least 8 characters with a special character
    """
    try:
        user = service.register_user(request_data.email, request_data.nickname, request_data.password)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return UserResponse(id=user.id, email=user.email, nickname=user.nickname, created_at=user.created_at)


@router.patch(
    "/password",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        400: {"model": ErrorResponse, "description": "Password policy violation"},
        403: {"model": ErrorResponse, "description": "Email verification required"},
        404: {"model": ErrorResponse, "description": "User does not exist"},
    },
    summary="Change password",
    description="Replace the password of an account whose email was just verified.",
)
async def change_password(
    request_data: ChangePasswordRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> Response:
    try:
        service.change_password(request_data.email, request_data.new_password)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
