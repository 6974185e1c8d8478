"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresUserRepository, PostgresVerificationRepository
from src.adapters.repository.postgres_posts import PostgresPostRepository
from src.adapters.security.hasher import BcryptPasswordHasher
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.sender import SmtpEmailSender
from src.config.settings import get_settings
from src.domain.ports import EmailSender, PasswordHasher, User, UserRepository
from src.domain.posts import PostService
from src.domain.registration import RegistrationService
from src.domain.validators import normalize_email
from src.domain.verification import VerificationService

# Compared against when the email is unknown so a missing account costs
# the same bcrypt time as a wrong password.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10)).decode()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_verification_repository(request: Request) -> PostgresVerificationRepository:
    """Create verification repository with connection pool from app state."""
    return PostgresVerificationRepository(get_pool(request))


def get_user_repository(request: Request) -> PostgresUserRepository:
    """Create user repository with connection pool from app state."""
    return PostgresUserRepository(get_pool(request))


def get_post_repository(request: Request) -> PostgresPostRepository:
    """Create post repository with connection pool from app state."""
    return PostgresPostRepository(get_pool(request))


def get_password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(cost=get_settings().bcrypt_cost)


def get_email_sender() -> EmailSender:
    """Get the configured email sender (console or SMTP)."""
    settings = get_settings()
    code_ttl_minutes = max(settings.code_ttl_seconds // 60, 1)
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.smtp_sender,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
            code_ttl_minutes=code_ttl_minutes,
        )
    return ConsoleEmailSender(code_ttl_minutes=code_ttl_minutes)


def get_verification_service(request: Request) -> VerificationService:
    """
    Create verification service with injected dependencies.

    Wires together the verification repository and email sender.
    """
    settings = get_settings()
    return VerificationService(
        repository=get_verification_repository(request),
        email_sender=get_email_sender(),
        code_ttl=timedelta(seconds=settings.code_ttl_seconds),
        verified_window=timedelta(seconds=settings.verified_window_seconds),
        allowed_email_domains=tuple(settings.allowed_email_domains),
    )


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the verification and user repositories and the hasher.
    """
    settings = get_settings()
    return RegistrationService(
        verifications=get_verification_repository(request),
        users=get_user_repository(request),
        password_hasher=get_password_hasher(),
        allowed_email_domains=tuple(settings.allowed_email_domains),
    )


def get_post_service(request: Request) -> PostService:
    """Create post service with the post repository."""
    settings = get_settings()
    return PostService(
        repository=get_post_repository(request),
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )


# HTTP BASIC AUTH security scheme for OpenAPI documentation
http_basic = HTTPBasic()


def get_current_user(
    credentials: HTTPBasicCredentials = Depends(http_basic),
    users: UserRepository = Depends(get_user_repository),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
) -> User:
    """
    Resolve the calling user from HTTP BASIC AUTH credentials.

    FastAPI's HTTPBasic automatically:
    - Returns 401 for missing Authorization header
    - Returns 401 for malformed base64 encoding
    - Parses base64(email:password) format

    Unknown emails and wrong passwords both return the same 401.
    """
    user = users.find_by_email(normalize_email(credentials.username))
    stored_hash = user.password_hash if user is not None else _DUMMY_BCRYPT_HASH
    password_valid = password_hasher.verify(credentials.password, stored_hash)

    if user is None or not password_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return user
