"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for lifecycle windows
- In-memory repositories and a recording email sender
- Domain services wired to those fakes
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.adapters.repository.memory import (
    InMemoryPostRepository,
    InMemoryUserRepository,
    InMemoryVerificationRepository,
)
from src.adapters.security.hasher import BcryptPasswordHasher
from src.domain.exceptions import MailDeliveryFailed
from src.domain.posts import PostService
from src.domain.registration import RegistrationService
from src.domain.verification import VerificationService

START_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = START_TIME) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingEmailSender:
    """EmailSender fake that remembers every code it was asked to send."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def send_verification_code(self, email: str, code: str) -> None:
        if self.fail:
            raise MailDeliveryFailed()
        self.sent.append((email, code))

    def last_code(self, email: str) -> str:
        return next(code for sent_to, code in reversed(self.sent) if sent_to == email)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def verification_repository() -> InMemoryVerificationRepository:
    return InMemoryVerificationRepository()


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def post_repository(user_repository: InMemoryUserRepository) -> InMemoryPostRepository:
    return InMemoryPostRepository(user_repository)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(cost=10)


@pytest.fixture
def verification_service(
    verification_repository: InMemoryVerificationRepository,
    email_sender: RecordingEmailSender,
    clock: FrozenClock,
) -> VerificationService:
    return VerificationService(
        repository=verification_repository,
        email_sender=email_sender,
        clock=clock,
    )


@pytest.fixture
def registration_service(
    verification_repository: InMemoryVerificationRepository,
    user_repository: InMemoryUserRepository,
    password_hasher: BcryptPasswordHasher,
    clock: FrozenClock,
) -> RegistrationService:
    return RegistrationService(
        verifications=verification_repository,
        users=user_repository,
        password_hasher=password_hasher,
        clock=clock,
    )


@pytest.fixture
def post_service(post_repository: InMemoryPostRepository) -> PostService:
    return PostService(repository=post_repository)


@pytest.fixture
def verify_email(
    verification_service: VerificationService, email_sender: RecordingEmailSender
):
    """Issue and verify a code for an email, returning the normalized email."""

    def _verify(email: str) -> str:
        normalized = verification_service.issue_verification(email)
        verification_service.verify_code(normalized, email_sender.last_code(normalized))
        return normalized

    return _verify
