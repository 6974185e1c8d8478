"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the value types the domain works with and the
interfaces (ports) that the domain requires from infrastructure.
Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class VerificationRecord:
    """
    Per-email verification state.

    The meaning of ``expiry`` depends on ``verified``:
    - verified=False: the issued code expires at ``expiry``
    - verified=True: privileged actions must complete before ``expiry``

    At most one record exists per email; re-issuing overwrites it.
    """

    email: str
    token: str
    verified: bool
    expiry: datetime


@dataclass(frozen=True)
class User:
    """Registered account."""

    id: int
    email: str
    nickname: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class Post:
    """
    Post as seen by a viewer.

    ``liked`` is whether the viewing user likes the post (False when
    the post is read without a viewer).
    """

    id: int
    author_id: int
    author_nickname: str
    title: str
    content: str
    created_at: datetime
    like_count: int = 0
    liked: bool = False


@dataclass(frozen=True)
class PostPage:
    """One page of posts, newest first."""

    items: list[Post]
    page: int
    take: int
    total: int

    @property
    def page_count(self) -> int:
        return (self.total + self.take - 1) // self.take if self.take else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count


class VerificationRepository(Protocol):
    """Port interface for verification record persistence."""

    def find_by_email(self, email: str) -> VerificationRecord | None:
        """Return the record for ``email`` or None."""
        ...

    def find_by_email_and_token(self, email: str, token: str) -> VerificationRecord | None:
        """Return the record only if both email and token match exactly."""
        ...

    def upsert(self, email: str, token: str, expiry: datetime) -> VerificationRecord:
        """
        Create or overwrite the record for ``email``.

        The stored record always ends up unverified with the given token
        and expiry. Must be atomic per email: concurrent upserts leave
        exactly one record.
        """
        ...

    def mark_verified(self, email: str, token: str, expiry: datetime) -> bool:
        """
        Flip the record to verified and set its new expiry.

        Only applies while the stored token still equals ``token``.

        Returns:
            True if a record was updated, False otherwise
        """
        ...

    def consume_if_verified(self, email: str, now: datetime) -> VerificationRecord | None:
        """
        Atomically delete and return a verified, unexpired record.

        A record matches when ``verified`` is true and ``now <= expiry``.
        Under concurrent calls for the same email at most one caller
        receives the record; the others receive None.
        """
        ...

    def delete(self, email: str) -> bool:
        """Delete the record for ``email``. Returns True if one existed."""
        ...

    def delete_if_token(self, email: str, token: str) -> bool:
        """Delete the record only while it still holds ``token``. Returns True if deleted."""
        ...


class UserRepository(Protocol):
    """Port interface for account persistence."""

    def find_by_email(self, email: str) -> User | None:
        ...

    def find_by_id(self, user_id: int) -> User | None:
        ...

    def create(self, email: str, nickname: str, password_hash: str) -> User:
        """
        Insert a new account.

        Raises:
            EmailAlreadyRegistered: If an account with this email exists
        """
        ...

    def update_password_hash(self, email: str, password_hash: str) -> bool:
        """Overwrite the password hash. Returns False if no such user."""
        ...


class PostRepository(Protocol):
    """Port interface for posts and likes."""

    def create(self, author_id: int, title: str, content: str) -> Post:
        ...

    def get(self, post_id: int, viewer_id: int | None = None) -> Post | None:
        ...

    def list_page(self, offset: int, limit: int) -> tuple[list[Post], int]:
        """Return (posts newest first, total post count)."""
        ...

    def delete(self, post_id: int) -> bool:
        """Delete a post and its likes. Returns True if it existed."""
        ...

    def toggle_like(self, post_id: int, user_id: int) -> tuple[bool, int]:
        """
        Flip the user's like on a post.

        Returns:
            (liked after the toggle, like count after the toggle)
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_verification_code(self, email: str, code: str) -> None:
        """
        Send verification code to email address.

        Args:
            email: Recipient email address
            code: 6-character verification code

        Raises:
            MailDeliveryFailed: If the message could not be handed off
        """
        ...


class PasswordHasher(Protocol):
    """Port interface for one-way password hashing."""

    def hash(self, password: str) -> str:
        ...

    def verify(self, password: str, password_hash: str) -> bool:
        ...
