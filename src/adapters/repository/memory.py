"""
In-memory repository adapters - Thread-safe fakes of the repository ports.

Used by unit and adversarial tests in place of PostgreSQL. Each
repository guards its state with a single lock so every port operation
is atomic, matching the per-statement atomicity of the SQL adapters.
"""

import threading
from dataclasses import replace
from datetime import datetime, timezone

from src.domain.exceptions import EmailAlreadyRegistered, PostNotFound
from src.domain.ports import Post, User, UserRepository, VerificationRecord


class InMemoryVerificationRepository:
    """Implements VerificationRepository protocol with a dict keyed by email."""

    def __init__(self) -> None:
        self._records: dict[str, VerificationRecord] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> VerificationRecord | None:
        with self._lock:
            return self._records.get(email)

    def find_by_email_and_token(self, email: str, token: str) -> VerificationRecord | None:
        with self._lock:
            record = self._records.get(email)
            if record is None or record.token != token:
                return None
            return record

    def upsert(self, email: str, token: str, expiry: datetime) -> VerificationRecord:
        record = VerificationRecord(email=email, token=token, verified=False, expiry=expiry)
        with self._lock:
            self._records[email] = record
        return record

    def mark_verified(self, email: str, token: str, expiry: datetime) -> bool:
        with self._lock:
            record = self._records.get(email)
            if record is None or record.token != token:
                return False
            self._records[email] = replace(record, verified=True, expiry=expiry)
            return True

    def consume_if_verified(self, email: str, now: datetime) -> VerificationRecord | None:
        with self._lock:
            record = self._records.get(email)
            if record is None or not record.verified or now > record.expiry:
                return None
            return self._records.pop(email)

    def delete(self, email: str) -> bool:
        with self._lock:
            return self._records.pop(email, None) is not None

    def delete_if_token(self, email: str, token: str) -> bool:
        with self._lock:
            record = self._records.get(email)
            if record is None or record.token != token:
                return False
            del self._records[email]
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class InMemoryUserRepository:
    """Implements UserRepository protocol with sequential ids."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> User | None:
        with self._lock:
            return self._users.get(email)

    def find_by_id(self, user_id: int) -> User | None:
        with self._lock:
            return next((u for u in self._users.values() if u.id == user_id), None)

    def create(self, email: str, nickname: str, password_hash: str) -> User:
        with self._lock:
            if email in self._users:
                raise EmailAlreadyRegistered()
            user = User(
                id=self._next_id,
                email=email,
                nickname=nickname,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc),
            )
            self._users[email] = user
            self._next_id += 1
        return user

    def update_password_hash(self, email: str, password_hash: str) -> bool:
        with self._lock:
            user = self._users.get(email)
            if user is None:
                return False
            self._users[email] = replace(user, password_hash=password_hash)
            return True


class InMemoryPostRepository:
    """Implements PostRepository protocol; author nicknames come from ``users``."""

    def __init__(self, users: UserRepository) -> None:
        self._users = users
        self._posts: dict[int, Post] = {}
        self._likes: set[tuple[int, int]] = set()
        self._next_id = 1
        self._lock = threading.Lock()

    def create(self, author_id: int, title: str, content: str) -> Post:
        author = self._users.find_by_id(author_id)
        with self._lock:
            post = Post(
                id=self._next_id,
                author_id=author_id,
                author_nickname=author.nickname if author else "",
                title=title,
                content=content,
                created_at=datetime.now(timezone.utc),
            )
            self._posts[post.id] = post
            self._next_id += 1
        return post

    def get(self, post_id: int, viewer_id: int | None = None) -> Post | None:
        with self._lock:
            post = self._posts.get(post_id)
            if post is None:
                return None
            return self._view(post, viewer_id)

    def list_page(self, offset: int, limit: int) -> tuple[list[Post], int]:
        with self._lock:
            ordered = sorted(self._posts.values(), key=lambda p: (p.created_at, p.id), reverse=True)
            return [self._view(p, None) for p in ordered[offset : offset + limit]], len(ordered)

    def delete(self, post_id: int) -> bool:
        with self._lock:
            if self._posts.pop(post_id, None) is None:
                return False
            self._likes = {like for like in self._likes if like[0] != post_id}
            return True

    def toggle_like(self, post_id: int, user_id: int) -> tuple[bool, int]:
        with self._lock:
            if post_id not in self._posts:
                raise PostNotFound()
            key = (post_id, user_id)
            if key in self._likes:
                self._likes.discard(key)
                liked = False
            else:
                self._likes.add(key)
                liked = True
            return liked, self._count_likes(post_id)

    def _count_likes(self, post_id: int) -> int:
        return sum(1 for like in self._likes if like[0] == post_id)

    def _view(self, post: Post, viewer_id: int | None) -> Post:
        return replace(
            post,
            like_count=self._count_likes(post.id),
            liked=viewer_id is not None and (post.id, viewer_id) in self._likes,
        )
