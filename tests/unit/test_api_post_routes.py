"""
Unit tests for API v1 post routes.

Routes run against a PostService backed by in-memory repositories;
the current user dependency is overridden per test.
"""

from base64 import b64encode
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.dependencies import (
    get_current_user,
    get_password_hasher,
    get_post_service,
    get_user_repository,
)
from src.api.v1 import router
from src.config.settings import get_settings


def basic_auth_header(email: str, password: str) -> dict:
    """Create HTTP BASIC AUTH header for testing."""
    encoded = b64encode(f"{email}:{password}".encode()).decode()
    return {"Authorization": f"Basic {encoded}"}


@pytest.fixture
def alice(user_repository):
    return user_repository.create("alice@x.com", "alice", "hash")


@pytest.fixture
def bob(user_repository):
    return user_repository.create("bob@x.com", "bob", "hash")


@pytest.fixture
def app(post_service) -> FastAPI:
    """Create test FastAPI application."""
    test_app = FastAPI()
    test_app.include_router(router, prefix="/v1")
    test_app.state.pool = MagicMock()
    test_app.dependency_overrides[get_post_service] = lambda: post_service
    return test_app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def login_as(app: FastAPI, user) -> None:
    app.dependency_overrides[get_current_user] = lambda: user


class TestListPosts:
    """Tests for GET /v1/posts."""

    def test_list_is_public(self, client: TestClient, post_service, alice) -> None:
        for i in range(3):
            post_service.create_post(alice.id, f"post {i}", "content")

        response = client.get("/v1/posts", params={"page": 1, "take": 2})

        assert response.status_code == 200
        body = response.json()
        assert [p["title"] for p in body["items"]] == ["post 2", "post 1"]
        assert body["total"] == 3
        assert body["page_count"] == 2
        assert body["has_next"] is True

    def test_page_must_be_positive(self, client: TestClient) -> None:
        assert client.get("/v1/posts", params={"page": 0}).status_code == 422

    def test_service_uses_configured_page_sizes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEFAULT_PAGE_SIZE", "2")
        monkeypatch.setenv("MAX_PAGE_SIZE", "5")
        get_settings.cache_clear()
        request = MagicMock()

        try:
            service = get_post_service(request)
        finally:
            get_settings.cache_clear()

        assert service.default_page_size == 2
        assert service.max_page_size == 5

    def test_take_is_optional(self, client: TestClient, post_service, alice) -> None:
        for i in range(12):
            post_service.create_post(alice.id, f"post {i}", "content")

        body = client.get("/v1/posts").json()

        assert body["take"] == 10
        assert len(body["items"]) == 10


class TestCreatePost:
    """Tests for POST /v1/posts."""

    def test_create_post(self, app: FastAPI, client: TestClient, alice) -> None:
        login_as(app, alice)

        response = client.post("/v1/posts", json={"title": "Hello", "content": "First"})

        assert response.status_code == 201
        body = response.json()
        assert body["author_id"] == alice.id
        assert body["author_nickname"] == "alice"
        assert body["like_count"] == 0

    def test_requires_credentials(self, client: TestClient) -> None:
        response = client.post("/v1/posts", json={"title": "Hello", "content": "First"})
        assert response.status_code == 401


class TestGetPost:
    """Tests for GET /v1/posts/{post_id}."""

    def test_get_includes_viewer_like(self, app, client, post_service, alice, bob) -> None:
        post = post_service.create_post(alice.id, "Hello", "First")
        post_service.toggle_like(post.id, bob.id)
        login_as(app, bob)

        response = client.get(f"/v1/posts/{post.id}")

        assert response.status_code == 200
        assert response.json()["liked"] is True
        assert response.json()["like_count"] == 1

    def test_missing_post_returns_404(self, app, client, alice) -> None:
        login_as(app, alice)

        response = client.get("/v1/posts/999")

        assert response.status_code == 404
        assert response.json() == {"detail": "Post does not exist"}


class TestDeletePost:
    """Tests for DELETE /v1/posts/{post_id}."""

    def test_author_deletes(self, app, client, post_service, alice) -> None:
        post = post_service.create_post(alice.id, "Hello", "First")
        login_as(app, alice)

        response = client.delete(f"/v1/posts/{post.id}")

        assert response.status_code == 204
        assert client.get(f"/v1/posts/{post.id}").status_code == 404

    def test_non_author_gets_403(self, app, client, post_service, alice, bob) -> None:
        post = post_service.create_post(alice.id, "Hello", "First")
        login_as(app, bob)

        response = client.delete(f"/v1/posts/{post.id}")

        assert response.status_code == 403


class TestLikeToggle:
    """Tests for POST /v1/posts/like-toggle."""

    def test_toggle_twice(self, app, client, post_service, alice, bob) -> None:
        post = post_service.create_post(alice.id, "Hello", "First")
        login_as(app, bob)

        first = client.post("/v1/posts/like-toggle", json={"post_id": post.id})
        second = client.post("/v1/posts/like-toggle", json={"post_id": post.id})

        assert first.json() == {"post_id": post.id, "liked": True, "like_count": 1}
        assert second.json() == {"post_id": post.id, "liked": False, "like_count": 0}

    def test_missing_post_returns_404(self, app, client, bob) -> None:
        login_as(app, bob)

        response = client.post("/v1/posts/like-toggle", json={"post_id": 999})

        assert response.status_code == 404


class TestBasicAuthGuard:
    """Tests for the get_current_user dependency with real credentials."""

    @pytest.fixture
    def guarded_client(self, app, user_repository, password_hasher) -> TestClient:
        user_repository.create("carol@x.com", "carol", password_hasher.hash("abc12345!"))
        app.dependency_overrides[get_user_repository] = lambda: user_repository
        app.dependency_overrides[get_password_hasher] = lambda: password_hasher
        return TestClient(app)

    def test_valid_credentials(self, guarded_client: TestClient) -> None:
        response = guarded_client.post(
            "/v1/posts",
            json={"title": "Hello", "content": "First"},
            headers=basic_auth_header("Carol@X.com", "abc12345!"),
        )

        assert response.status_code == 201
        assert response.json()["author_nickname"] == "carol"

    def test_wrong_password(self, guarded_client: TestClient) -> None:
        response = guarded_client.post(
            "/v1/posts",
            json={"title": "Hello", "content": "First"},
            headers=basic_auth_header("carol@x.com", "wrong-pass!"),
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Basic"

    def test_unknown_user_same_response(self, guarded_client: TestClient) -> None:
        unknown = guarded_client.post(
            "/v1/posts",
            json={"title": "Hello", "content": "First"},
            headers=basic_auth_header("nobody@x.com", "abc12345!"),
        )
        wrong = guarded_client.post(
            "/v1/posts",
            json={"title": "Hello", "content": "First"},
            headers=basic_auth_header("carol@x.com", "wrong-pass!"),
        )

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()
