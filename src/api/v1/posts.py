"""
API v1 post routes.

Listing is public; every other endpoint requires HTTP BASIC AUTH.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import get_current_user, get_post_service
from src.api.errors import to_http_exception
from src.api.models import (
    CreatePostRequest,
    ErrorResponse,
    LikeToggleRequest,
    LikeToggleResponse,
    PostPageResponse,
    PostResponse,
)
from src.domain.exceptions import PostError
from src.domain.ports import Post, User
from src.domain.posts import PostService

router = APIRouter(prefix="/posts", tags=["v1"])


def _to_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        author_id=post.author_id,
        author_nickname=post.author_nickname,
        title=post.title,
        content=post.content,
        created_at=post.created_at,
        like_count=post.like_count,
        liked=post.liked,
    )


@router.get("", response_model=PostPageResponse, summary="List posts")
async def list_posts(
    page: int = Query(1, ge=1),
    take: int | None = Query(None, ge=1),
    service: PostService = Depends(get_post_service),
) -> PostPageResponse:
    """List posts newest first. ``take`` defaults to and is capped by server settings."""
    result = service.list_posts(page, take)
    return PostPageResponse(
        items=[_to_response(post) for post in result.items],
        page=result.page,
        take=result.take,
        total=result.total,
        page_count=result.page_count,
        has_next=result.has_next,
    )


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Create a post",
)
async def create_post(
    request_data: CreatePostRequest,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    post = service.create_post(user.id, request_data.title, request_data.content)
    return _to_response(post)


@router.post(
    "/like-toggle",
    response_model=LikeToggleResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        404: {"model": ErrorResponse, "description": "Post does not exist"},
    },
    summary="Like or unlike a post",
)
async def toggle_like(
    request_data: LikeToggleRequest,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> LikeToggleResponse:
    try:
        liked, like_count = service.toggle_like(request_data.post_id, user.id)
    except PostError as e:
        raise to_http_exception(e) from None
    return LikeToggleResponse(post_id=request_data.post_id, liked=liked, like_count=like_count)


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        404: {"model": ErrorResponse, "description": "Post does not exist"},
    },
    summary="Get a post",
)
async def get_post(
    post_id: int,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    try:
        post = service.get_post(post_id, viewer_id=user.id)
    except PostError as e:
        raise to_http_exception(e) from None
    return _to_response(post)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Not the author"},
        404: {"model": ErrorResponse, "description": "Post does not exist"},
    },
    summary="Delete a post",
)
async def delete_post(
    post_id: int,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> Response:
    try:
        service.delete_post(post_id, user.id)
    except PostError as e:
        raise to_http_exception(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
