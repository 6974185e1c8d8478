"""
Posting domain service - posts and like toggling.

Callers are identified by user id; resolving who the caller is happens
outside the domain.
"""

import logging
from dataclasses import dataclass

from .exceptions import NotPostAuthor, PostNotFound
from .ports import Post, PostPage, PostRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


@dataclass
class PostService:
    """Domain service for creating, reading, deleting and liking posts."""

    repository: PostRepository
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE

    def create_post(self, author_id: int, title: str, content: str) -> Post:
        post = self.repository.create(author_id, title, content)
        logger.info("Post created: id=%s author_id=%s", post.id, author_id)
        return post

    def get_post(self, post_id: int, viewer_id: int | None = None) -> Post:
        """
        Fetch a post with its like count and the viewer's like state.

        Raises:
            PostNotFound: If the post does not exist
        """
        post = self.repository.get(post_id, viewer_id)
        if post is None:
            raise PostNotFound()
        return post

    def delete_post(self, post_id: int, user_id: int) -> None:
        """
        Delete a post owned by ``user_id``.

        Raises:
            PostNotFound: If the post does not exist
            NotPostAuthor: If ``user_id`` did not write the post
        """
        post = self.get_post(post_id)
        if post.author_id != user_id:
            raise NotPostAuthor()
        if not self.repository.delete(post_id):
            raise PostNotFound()
        logger.info("Post deleted: id=%s", post_id)

    def toggle_like(self, post_id: int, user_id: int) -> tuple[bool, int]:
        """
        Like the post if the user does not like it yet, otherwise unlike it.

        Returns:
            (liked, like_count) after the toggle

        Raises:
            PostNotFound: If the post does not exist
        """
        self.get_post(post_id)
        return self.repository.toggle_like(post_id, user_id)

    def list_posts(self, page: int = 1, take: int | None = None) -> PostPage:
        """Return one page of posts, newest first. ``take`` is clamped."""
        page = max(page, 1)
        if take is None:
            take = self.default_page_size
        take = min(max(take, 1), self.max_page_size)
        items, total = self.repository.list_page((page - 1) * take, take)
        return PostPage(items=items, page=page, take=take, total=total)
