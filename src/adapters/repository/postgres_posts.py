"""
PostgreSQL post repository - Implements PostRepository protocol.

Likes live in ``post_likes`` keyed by (post_id, user_id); deleting a
post cascades to its likes.
"""

import logging

from psycopg import errors
from psycopg_pool import ConnectionPool

from src.domain.exceptions import PostNotFound
from src.domain.ports import Post

logger = logging.getLogger(__name__)

_POST_SELECT = """
    SELECT p.id, p.author_id, u.nickname, p.title, p.content, p.created_at,
           (SELECT COUNT(*) FROM post_likes l WHERE l.post_id = p.id) AS like_count
    FROM posts p
    JOIN users u ON u.id = p.author_id
"""


def _to_post(row: tuple, liked: bool = False) -> Post:
    return Post(
        id=row[0],
        author_id=row[1],
        author_nickname=row[2],
        title=row[3],
        content=row[4],
        created_at=row[5],
        like_count=row[6],
        liked=liked,
    )


class PostgresPostRepository:
    """
    Implements PostRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def create(self, author_id: int, title: str, content: str) -> Post:
        insert_sql = """
            INSERT INTO posts (author_id, title, content, created_at)
            VALUES (%s, %s, %s, NOW())
            RETURNING id
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(insert_sql, (author_id, title, content))
            post_id = cursor.fetchone()[0]
            cursor.execute(_POST_SELECT + " WHERE p.id = %s", (post_id,))
            post = _to_post(cursor.fetchone())
            conn.commit()
        return post

    def get(self, post_id: int, viewer_id: int | None = None) -> Post | None:
        liked_sql = "SELECT 1 FROM post_likes WHERE post_id = %s AND user_id = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(_POST_SELECT + " WHERE p.id = %s", (post_id,))
            row = cursor.fetchone()
            if row is None:
                return None

            liked = False
            if viewer_id is not None:
                cursor.execute(liked_sql, (post_id, viewer_id))
                liked = cursor.fetchone() is not None
        return _to_post(row, liked=liked)

    def list_page(self, offset: int, limit: int) -> tuple[list[Post], int]:
        page_sql = _POST_SELECT + " ORDER BY p.created_at DESC, p.id DESC LIMIT %s OFFSET %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT COUNT(*) FROM posts")
            total = cursor.fetchone()[0]
            cursor.execute(page_sql, (limit, offset))
            posts = [_to_post(row) for row in cursor.fetchall()]
        return posts, total

    def delete(self, post_id: int) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM posts WHERE id = %s", (post_id,))
            conn.commit()
            return cursor.rowcount == 1

    def toggle_like(self, post_id: int, user_id: int) -> tuple[bool, int]:
        """
        Remove the like if present, otherwise add it, in one transaction.

        Raises:
            PostNotFound: If the post was deleted concurrently
        """
        unlike_sql = "DELETE FROM post_likes WHERE post_id = %s AND user_id = %s"
        like_sql = """
            INSERT INTO post_likes (post_id, user_id, created_at)
            VALUES (%s, %s, NOW())
            ON CONFLICT (post_id, user_id) DO NOTHING
        """
        count_sql = "SELECT COUNT(*) FROM post_likes WHERE post_id = %s"

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(unlike_sql, (post_id, user_id))
                liked = cursor.rowcount == 0
                if liked:
                    cursor.execute(like_sql, (post_id, user_id))
                cursor.execute(count_sql, (post_id,))
                like_count = cursor.fetchone()[0]
                conn.commit()
        except errors.ForeignKeyViolation:
            raise PostNotFound() from None

        logger.debug("Post %s like toggled by user %s: liked=%s", post_id, user_id, liked)
        return liked, like_count
