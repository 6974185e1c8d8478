"""
API v1 package.

Contains versioned API routes for user verification and posts.
"""

from fastapi import APIRouter

from src.api.v1.posts import router as posts_router
from src.api.v1.routes import router as users_router

router = APIRouter()
router.include_router(users_router)
router.include_router(posts_router)

__all__ = ["router"]
