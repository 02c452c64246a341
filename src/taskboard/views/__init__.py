from __future__ import annotations

from fastapi import APIRouter

from . import auth, pages, tasks

router = APIRouter()
router.include_router(pages.router)
router.include_router(auth.router, prefix="/auth")
router.include_router(tasks.router, prefix="/tasks")

__all__ = ["router"]
