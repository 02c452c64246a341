"""JSON endpoints exposed next to the HTML views."""

from __future__ import annotations

from .routers import system_router

__all__ = ["system_router"]
