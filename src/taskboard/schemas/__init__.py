"""Pydantic models for the remote API and the service's own endpoints."""

from __future__ import annotations

from .system import ApiError, ErrorResponse, HealthCheckResponse, RootResponse
from .task import Assignee, Task, TaskCreate, TaskStatus, TaskUpdate
from .user import AuthResponse, LoginRequest, SignupRequest, User

__all__ = [
    "ApiError",
    "Assignee",
    "AuthResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "LoginRequest",
    "RootResponse",
    "SignupRequest",
    "Task",
    "TaskCreate",
    "TaskStatus",
    "TaskUpdate",
    "User",
]
