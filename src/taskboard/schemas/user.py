"""User and authentication payloads exchanged with the task API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model using the remote API's camelCase wire names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class User(ApiModel):
    """Public representation of a user."""

    id: int
    email: str
    name: str


class AuthResponse(ApiModel):
    """Successful signup/login result: bearer token plus the user."""

    token: str
    user: User


class SignupRequest(ApiModel):
    email: str
    password: str
    name: str


class LoginRequest(ApiModel):
    email: str
    password: str


__all__ = ["ApiModel", "AuthResponse", "LoginRequest", "SignupRequest", "User"]
