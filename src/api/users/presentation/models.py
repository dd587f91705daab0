"""Pydantic models for user API requests and responses.

Request fields are typed loosely on purpose: type and format rules are
applied by the application-layer validator so every violation comes back
in the same field-error map.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from users.domain.aggregates import User


class CreateUserRequest(BaseModel):
    """Request model for creating a user."""

    model_config = ConfigDict(extra="ignore")

    name: Any = Field(default=None, description="Display name (max 255 characters)")
    email: Any = Field(default=None, description="Unique email address")
    password: Any = Field(
        default=None,
        description=(
            "At least 8 characters with upper and lower case letters and a number"
        ),
    )


class UpdateUserRequest(BaseModel):
    """Request model for updating a user's name and email."""

    model_config = ConfigDict(extra="ignore")

    name: Any = Field(default=None, description="Display name (max 255 characters)")
    email: Any = Field(default=None, description="Unique email address")


class UserResponse(BaseModel):
    """Public representation of a user. Never includes password data."""

    id: int = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    created_at: datetime | None = Field(default=None, description="Creation time")
    updated_at: datetime | None = Field(default=None, description="Last update time")

    @classmethod
    def from_domain(cls, user: User) -> UserResponse:
        """Convert domain User aggregate to API response.

        Args:
            user: User domain aggregate

        Returns:
            UserResponse
        """
        return cls(
            id=user.id.value,
            name=user.name,
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserDetailResponse(BaseModel):
    """Response body for GET /user/{id}."""

    user: UserResponse


class UserMutationResponse(BaseModel):
    """Response body for successful create and update."""

    message: str
    user: UserResponse


class UserPageResponse(BaseModel):
    """One cursor-paginated page of users."""

    data: list[UserResponse]
    path: str = Field(..., description="Endpoint URL without query string")
    per_page: int
    next_cursor: str | None = Field(
        default=None, description="Opaque cursor for the next page, null when exhausted"
    )
    next_page_url: str | None = None


class UserListResponse(BaseModel):
    """Response body for GET /users."""

    users: UserPageResponse


class MessageResponse(BaseModel):
    """Response body carrying only a message."""

    message: str


class ErrorResponse(BaseModel):
    """Response body for unexpected failures."""

    message: str
    error: str


class ValidationErrorResponse(BaseModel):
    """Response body for validation failures."""

    message: str
    errors: dict[str, list[str]]
