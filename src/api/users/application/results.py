"""Tagged results returned by the user application service.

The service never raises for expected outcomes. Each operation returns one
of these variants and the presentation layer maps them to status codes::

    match await service.get_user(user_id):
        case Ok(value=user): ...
        case NotFound(): ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from users.domain.value_objects import UserId

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """The operation succeeded."""

    value: T


@dataclass(frozen=True)
class NotFound:
    """No user exists with the requested id."""

    user_id: UserId | None = None


@dataclass(frozen=True)
class Invalid:
    """Input failed validation; errors maps field name to messages."""

    errors: dict[str, list[str]]


@dataclass(frozen=True)
class Internal:
    """The store or infrastructure failed unexpectedly."""

    cause: Exception

    @property
    def message(self) -> str:
        """The underlying error text (not safe to show clients by default)."""
        return str(self.cause) or type(self.cause).__name__


Result = Ok[T] | NotFound | Invalid | Internal
