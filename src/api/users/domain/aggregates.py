"""User aggregate for the users context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from users.domain.value_objects import UserId


@dataclass(frozen=True)
class User:
    """User aggregate representing a registered person.

    The password is only ever held as its one-way hash. The hash is kept
    out of repr() so it does not end up in logs or tracebacks.
    """

    id: UserId
    name: str
    email: str
    password_hash: str = field(repr=False)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __str__(self) -> str:
        """Return string representation."""
        return f"User({self.id}, {self.email})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id)
