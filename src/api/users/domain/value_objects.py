"""Value objects for the users domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and pagination.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from users.domain.aggregates import User

# users.id is a 32-bit integer column
MAX_USER_ID = 2**31 - 1


@dataclass(frozen=True)
class UserId:
    """Identifier for a User aggregate.

    Ids are assigned by the store (auto-incrementing integer column) and
    are never reused after deletion.
    """

    value: int

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from a path segment.

        Args:
            value: Decimal string of a positive integer

        Returns:
            UserId instance

        Raises:
            ValueError: If value is not a positive integer within the id range
        """
        if not (value.isascii() and value.isdigit()):
            raise ValueError(f"Invalid UserId: {value}")

        parsed = int(value)
        if parsed < 1 or parsed > MAX_USER_ID:
            raise ValueError(f"Invalid UserId: {value}")

        return cls(value=parsed)


@dataclass(frozen=True)
class PageCursor:
    """Opaque pointer to the last user seen on the previous page.

    The wire form is URL-safe base64 of ``{"id": <last id>}`` so clients
    cannot depend on its structure.
    """

    last_id: int

    def encode(self) -> str:
        """Encode the cursor into its opaque token."""
        payload = json.dumps({"id": self.last_id}, separators=(",", ":"))
        return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")

    @classmethod
    def decode(cls, token: str) -> PageCursor:
        """Decode an opaque token produced by encode().

        Args:
            token: The cursor token supplied by a client

        Returns:
            PageCursor instance

        Raises:
            ValueError: If the token is not a valid cursor
        """
        padded = token + "=" * (-len(token) % 4)
        try:
            payload = json.loads(base64.urlsafe_b64decode(padded.encode()))
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            raise ValueError(f"Invalid cursor: {token}") from e

        if not isinstance(payload, dict):
            raise ValueError(f"Invalid cursor: {token}")

        last_id = payload.get("id")
        # bool is an int subclass
        if not isinstance(last_id, int) or isinstance(last_id, bool):
            raise ValueError(f"Invalid cursor: {token}")
        if not 0 <= last_id <= MAX_USER_ID:
            raise ValueError(f"Invalid cursor: {token}")

        return cls(last_id=last_id)


@dataclass(frozen=True)
class UserPage:
    """One page of users ordered by ascending id."""

    users: list[User] = field(default_factory=list)
    per_page: int = 10
    next_cursor: PageCursor | None = None

    @property
    def has_more(self) -> bool:
        """Whether another page follows this one."""
        return self.next_cursor is not None
