"""Repository protocol (port) for the users context.

The repository is the store collaborator: it persists User aggregates and
enforces email uniqueness through the database's unique index.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from users.domain.aggregates import User
from users.domain.value_objects import UserId


@runtime_checkable
class IUserRepository(Protocol):
    """Repository for User aggregate persistence.

    Implementations do not manage transactions; callers wrap mutating
    calls in ``async with session.begin()``.
    """

    async def add(self, name: str, email: str, password_hash: str) -> User:
        """Insert a new user.

        Args:
            name: Display name
            email: Email address (must be unique)
            password_hash: One-way hash of the password

        Returns:
            The created User with its store-assigned id

        Raises:
            DuplicateEmailError: If the email is already used
        """
        ...

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by id.

        Args:
            user_id: The unique identifier of the user

        Returns:
            The User aggregate, or None if not found
        """
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Retrieve a user by email address.

        Args:
            email: The email to search for (exact match)

        Returns:
            The User aggregate, or None if not found
        """
        ...

    async def update(self, user_id: UserId, name: str, email: str) -> User | None:
        """Change a user's name and email.

        Args:
            user_id: The user to update
            name: New display name
            email: New email address (must be unique)

        Returns:
            The updated User, or None if not found

        Raises:
            DuplicateEmailError: If another user already has the email
        """
        ...

    async def delete(self, user_id: UserId) -> bool:
        """Permanently delete a user.

        Args:
            user_id: The user to delete

        Returns:
            True if deleted, False if not found
        """
        ...

    async def list_after(self, after_id: int | None, limit: int) -> list[User]:
        """List users with an id greater than ``after_id``, ascending by id.

        Args:
            after_id: Last id already seen, or None to start from the beginning
            limit: Maximum number of users to return

        Returns:
            Up to ``limit`` User aggregates ordered by ascending id
        """
        ...
