"""PostgreSQL implementation of IUserRepository.

The repository never opens transactions itself. It flushes after writes so
that unique-index violations surface inside the caller's transaction,
where they are translated into DuplicateEmailError.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from users.domain.aggregates import User
from users.domain.value_objects import UserId
from users.infrastructure.models import UserModel
from users.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from users.ports.exceptions import DuplicateEmailError
from users.ports.repositories import IUserRepository

EMAIL_INDEX_NAME = "ix_users_email"


class UserRepository(IUserRepository):
    """PostgreSQL-backed repository for User aggregates."""

    def __init__(
        self, session: AsyncSession, probe: UserRepositoryProbe | None = None
    ) -> None:
        """Initialize repository with database session and probe.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def add(self, name: str, email: str, password_hash: str) -> User:
        """Insert a new user row.

        Args:
            name: Display name
            email: Email address (must be unique)
            password_hash: One-way hash of the password

        Returns:
            The created User with its store-assigned id

        Raises:
            DuplicateEmailError: If the email is already used
        """
        model = UserModel(name=name, email=email, password_hash=password_hash)
        self._session.add(model)
        await self._flush(email)

        self._probe.user_saved(model.id, model.email)
        return self._to_domain(model)

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by id.

        Args:
            user_id: The unique identifier of the user

        Returns:
            The User aggregate, or None if not found
        """
        model = await self._get_model(user_id)

        if model is None:
            self._probe.user_not_found(user_id.value)
            return None

        self._probe.user_retrieved(user_id.value)
        return self._to_domain(model)

    async def get_by_email(self, email: str) -> User | None:
        """Retrieve a user by email address, ignoring case.

        Args:
            email: The email to search for

        Returns:
            The User aggregate, or None if not found
        """
        stmt = select(UserModel).where(
            func.lower(UserModel.email) == email.lower()
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        self._probe.user_retrieved(model.id)
        return self._to_domain(model)

    async def update(self, user_id: UserId, name: str, email: str) -> User | None:
        """Change a user's name and email.

        Args:
            user_id: The user to update
            name: New display name
            email: New email address

        Returns:
            The updated User, or None if not found

        Raises:
            DuplicateEmailError: If another user already has the email
        """
        model = await self._get_model(user_id)

        if model is None:
            self._probe.user_not_found(user_id.value)
            return None

        model.name = name
        model.email = email
        await self._flush(email)

        self._probe.user_saved(model.id, model.email)
        return self._to_domain(model)

    async def delete(self, user_id: UserId) -> bool:
        """Delete a user row.

        Args:
            user_id: The user to delete

        Returns:
            True if deleted, False if not found
        """
        model = await self._get_model(user_id)

        if model is None:
            self._probe.user_not_found(user_id.value)
            return False

        await self._session.delete(model)
        await self._session.flush()

        self._probe.user_deleted(user_id.value)
        return True

    async def list_after(self, after_id: int | None, limit: int) -> list[User]:
        """List users with an id greater than after_id, ascending by id.

        Args:
            after_id: Last id already seen, or None to start from the beginning
            limit: Maximum number of users to return

        Returns:
            Up to limit User aggregates ordered by ascending id
        """
        stmt = select(UserModel).order_by(UserModel.id).limit(limit)
        if after_id is not None:
            stmt = stmt.where(UserModel.id > after_id)

        result = await self._session.execute(stmt)
        users = [self._to_domain(model) for model in result.scalars().all()]

        self._probe.users_listed(after_id, len(users))
        return users

    async def _get_model(self, user_id: UserId) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == user_id.value)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _flush(self, email: str) -> None:
        """Flush pending writes, translating email unique violations."""
        try:
            await self._session.flush()
        except IntegrityError as e:
            if EMAIL_INDEX_NAME in str(e):
                self._probe.duplicate_email(email)
                raise DuplicateEmailError(
                    f"User with email '{email}' already exists"
                ) from e
            raise

    @staticmethod
    def _to_domain(model: UserModel) -> User:
        return User(
            id=UserId(value=model.id),
            name=model.name,
            email=model.email,
            password_hash=model.password_hash,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
