"""User application service for the users context.

Implements the user resource use cases: list, create, show, update and
destroy. Every method returns a tagged result (see results.py) so the
HTTP layer decides status codes and the service never leaks exceptions
for expected outcomes.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from users.application.observability import DefaultUserServiceProbe, UserServiceProbe
from users.application.results import Internal, Invalid, NotFound, Ok, Result
from users.application.security import hash_password
from users.application.validation import (
    EMAIL_TAKEN_MESSAGE,
    FieldErrors,
    normalize_text,
    validate_user_fields,
)
from users.domain.aggregates import User
from users.domain.value_objects import PageCursor, UserId, UserPage
from users.ports.exceptions import DuplicateEmailError
from users.ports.repositories import IUserRepository

DEFAULT_PAGE_SIZE = 10


class UserService:
    """Application service for user management.

    Holds no state between calls; the repository and session are scoped
    to a single request.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        session: AsyncSession,
        probe: UserServiceProbe | None = None,
    ):
        """Initialize UserService with dependencies.

        Args:
            user_repository: Repository for user persistence
            session: Database session for transaction management
            probe: Optional domain probe for observability
        """
        self._user_repository = user_repository
        self._probe = probe or DefaultUserServiceProbe()
        self._session = session

    async def list_users(
        self,
        cursor: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Result[UserPage]:
        """List users in ascending id order, one page at a time.

        An undecodable cursor is ignored and the first page is returned.

        Args:
            cursor: Opaque token from a previous page, or None for the first page
            page_size: Maximum number of users on the page

        Returns:
            Ok(UserPage), or Internal if the store fails
        """
        after_id: int | None = None
        if cursor:
            try:
                after_id = PageCursor.decode(cursor).last_id
            except ValueError:
                self._probe.invalid_cursor_ignored(cursor)

        try:
            # One extra row tells us whether another page exists
            users = await self._user_repository.list_after(after_id, page_size + 1)
        except Exception as e:
            self._probe.user_operation_failed(operation="list", error=str(e))
            return Internal(e)

        next_cursor = None
        if len(users) > page_size:
            users = users[:page_size]
            next_cursor = PageCursor(last_id=users[-1].id.value)

        page = UserPage(users=users, per_page=page_size, next_cursor=next_cursor)
        self._probe.users_listed(count=len(users), has_more=page.has_more)
        return Ok(page)

    async def create_user(self, name: Any, email: Any, password: Any) -> Result[User]:
        """Validate input, hash the password and persist a new user.

        Args:
            name: Display name
            email: Email address
            password: Plaintext password (never stored)

        Returns:
            Ok(User), Invalid with the field-error map, or Internal
        """
        name = normalize_text(name)
        email = normalize_text(email)

        try:
            async with self._session.begin():
                errors = validate_user_fields(
                    name, email, password, require_password=True
                )
                await self._check_email_available(email, errors)
                if errors:
                    self._probe.user_create_rejected(fields=sorted(errors))
                    return Invalid(errors)

                user = await self._user_repository.add(
                    name=name,
                    email=email,
                    password_hash=hash_password(password),
                )
        except DuplicateEmailError:
            # Lost a race with a concurrent create for the same email
            self._probe.user_create_rejected(fields=["email"])
            return Invalid({"email": [EMAIL_TAKEN_MESSAGE]})
        except Exception as e:
            self._probe.user_operation_failed(operation="create", error=str(e))
            return Internal(e)

        self._probe.user_created(user_id=user.id.value, email=user.email)
        return Ok(user)

    async def get_user(self, user_id: UserId | None) -> Result[User]:
        """Retrieve a single user.

        Args:
            user_id: The user to fetch; None stands for an unparseable id

        Returns:
            Ok(User), NotFound, or Internal
        """
        if user_id is None:
            return NotFound()

        try:
            user = await self._user_repository.get_by_id(user_id)
        except Exception as e:
            self._probe.user_operation_failed(
                operation="show", error=str(e), user_id=user_id.value
            )
            return Internal(e)

        if user is None:
            self._probe.user_not_found(user_id.value)
            return NotFound(user_id)

        self._probe.user_retrieved(user_id.value)
        return Ok(user)

    async def update_user(
        self, user_id: UserId | None, name: Any, email: Any
    ) -> Result[User]:
        """Change a user's name and email.

        Validation runs before the existence check, so an invalid request
        against a missing user reports the validation errors.

        Args:
            user_id: The user to update; None stands for an unparseable id
            name: New display name
            email: New email address

        Returns:
            Ok(User), Invalid, NotFound, or Internal
        """
        name = normalize_text(name)
        email = normalize_text(email)
        raw_id = user_id.value if user_id is not None else None

        try:
            async with self._session.begin():
                errors = validate_user_fields(name, email, require_password=False)
                await self._check_email_available(email, errors, ignore_id=user_id)
                if errors:
                    self._probe.user_update_rejected(
                        user_id=raw_id, fields=sorted(errors)
                    )
                    return Invalid(errors)

                if user_id is None:
                    return NotFound()

                user = await self._user_repository.update(
                    user_id, name=name, email=email
                )
                if user is None:
                    self._probe.user_not_found(user_id.value)
                    return NotFound(user_id)
        except DuplicateEmailError:
            self._probe.user_update_rejected(user_id=raw_id, fields=["email"])
            return Invalid({"email": [EMAIL_TAKEN_MESSAGE]})
        except Exception as e:
            self._probe.user_operation_failed(
                operation="update", error=str(e), user_id=raw_id
            )
            return Internal(e)

        self._probe.user_updated(user.id.value)
        return Ok(user)

    async def delete_user(self, user_id: UserId | None) -> Result[None]:
        """Permanently delete a user.

        Args:
            user_id: The user to delete; None stands for an unparseable id

        Returns:
            Ok(None), NotFound, or Internal
        """
        if user_id is None:
            return NotFound()

        try:
            async with self._session.begin():
                deleted = await self._user_repository.delete(user_id)
        except Exception as e:
            self._probe.user_operation_failed(
                operation="destroy", error=str(e), user_id=user_id.value
            )
            return Internal(e)

        if not deleted:
            self._probe.user_not_found(user_id.value)
            return NotFound(user_id)

        self._probe.user_deleted(user_id.value)
        return Ok(None)

    async def _check_email_available(
        self,
        email: Any,
        errors: FieldErrors,
        ignore_id: UserId | None = None,
    ) -> None:
        """Add the uniqueness error for email if another user already has it.

        Skipped when the email already failed a syntactic rule.
        """
        if "email" in errors:
            return

        existing = await self._user_repository.get_by_email(email)
        if existing is not None and existing.id != ignore_id:
            errors.setdefault("email", []).append(EMAIL_TAKEN_MESSAGE)
