"""Protocol for user application service observability.

Defines the interface for domain probes that capture application-level
domain events for user service operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class UserServiceProbe(Protocol):
    """Domain probe for user application service operations."""

    def users_listed(self, count: int, has_more: bool) -> None:
        """Record that a page of users was listed."""
        ...

    def invalid_cursor_ignored(self, cursor: str) -> None:
        """Record that an undecodable cursor was replaced by the first page."""
        ...

    def user_created(self, user_id: int, email: str) -> None:
        """Record that a user was created."""
        ...

    def user_create_rejected(self, fields: list[str]) -> None:
        """Record that a create request failed validation."""
        ...

    def user_retrieved(self, user_id: int) -> None:
        """Record that a user was retrieved."""
        ...

    def user_not_found(self, user_id: int) -> None:
        """Record that a requested user does not exist."""
        ...

    def user_updated(self, user_id: int) -> None:
        """Record that a user was updated."""
        ...

    def user_update_rejected(self, user_id: int | None, fields: list[str]) -> None:
        """Record that an update request failed validation."""
        ...

    def user_deleted(self, user_id: int) -> None:
        """Record that a user was deleted."""
        ...

    def user_operation_failed(
        self, operation: str, error: str, user_id: int | None = None
    ) -> None:
        """Record that an operation failed unexpectedly."""
        ...

    def with_context(self, context: ObservationContext) -> UserServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserServiceProbe:
    """Default implementation of UserServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultUserServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserServiceProbe(logger=self._logger, context=context)

    def users_listed(self, count: int, has_more: bool) -> None:
        """Record that a page of users was listed."""
        self._logger.debug(
            "users_listed",
            count=count,
            has_more=has_more,
            **self._get_context_kwargs(),
        )

    def invalid_cursor_ignored(self, cursor: str) -> None:
        """Record that an undecodable cursor was replaced by the first page."""
        self._logger.warning(
            "invalid_cursor_ignored",
            cursor=cursor,
            **self._get_context_kwargs(),
        )

    def user_created(self, user_id: int, email: str) -> None:
        """Record that a user was created."""
        self._logger.info(
            "user_created",
            user_id=user_id,
            email=email,
            **self._get_context_kwargs(),
        )

    def user_create_rejected(self, fields: list[str]) -> None:
        """Record that a create request failed validation."""
        self._logger.info(
            "user_create_rejected",
            fields=fields,
            **self._get_context_kwargs(),
        )

    def user_retrieved(self, user_id: int) -> None:
        """Record that a user was retrieved."""
        self._logger.debug(
            "user_retrieved",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, user_id: int) -> None:
        """Record that a requested user does not exist."""
        self._logger.debug(
            "user_not_found",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_updated(self, user_id: int) -> None:
        """Record that a user was updated."""
        self._logger.info(
            "user_updated",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_update_rejected(self, user_id: int | None, fields: list[str]) -> None:
        """Record that an update request failed validation."""
        self._logger.info(
            "user_update_rejected",
            user_id=user_id,
            fields=fields,
            **self._get_context_kwargs(),
        )

    def user_deleted(self, user_id: int) -> None:
        """Record that a user was deleted."""
        self._logger.info(
            "user_deleted",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_operation_failed(
        self, operation: str, error: str, user_id: int | None = None
    ) -> None:
        """Record that an operation failed unexpectedly."""
        self._logger.error(
            "user_operation_failed",
            operation=operation,
            user_id=user_id,
            error=error,
            **self._get_context_kwargs(),
        )
