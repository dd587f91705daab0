"""FastAPI dependency injection for the user repository and service.

Provides per-request repository and service instances. FastAPI caches
dependencies within a request, so the repository and the service share
the same session. Read-only endpoints get a service bound to the read
engine; mutations use the write engine.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.dependencies import get_read_session, get_write_session
from infrastructure.observability import ObservationContext
from users.application.observability import (
    DefaultUserServiceProbe,
    UserServiceProbe,
)
from users.application.services import UserService
from users.infrastructure.user_repository import UserRepository

REQUEST_ID_HEADER = "X-Request-ID"


def get_observation_context(request: Request) -> ObservationContext:
    """Build the observation context for the current request.

    Args:
        request: Incoming HTTP request

    Returns:
        ObservationContext carrying request id, method and path
    """
    return ObservationContext(
        request_id=request.headers.get(REQUEST_ID_HEADER),
        method=request.method,
        path=request.url.path,
    )


def get_user_service_probe(
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> UserServiceProbe:
    """Get UserServiceProbe instance bound to the request context.

    Returns:
        DefaultUserServiceProbe instance for observability
    """
    return DefaultUserServiceProbe().with_context(context)


def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> UserRepository:
    """Get UserRepository instance.

    Args:
        session: Async database session

    Returns:
        UserRepository instance
    """
    return UserRepository(session=session)


def get_user_service(
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    session: Annotated[AsyncSession, Depends(get_write_session)],
    probe: Annotated[UserServiceProbe, Depends(get_user_service_probe)],
) -> UserService:
    """Get UserService instance.

    Args:
        user_repository: User repository for persistence
        session: Database session for transaction management
        probe: User service probe for observability

    Returns:
        UserService instance
    """
    return UserService(
        user_repository=user_repository,
        session=session,
        probe=probe,
    )


def get_user_read_repository(
    session: Annotated[AsyncSession, Depends(get_read_session)],
) -> UserRepository:
    """Get UserRepository bound to a read-only session."""
    return UserRepository(session=session)


def get_user_read_service(
    user_repository: Annotated[UserRepository, Depends(get_user_read_repository)],
    session: Annotated[AsyncSession, Depends(get_read_session)],
    probe: Annotated[UserServiceProbe, Depends(get_user_service_probe)],
) -> UserService:
    """Get UserService for list and show, backed by the read engine.

    Args:
        user_repository: User repository on the read session
        session: Read session
        probe: User service probe for observability

    Returns:
        UserService instance that must only be used for queries
    """
    return UserService(
        user_repository=user_repository,
        session=session,
        probe=probe,
    )
