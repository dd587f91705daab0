"""Fixtures shared by users unit tests."""

from unittest.mock import AsyncMock, MagicMock, create_autospec

import pytest

from tests.unit.users.fakes import InMemoryUserRepository


@pytest.fixture
def mock_session():
    """Create mock async session with transaction support."""
    session = AsyncMock()
    mock_transaction = MagicMock()
    mock_transaction.__aenter__ = AsyncMock(return_value=None)
    mock_transaction.__aexit__ = AsyncMock(return_value=None)
    session.begin = MagicMock(return_value=mock_transaction)
    return session


@pytest.fixture
def mock_service_probe():
    """Create mock user service probe."""
    from users.application.observability import UserServiceProbe

    return create_autospec(UserServiceProbe, instance=True)


@pytest.fixture
def in_memory_repository() -> InMemoryUserRepository:
    """Provide an empty in-memory user store."""
    return InMemoryUserRepository()
