"""Unit tests for UserService.

Mocked repositories pin down probe and error handling; the in-memory
store exercises whole use cases end to end.
"""

from unittest.mock import AsyncMock, create_autospec

import bcrypt
import pytest

from users.application.results import Internal, Invalid, NotFound, Ok
from users.domain.aggregates import User
from users.domain.value_objects import PageCursor, UserId
from users.ports.exceptions import DuplicateEmailError
from users.ports.repositories import IUserRepository

VALID_PASSWORD = "Abc12345"


@pytest.fixture
def mock_user_repository():
    """Create mock user repository."""
    return create_autospec(IUserRepository, instance=True)


@pytest.fixture
def user_service(mock_user_repository, mock_session, mock_service_probe):
    """Create UserService with mock dependencies."""
    from users.application.services.user_service import UserService

    return UserService(
        user_repository=mock_user_repository,
        session=mock_session,
        probe=mock_service_probe,
    )


@pytest.fixture
def store_service(in_memory_repository, mock_session, mock_service_probe):
    """Create UserService backed by the in-memory store."""
    from users.application.services.user_service import UserService

    return UserService(
        user_repository=in_memory_repository,
        session=mock_session,
        probe=mock_service_probe,
    )


def _user(user_id: int = 1, email: str = "alice@example.com") -> User:
    return User(
        id=UserId(value=user_id),
        name="Alice",
        email=email,
        password_hash="$2b$12$hash",
    )


class TestUserServiceInit:
    """Tests for UserService initialization."""

    def test_stores_repository(self, mock_user_repository, mock_session):
        """Service should store repository reference."""
        from users.application.services.user_service import UserService

        service = UserService(
            user_repository=mock_user_repository,
            session=mock_session,
        )
        assert service._user_repository is mock_user_repository

    def test_uses_default_probe_when_not_provided(
        self, mock_user_repository, mock_session
    ):
        """Service should create default probe when not provided."""
        from users.application.services.user_service import UserService

        service = UserService(
            user_repository=mock_user_repository,
            session=mock_session,
        )
        assert service._probe is not None


class TestCreateUser:
    """Tests for create_user."""

    @pytest.mark.asyncio
    async def test_creates_user_with_hashed_password(
        self, store_service, in_memory_repository, mock_service_probe
    ):
        """Valid input is stored with a bcrypt hash, never the plaintext."""
        result = await store_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )

        assert isinstance(result, Ok)
        user = result.value
        assert user.id == UserId(value=1)
        assert user.password_hash != VALID_PASSWORD
        assert bcrypt.checkpw(VALID_PASSWORD.encode(), user.password_hash.encode())
        assert in_memory_repository.users[1].email == "alice@example.com"
        mock_service_probe.user_created.assert_called_once_with(
            user_id=1, email="alice@example.com"
        )

    @pytest.mark.asyncio
    async def test_trims_name_and_email(self, store_service):
        """Surrounding whitespace is dropped before storing."""
        result = await store_service.create_user(
            "  Alice ", " alice@example.com ", VALID_PASSWORD
        )

        assert isinstance(result, Ok)
        assert result.value.name == "Alice"
        assert result.value.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_rejects_invalid_fields_without_writing(
        self, store_service, in_memory_repository, mock_service_probe
    ):
        """Validation failures return every field error and store nothing."""
        result = await store_service.create_user("", "not-an-email", "abc12345")

        assert isinstance(result, Invalid)
        assert set(result.errors) == {"name", "email", "password"}
        assert in_memory_repository.users == {}
        mock_service_probe.user_create_rejected.assert_called_once_with(
            fields=["email", "name", "password"]
        )

    @pytest.mark.asyncio
    async def test_second_create_with_same_email_is_rejected(self, store_service):
        """Exactly one of two creates with the same email succeeds."""
        first = await store_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )
        second = await store_service.create_user(
            "Other Alice", "alice@example.com", VALID_PASSWORD
        )

        assert isinstance(first, Ok)
        assert second == Invalid({"email": ["The email has already been taken."]})

    @pytest.mark.asyncio
    async def test_email_taken_regardless_of_case(self, store_service):
        """Emails differing only in letter case count as the same email."""
        await store_service.create_user("Alice", "Alice@Example.com", VALID_PASSWORD)

        result = await store_service.create_user(
            "Other Alice", "alice@example.com", VALID_PASSWORD
        )

        assert result == Invalid({"email": ["The email has already been taken."]})

    @pytest.mark.asyncio
    async def test_unique_violation_during_insert_is_validation_error(
        self, user_service, mock_user_repository, mock_service_probe
    ):
        """Losing the race at the unique index reports an email error."""
        mock_user_repository.get_by_email = AsyncMock(return_value=None)
        mock_user_repository.add = AsyncMock(
            side_effect=DuplicateEmailError("duplicate")
        )

        result = await user_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )

        assert result == Invalid({"email": ["The email has already been taken."]})
        mock_service_probe.user_create_rejected.assert_called_once_with(
            fields=["email"]
        )

    @pytest.mark.asyncio
    async def test_skips_uniqueness_lookup_for_malformed_email(
        self, user_service, mock_user_repository
    ):
        """The store is not queried for syntactically invalid emails."""
        mock_user_repository.get_by_email = AsyncMock(return_value=None)

        await user_service.create_user("Alice", "nope", VALID_PASSWORD)

        mock_user_repository.get_by_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure_is_internal(
        self, user_service, mock_user_repository, mock_service_probe
    ):
        """Unexpected store errors become Internal and are recorded."""
        error = RuntimeError("connection reset")
        mock_user_repository.get_by_email = AsyncMock(return_value=None)
        mock_user_repository.add = AsyncMock(side_effect=error)

        result = await user_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )

        assert isinstance(result, Internal)
        assert result.cause is error
        mock_service_probe.user_operation_failed.assert_called_once_with(
            operation="create", error="connection reset"
        )

    @pytest.mark.asyncio
    async def test_runs_in_transaction(self, user_service, mock_user_repository, mock_session):
        """Create opens a transaction on the session."""
        mock_user_repository.get_by_email = AsyncMock(return_value=None)
        mock_user_repository.add = AsyncMock(return_value=_user())

        await user_service.create_user("Alice", "alice@example.com", VALID_PASSWORD)

        mock_session.begin.assert_called_once()


class TestGetUser:
    """Tests for get_user."""

    @pytest.mark.asyncio
    async def test_returns_stored_user(self, store_service):
        """An existing id returns exactly the stored fields."""
        created = await store_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )

        result = await store_service.get_user(created.value.id)

        assert isinstance(result, Ok)
        assert result.value.name == "Alice"
        assert result.value.email == "alice@example.com"
        assert result.value.password_hash == created.value.password_hash

    @pytest.mark.asyncio
    async def test_missing_user_is_not_found(self, store_service, mock_service_probe):
        """A nonexistent id returns NotFound."""
        result = await store_service.get_user(UserId(value=99))

        assert result == NotFound(UserId(value=99))
        mock_service_probe.user_not_found.assert_called_once_with(99)

    @pytest.mark.asyncio
    async def test_unparseable_id_is_not_found(self, user_service, mock_user_repository):
        """None (an id that failed to parse) never reaches the store."""
        result = await user_service.get_user(None)

        assert result == NotFound()
        mock_user_repository.get_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure_is_internal(self, user_service, mock_user_repository):
        """Store errors become Internal."""
        mock_user_repository.get_by_id = AsyncMock(side_effect=RuntimeError("down"))

        result = await user_service.get_user(UserId(value=1))

        assert isinstance(result, Internal)


class TestUpdateUser:
    """Tests for update_user."""

    @pytest.mark.asyncio
    async def test_updates_name_and_email(self, store_service, mock_service_probe):
        """Valid changes are persisted and returned."""
        created = await store_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )

        result = await store_service.update_user(
            created.value.id, "Alice Smith", "alice.smith@example.com"
        )

        assert isinstance(result, Ok)
        assert result.value.name == "Alice Smith"
        assert result.value.email == "alice.smith@example.com"
        assert result.value.password_hash == created.value.password_hash
        mock_service_probe.user_updated.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_keeping_own_email_is_allowed(self, store_service):
        """The uniqueness rule ignores the user being updated."""
        created = await store_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )

        result = await store_service.update_user(
            created.value.id, "Alice Smith", "alice@example.com"
        )

        assert isinstance(result, Ok)

    @pytest.mark.asyncio
    async def test_changing_case_of_own_email_is_allowed(self, store_service):
        """A user may re-case their own email."""
        created = await store_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )

        result = await store_service.update_user(
            created.value.id, "Alice", "Alice@Example.com"
        )

        assert isinstance(result, Ok)
        assert result.value.email == "Alice@Example.com"

    @pytest.mark.asyncio
    async def test_taking_another_users_email_is_rejected(self, store_service):
        """Emails owned by someone else are taken."""
        await store_service.create_user("Alice", "alice@example.com", VALID_PASSWORD)
        bob = await store_service.create_user("Bob", "bob@example.com", VALID_PASSWORD)

        result = await store_service.update_user(
            bob.value.id, "Bob", "alice@example.com"
        )

        assert result == Invalid({"email": ["The email has already been taken."]})

    @pytest.mark.asyncio
    async def test_validation_precedes_existence_check(
        self, store_service, in_memory_repository
    ):
        """Invalid input against a missing id reports validation errors."""
        result = await store_service.update_user(UserId(value=404), "", "x")

        assert isinstance(result, Invalid)
        assert set(result.errors) == {"name", "email"}

    @pytest.mark.asyncio
    async def test_unparseable_id_still_validates_first(self, store_service):
        """Even an unparseable id reports validation errors first."""
        result = await store_service.update_user(None, "", "alice@example.com")

        assert isinstance(result, Invalid)

    @pytest.mark.asyncio
    async def test_missing_user_is_not_found(self, store_service):
        """Valid input against a missing id returns NotFound."""
        result = await store_service.update_user(
            UserId(value=404), "Alice", "alice@example.com"
        )

        assert result == NotFound(UserId(value=404))

    @pytest.mark.asyncio
    async def test_unparseable_id_with_valid_input_is_not_found(self, store_service):
        """Valid input against an unparseable id returns NotFound."""
        result = await store_service.update_user(None, "Alice", "alice@example.com")

        assert result == NotFound()

    @pytest.mark.asyncio
    async def test_unique_violation_during_update_is_validation_error(
        self, user_service, mock_user_repository
    ):
        """A concurrent writer grabbing the email reports an email error."""
        mock_user_repository.get_by_email = AsyncMock(return_value=None)
        mock_user_repository.update = AsyncMock(
            side_effect=DuplicateEmailError("duplicate")
        )

        result = await user_service.update_user(
            UserId(value=1), "Alice", "alice@example.com"
        )

        assert result == Invalid({"email": ["The email has already been taken."]})

    @pytest.mark.asyncio
    async def test_store_failure_is_internal(
        self, user_service, mock_user_repository, mock_service_probe
    ):
        """Store errors become Internal and are recorded with the id."""
        mock_user_repository.get_by_email = AsyncMock(return_value=None)
        mock_user_repository.update = AsyncMock(side_effect=RuntimeError("down"))

        result = await user_service.update_user(
            UserId(value=1), "Alice", "alice@example.com"
        )

        assert isinstance(result, Internal)
        mock_service_probe.user_operation_failed.assert_called_once_with(
            operation="update", error="down", user_id=1
        )


class TestDeleteUser:
    """Tests for delete_user."""

    @pytest.mark.asyncio
    async def test_deleted_user_is_gone(self, store_service, mock_service_probe):
        """After destroy, show returns NotFound."""
        created = await store_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )

        result = await store_service.delete_user(created.value.id)

        assert result == Ok(None)
        assert await store_service.get_user(created.value.id) == NotFound(
            created.value.id
        )
        mock_service_probe.user_deleted.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_missing_user_is_not_found(self, store_service):
        """Deleting a nonexistent id returns NotFound."""
        assert await store_service.delete_user(UserId(value=5)) == NotFound(
            UserId(value=5)
        )

    @pytest.mark.asyncio
    async def test_ids_are_not_reused_after_delete(self, store_service):
        """A user created after a deletion gets a fresh id."""
        first = await store_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )
        await store_service.delete_user(first.value.id)

        second = await store_service.create_user(
            "Alice", "alice@example.com", VALID_PASSWORD
        )

        assert second.value.id != first.value.id

    @pytest.mark.asyncio
    async def test_store_failure_is_internal(self, user_service, mock_user_repository):
        """Store errors become Internal."""
        mock_user_repository.delete = AsyncMock(side_effect=RuntimeError("down"))

        result = await user_service.delete_user(UserId(value=1))

        assert isinstance(result, Internal)
        assert result.message == "down"


class TestListUsers:
    """Tests for list_users."""

    @pytest.mark.asyncio
    async def test_paginates_25_users_into_3_pages(
        self, store_service, in_memory_repository
    ):
        """Pages are ascending, complete and without duplicates."""
        for i in range(25):
            await in_memory_repository.add(f"User {i}", f"user{i}@example.com", "hash")

        pages = []
        cursor = None
        while True:
            result = await store_service.list_users(cursor=cursor, page_size=10)
            assert isinstance(result, Ok)
            pages.append(result.value)
            if result.value.next_cursor is None:
                break
            cursor = result.value.next_cursor.encode()

        assert [len(p.users) for p in pages] == [10, 10, 5]
        ids = [u.id.value for p in pages for u in p.users]
        assert ids == list(range(1, 26))

    @pytest.mark.asyncio
    async def test_exact_page_has_no_next_cursor(
        self, store_service, in_memory_repository
    ):
        """A page that exactly exhausts the users has no next cursor."""
        for i in range(10):
            await in_memory_repository.add(f"User {i}", f"user{i}@example.com", "hash")

        result = await store_service.list_users(page_size=10)

        assert len(result.value.users) == 10
        assert result.value.next_cursor is None

    @pytest.mark.asyncio
    async def test_next_cursor_points_at_last_user(
        self, store_service, in_memory_repository, mock_service_probe
    ):
        """The next cursor encodes the last id of the page."""
        for i in range(3):
            await in_memory_repository.add(f"User {i}", f"user{i}@example.com", "hash")

        result = await store_service.list_users(page_size=2)

        assert result.value.next_cursor == PageCursor(last_id=2)
        assert result.value.has_more
        mock_service_probe.users_listed.assert_called_once_with(
            count=2, has_more=True
        )

    @pytest.mark.asyncio
    async def test_invalid_cursor_returns_first_page(
        self, store_service, in_memory_repository, mock_service_probe
    ):
        """Undecodable cursors are ignored."""
        await in_memory_repository.add("Alice", "alice@example.com", "hash")

        result = await store_service.list_users(cursor="garbage!")

        assert [u.id.value for u in result.value.users] == [1]
        mock_service_probe.invalid_cursor_ignored.assert_called_once_with("garbage!")

    @pytest.mark.asyncio
    async def test_out_of_range_cursor_returns_first_page(
        self, user_service, mock_user_repository, mock_service_probe
    ):
        """A cursor past the id column range is ignored like any bad cursor."""
        mock_user_repository.list_after = AsyncMock(return_value=[])
        token = PageCursor(last_id=10**20).encode()

        result = await user_service.list_users(cursor=token, page_size=10)

        assert isinstance(result, Ok)
        mock_user_repository.list_after.assert_called_once_with(None, 11)
        mock_service_probe.invalid_cursor_ignored.assert_called_once_with(token)

    @pytest.mark.asyncio
    async def test_requests_one_extra_row(self, user_service, mock_user_repository):
        """The store is asked for page_size + 1 rows after the cursor."""
        mock_user_repository.list_after = AsyncMock(return_value=[])

        await user_service.list_users(
            cursor=PageCursor(last_id=20).encode(), page_size=10
        )

        mock_user_repository.list_after.assert_called_once_with(20, 11)

    @pytest.mark.asyncio
    async def test_store_failure_is_internal(self, user_service, mock_user_repository):
        """Store errors become Internal."""
        mock_user_repository.list_after = AsyncMock(side_effect=RuntimeError("down"))

        result = await user_service.list_users()

        assert isinstance(result, Internal)
