"""Unit tests for core.exceptions module."""

from uuid import UUID

import pytest

from bitback.core.exceptions import (
    BitbackError,
    ConfigurationError,
    ConnectionPoolError,
    DatabaseError,
    HostLookupFailedError,
    KeyGenerationError,
    KeyValidationError,
    NoHostAvailableError,
    QueryError,
    RecordNotFoundError,
    UserNotFoundError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("exc_class", "parent"),
        [
            (ConfigurationError, BitbackError),
            (DatabaseError, BitbackError),
            (ConnectionPoolError, DatabaseError),
            (QueryError, DatabaseError),
            (RecordNotFoundError, DatabaseError),
            (KeyGenerationError, BitbackError),
            (UserNotFoundError, KeyGenerationError),
            (NoHostAvailableError, KeyGenerationError),
            (HostLookupFailedError, KeyGenerationError),
            (KeyValidationError, KeyGenerationError),
        ],
    )
    def test_parent(self, exc_class, parent) -> None:
        assert issubclass(exc_class, parent)

    def test_base_is_exception(self) -> None:
        assert issubclass(BitbackError, Exception)

    def test_no_host_is_not_lookup_failure(self) -> None:
        assert not issubclass(NoHostAvailableError, HostLookupFailedError)
        assert not issubclass(HostLookupFailedError, NoHostAvailableError)


class TestUserNotFoundError:
    def test_message_and_id(self) -> None:
        user_id = UUID(int=5)
        err = UserNotFoundError(user_id)
        assert err.user_id == user_id
        assert str(err) == f"user with ID {user_id} not found"

    def test_chaining(self) -> None:
        cause = RecordNotFoundError("no row")
        try:
            raise UserNotFoundError(1) from cause
        except UserNotFoundError as e:
            assert e.__cause__ is cause
