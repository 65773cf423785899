"""Unit tests for models.user module."""

from uuid import UUID

import pytest

from bitback.models import User


USER_ID = UUID("00000000-0000-0000-0000-000000000001")


class TestUser:
    def test_defaults(self) -> None:
        user = User(id=USER_ID)
        assert user.is_active is True
        assert user.telegram_id is None

    def test_id_must_be_uuid(self) -> None:
        with pytest.raises(TypeError, match="id"):
            User(id=str(USER_ID))  # type: ignore[arg-type]

    def test_telegram_id_type(self) -> None:
        with pytest.raises(TypeError, match="telegram_id"):
            User(id=USER_ID, telegram_id="42")  # type: ignore[arg-type]

    def test_from_record_with_string_id(self) -> None:
        user = User.from_record(
            {
                "id": str(USER_ID),
                "name": "alice",
                "email": None,
                "telegram_id": 42,
                "is_active": False,
            }
        )
        assert user.id == USER_ID
        assert user.name == "alice"
        assert user.telegram_id == 42
        assert user.is_active is False

    def test_from_record_with_uuid(self) -> None:
        user = User.from_record({"id": USER_ID})
        assert user.id is USER_ID
        assert user.is_active is True
