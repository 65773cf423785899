"""User model.

Read-only view of a row of the ``users`` table. Key generation only needs
the id, but the remaining columns are carried for logging.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import UUID

from ._validation import validate_bool, validate_instance, validate_optional_str


if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class User:
    """Immutable user record.

    Attributes:
        id: User identifier, also used as the client id inside the key.
        name: Display name.
        email: Contact email, if known.
        telegram_id: Linked Telegram account id, if any.
        is_active: Whether the account is enabled.
    """

    id: UUID
    name: str | None = None
    email: str | None = None
    telegram_id: int | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        validate_instance(self.id, UUID, "id")
        validate_optional_str(self.name, "name")
        validate_optional_str(self.email, "email")
        if self.telegram_id is not None and (
            isinstance(self.telegram_id, bool) or not isinstance(self.telegram_id, int)
        ):
            raise TypeError(f"telegram_id must be an int, got {type(self.telegram_id).__name__}")
        validate_bool(self.is_active, "is_active")

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> User:
        """Build a user from a database row."""
        user_id = record["id"]
        return cls(
            id=user_id if isinstance(user_id, UUID) else UUID(str(user_id)),
            name=record.get("name"),
            email=record.get("email"),
            telegram_id=record.get("telegram_id"),
            is_active=bool(record.get("is_active", True)),
        )
