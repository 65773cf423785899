"""Bitback exception hierarchy.

Every failure that crosses a layer boundary is a typed exception, so callers
branch on the exception class and never on message text. ``CancelledError``
is never wrapped and always propagates untouched.

Exception hierarchy:

```text
BitbackError (base -- never raised directly)
├── ConfigurationError        -- config validation, missing keys, bad YAML
├── DatabaseError             -- pool/store/query failures
│   ├── ConnectionPoolError   -- transient: pool exhausted, network blip, timeout
│   ├── QueryError            -- permanent: bad SQL, constraint violation
│   └── RecordNotFoundError   -- expected: the query matched no row
└── KeyGenerationError        -- key generation pipeline failures
    ├── UserNotFoundError     -- requested user does not exist
    ├── NoHostAvailableError  -- no online host for the tier/country
    ├── HostLookupFailedError -- host store unreachable or broken
    └── KeyValidationError    -- selected host cannot be encoded
```

See Also:
    [Pool][bitback.core.pool.Pool]: Raises
        [ConnectionPoolError][bitback.core.exceptions.ConnectionPoolError]
        and [QueryError][bitback.core.exceptions.QueryError].
    [KeyService][bitback.services.keys.service.KeyService]: Raises the
        [KeyGenerationError][bitback.core.exceptions.KeyGenerationError]
        family.
"""

from __future__ import annotations


class BitbackError(Exception):
    """Base exception for all Bitback errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(BitbackError):
    """Invalid or missing configuration (YAML, env vars, CLI flags)."""


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


class DatabaseError(BitbackError):
    """Base for all database-related errors."""


class ConnectionPoolError(DatabaseError):
    """Transient database error: pool exhausted, connection refused, timeout.

    Callers may retry after a backoff.
    """


class QueryError(DatabaseError):
    """Permanent database error: bad SQL, constraint violation, data integrity.

    Callers should NOT retry -- the query itself is wrong.
    """


class RecordNotFoundError(DatabaseError):
    """The lookup completed normally but matched no row.

    Raised by the store implementations in
    [stores][bitback.services.common.stores]; it is an expected outcome,
    not an infrastructure fault.
    """


# ---------------------------------------------------------------------------
# Key generation
# ---------------------------------------------------------------------------


class KeyGenerationError(BitbackError):
    """Base for failures of the key generation pipeline.

    Raised directly only for user-store faults; everything else uses a
    specific subclass.
    """


class UserNotFoundError(KeyGenerationError):
    """The requested user does not exist. Surfaced to callers as 404."""

    def __init__(self, user_id: object) -> None:
        super().__init__(f"user with ID {user_id} not found")
        self.user_id = user_id


class NoHostAvailableError(KeyGenerationError):
    """No online host matches the requested tier, even without the country filter.

    An expected outcome; surfaced to callers as service-unavailable.
    """


class HostLookupFailedError(KeyGenerationError):
    """The host store failed while selecting a host."""


class KeyValidationError(KeyGenerationError):
    """A selected host is misconfigured and cannot be encoded as a key.

    Indicates bad host data upstream, not a caller mistake.
    """
