"""Unit tests for models.constants module."""

import pytest

from bitback.models.constants import (
    DEFAULT_NETWORK,
    FREE_TIER_CLIENT_ID,
    HostStatus,
    ServiceName,
    Tier,
)


class TestHostStatus:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("active", HostStatus.ACTIVE),
            ("ACTIVE", HostStatus.ACTIVE),
            ("Maintenance", HostStatus.MAINTENANCE),
            ("inactive", HostStatus.INACTIVE),
            ("retired", HostStatus.UNKNOWN),
            ("", HostStatus.UNKNOWN),
            (None, HostStatus.UNKNOWN),
        ],
    )
    def test_parse(self, raw, expected):
        assert HostStatus.parse(raw) is expected

    def test_str_values(self):
        assert str(HostStatus.ACTIVE) == "active"


class TestTier:
    def test_values(self):
        assert {t.value for t in Tier} == {"free", "paid"}


class TestConstants:
    def test_service_name(self):
        assert ServiceName.API == "api"

    def test_defaults(self):
        assert DEFAULT_NETWORK == "tcp"
        assert FREE_TIER_CLIENT_ID == "5ccc43c4-3c3e-4220-a878-761aa1182dd9"
