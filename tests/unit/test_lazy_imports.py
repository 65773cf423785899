"""Tests for lazy import system in bitback.__init__."""

from __future__ import annotations

import subprocess
import sys

import pytest


class TestLazyImports:
    """Test PEP 562 lazy loading in bitback.__init__."""

    def test_lazy_import_does_not_eagerly_load(self) -> None:
        """Importing bitback in a fresh interpreter leaves subpackages unloaded."""
        code = (
            "import sys, bitback; "
            "print(any(m.startswith('bitback.') for m in sys.modules))"
        )
        out = subprocess.run(
            [sys.executable, "-c", code], capture_output=True, text=True, check=True
        )
        assert out.stdout.strip() == "False"

    def test_lazy_import_resolves_on_access(self) -> None:
        from bitback import Host, KeyService
        from bitback.models.host import Host as DirectHost
        from bitback.services.keys.service import KeyService as DirectKeyService

        assert Host is DirectHost
        assert KeyService is DirectKeyService

    def test_lazy_import_caches_after_first_access(self) -> None:
        import bitback

        _ = bitback.encode_vless_key
        assert "encode_vless_key" in vars(bitback)

    def test_lazy_import_invalid_attribute(self) -> None:
        import bitback

        with pytest.raises(AttributeError, match="no_such_thing"):
            _ = getattr(bitback, "no_such_thing")  # noqa: B009

    def test_all_exports_are_in_lazy_imports(self) -> None:
        import bitback

        assert set(bitback.__all__) == set(bitback._LAZY_IMPORTS)

    def test_dir(self) -> None:
        import bitback

        assert dir(bitback) == bitback.__all__
