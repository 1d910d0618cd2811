"""Tests for sync strategy parsing."""

import pytest

from storefront.modules.categories.sync import SyncStrategy


class TestSyncStrategyParse:
    """Tests for SyncStrategy.parse."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("reconcile", SyncStrategy.RECONCILE),
            ("reset", SyncStrategy.RESET),
            ("RESET", SyncStrategy.RESET),
            ("  Reset ", SyncStrategy.RESET),
            (SyncStrategy.RESET, SyncStrategy.RESET),
        ],
    )
    def test_known_values(self, raw, expected) -> None:
        assert SyncStrategy.parse(raw) is expected

    @pytest.mark.parametrize("raw", [None, "", "wipe", "delete-all"])
    def test_unknown_values_fall_back_to_reconcile(self, raw) -> None:
        """Verify anything unrecognised never selects the destructive strategy."""
        assert SyncStrategy.parse(raw) is SyncStrategy.RECONCILE
