"""Tests for the marker label commit routing table."""
from __future__ import annotations

import pytest

from maps.callbacks import LabelCallbackRegistry


class TestLabelCallbackRegistry:
    def test_dispatch_reaches_registered_callback(self):
        table = LabelCallbackRegistry()
        got = []
        key = table.new_key()
        table.register(key, lambda i, label: got.append((i, label)))
        assert table.dispatch(key, 2, "Home") is True
        assert got == [(2, "Home")]

    def test_dispatch_after_unregister_is_dropped(self):
        table = LabelCallbackRegistry()
        got = []
        key = table.new_key()
        table.register(key, lambda i, label: got.append((i, label)))
        table.unregister(key)
        assert table.dispatch(key, 0, "late") is False
        assert got == []
        assert len(table) == 0

    def test_duplicate_key_rejected(self):
        table = LabelCallbackRegistry()
        key = table.new_key()
        table.register(key, lambda i, label: None)
        with pytest.raises(KeyError):
            table.register(key, lambda i, label: None)

    def test_keys_are_distinct(self):
        keys = {LabelCallbackRegistry.new_key() for _ in range(50)}
        assert len(keys) == 50
        assert all(k.startswith("map_") for k in keys)
