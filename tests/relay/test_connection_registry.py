"""
Tests for the ConnectionRegistry.
"""

import pytest
from unittest.mock import MagicMock

from host.modules.relay.connection_registry import (
    ConnectionChanged,
    ConnectionCounts,
    ConnectionGroup,
    ConnectionRegistry,
)
from host.modules.relay.exceptions import DuplicateConnection, UnknownConnection


class TestConnectionRegistry:
    """Test suite for the ConnectionRegistry class."""

    def test_register_reports_post_update_counts(self):
        registry = ConnectionRegistry()

        change = registry.register(ConnectionGroup.PRODUCER, "browser-1")

        assert change == ConnectionChanged(
            group=ConnectionGroup.PRODUCER,
            connection_id="browser-1",
            connected=True,
            counts=ConnectionCounts(producers=1, consumers=0),
        )
        assert registry.is_registered(ConnectionGroup.PRODUCER, "browser-1")

    def test_unregister_reports_post_update_counts(self):
        registry = ConnectionRegistry()
        registry.register(ConnectionGroup.CONSUMER, "app-1")
        registry.register(ConnectionGroup.CONSUMER, "app-2")

        change = registry.unregister(ConnectionGroup.CONSUMER, "app-1")

        assert change.connected is False
        assert change.counts == ConnectionCounts(producers=0, consumers=1)
        assert registry.members(ConnectionGroup.CONSUMER) == ("app-2",)

    def test_duplicate_registration_is_rejected_without_double_count(self):
        registry = ConnectionRegistry()
        registry.register(ConnectionGroup.CONSUMER, "app-1")

        with pytest.raises(DuplicateConnection) as exc_info:
            registry.register(ConnectionGroup.CONSUMER, "app-1")

        assert exc_info.value.group == ConnectionGroup.CONSUMER
        assert exc_info.value.connection_id == "app-1"
        assert registry.count(ConnectionGroup.CONSUMER) == 1
        assert registry.members(ConnectionGroup.CONSUMER) == ("app-1",)

    def test_unregister_unknown_connection_raises(self):
        registry = ConnectionRegistry()

        with pytest.raises(UnknownConnection):
            registry.unregister(ConnectionGroup.PRODUCER, "ghost")

        assert registry.counts() == ConnectionCounts(producers=0, consumers=0)

    def test_reregistration_after_removal_is_a_new_member(self):
        registry = ConnectionRegistry()
        registry.register(ConnectionGroup.PRODUCER, "browser-1")
        registry.unregister(ConnectionGroup.PRODUCER, "browser-1")

        change = registry.register(ConnectionGroup.PRODUCER, "browser-1")

        assert change.counts.producers == 1

    def test_groups_are_independent(self):
        registry = ConnectionRegistry()
        registry.register(ConnectionGroup.PRODUCER, "shared-id")

        registry.register(ConnectionGroup.CONSUMER, "shared-id")

        assert registry.counts() == ConnectionCounts(producers=1, consumers=1)
        with pytest.raises(UnknownConnection):
            registry.unregister(ConnectionGroup.CONSUMER, "other-id")

    def test_members_keep_registration_order(self):
        registry = ConnectionRegistry()
        for sid in ("c", "a", "b"):
            registry.register(ConnectionGroup.CONSUMER, sid)

        assert registry.members(ConnectionGroup.CONSUMER) == ("c", "a", "b")

    def test_listeners_receive_every_transition(self):
        registry = ConnectionRegistry()
        listener = MagicMock()
        registry.add_listener(listener)

        connected = registry.register(ConnectionGroup.PRODUCER, "browser-1")
        disconnected = registry.unregister(ConnectionGroup.PRODUCER, "browser-1")

        assert [c.args[0] for c in listener.call_args_list] == [connected, disconnected]

    def test_listener_not_called_on_fault(self):
        registry = ConnectionRegistry()
        listener = MagicMock()
        registry.add_listener(listener)

        with pytest.raises(UnknownConnection):
            registry.unregister(ConnectionGroup.CONSUMER, "app-1")

        listener.assert_not_called()

    def test_failing_listener_does_not_break_registration(self, caplog):
        registry = ConnectionRegistry()
        registry.add_listener(MagicMock(side_effect=RuntimeError("boom")))

        change = registry.register(ConnectionGroup.CONSUMER, "app-1")

        assert change.counts.consumers == 1
        assert "Connection listener failed" in caplog.text


class TestConnectionChanged:

    def test_to_dict_is_plain_data(self):
        change = ConnectionChanged(ConnectionGroup.CONSUMER, "app-1", True, ConnectionCounts(2, 3))

        assert change.to_dict() == {
            "group": "consumer",
            "connection_id": "app-1",
            "connected": True,
            "producers": 2,
            "consumers": 3,
        }

    def test_describe(self):
        change = ConnectionChanged(ConnectionGroup.PRODUCER, "browser-1", False, ConnectionCounts(0, 1))

        assert change.describe() == ("Disconnected from producer: browser-1 | "
                                     "Total consumers: 1 | Total producers: 0")
