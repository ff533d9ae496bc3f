"""
Tests for the VM state watcher
"""

import pytest
from unittest.mock import MagicMock

from conftest import FakeProvider
from common.exceptions import SubscriptionError
from vmtray.core.models import StateChangeEvent
from vmtray.core.vm_state import VMState
from vmtray.core.watcher import StateWatcher


@pytest.fixture
def watcher():
    return StateWatcher(FakeProvider(), unknown_name="Unknown Virtual Machine")


class TestStateWatcher:
    """Tests for StateWatcher."""

    def test_start_subscribes(self):
        """Test start establishes and starts a subscription."""
        provider = FakeProvider()
        watcher = StateWatcher(provider)

        watcher.start()

        assert watcher.running
        assert len(provider.subscriptions) == 1
        assert provider.subscriptions[0].started

    def test_start_twice_subscribes_once(self):
        """Test a second start is a no-op."""
        provider = FakeProvider()
        watcher = StateWatcher(provider)

        watcher.start()
        watcher.start()

        assert len(provider.subscriptions) == 1

    def test_stop_releases_subscription(self):
        """Test stop stops the subscription."""
        provider = FakeProvider()
        watcher = StateWatcher(provider)
        watcher.start()

        watcher.stop()

        assert not watcher.running
        assert provider.subscriptions[0].stopped

    def test_cannot_restart(self):
        """Test a stopped watcher cannot be started again."""
        watcher = StateWatcher(FakeProvider())
        watcher.start()
        watcher.stop()

        with pytest.raises(SubscriptionError):
            watcher.start()

    def test_subscription_failure_is_fatal(self):
        """Test provider errors surface as SubscriptionError."""
        provider = FakeProvider()
        provider.subscribe_error = OSError("event loop unavailable")
        watcher = StateWatcher(provider)

        with pytest.raises(SubscriptionError) as exc_info:
            watcher.start()

        assert exc_info.value.recoverable is False
        assert isinstance(exc_info.value.cause, OSError)
        assert not watcher.running

    def test_transitional_code_emits_nothing(self, watcher):
        """Test code 10 produces no event."""
        listener = MagicMock()
        watcher.add_listener(listener)

        event = watcher.handle_notification(10, "vm1")

        assert event is None
        listener.assert_not_called()

    def test_critical_code_emits_once(self, watcher):
        """Test code 32781 produces exactly one critical event."""
        listener = MagicMock()
        watcher.add_listener(listener)

        event = watcher.handle_notification(32781, "vm1")

        assert event == StateChangeEvent("vm1", VMState.RUNNING_CRITICAL, critical=True)
        listener.assert_called_once_with(event)

    def test_interesting_code_emits(self, watcher):
        """Test a plain state change is emitted as non-critical."""
        listener = MagicMock()
        watcher.add_listener(listener)

        watcher.handle_notification(VMState.DISABLED.value, "vm1")

        event = listener.call_args[0][0]
        assert event.state is VMState.DISABLED
        assert event.critical is False

    def test_missing_name_uses_fallback(self, watcher):
        """Test events without a name use the unknown VM name."""
        event = watcher.handle_notification(VMState.ENABLED.value, None)
        assert event.name == "Unknown Virtual Machine"

    def test_listener_error_isolated(self, watcher):
        """Test a failing listener does not stop the others."""
        broken = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        watcher.add_listener(broken)
        watcher.add_listener(healthy)

        watcher.handle_notification(VMState.ENABLED.value, "vm1")

        healthy.assert_called_once()

    def test_remove_listener(self, watcher):
        """Test removed listeners are no longer called."""
        listener = MagicMock()
        watcher.add_listener(listener)
        watcher.remove_listener(listener)

        watcher.handle_notification(VMState.ENABLED.value, "vm1")

        listener.assert_not_called()

    def test_subscription_delivers_to_watcher(self):
        """Test notifications from the subscription reach listeners."""
        provider = FakeProvider()
        watcher = StateWatcher(provider)
        listener = MagicMock()
        watcher.add_listener(listener)
        watcher.start()

        provider.subscriptions[0].on_change(VMState.QUIESCE.value, "vm1")

        listener.assert_called_once()
        assert listener.call_args[0][0].state is VMState.QUIESCE
