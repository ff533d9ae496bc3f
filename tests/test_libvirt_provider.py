"""
Tests for the libvirt provider (mocked libvirt)
"""

import pytest
from unittest.mock import MagicMock

from conftest import FakeLibvirtError
from common.exceptions import ProviderConnectionError
from vmtray.core.vm_state import StateChangeResponse, VMState


class TestStateMapping:
    """Tests for libvirt state and event translation."""

    def test_domain_states(self):
        from vmtray.core.libvirt_provider import domain_state_to_vm_state

        assert domain_state_to_vm_state(1) is VMState.ENABLED
        assert domain_state_to_vm_state(2) is VMState.ENABLED
        assert domain_state_to_vm_state(3) is VMState.QUIESCE
        assert domain_state_to_vm_state(5) is VMState.DISABLED
        assert domain_state_to_vm_state(5, has_managed_save=True) is VMState.OFFLINE
        assert domain_state_to_vm_state(6) is VMState.OFF_CRITICAL
        assert domain_state_to_vm_state(99) is VMState.UNKNOWN

    def test_lifecycle_events(self):
        from vmtray.core.libvirt_provider import lifecycle_event_to_vm_state

        assert lifecycle_event_to_vm_state(2, 0) is VMState.ENABLED
        assert lifecycle_event_to_vm_state(3, 0) is VMState.QUIESCE
        assert lifecycle_event_to_vm_state(3, 2) is VMState.PAUSED_CRITICAL
        assert lifecycle_event_to_vm_state(5, 0) is VMState.DISABLED
        assert lifecycle_event_to_vm_state(5, 4) is VMState.OFFLINE
        assert lifecycle_event_to_vm_state(5, 2) is VMState.OFF_CRITICAL
        assert lifecycle_event_to_vm_state(8, 0) is VMState.OFF_CRITICAL

    def test_define_events_ignored(self):
        """Test define and undefine are not state changes."""
        from vmtray.core.libvirt_provider import lifecycle_event_to_vm_state

        assert lifecycle_event_to_vm_state(0, 0) is None
        assert lifecycle_event_to_vm_state(1, 0) is None

    def test_error_codes(self, fake_libvirt):
        from vmtray.core.libvirt_provider import error_to_response

        invalid = FakeLibvirtError("bad state", code=fake_libvirt.VIR_ERR_OPERATION_INVALID)
        denied = FakeLibvirtError("denied", code=fake_libvirt.VIR_ERR_OPERATION_DENIED)
        other = FakeLibvirtError("other", code=1)

        assert error_to_response(invalid) == StateChangeResponse.INVALID_STATE.value
        assert error_to_response(denied) == StateChangeResponse.ACCESS_DENIED.value
        assert error_to_response(other) == StateChangeResponse.FAILED.value


class TestLibvirtProvider:
    """Tests for LibvirtProvider with a mocked connection."""

    @pytest.fixture
    def connection(self, fake_libvirt):
        connection = MagicMock()
        connection.uri = "test:///default"
        return connection

    @pytest.fixture
    def lv_provider(self, connection):
        from vmtray.core.libvirt_provider import LibvirtProvider
        return LibvirtProvider(connection)

    def test_enumerate_sorted(self, connection, lv_provider):
        """Test domains are listed sorted by name."""
        first, second = MagicMock(), MagicMock()
        first.name.return_value = "zeta"
        first.state.return_value = (1, 0)
        second.name.return_value = "alpha"
        second.state.return_value = (5, 0)
        second.hasManagedSaveImage.return_value = 1
        connection.connect.return_value.listAllDomains.return_value = [first, second]

        snapshots = lv_provider.enumerate()

        assert [(s.name, s.state) for s in snapshots] == [
            ("alpha", VMState.OFFLINE),
            ("zeta", VMState.ENABLED),
        ]

    def test_enumerate_by_name_missing(self, connection, lv_provider, fake_libvirt):
        """Test a missing domain gives an empty list."""
        connection.connect.return_value.lookupByName.side_effect = FakeLibvirtError(
            "no domain", code=fake_libvirt.VIR_ERR_NO_DOMAIN,
        )
        assert lv_provider.enumerate("ghost") == []

    def test_start(self, connection, lv_provider, mock_domain):
        """Test starting a shut off domain creates it."""
        mock_domain.state.return_value = (5, 0)
        connection.connect.return_value.lookupByName.return_value = mock_domain

        code = lv_provider.request_state_change("test-vm", VMState.ENABLED)

        assert code == StateChangeResponse.COMPLETED_WITH_NO_ERROR.value
        mock_domain.create.assert_called_once()

    def test_resume_paused(self, connection, lv_provider, mock_domain):
        """Test enabling a paused domain resumes it."""
        mock_domain.state.return_value = (3, 0)
        connection.connect.return_value.lookupByName.return_value = mock_domain

        lv_provider.request_state_change("test-vm", VMState.ENABLED)

        mock_domain.resume.assert_called_once()
        mock_domain.create.assert_not_called()

    @pytest.mark.parametrize("state,method", [
        (VMState.DISABLED, "destroy"),
        (VMState.OFFLINE, "managedSave"),
        (VMState.QUIESCE, "suspend"),
        (VMState.RESET, "reset"),
    ])
    def test_state_methods(self, connection, lv_provider, mock_domain, state, method):
        connection.connect.return_value.lookupByName.return_value = mock_domain

        lv_provider.request_state_change("test-vm", state)

        getattr(mock_domain, method).assert_called_once()

    def test_unsupported_state(self, connection, lv_provider, mock_domain):
        connection.connect.return_value.lookupByName.return_value = mock_domain
        code = lv_provider.request_state_change("test-vm", VMState.STARTING)
        assert code == StateChangeResponse.NOT_SUPPORTED.value

    def test_libvirt_error_mapped(self, connection, lv_provider, mock_domain, fake_libvirt):
        """Test libvirt errors become failure codes."""
        mock_domain.destroy.side_effect = FakeLibvirtError(
            "not running", code=fake_libvirt.VIR_ERR_OPERATION_INVALID,
        )
        connection.connect.return_value.lookupByName.return_value = mock_domain

        code = lv_provider.request_state_change("test-vm", VMState.DISABLED)

        assert code == StateChangeResponse.INVALID_STATE.value

    def test_shutdown_capability_only_when_running(self, connection, lv_provider, mock_domain):
        connection.connect.return_value.lookupByName.return_value = mock_domain

        assert lv_provider.locate_shutdown_capability("test-vm") is not None
        mock_domain.state.return_value = (3, 0)
        assert lv_provider.locate_shutdown_capability("test-vm") is None

    def test_invoke_shutdown(self, connection, lv_provider, mock_domain):
        """Test a forced shutdown lets libvirt choose the method."""
        connection.connect.return_value.lookupByName.return_value = mock_domain
        capability = lv_provider.locate_shutdown_capability("test-vm")

        code = lv_provider.invoke_shutdown(capability, force=True, reason="VM Tray")

        assert code == StateChangeResponse.TRANSITION_STARTED.value
        mock_domain.shutdownFlags.assert_called_once_with(0)


class TestLibvirtSubscription:
    """Tests for domain event delivery."""

    def test_events_forwarded(self, fake_libvirt, mock_domain):
        """Test lifecycle and reboot callbacks reach on_change."""
        from vmtray.core.libvirt_provider import LibvirtSubscription

        connection = MagicMock()
        connection.register_domain_event.side_effect = [1, 2]
        on_change = MagicMock()
        subscription = LibvirtSubscription(connection, on_change)
        subscription.start()

        lifecycle = connection.register_domain_event.call_args_list[0][0][1]
        reboot = connection.register_domain_event.call_args_list[1][0][1]
        lifecycle(None, mock_domain, 5, 0, None)
        reboot(None, mock_domain, None)

        assert on_change.call_args_list[0][0] == (VMState.DISABLED.value, "test-vm")
        assert on_change.call_args_list[1][0] == (VMState.RESET.value, "test-vm")

        subscription.stop()
        assert connection.deregister_domain_event.call_count == 2


class TestLibvirtConnection:
    """Tests for LibvirtConnection."""

    def test_connect_failure(self, fake_libvirt):
        """Test libvirt errors become ProviderConnectionError."""
        from vmtray.core.connection import LibvirtConnection

        fake_libvirt.open.side_effect = FakeLibvirtError("no daemon")
        connection = LibvirtConnection("test:///default")

        with pytest.raises(ProviderConnectionError) as exc_info:
            connection.connect()
        assert exc_info.value.details["uri"] == "test:///default"

    def test_connect_and_disconnect(self, fake_libvirt):
        from vmtray.core.connection import LibvirtConnection

        conn = fake_libvirt.open.return_value
        conn.isAlive.return_value = True
        connection = LibvirtConnection("test:///default")

        assert connection.connect() is conn
        assert connection.is_connected
        connection.disconnect()
        conn.close.assert_called_once()
        assert not connection.is_connected
