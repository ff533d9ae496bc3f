"""
libvirt provider.

Translates libvirt domain states, lifecycle events and API errors into
the tray's state and acknowledgement codes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from .connection import LibvirtConnection, libvirt
from .models import VMSnapshot
from .provider import ChangeCallback, Subscription, VMProvider
from .vm_state import StateChangeResponse, VMState

logger = logging.getLogger(__name__)


class DomainState(Enum):
    """libvirt virDomainState values."""
    NOSTATE = 0
    RUNNING = 1
    BLOCKED = 2
    PAUSED = 3
    SHUTDOWN = 4
    SHUTOFF = 5
    CRASHED = 6
    PMSUSPENDED = 7


class DomainEvent(Enum):
    """libvirt virDomainEventType values."""
    DEFINED = 0
    UNDEFINED = 1
    STARTED = 2
    SUSPENDED = 3
    RESUMED = 4
    STOPPED = 5
    SHUTDOWN = 6
    PMSUSPENDED = 7
    CRASHED = 8


# virDomainEventStoppedDetailType
STOPPED_CRASHED = 2
STOPPED_SAVED = 4
STOPPED_FAILED = 5

# virDomainEventSuspendedDetailType values that mean something went wrong
SUSPENDED_ERROR_DETAILS = frozenset({
    2,  # IOERROR
    3,  # WATCHDOG
    6,  # API_ERROR
    8,  # POSTCOPY_FAILED
})

EVENT_ID_LIFECYCLE = 0
EVENT_ID_REBOOT = 1

SHUTDOWN_ACPI_POWER_BTN = 1


def domain_state_to_vm_state(state: int, has_managed_save: bool = False) -> VMState:
    """Map a libvirt domain state to a VMState."""
    try:
        domain_state = DomainState(state)
    except ValueError:
        return VMState.UNKNOWN

    if domain_state in (DomainState.RUNNING, DomainState.BLOCKED):
        return VMState.ENABLED
    if domain_state is DomainState.PAUSED:
        return VMState.QUIESCE
    if domain_state is DomainState.PMSUSPENDED:
        return VMState.PAUSED
    if domain_state is DomainState.SHUTDOWN:
        return VMState.STOPPING
    if domain_state is DomainState.SHUTOFF:
        return VMState.OFFLINE if has_managed_save else VMState.DISABLED
    if domain_state is DomainState.CRASHED:
        return VMState.OFF_CRITICAL
    return VMState.UNKNOWN


def lifecycle_event_to_vm_state(event: int, detail: int) -> Optional[VMState]:
    """
    Map a lifecycle event to the state the domain has entered.

    Returns None for events that are not state changes (define/undefine).
    """
    try:
        domain_event = DomainEvent(event)
    except ValueError:
        return None

    if domain_event in (DomainEvent.STARTED, DomainEvent.RESUMED):
        return VMState.ENABLED
    if domain_event is DomainEvent.SUSPENDED:
        if detail in SUSPENDED_ERROR_DETAILS:
            return VMState.PAUSED_CRITICAL
        return VMState.QUIESCE
    if domain_event is DomainEvent.PMSUSPENDED:
        return VMState.PAUSED
    if domain_event is DomainEvent.SHUTDOWN:
        return VMState.STOPPING
    if domain_event is DomainEvent.STOPPED:
        if detail == STOPPED_SAVED:
            return VMState.OFFLINE
        if detail in (STOPPED_CRASHED, STOPPED_FAILED):
            return VMState.OFF_CRITICAL
        return VMState.DISABLED
    if domain_event is DomainEvent.CRASHED:
        return VMState.OFF_CRITICAL
    return None


def error_to_response(error: Exception) -> int:
    """Map a libvirt error to an acknowledgement code."""
    code = error.get_error_code() if hasattr(error, "get_error_code") else None
    if code == libvirt.VIR_ERR_OPERATION_INVALID:
        return StateChangeResponse.INVALID_STATE.value
    if code in (libvirt.VIR_ERR_NO_SUPPORT, libvirt.VIR_ERR_OPERATION_UNSUPPORTED):
        return StateChangeResponse.NOT_SUPPORTED.value
    if code in (libvirt.VIR_ERR_OPERATION_DENIED, libvirt.VIR_ERR_AUTH_FAILED):
        return StateChangeResponse.ACCESS_DENIED.value
    if code == libvirt.VIR_ERR_OPERATION_TIMEOUT:
        return StateChangeResponse.TIMEOUT.value
    if code == libvirt.VIR_ERR_NO_DOMAIN:
        return StateChangeResponse.INVALID_PARAMETER.value
    return StateChangeResponse.FAILED.value


@dataclass
class ShutdownCapability:
    """Graceful shutdown handle for a running domain."""
    name: str
    domain: Any


class LibvirtSubscription(Subscription):
    """Lifecycle and reboot events for every domain on a connection."""

    def __init__(self, connection: LibvirtConnection, on_change: ChangeCallback):
        self._connection = connection
        self._on_change = on_change
        self._callback_ids: List[int] = []

    def _domain_name(self, domain) -> Optional[str]:
        try:
            return domain.name()
        except libvirt.libvirtError:
            return None

    def _lifecycle_callback(self, conn, domain, event, detail, opaque):
        state = lifecycle_event_to_vm_state(event, detail)
        logger.debug(f"Domain event {event}/{detail} -> {state}")
        if state is not None:
            self._on_change(state.value, self._domain_name(domain))

    def _reboot_callback(self, conn, domain, opaque):
        self._on_change(VMState.RESET.value, self._domain_name(domain))

    def start(self) -> None:
        if self._callback_ids:
            return
        self._callback_ids.append(
            self._connection.register_domain_event(EVENT_ID_LIFECYCLE, self._lifecycle_callback)
        )
        self._callback_ids.append(
            self._connection.register_domain_event(EVENT_ID_REBOOT, self._reboot_callback)
        )
        logger.info(f"Watching domain events on {self._connection.uri}")

    def stop(self) -> None:
        for callback_id in self._callback_ids:
            try:
                self._connection.deregister_domain_event(callback_id)
            except libvirt.libvirtError as e:
                logger.warning(f"Could not deregister domain events: {e}")
        self._callback_ids.clear()


class LibvirtProvider(VMProvider):
    """
    VM provider backed by a libvirt connection.

    Saved state uses libvirt's managed save, so a shut off domain with a
    managed save image reports as saved and starting it restores the image.
    """

    def __init__(self, connection: LibvirtConnection):
        self._connection = connection

    @property
    def connection(self) -> LibvirtConnection:
        return self._connection

    def _snapshot(self, domain) -> VMSnapshot:
        state, _reason = domain.state()
        has_managed_save = False
        if state == DomainState.SHUTOFF.value:
            has_managed_save = bool(domain.hasManagedSaveImage(0))
        return VMSnapshot(
            name=domain.name(),
            state=domain_state_to_vm_state(state, has_managed_save),
        )

    def _lookup(self, name: str):
        conn = self._connection.connect()
        try:
            return conn.lookupByName(name)
        except libvirt.libvirtError as e:
            if e.get_error_code() == libvirt.VIR_ERR_NO_DOMAIN:
                return None
            raise

    def enumerate(self, name: Optional[str] = None) -> List[VMSnapshot]:
        if name is not None:
            domain = self._lookup(name)
            return [self._snapshot(domain)] if domain is not None else []

        conn = self._connection.connect()
        snapshots = []
        for domain in conn.listAllDomains(0):
            try:
                snapshots.append(self._snapshot(domain))
            except libvirt.libvirtError as e:
                # Domain vanished between listing and querying
                logger.warning(f"Error getting domain state: {e}")
        return sorted(snapshots, key=lambda s: s.name)

    def subscribe(self, on_change: ChangeCallback) -> Subscription:
        return LibvirtSubscription(self._connection, on_change)

    def request_state_change(self, name: str, state: VMState) -> int:
        domain = self._lookup(name)
        if domain is None:
            return StateChangeResponse.INVALID_PARAMETER.value

        try:
            current, _reason = domain.state()
            if state is VMState.ENABLED:
                if current == DomainState.PAUSED.value:
                    domain.resume()
                elif current == DomainState.PMSUSPENDED.value:
                    domain.pMWakeup(0)
                else:
                    domain.create()
            elif state is VMState.DISABLED:
                domain.destroy()
            elif state is VMState.OFFLINE:
                domain.managedSave(0)
            elif state is VMState.QUIESCE:
                domain.suspend()
            elif state is VMState.RESET:
                domain.reset(0)
            else:
                return StateChangeResponse.NOT_SUPPORTED.value
        except libvirt.libvirtError as e:
            logger.warning(f"libvirt rejected {state.name} for {name}: {e}")
            return error_to_response(e)

        return StateChangeResponse.COMPLETED_WITH_NO_ERROR.value

    def locate_shutdown_capability(self, name: str) -> Optional[ShutdownCapability]:
        domain = self._lookup(name)
        if domain is None:
            return None
        state, _reason = domain.state()
        # Only a running guest can react to a shutdown request
        if state not in (DomainState.RUNNING.value, DomainState.BLOCKED.value):
            return None
        return ShutdownCapability(name=name, domain=domain)

    def invoke_shutdown(self, capability: ShutdownCapability, force: bool, reason: str) -> int:
        # Forced shutdown lets libvirt pick any method the guest supports,
        # otherwise only the ACPI power button is pressed.
        flags = 0 if force else SHUTDOWN_ACPI_POWER_BTN
        logger.info(f"Shutting down {capability.name} (requested by {reason})")
        try:
            capability.domain.shutdownFlags(flags)
        except libvirt.libvirtError as e:
            logger.warning(f"libvirt rejected shutdown for {capability.name}: {e}")
            return error_to_response(e)
        return StateChangeResponse.TRANSITION_STARTED.value
