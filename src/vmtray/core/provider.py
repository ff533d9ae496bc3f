"""
Hypervisor provider interface.

Everything the tray needs from a hypervisor's management layer: listing
VMs, watching their state, and asking them to change it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from .models import VMSnapshot
from .vm_state import VMState

# Called with (raw state code, VM name or None)
ChangeCallback = Callable[[int, Optional[str]], None]


class Subscription(ABC):
    """A long-lived change notification handle."""

    @abstractmethod
    def start(self) -> None:
        """Begin delivering notifications."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering notifications."""
        pass


class VMProvider(ABC):
    """Base class for hypervisor providers."""

    @abstractmethod
    def enumerate(self, name: Optional[str] = None) -> List[VMSnapshot]:
        """
        List virtual machines sorted by name.

        Args:
            name: Only return the VM with this name
        """
        pass

    @abstractmethod
    def subscribe(self, on_change: ChangeCallback) -> Subscription:
        """Create a subscription to state changes. It must be started."""
        pass

    @abstractmethod
    def request_state_change(self, name: str, state: VMState) -> int:
        """Ask a VM to enter a state. Returns an acknowledgement code."""
        pass

    @abstractmethod
    def locate_shutdown_capability(self, name: str) -> Optional[Any]:
        """Find the graceful shutdown handle for a VM, if it has one."""
        pass

    @abstractmethod
    def invoke_shutdown(self, capability: Any, force: bool, reason: str) -> int:
        """Request graceful shutdown. Returns an acknowledgement code."""
        pass
