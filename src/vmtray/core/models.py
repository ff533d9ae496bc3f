"""
Value types passed between the provider, the watcher and the controllers.
"""

from __future__ import annotations

from dataclasses import dataclass

from .actions import VMAction
from .vm_state import VMState, is_critical, state_label


@dataclass(frozen=True)
class VMSnapshot:
    """A VM's name and state at the time of one directory query."""
    name: str
    state: VMState

    @property
    def label(self) -> str:
        return state_label(self.state)


@dataclass(frozen=True)
class StateChangeEvent:
    """An interesting state change reported by the watcher."""
    name: str
    state: VMState
    critical: bool

    @classmethod
    def from_state(cls, name: str, state: VMState) -> "StateChangeEvent":
        return cls(name=name, state=state, critical=is_critical(state))


@dataclass(frozen=True)
class TransitionRequest:
    """One user action against one VM or against all of them."""
    name: str
    action: VMAction
    requires_confirmation: bool = False
    is_fleet: bool = False
