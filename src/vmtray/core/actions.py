"""
VM Actions

The user-facing transitions and which of them a VM (or the whole fleet)
can take from its current state.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional

from .. import messages
from .vm_state import (
    VMState, StateLike, is_off, is_paused, is_running, is_saved,
)


class VMAction(Enum):
    """Transitions the tray can request."""
    START = "start"
    TURN_OFF = "turn_off"
    SHUT_DOWN = "shut_down"
    SAVE = "save"
    PAUSE = "pause"
    RESUME = "resume"
    RESET = "reset"

    @property
    def target_state(self) -> Optional[VMState]:
        """Requested state, or None for graceful shutdown."""
        return _TARGET_STATES[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    def failure_message(self, name: str) -> str:
        """Error heading for a single VM."""
        return _FAILURE_MESSAGES[self].format(name=name)

    @property
    def fleet_failure_message(self) -> str:
        """Error heading when any VM of a fleet operation failed."""
        return _FLEET_FAILURE_MESSAGES[self]


_TARGET_STATES: Dict[VMAction, Optional[VMState]] = {
    VMAction.START: VMState.ENABLED,
    VMAction.TURN_OFF: VMState.DISABLED,
    VMAction.SHUT_DOWN: None,
    VMAction.SAVE: VMState.OFFLINE,
    VMAction.PAUSE: VMState.QUIESCE,
    VMAction.RESUME: VMState.ENABLED,
    VMAction.RESET: VMState.RESET,
}

_LABELS: Dict[VMAction, str] = {
    VMAction.START: messages.COMMAND_START,
    VMAction.TURN_OFF: messages.COMMAND_TURN_OFF,
    VMAction.SHUT_DOWN: messages.COMMAND_SHUT_DOWN,
    VMAction.SAVE: messages.COMMAND_SAVE,
    VMAction.PAUSE: messages.COMMAND_PAUSE,
    VMAction.RESUME: messages.COMMAND_RESUME,
    VMAction.RESET: messages.COMMAND_RESET,
}

_FAILURE_MESSAGES: Dict[VMAction, str] = {
    VMAction.START: messages.MESSAGE_START_VM_FAILED,
    VMAction.TURN_OFF: messages.MESSAGE_POWER_OFF_VM_FAILED,
    VMAction.SHUT_DOWN: messages.MESSAGE_SHUT_DOWN_VM_FAILED,
    VMAction.SAVE: messages.MESSAGE_SAVE_STATE_VM_FAILED,
    VMAction.PAUSE: messages.MESSAGE_PAUSE_VM_FAILED,
    VMAction.RESUME: messages.MESSAGE_RESUME_VM_FAILED,
    VMAction.RESET: messages.MESSAGE_RESET_VM_FAILED,
}

_FLEET_FAILURE_MESSAGES: Dict[VMAction, str] = {
    VMAction.START: messages.MESSAGE_START_VM_FAILED_MULTIPLE,
    VMAction.TURN_OFF: messages.MESSAGE_POWER_OFF_VM_FAILED_MULTIPLE,
    VMAction.SHUT_DOWN: messages.MESSAGE_SHUT_DOWN_VM_FAILED_MULTIPLE,
    VMAction.SAVE: messages.MESSAGE_SAVE_STATE_VM_FAILED_MULTIPLE,
    VMAction.PAUSE: messages.MESSAGE_PAUSE_VM_FAILED_MULTIPLE,
    VMAction.RESUME: messages.MESSAGE_RESUME_VM_FAILED_MULTIPLE,
    VMAction.RESET: messages.MESSAGE_RESET_VM_FAILED_MULTIPLE,
}


def available_actions(state: StateLike) -> List[VMAction]:
    """
    Actions offered for one VM, in menu order.

    Off or saved machines can only be started. Anything else can be turned
    off, saved, paused or resumed, and reset; paused machines cannot be
    shut down gracefully.
    """
    if is_off(state) or is_saved(state):
        return [VMAction.START]

    paused = is_paused(state)
    actions = [VMAction.TURN_OFF]
    if not paused:
        actions.append(VMAction.SHUT_DOWN)
    actions.append(VMAction.SAVE)
    actions.append(VMAction.RESUME if paused else VMAction.PAUSE)
    actions.append(VMAction.RESET)
    return actions


class FleetStates:
    """Which classifier categories are present across a set of states."""

    def __init__(self, states: Iterable[StateLike]):
        states = list(states)
        self.any_off = any(is_off(s) for s in states)
        self.any_paused = any(is_paused(s) for s in states)
        self.any_running = any(is_running(s) for s in states)
        self.any_saved = any(is_saved(s) for s in states)

    def can(self, action: VMAction) -> bool:
        """True if the action applies to at least one VM."""
        if action is VMAction.START:
            return self.any_off or self.any_saved
        if action is VMAction.SHUT_DOWN or action is VMAction.PAUSE:
            return self.any_running
        if action is VMAction.RESUME:
            return self.any_paused
        return self.any_running or self.any_paused
