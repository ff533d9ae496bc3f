"""
VM States

Provider state codes, the classifier predicates built on them, and the
table deciding which observed states are worth telling the user about.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Union

from .. import messages


class VMState(Enum):
    """
    Enabled states a virtual machine can report or be asked to enter.

    Values 0-11 are the common lifecycle states; 32768 onwards is the
    extended lifecycle, and 32781-32792 are the critical variants.
    """
    UNKNOWN = 0
    OTHER = 1
    ENABLED = 2             # Running
    DISABLED = 3            # Off
    SHUT_DOWN = 4
    NOT_APPLICABLE = 5
    OFFLINE = 6             # Saved
    TEST = 7
    DEFER = 8
    QUIESCE = 9             # Paused
    REBOOT_OR_STARTING = 10
    RESET = 11
    PAUSED = 32768
    SUSPENDED = 32769
    STARTING = 32770
    SAVING = 32773
    STOPPING = 32774
    PAUSING = 32776
    RESUMING = 32777
    FAST_SAVED = 32779
    FAST_SAVING = 32780
    RUNNING_CRITICAL = 32781
    OFF_CRITICAL = 32782
    STOPPING_CRITICAL = 32783
    SAVED_CRITICAL = 32784
    PAUSED_CRITICAL = 32785
    STARTING_CRITICAL = 32786
    RESET_CRITICAL = 32787
    SAVING_CRITICAL = 32788
    PAUSING_CRITICAL = 32789
    RESUMING_CRITICAL = 32790
    FAST_SAVED_CRITICAL = 32791
    FAST_SAVING_CRITICAL = 32792


class StateChangeResponse(Enum):
    """Return codes of a state change or shutdown request."""
    COMPLETED_WITH_NO_ERROR = 0
    TRANSITION_STARTED = 4096
    FAILED = 32768
    ACCESS_DENIED = 32769
    NOT_SUPPORTED = 32770
    STATUS_UNKNOWN = 32771
    TIMEOUT = 32772
    INVALID_PARAMETER = 32773
    SYSTEM_IN_USE = 32774
    INVALID_STATE = 32775
    INCORRECT_DATA_TYPE = 32776
    SYSTEM_NOT_AVAILABLE = 32777
    OUT_OF_MEMORY = 32778


CRITICAL_RANGE = range(32781, 32793)

ACCEPTED_RESPONSES: FrozenSet[int] = frozenset({
    StateChangeResponse.COMPLETED_WITH_NO_ERROR.value,
    StateChangeResponse.TRANSITION_STARTED.value,
})

# States a VM can be asked to enter directly
REQUESTABLE_STATES: FrozenSet[VMState] = frozenset({
    VMState.ENABLED,
    VMState.DISABLED,
    VMState.OFFLINE,
    VMState.QUIESCE,
    VMState.RESET,
})

StateLike = Union[VMState, int]


def _code(state: StateLike) -> int:
    return state.value if isinstance(state, VMState) else int(state)


def parse_state(code: int) -> VMState:
    """Map a raw provider code to a VMState; unknown codes become UNKNOWN."""
    try:
        return VMState(int(code))
    except ValueError:
        return VMState.UNKNOWN


def is_accepted_response(return_code: int) -> bool:
    """True if the provider accepted the request."""
    return return_code in ACCEPTED_RESPONSES


# =============================================================================
# Classifier
# =============================================================================

_OFF = frozenset({VMState.DISABLED.value, VMState.OFF_CRITICAL.value})
_PAUSED = frozenset({
    VMState.PAUSED.value,
    VMState.QUIESCE.value,
    VMState.PAUSED_CRITICAL.value,
})
_RUNNING = frozenset({VMState.ENABLED.value, VMState.RUNNING_CRITICAL.value})
_SAVED = frozenset({
    VMState.SUSPENDED.value,
    VMState.OFFLINE.value,
    VMState.SAVED_CRITICAL.value,
    VMState.FAST_SAVED.value,
    VMState.FAST_SAVED_CRITICAL.value,
})


def is_critical(state: StateLike) -> bool:
    """True if the state is a critical variant."""
    return _code(state) in CRITICAL_RANGE


def is_off(state: StateLike) -> bool:
    return _code(state) in _OFF


def is_paused(state: StateLike) -> bool:
    return _code(state) in _PAUSED


def is_running(state: StateLike) -> bool:
    return _code(state) in _RUNNING


def is_saved(state: StateLike) -> bool:
    return _code(state) in _SAVED


# =============================================================================
# Display labels
# =============================================================================

# Critical variants are labelled through their base state
_CRITICAL_BASE: Dict[VMState, VMState] = {
    VMState.RUNNING_CRITICAL: VMState.ENABLED,
    VMState.OFF_CRITICAL: VMState.DISABLED,
    VMState.STOPPING_CRITICAL: VMState.STOPPING,
    VMState.SAVED_CRITICAL: VMState.OFFLINE,
    VMState.PAUSED_CRITICAL: VMState.QUIESCE,
    VMState.STARTING_CRITICAL: VMState.STARTING,
    VMState.RESET_CRITICAL: VMState.RESET,
    VMState.SAVING_CRITICAL: VMState.SAVING,
    VMState.PAUSING_CRITICAL: VMState.PAUSING,
    VMState.RESUMING_CRITICAL: VMState.RESUMING,
    VMState.FAST_SAVED_CRITICAL: VMState.FAST_SAVED,
    VMState.FAST_SAVING_CRITICAL: VMState.FAST_SAVING,
}

_LABELS: Dict[VMState, str] = {
    VMState.ENABLED: messages.STATE_RUNNING,
    VMState.DISABLED: messages.STATE_OFF,
    VMState.OFFLINE: messages.STATE_SAVED,
    VMState.SUSPENDED: messages.STATE_SAVED,
    VMState.FAST_SAVED: messages.STATE_SAVED,
    VMState.QUIESCE: messages.STATE_PAUSED,
    VMState.PAUSED: messages.STATE_PAUSED,
    VMState.RESET: messages.STATE_RESETTING,
    VMState.STARTING: messages.STATE_STARTING,
    VMState.REBOOT_OR_STARTING: messages.STATE_STARTING,
    VMState.SHUT_DOWN: messages.STATE_STOPPING,
    VMState.STOPPING: messages.STATE_STOPPING,
    VMState.SAVING: messages.STATE_SAVING,
    VMState.FAST_SAVING: messages.STATE_SAVING,
    VMState.PAUSING: messages.STATE_PAUSING,
    VMState.RESUMING: messages.STATE_RESUMING,
}


def state_label(state: StateLike) -> str:
    """
    Friendly display string for a state.

    Critical states get their base state's label wrapped once in the
    critical template, e.g. "Running (Critical)".
    """
    vm_state = parse_state(_code(state))
    if is_critical(vm_state):
        base = _CRITICAL_BASE[vm_state]
        return messages.STATE_CRITICAL.format(_LABELS.get(base, messages.STATE_UNKNOWN))
    return _LABELS.get(vm_state, messages.STATE_UNKNOWN)


# =============================================================================
# Watch table
# =============================================================================

class WatchAction(Enum):
    """What the watcher does with an observed state."""
    IGNORE = "ignore"
    EMIT = "emit"
    EMIT_CRITICAL = "emit_critical"


WATCH_TABLE: Dict[VMState, WatchAction] = {
    **{state: WatchAction.IGNORE for state in VMState},
    VMState.DISABLED: WatchAction.EMIT,
    VMState.ENABLED: WatchAction.EMIT,
    VMState.OFFLINE: WatchAction.EMIT,
    VMState.SUSPENDED: WatchAction.EMIT,
    VMState.FAST_SAVED: WatchAction.EMIT,
    VMState.QUIESCE: WatchAction.EMIT,
    VMState.PAUSED: WatchAction.EMIT,
    VMState.RESET: WatchAction.EMIT,
    VMState.RUNNING_CRITICAL: WatchAction.EMIT_CRITICAL,
    VMState.OFF_CRITICAL: WatchAction.EMIT_CRITICAL,
    VMState.SAVED_CRITICAL: WatchAction.EMIT_CRITICAL,
    VMState.PAUSED_CRITICAL: WatchAction.EMIT_CRITICAL,
    VMState.RESET_CRITICAL: WatchAction.EMIT_CRITICAL,
    VMState.FAST_SAVED_CRITICAL: WatchAction.EMIT_CRITICAL,
}


def watch_action(code: int) -> WatchAction:
    """Look up what to do with a raw state code. Undefined codes are ignored."""
    try:
        return WATCH_TABLE[VMState(int(code))]
    except ValueError:
        return WatchAction.IGNORE
