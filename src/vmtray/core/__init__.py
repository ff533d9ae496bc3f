"""
vmtray core - VM state tracking and control.
"""

from .actions import VMAction, available_actions
from .confirmation import ConfirmationGate, ConfirmationPrompt
from .fleet import FleetController, FleetResult
from .models import StateChangeEvent, TransitionRequest, VMSnapshot
from .provider import Subscription, VMProvider
from .requestor import TransitionRequestor
from .service import VMTrayService
from .vm_state import (
    StateChangeResponse, VMState, is_critical, is_off, is_paused, is_running,
    is_saved, state_label,
)
from .watcher import StateWatcher

__all__ = [
    "VMAction", "available_actions",
    "ConfirmationGate", "ConfirmationPrompt",
    "FleetController", "FleetResult",
    "StateChangeEvent", "TransitionRequest", "VMSnapshot",
    "Subscription", "VMProvider",
    "TransitionRequestor",
    "VMTrayService",
    "StateChangeResponse", "VMState", "is_critical", "is_off", "is_paused",
    "is_running", "is_saved", "state_label",
    "StateWatcher",
]
