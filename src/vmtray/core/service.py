"""
VMTrayService - the facade the tray and command line talk to.

Owns the watcher, the requestor, the confirmation gate and the fleet
controller for one provider. The process entry point constructs it,
starts it and stops it.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from common.dialogs import DialogPresenter

from .. import messages
from .actions import VMAction
from .confirmation import ConfirmationGate
from .fleet import FleetController, FleetResult
from .models import TransitionRequest, VMSnapshot
from .provider import VMProvider
from .requestor import TransitionRequestor
from .watcher import StateListener, StateWatcher

logger = logging.getLogger(__name__)


class VMTrayService:
    """
    Monitor and control the VMs of one provider.

    Provides:
    - State change notifications (start() must be called first)
    - Directory queries for building menus
    - Single VM and whole fleet control with confirmation
    """

    def __init__(
        self,
        provider: VMProvider,
        presenter: DialogPresenter,
        application_name: str = messages.APPLICATION_NAME,
    ):
        self._provider = provider
        self._presenter = presenter
        self._gate = ConfirmationGate()
        self._requestor = TransitionRequestor(provider, application_name)
        self._watcher = StateWatcher(provider)
        self._fleet = FleetController(provider, self._requestor, self._gate, presenter)

    @property
    def watcher(self) -> StateWatcher:
        return self._watcher

    @property
    def gate(self) -> ConfirmationGate:
        return self._gate

    def start(self) -> None:
        """
        Start watching for state changes.

        Raises:
            SubscriptionError: If the watcher cannot subscribe
        """
        self._watcher.start()

    def stop(self) -> None:
        self._watcher.stop()

    def add_state_listener(self, listener: StateListener) -> None:
        self._watcher.add_listener(listener)

    def remove_state_listener(self, listener: StateListener) -> None:
        self._watcher.remove_listener(listener)

    def get_virtual_machines(self, name: Optional[str] = None) -> List[VMSnapshot]:
        """List VMs sorted by name, optionally only the one called name."""
        return self._provider.enumerate(name)

    def control_virtual_machine(
        self,
        name: str,
        action: VMAction,
        show_error: bool = True,
        prompt_to_confirm: bool = True,
    ) -> bool:
        """
        Apply an action to one VM.

        Args:
            name: VM name
            action: Action to apply
            show_error: Tell the user if the request fails
            prompt_to_confirm: Ask before destructive actions

        Returns:
            True if the request was accepted. A declined confirmation
            returns False without an error.
        """
        request = TransitionRequest(
            name=name,
            action=action,
            requires_confirmation=prompt_to_confirm and self._gate.requires_confirmation(action),
        )

        if request.requires_confirmation and not self._gate.confirm(action, self._presenter):
            return False

        if self._requestor.execute(request):
            return True

        if show_error:
            self._presenter.show_error(action.failure_message(name))
        return False

    def control_all_virtual_machines(self, action: VMAction) -> FleetResult:
        """Apply an action to every VM; see FleetController.control_all."""
        return self._fleet.control_all(action)
