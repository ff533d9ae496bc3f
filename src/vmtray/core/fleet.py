"""
Fleet Controller

Applies one action to every VM: one confirmation up front, one attempt
per VM, and one error at the end if anything failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from common.decorators import timed
from common.dialogs import DialogPresenter

from .actions import VMAction
from .confirmation import ConfirmationGate
from .models import TransitionRequest
from .provider import VMProvider
from .requestor import TransitionRequestor

logger = logging.getLogger(__name__)


@dataclass
class FleetResult:
    """Outcome of a fleet operation."""
    action: VMAction
    confirmed: bool = True
    attempted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def any_failed(self) -> bool:
        return bool(self.failed)


class FleetController:
    """
    Runs an action against all enumerated VMs.

    VMs are handled one after another on the calling thread. A failure
    never stops the loop and nothing is rolled back.
    """

    def __init__(
        self,
        provider: VMProvider,
        requestor: TransitionRequestor,
        gate: ConfirmationGate,
        presenter: DialogPresenter,
    ):
        self._provider = provider
        self._requestor = requestor
        self._gate = gate
        self._presenter = presenter

    @timed
    def control_all(self, action: VMAction) -> FleetResult:
        """
        Apply an action to every VM.

        Args:
            action: The action to apply

        Returns:
            Which VMs were attempted and which failed
        """
        result = FleetResult(action=action)

        if not self._gate.confirm(action, self._presenter, multiple=True):
            result.confirmed = False
            return result

        try:
            snapshots = self._provider.enumerate()
        except Exception as e:
            logger.error(f"Could not list virtual machines: {e}")
            self._presenter.show_error(action.fleet_failure_message, str(e))
            return result

        for snapshot in snapshots:
            request = TransitionRequest(name=snapshot.name, action=action, is_fleet=True)
            result.attempted.append(snapshot.name)
            if not self._requestor.execute(request):
                result.failed.append(snapshot.name)

        logger.info(
            f"{action.value} on all VMs: {len(result.attempted)} attempted, "
            f"{len(result.failed)} failed"
        )

        if result.any_failed:
            self._presenter.show_error(action.fleet_failure_message, ", ".join(result.failed))

        return result
