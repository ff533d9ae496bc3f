"""
Transition Requestor

Asks the provider to move one VM to a new state and decides from the
acknowledgement whether that worked. Failures end here as False.
"""

from __future__ import annotations

import logging
from typing import Union

from common.decorators import handle_errors
from common.exceptions import (
    CapabilityMissingError, ProviderRejectedError, UnsupportedTransitionError,
    VMNotFoundError,
)
from common.logging_config import LogContext

from .. import messages
from .actions import VMAction, available_actions
from .models import TransitionRequest, VMSnapshot
from .provider import VMProvider
from .vm_state import REQUESTABLE_STATES, VMState, is_accepted_response

logger = logging.getLogger(__name__)


class TransitionRequestor:
    """
    Issues state change and graceful shutdown requests.

    Nothing is cached: every request looks the VM up again.
    """

    def __init__(self, provider: VMProvider, application_name: str = messages.APPLICATION_NAME):
        self._provider = provider
        self._application_name = application_name

    def _find(self, name: str) -> VMSnapshot:
        snapshots = self._provider.enumerate(name)
        if not snapshots:
            raise VMNotFoundError(name)
        return snapshots[0]

    @staticmethod
    def _requestable(name: str, state: Union[VMState, int]) -> VMState:
        if not isinstance(state, VMState):
            try:
                state = VMState(state)
            except ValueError:
                raise UnsupportedTransitionError(name, str(state)) from None
        if state not in REQUESTABLE_STATES:
            raise UnsupportedTransitionError(name, state.name)
        return state

    @handle_errors(default=False, message="State change request failed")
    def request_transition(self, name: str, state: Union[VMState, int]) -> bool:
        """
        Request a VM to change state.

        Args:
            name: VM name
            state: ENABLED, DISABLED, OFFLINE, QUIESCE or RESET

        Returns:
            True if the VM is already in that state or the provider
            accepted the request
        """
        state = self._requestable(name, state)
        snapshot = self._find(name)

        if snapshot.state is state:
            logger.info(f"VM {name} is already {state.name}")
            return True

        return_code = self._provider.request_state_change(name, state)
        if not is_accepted_response(return_code):
            raise ProviderRejectedError(name, f"Change to {state.name}", return_code)

        logger.info(f"Requested {name}: {snapshot.state.name} -> {state.name}")
        return True

    @handle_errors(default=False, message="Shutdown request failed")
    def request_shutdown(self, name: str) -> bool:
        """
        Ask a VM's guest to shut down.

        Returns:
            True if the provider accepted the request
        """
        self._find(name)

        capability = self._provider.locate_shutdown_capability(name)
        if capability is None:
            raise CapabilityMissingError(name)

        return_code = self._provider.invoke_shutdown(
            capability, force=True, reason=self._application_name,
        )
        if not is_accepted_response(return_code):
            raise ProviderRejectedError(name, "Shutdown", return_code)

        logger.info(f"Requested shutdown of {name}")
        return True

    @handle_errors(default=True, message="Eligibility check failed")
    def _applies(self, request: TransitionRequest) -> bool:
        snapshots = self._provider.enumerate(request.name)
        # A missing VM is left to the request itself to report
        return not snapshots or request.action in available_actions(snapshots[0].state)

    def execute(self, request: TransitionRequest) -> bool:
        """
        Carry out a request for the action it names.

        Fleet requests for a VM whose current state does not offer the
        action succeed without asking the provider.
        """
        with LogContext(vm_name=request.name, action=request.action.value, fleet=request.is_fleet):
            if request.is_fleet and not self._applies(request):
                logger.info(f"Skipping {request.name}: {request.action.value} does not apply")
                return True
            if request.action is VMAction.SHUT_DOWN:
                return self.request_shutdown(request.name)
            return self.request_transition(request.name, request.action.target_state)
