"""
Confirmation Gate

Destructive actions (turn off, shut down, reset) need the user's consent
before anything is sent to the provider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from common.dialogs import DialogPresenter

from .. import messages
from .actions import VMAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmationPrompt:
    """Texts for a confirmation dialog. Cancel is always the default."""
    confirm_label: str
    cancel_label: str
    heading: str
    body: str
    default_response: str = "cancel"


@dataclass(frozen=True)
class _PromptTexts:
    confirm_label: str
    cancel_label: str
    heading: str
    body_single: str
    body_multiple: str


_PROMPTS: Dict[VMAction, _PromptTexts] = {
    VMAction.TURN_OFF: _PromptTexts(
        confirm_label=messages.BUTTON_TURN_OFF,
        cancel_label=messages.BUTTON_DONT_TURN_OFF,
        heading=messages.TITLE_TURN_OFF_MACHINE,
        body_single=messages.MESSAGE_CONFIRMATION_TURN_OFF,
        body_multiple=messages.MESSAGE_CONFIRMATION_TURN_OFF_MULTIPLE,
    ),
    VMAction.SHUT_DOWN: _PromptTexts(
        confirm_label=messages.BUTTON_SHUT_DOWN,
        cancel_label=messages.BUTTON_DONT_SHUT_DOWN,
        heading=messages.TITLE_SHUT_DOWN_MACHINE,
        body_single=messages.MESSAGE_CONFIRMATION_SHUT_DOWN,
        body_multiple=messages.MESSAGE_CONFIRMATION_SHUT_DOWN_MULTIPLE,
    ),
    VMAction.RESET: _PromptTexts(
        confirm_label=messages.BUTTON_RESET,
        cancel_label=messages.BUTTON_DONT_RESET,
        heading=messages.TITLE_RESET_MACHINE,
        body_single=messages.MESSAGE_CONFIRMATION_RESET,
        body_multiple=messages.MESSAGE_CONFIRMATION_RESET_MULTIPLE,
    ),
}


class ConfirmationGate:
    """Decides whether an action must be confirmed, and asks."""

    def requires_confirmation(self, action: VMAction) -> bool:
        return action in _PROMPTS

    def prompt_for(self, action: VMAction, multiple: bool = False) -> Optional[ConfirmationPrompt]:
        """
        Build the dialog texts for an action.

        Args:
            action: The requested action
            multiple: Phrase the body for all virtual machines

        Returns:
            The prompt, or None if the action needs no confirmation
        """
        texts = _PROMPTS.get(action)
        if texts is None:
            return None
        return ConfirmationPrompt(
            confirm_label=texts.confirm_label,
            cancel_label=texts.cancel_label,
            heading=texts.heading,
            body=texts.body_multiple if multiple else texts.body_single,
        )

    def confirm(self, action: VMAction, presenter: DialogPresenter, multiple: bool = False) -> bool:
        """True if the action may go ahead."""
        prompt = self.prompt_for(action, multiple)
        if prompt is None:
            return True
        confirmed = presenter.confirm(prompt)
        if not confirmed:
            logger.info(f"{action.value} declined by user")
        return confirmed
