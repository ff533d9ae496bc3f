"""
Notification content for state change events.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import messages
from .core.models import StateChangeEvent
from .core.vm_state import state_label


@dataclass(frozen=True)
class Notification:
    title: str
    body: str
    heading: Optional[str] = None
    urgent: bool = False

    def as_text(self) -> str:
        lines = [self.title]
        if self.heading:
            lines.append(self.heading)
        lines.append(self.body)
        return "\n".join(lines)


def build_notification(event: StateChangeEvent) -> Notification:
    """Title is the VM name, body its new state; critical events are urgent."""
    return Notification(
        title=event.name,
        body=state_label(event.state),
        heading=messages.TOAST_CRITICAL_STATE if event.critical else None,
        urgent=event.critical,
    )
