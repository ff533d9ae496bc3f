"""
Tray menu model.

Builds what the tray menu should contain from one directory query. The
tray renders it; nothing here touches a toolkit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from . import messages
from .core.actions import FleetStates, VMAction, available_actions
from .core.models import VMSnapshot
from .core.vm_state import VMState, is_paused


@dataclass(frozen=True)
class MenuItem:
    """An action entry, or a separator when action is None."""
    action: Optional[VMAction] = None

    @property
    def is_separator(self) -> bool:
        return self.action is None

    @property
    def label(self) -> str:
        return "-" if self.action is None else self.action.label


SEPARATOR = MenuItem()


@dataclass
class VMMenu:
    """Submenu for one VM."""
    name: str
    title: str
    items: List[MenuItem] = field(default_factory=list)


@dataclass
class TrayMenu:
    """The whole menu: one submenu per VM plus the all-VMs group."""
    machines: List[VMMenu] = field(default_factory=list)
    all_machines: Optional[VMMenu] = None


def vm_title(snapshot: VMSnapshot) -> str:
    """Menu title: the name, plus the state unless the VM is off."""
    if snapshot.state is VMState.DISABLED:
        return snapshot.name
    return f"{snapshot.name} [{snapshot.label}]"


def build_vm_menu(snapshot: VMSnapshot) -> VMMenu:
    actions = available_actions(snapshot.state)
    items = [MenuItem(a) for a in actions]

    # Pause/resume and reset sit below a separator
    if len(actions) > 1:
        split = actions.index(VMAction.RESUME if is_paused(snapshot.state) else VMAction.PAUSE)
        items.insert(split, SEPARATOR)

    return VMMenu(name=snapshot.name, title=vm_title(snapshot), items=items)


def build_fleet_menu(snapshots: Sequence[VMSnapshot]) -> VMMenu:
    fleet = FleetStates(s.state for s in snapshots)
    items: List[MenuItem] = []

    for action in (VMAction.START, VMAction.TURN_OFF, VMAction.SHUT_DOWN, VMAction.SAVE):
        if fleet.can(action):
            items.append(MenuItem(action))

    if items and (fleet.any_running or fleet.any_paused):
        items.append(SEPARATOR)

    for action in (VMAction.RESUME, VMAction.PAUSE, VMAction.RESET):
        if fleet.can(action):
            items.append(MenuItem(action))

    return VMMenu(name="", title=messages.MENU_ALL_VIRTUAL_MACHINES, items=items)


def build_menu(snapshots: Sequence[VMSnapshot]) -> TrayMenu:
    """Build the menu model for the given directory query result."""
    menu = TrayMenu(machines=[build_vm_menu(s) for s in snapshots])
    if snapshots:
        menu.all_machines = build_fleet_menu(snapshots)
    return menu
