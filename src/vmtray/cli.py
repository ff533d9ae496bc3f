#!/usr/bin/env python3
"""
vmtray CLI

Command-line interface for listing, watching and controlling VMs.
"""

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import Optional, Sequence, Tuple

from common.dialogs import create_presenter
from common.exceptions import ConfigError, ConnectionError, SubscriptionError, VMTrayError
from common.logging_config import setup_logging

from . import __version__
from .config import DIALOG_KINDS, TrayConfig, load_config
from .core.actions import VMAction
from .core.connection import LibvirtConnection, libvirt_errors
from .core.libvirt_provider import LibvirtProvider
from .core.models import StateChangeEvent
from .core.service import VMTrayService
from .menu import VMMenu, build_menu
from .notifications import build_notification

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_FATAL = 2

# Command name -> action
COMMAND_ACTIONS = {
    "start": VMAction.START,
    "turn-off": VMAction.TURN_OFF,
    "shut-down": VMAction.SHUT_DOWN,
    "save": VMAction.SAVE,
    "pause": VMAction.PAUSE,
    "resume": VMAction.RESUME,
    "reset": VMAction.RESET,
}


def open_provider(uri: str) -> Tuple[LibvirtConnection, LibvirtProvider]:
    """Connect to libvirt and wrap the connection in a provider."""
    connection = LibvirtConnection(uri)
    connection.connect()
    return connection, LibvirtProvider(connection)


def wait_for_interrupt() -> None:
    """Block until Ctrl+C."""
    stop = threading.Event()
    try:
        while not stop.wait(1.0):
            pass
    except KeyboardInterrupt:
        print()


def print_menu(menu: VMMenu, indent: str = "") -> None:
    print(f"{indent}{menu.title}")
    for item in menu.items:
        print(f"{indent}  {item.label}")


def cmd_list(args, service: VMTrayService) -> int:
    """List VMs with their state."""
    machines = service.get_virtual_machines(args.name)

    if not machines:
        if args.name:
            print(f"No virtual machine named '{args.name}'")
            return EXIT_FAILURE
        print("No virtual machines found.")
        return EXIT_OK

    width = max(len(vm.name) for vm in machines)
    for vm in machines:
        print(f"  {vm.name:{width}s}  {vm.label}")

    return EXIT_OK


def cmd_menu(args, service: VMTrayService) -> int:
    """Print the tray menu as it would be shown."""
    menu = build_menu(service.get_virtual_machines())

    if not menu.machines:
        print("No virtual machines found.")
        return EXIT_OK

    for vm_menu in menu.machines:
        print_menu(vm_menu)
    if menu.all_machines:
        print_menu(menu.all_machines)

    return EXIT_OK


def cmd_control(args, service: VMTrayService) -> int:
    """Apply an action to one VM or to all of them."""
    action = COMMAND_ACTIONS[args.command]

    if args.all:
        result = service.control_all_virtual_machines(action)
        if not result.confirmed:
            print("Cancelled.")
            return EXIT_OK
        if not result.attempted:
            print("No virtual machines found.")
            return EXIT_OK
        done = len(result.attempted) - len(result.failed)
        print(f"{action.label}: {done} of {len(result.attempted)} succeeded")
        return EXIT_FAILURE if result.any_failed else EXIT_OK

    # Ask here so a declined prompt is not reported as a failure
    if not service.gate.confirm(action, args.presenter):
        print("Cancelled.")
        return EXIT_OK

    if service.control_virtual_machine(args.name, action, prompt_to_confirm=False):
        print(f"{action.label}: {args.name}")
        return EXIT_OK

    return EXIT_FAILURE


def on_state_change(event: StateChangeEvent) -> None:
    """Print a notification for a state change."""
    print(build_notification(event).as_text(), flush=True)
    print(flush=True)


def cmd_watch(args, service: VMTrayService) -> int:
    """Print state change notifications until interrupted."""
    service.add_state_listener(on_state_change)
    service.start()
    print("Watching for state changes (Ctrl+C to stop)...", flush=True)

    try:
        wait_for_interrupt()
    finally:
        service.stop()
        service.remove_state_listener(on_state_change)

    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vmtray",
        description="Watch and control local virtual machines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vmtray list                      # List VMs and their state
  vmtray menu                      # Show the tray menu
  vmtray start win11               # Start one VM
  vmtray turn-off --all --yes      # Turn off every VM without asking
  vmtray watch                     # Print state changes as they happen
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--uri", help="libvirt connection URI")
    parser.add_argument("--config", type=Path, help="Config file path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--log-file", type=Path, help="Also log to this file")
    parser.add_argument("--json-logs", action="store_true", default=None,
                        help="Log as JSON lines")
    parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")
    parser.add_argument("--dialogs", choices=DIALOG_KINDS, help="How to ask and report errors")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # list command
    list_parser = subparsers.add_parser("list", help="List virtual machines")
    list_parser.add_argument("name", nargs="?", help="Only this VM")
    list_parser.set_defaults(func=cmd_list)

    # menu command
    menu_parser = subparsers.add_parser("menu", help="Print the tray menu")
    menu_parser.set_defaults(func=cmd_menu)

    # action commands
    for command, action in COMMAND_ACTIONS.items():
        action_parser = subparsers.add_parser(command, help=action.label)
        target = action_parser.add_mutually_exclusive_group(required=True)
        target.add_argument("name", nargs="?", help="Virtual machine name")
        target.add_argument("-a", "--all", action="store_true", help="All virtual machines")
        action_parser.set_defaults(func=cmd_control)

    # watch command
    watch_parser = subparsers.add_parser("watch", help="Print state changes")
    watch_parser.set_defaults(func=cmd_watch)

    return parser


def resolve_config(args) -> TrayConfig:
    """File and environment settings with command line flags on top."""
    config = load_config(args.config)
    return config.with_overrides(
        uri=args.uri,
        dialogs=args.dialogs,
        json_logs=args.json_logs,
        log_level="DEBUG" if args.verbose else None,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_FAILURE

    try:
        config = resolve_config(args)
        config.validate()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FATAL

    setup_logging(
        level=config.log_level,
        log_file=args.log_file,
        json_logs=config.json_logs,
        log_dir=Path(config.log_dir) if config.log_dir else None,
    )

    try:
        args.presenter = create_presenter(
            config.dialogs,
            assume_yes=args.yes,
            application_name=config.application_name,
        )
    except RuntimeError as e:
        print(f"Cannot show dialogs: {e}", file=sys.stderr)
        return EXIT_FATAL

    try:
        connection, provider = open_provider(config.uri)
    except (ConnectionError, RuntimeError) as e:
        print(f"Connection failed: {e}", file=sys.stderr)
        return EXIT_FATAL

    service = VMTrayService(provider, args.presenter, config.application_name)

    try:
        return args.func(args, service)
    except SubscriptionError as e:
        logger.error(f"Cannot watch for state changes: {e}")
        print(f"Subscription failed: {e}", file=sys.stderr)
        return EXIT_FATAL
    except (VMTrayError,) + libvirt_errors() as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        connection.disconnect()


if __name__ == "__main__":
    sys.exit(main())
