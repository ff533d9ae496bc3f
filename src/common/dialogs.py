"""
Dialog presenters for vmtray.

A presenter asks the user to confirm a destructive action and reports
errors. The console presenter serves the command line; the GTK4/Adwaita
presenter shows modal message dialogs.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import Optional, TextIO

try:
    import gi
    gi.require_version('Gtk', '4.0')
    gi.require_version('Adw', '1')
    from gi.repository import Gtk, Adw, GLib
    GTK_AVAILABLE = True
except (ImportError, ValueError):
    GTK_AVAILABLE = False
    Gtk = None
    Adw = None
    GLib = None

logger = logging.getLogger(__name__)

CONFIRM_RESPONSE = "confirm"
CANCEL_RESPONSE = "cancel"


class DialogPresenter(ABC):
    """Presents confirmations and errors to the user."""

    @abstractmethod
    def confirm(self, prompt) -> bool:
        """
        Ask the user to confirm.

        Args:
            prompt: Object with heading, body, confirm_label and cancel_label

        Returns:
            True only if the user chose the confirm action
        """
        pass

    @abstractmethod
    def show_error(self, heading: str, text: str = "") -> None:
        """Show an error to the user."""
        pass


class ConsolePresenter(DialogPresenter):
    """Presenter for terminal use."""

    def __init__(
        self,
        assume_yes: bool = False,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.assume_yes = assume_yes
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr

    def confirm(self, prompt) -> bool:
        if self.assume_yes:
            return True

        print(prompt.heading, file=self._stdout)
        print(prompt.body, file=self._stdout)
        print(
            f"[y] {prompt.confirm_label}  [N] {prompt.cancel_label}: ",
            end="",
            file=self._stdout,
            flush=True,
        )
        answer = self._stdin.readline()
        # Cancel is the default response
        return answer.strip().lower() in ("y", "yes")

    def show_error(self, heading: str, text: str = "") -> None:
        print(f"ERROR: {heading}", file=self._stderr)
        if text:
            print(text, file=self._stderr)


class GtkPresenter(DialogPresenter):
    """
    Adwaita message dialogs, run modally.

    Each call spins a nested GLib main loop until the dialog is answered,
    so callers get a synchronous result.
    """

    def __init__(self, parent=None, application_name: str = "VM Tray"):
        if not GTK_AVAILABLE:
            raise RuntimeError(
                "GTK4/libadwaita is not available. "
                "Install PyGObject with GTK 4 and libadwaita."
            )
        Adw.init()
        self._parent = parent
        self._application_name = application_name

    def _run(self, dialog) -> str:
        loop = GLib.MainLoop()
        result = {"response": CANCEL_RESPONSE}

        def on_response(_dialog, response):
            result["response"] = response
            loop.quit()

        dialog.connect("response", on_response)
        dialog.present()
        loop.run()
        return result["response"]

    def confirm(self, prompt) -> bool:
        dialog = Adw.MessageDialog(
            transient_for=self._parent,
            heading=prompt.heading,
            body=prompt.body,
        )
        dialog.set_title(self._application_name)
        dialog.add_response(CANCEL_RESPONSE, prompt.cancel_label)
        dialog.add_response(CONFIRM_RESPONSE, prompt.confirm_label)
        dialog.set_response_appearance(CONFIRM_RESPONSE, Adw.ResponseAppearance.DESTRUCTIVE)
        dialog.set_default_response(CANCEL_RESPONSE)
        dialog.set_close_response(CANCEL_RESPONSE)

        return self._run(dialog) == CONFIRM_RESPONSE

    def show_error(self, heading: str, text: str = "") -> None:
        dialog = Adw.MessageDialog(
            transient_for=self._parent,
            heading=heading,
            body=text,
        )
        dialog.set_title(self._application_name)
        dialog.add_response("close", "Close")
        dialog.set_default_response("close")
        dialog.set_close_response("close")

        self._run(dialog)


def create_presenter(kind: str, assume_yes: bool = False, application_name: str = "VM Tray") -> DialogPresenter:
    """
    Build a presenter by name.

    Args:
        kind: "console" or "gtk"
        assume_yes: Console only, accept every confirmation
        application_name: Window title for GTK dialogs

    Raises:
        ValueError: For an unknown kind
    """
    if kind == "console":
        return ConsolePresenter(assume_yes=assume_yes)
    if kind == "gtk":
        logger.debug("Using GTK dialogs")
        return GtkPresenter(application_name=application_name)
    raise ValueError(f"Unknown dialog presenter: {kind}")
