"""
vmtray Common Utilities

Errors, logging, decorators and dialogs shared by vmtray.
"""

from .dialogs import (
    DialogPresenter, ConsolePresenter, GtkPresenter, create_presenter,
)
from .exceptions import (
    VMTrayError, VMError, VMNotFoundError, UnsupportedTransitionError,
    ProviderRejectedError, CapabilityMissingError, ConnectionError,
    ProviderConnectionError, SubscriptionError, ConfigError, InvalidConfigError,
)
from .decorators import handle_errors, timed
from .logging_config import setup_logging, LogContext

__all__ = [
    # Dialogs
    "DialogPresenter", "ConsolePresenter", "GtkPresenter", "create_presenter",
    # Exceptions
    "VMTrayError", "VMError", "VMNotFoundError", "UnsupportedTransitionError",
    "ProviderRejectedError", "CapabilityMissingError", "ConnectionError",
    "ProviderConnectionError", "SubscriptionError", "ConfigError", "InvalidConfigError",
    # Decorators
    "handle_errors", "timed",
    # Logging
    "setup_logging", "LogContext",
]
