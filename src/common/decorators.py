"""
Error Handling Decorators

Decorators used at the boundaries where failures become return values.
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Type, Callable, Any, Optional

from .exceptions import VMTrayError

logger = logging.getLogger(__name__)


def handle_errors(
    *exception_types: Type[Exception],
    default: Any = None,
    message: Optional[str] = None,
):
    """
    Return a default value instead of raising.

    vmtray errors are expected outcomes (a VM went missing, the provider
    refused) and are logged without a traceback. Anything else is logged
    with one.

    Args:
        exception_types: Exception types to catch (default: Exception)
        default: Value to return on error
        message: Log prefix (default: "<function> failed")

    Example:
        @handle_errors(default=False, message="State change request failed")
        def request_transition(self, name, state):
            ...
    """
    caught = exception_types or (Exception,)

    def decorator(func: Callable) -> Callable:
        prefix = message or f"{func.__name__} failed"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except caught as e:
                logger.error(f"{prefix}: {e}", exc_info=not isinstance(e, VMTrayError))
                return default
        return wrapper
    return decorator


def timed(func: Callable) -> Callable:
    """Log how long a call took at DEBUG."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            logger.debug(f"{func.__name__} completed in {time.perf_counter() - start:.3f}s")
    return wrapper
