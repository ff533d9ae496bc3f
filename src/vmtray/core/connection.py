"""
LibVirt Connection Manager

Owns the libvirt connection and the event loop thread that delivers
domain events.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Callable, List

try:
    import libvirt
    LIBVIRT_AVAILABLE = True
except ImportError:
    LIBVIRT_AVAILABLE = False
    libvirt = None

from common.exceptions import ProviderConnectionError

logger = logging.getLogger(__name__)

# libvirt requires the default event implementation to be registered
# once per process, before the connection is opened.
_event_impl_lock = threading.Lock()
_event_impl_registered = False


def _register_event_impl() -> None:
    global _event_impl_registered
    with _event_impl_lock:
        if not _event_impl_registered:
            libvirt.virEventRegisterDefaultImpl()
            _event_impl_registered = True


def libvirt_errors() -> tuple:
    """Exception types raised by the libvirt binding, empty without it."""
    return (libvirt.libvirtError,) if LIBVIRT_AVAILABLE else ()


class LibvirtConnection:
    """
    Thread-safe libvirt connection manager.

    Provides:
    - Lazy connection
    - Domain event registration
    - A daemon thread pumping the libvirt event loop
    """

    SYSTEM_URI = "qemu:///system"
    SESSION_URI = "qemu:///session"

    def __init__(self, uri: str = SYSTEM_URI):
        if not LIBVIRT_AVAILABLE:
            raise RuntimeError(
                "libvirt-python is not installed. "
                "Install with: pip install libvirt-python"
            )
        self._uri = uri
        self._conn: Optional[libvirt.virConnect] = None
        self._lock = threading.RLock()
        self._event_loop_running = False
        self._event_thread: Optional[threading.Thread] = None
        self._callback_ids: List[int] = []

    @property
    def uri(self) -> str:
        """Get the connection URI."""
        return self._uri

    @property
    def is_connected(self) -> bool:
        """Check if connected to libvirt."""
        with self._lock:
            if self._conn is None:
                return False
            try:
                return bool(self._conn.isAlive())
            except libvirt.libvirtError:
                return False

    def connect(self) -> libvirt.virConnect:
        """
        Establish the connection if needed and return it.

        Raises:
            ProviderConnectionError: If connection fails
        """
        with self._lock:
            if self.is_connected:
                return self._conn

            try:
                _register_event_impl()
                libvirt.registerErrorHandler(self._error_handler, None)

                self._conn = libvirt.open(self._uri)
                if self._conn is None:
                    raise ProviderConnectionError(self._uri)
            except libvirt.libvirtError as e:
                self._conn = None
                raise ProviderConnectionError(self._uri, cause=e) from e

            logger.info(f"Connected to libvirt: {self._uri}")
            return self._conn

    def disconnect(self) -> None:
        """Deregister events, stop the event loop and close the connection."""
        with self._lock:
            self._event_loop_running = False
            if self._conn is None:
                return
            for callback_id in self._callback_ids:
                try:
                    self._conn.domainEventDeregisterAny(callback_id)
                except libvirt.libvirtError as e:
                    logger.debug(f"Could not deregister event {callback_id}: {e}")
            self._callback_ids.clear()
            try:
                self._conn.close()
            except libvirt.libvirtError as e:
                logger.warning(f"Error closing libvirt connection: {e}")
            self._conn = None
            logger.info("Disconnected from libvirt")

    def _error_handler(self, ctx, error):
        """Keep libvirt from printing errors to stderr; we log them instead."""
        logger.debug(f"LibVirt: {error}")

    def _start_event_loop(self) -> None:
        if self._event_loop_running:
            return

        def event_loop():
            while self._event_loop_running:
                if libvirt.virEventRunDefaultImpl() < 0:
                    logger.error("libvirt event loop failed")
                    break

        self._event_loop_running = True
        self._event_thread = threading.Thread(
            target=event_loop, name="libvirt-events", daemon=True,
        )
        self._event_thread.start()

    def register_domain_event(self, event_id: int, callback: Callable) -> int:
        """
        Register a callback for a domain event on every domain.

        Args:
            event_id: libvirt VIR_DOMAIN_EVENT_ID_* constant
            callback: libvirt callback for that event id

        Returns:
            Callback ID for later removal
        """
        with self._lock:
            conn = self.connect()
            self._start_event_loop()
            callback_id = conn.domainEventRegisterAny(None, event_id, callback, None)
            self._callback_ids.append(callback_id)
            return callback_id

    def deregister_domain_event(self, callback_id: int) -> None:
        with self._lock:
            if callback_id not in self._callback_ids:
                return
            self._callback_ids.remove(callback_id)
            if self._conn is not None:
                self._conn.domainEventDeregisterAny(callback_id)
