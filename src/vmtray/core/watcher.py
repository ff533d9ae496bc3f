"""
VM State Watcher

Subscribes to provider change notifications and tells listeners about
the ones the user cares about.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from common.exceptions import SubscriptionError

from .. import messages
from .models import StateChangeEvent
from .provider import Subscription, VMProvider
from .vm_state import WatchAction, parse_state, watch_action

logger = logging.getLogger(__name__)

StateListener = Callable[[StateChangeEvent], None]


class StateWatcher:
    """
    Watches every VM for state changes.

    The watcher is started once by whoever owns the process and stopped on
    exit; it cannot be restarted. Notifications arrive on the provider's
    delivery thread and listeners are called synchronously on that thread,
    so they must guard any state they share with the foreground.
    """

    def __init__(self, provider: VMProvider, unknown_name: str = messages.UNKNOWN_VIRTUAL_MACHINE):
        self._provider = provider
        self._unknown_name = unknown_name
        self._listeners: List[StateListener] = []
        self._lock = threading.Lock()
        self._subscription: Optional[Subscription] = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._subscription is not None

    def add_listener(self, listener: StateListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def start(self) -> None:
        """
        Establish the subscription.

        Raises:
            SubscriptionError: If the provider cannot deliver notifications.
                There is no degraded mode.
        """
        if self._subscription is not None:
            return
        if self._stopped:
            raise SubscriptionError("watcher has been stopped")

        try:
            subscription = self._provider.subscribe(self.handle_notification)
            subscription.start()
        except SubscriptionError:
            raise
        except Exception as e:
            # Provider libraries raise their own error types
            raise SubscriptionError(str(e), cause=e) from e

        self._subscription = subscription
        logger.info("State watcher started")

    def stop(self) -> None:
        self._stopped = True
        if self._subscription is None:
            return
        self._subscription.stop()
        self._subscription = None
        logger.info("State watcher stopped")

    def handle_notification(self, raw_state: int, name: Optional[str]) -> Optional[StateChangeEvent]:
        """
        Filter one provider notification and fan it out.

        Returns:
            The emitted event, or None if the state was noise
        """
        action = watch_action(raw_state)
        vm_name = name or self._unknown_name

        if action is WatchAction.IGNORE:
            logger.debug(f"Ignoring state {raw_state} for {vm_name}")
            return None

        event = StateChangeEvent.from_state(vm_name, parse_state(raw_state))
        if event.critical:
            logger.warning(f"VM {vm_name} entered critical state {event.state.name}")
        else:
            logger.info(f"VM {vm_name} is now {event.state.name}")

        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"State listener error: {e}", exc_info=True)

        return event
