"""
Store — owns the single AppState and funnels every change through reduce().

Listeners subscribe to transitions and receive (previous, current, intent).
Dispatching from inside a listener is allowed: the intent is queued and runs
after the current one finishes, so intents are always processed one at a
time and in order.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional

from focusforge.data.models import AppState, default_state
from focusforge.engine.intents import Intent
from focusforge.engine.reducer import reduce

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    previous: AppState
    current: AppState
    intent: Intent

    @property
    def changed(self) -> bool:
        return self.previous is not self.current

    @property
    def mode_changed(self) -> bool:
        return self.previous.timer_mode != self.current.timer_mode


Listener = Callable[[Transition], None]


class Store:
    """Single-threaded state container with transition notifications."""

    def __init__(self, initial: Optional[AppState] = None) -> None:
        self._state = initial if initial is not None else default_state()
        self._listeners: List[Listener] = []
        self._queue: Deque[Intent] = deque()
        self._dispatching = False

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, intent: Intent) -> AppState:
        """Apply an intent (after any already queued) and notify listeners."""
        self._queue.append(intent)
        if self._dispatching:
            return self._state

        self._dispatching = True
        try:
            while self._queue:
                self._apply(self._queue.popleft())
        finally:
            self._dispatching = False
        return self._state

    def _apply(self, intent: Intent) -> None:
        previous = self._state
        self._state = reduce(previous, intent)
        transition = Transition(previous, self._state, intent)
        logger.debug("%s applied", intent.tag)

        for listener in list(self._listeners):
            try:
                listener(transition)
            except Exception:
                # A failing side effect must not block the transition or the
                # listeners after it.
                logger.exception("Listener %r failed on %s", listener, intent.tag)
