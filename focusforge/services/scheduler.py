"""
Timer Scheduler — the one autonomous source of intents.

While the store says the timer is running, a QTimer fires once per second and
dispatches Tick. When the countdown reaches zero while running, it dispatches
CompleteSession with the configured duration of the mode that just ended.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QTimer

from focusforge.data.models import AppState
from focusforge.engine.intents import CompleteSession, Tick
from focusforge.engine.store import Store, Transition

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_MS = 1000


class TimerScheduler:
    """
    Keeps a QTimer in step with ``state.is_running``.

    Uses QTimer so ticks run on the Qt event loop, the same thread that
    dispatches user intents.
    """

    def __init__(self, store: Store, interval_ms: int = DEFAULT_TICK_INTERVAL_MS) -> None:
        self.store = store
        self.interval_ms = interval_ms
        self._timer = QTimer()
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ── Public API ──────────────────────────────────────────────────────────

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    def attach(self) -> None:
        """Follow the store from now on, starting from its current state."""
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_transition)
        self._sync(self.store.state, rearm=True)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._stop()

    # ── Store / timer callbacks ─────────────────────────────────────────────

    def _on_transition(self, transition: Transition) -> None:
        prev, cur = transition.previous, transition.current
        rearm = (
            cur.is_running and (
                not prev.is_running
                or prev.timer_mode != cur.timer_mode
                or prev.settings != cur.settings
            )
        )
        self._sync(cur, rearm=rearm)

    def _on_timeout(self) -> None:
        if not self.store.state.is_running:
            self._stop()
            return
        self.store.dispatch(Tick())

    def _sync(self, state: AppState, rearm: bool) -> None:
        if not state.is_running:
            self._stop()
            return

        if state.remaining_seconds <= 0:
            self._stop()
            duration = state.settings.duration_for(state.timer_mode)
            logger.info("%s finished (%d min).", state.timer_mode, duration)
            self.store.dispatch(CompleteSession(mode=state.timer_mode, duration=duration))
            return

        if rearm or not self._timer.isActive():
            # QTimer.start() on an active timer restarts it
            self._timer.start()
            logger.debug("Scheduler armed: %s, %ds left.", state.timer_mode, state.remaining_seconds)

    def _stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
            logger.debug("Scheduler stopped.")


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Drives the countdown. It listens to the store and decides whether the
#   1-second QTimer should be running.
#
# Rules:
#   - is_running false -> stop.
#   - just started, mode changed or settings changed while running ->
#     restart the QTimer (against the *current* remaining time; only
#     Reset/SetMode reload the configured duration).
#   - remaining hits 0 while running -> CompleteSession. The reducer
#     auto-starts the next phase, which re-arms the timer on the next
#     transition.
#
# Interviewer-friendly talking points:
#   1. CompleteSession is dispatched from inside a store listener. The
#      store queues it, so intents still run strictly one after another.
#   2. The scheduler never touches state; it only produces intents. That
#      keeps all timing logic testable by calling _on_timeout() directly.
