"""
Transition Effects — chimes, toasts and background music driven by the store.

The reducer never plays a sound. This listener compares the previous and
current snapshot of every transition and calls the collaborators:
  - chime on every start/pause
  - chime + toast whenever the timer mode changes
  - background track playing exactly while focusing and running
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from focusforge.data.models import AppState, BackgroundMusic, Severity, TimerMode
from focusforge.engine.intents import ToggleTimer
from focusforge.engine.store import Store, Transition

logger = logging.getLogger(__name__)

FOCUS_TOAST = "🎯 Focus Session Starts!"
BREAK_TOAST = "☕ Take a Break"


def _wants_music(state: AppState) -> bool:
    return (
        state.is_running
        and state.timer_mode == TimerMode.FOCUS
        and state.settings.background_music != BackgroundMusic.NONE
    )


class TransitionEffects:
    """Store listener that turns state changes into sounds and notifications."""

    def __init__(
        self,
        store: Store,
        play_chime: Callable[[], None],
        show_toast: Callable[[str, str], None],
        play_background_track: Callable[[str, int], None],
        stop_background_track: Callable[[], None],
    ) -> None:
        self.store = store
        self.play_chime = play_chime
        self.show_toast = show_toast
        self.play_background_track = play_background_track
        self.stop_background_track = stop_background_track
        self._unsubscribe: Optional[Callable[[], None]] = None
        # (track, volume) currently requested from the audio layer
        self._playing: Optional[tuple] = None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self.on_transition)
        self._sync_music(self.store.state)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._stop_music()

    # ── Listener ────────────────────────────────────────────────────────────

    def on_transition(self, transition: Transition) -> None:
        if isinstance(transition.intent, ToggleTimer):
            self.play_chime()

        if transition.mode_changed:
            self.play_chime()
            if transition.current.timer_mode == TimerMode.FOCUS:
                self.show_toast(FOCUS_TOAST, Severity.SUCCESS)
            else:
                self.show_toast(BREAK_TOAST, Severity.INFO)

        self._sync_music(transition.current)

    # ── Music ───────────────────────────────────────────────────────────────

    def _sync_music(self, state: AppState) -> None:
        if not _wants_music(state):
            self._stop_music()
            return

        wanted = (state.settings.background_music, state.settings.music_volume)
        if wanted != self._playing:
            logger.debug("Background music -> %s @ %d", *wanted)
            self.play_background_track(*wanted)
            self._playing = wanted

    def _stop_music(self) -> None:
        if self._playing is not None:
            self.stop_background_track()
            self._playing = None


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Side effects as a subscription. The reducer stays pure; this class
#   watches transitions and talks to the sound manager and the window.
#
# Key design decisions:
#   - Collaborators are plain callables, so the tests pass in lists'
#     append methods instead of a real audio device.
#   - Music state is edge-triggered: the track is only (re)started when the
#     wanted (track, volume) pair differs from what is already playing.
