"""
Sound Manager — chime and background-track playback.

Uses pygame.mixer for lightweight audio. All sounds are generated
programmatically (no bundled audio files): the chime is two sine notes, the
background tracks are short seamless loops synthesized with numpy and cached
as WAV files on first use.
"""

from __future__ import annotations

import logging
import wave
from io import BytesIO
from pathlib import Path
from typing import Optional

import numpy as np

from focusforge.data.models import BackgroundMusic

logger = logging.getLogger(__name__)

MUSIC_DIR = Path(__file__).resolve().parent.parent / "assets" / "music"
SAMPLE_RATE = 22050
LOOP_SECONDS = 8

# Whether pygame mixer is available
_mixer_available = False
try:
    import pygame.mixer
    _mixer_available = True
except ImportError:
    logger.warning("pygame not installed; sounds will be disabled.")


class SoundManager:
    """
    Owns the audio device for the lifetime of the app.

    The mixer is opened lazily on the first sound and released by
    shutdown(). Every failure is logged here and never raised, so a missing
    audio device can't interfere with the timer.
    """

    def __init__(self, enabled: bool = True, volume: float = 0.5,
                 music_dir: Optional[Path] = None) -> None:
        self.enabled = enabled
        self.volume = max(0.0, min(volume, 1.0))
        self.music_dir = Path(music_dir) if music_dir else MUSIC_DIR
        self._initialized = False
        self._chime = None
        self._current_track: Optional[str] = None

    @property
    def current_track(self) -> Optional[str]:
        return self._current_track

    # ── Lifecycle ───────────────────────────────────────────────────────────

    def _ensure_mixer(self) -> bool:
        if not self.enabled or not _mixer_available:
            return False
        if self._initialized:
            return True
        try:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1, buffer=512)
            self._chime = pygame.mixer.Sound(buffer=self._pcm(self._render_chime()))
            self._chime.set_volume(self.volume)
            self._initialized = True
            logger.info("Sound manager initialized.")
        except Exception as e:
            logger.warning("Could not init audio: %s", e)
        return self._initialized

    def shutdown(self) -> None:
        """Stop playback and release the audio device."""
        if not self._initialized:
            return
        self.stop_background_track()
        try:
            pygame.mixer.quit()
        except Exception as e:
            logger.warning("Could not close audio: %s", e)
        self._initialized = False
        self._chime = None
        logger.info("Sound manager shut down.")

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled
        if not enabled:
            self.shutdown()

    def set_volume(self, volume: float) -> None:
        self.volume = max(0.0, min(volume, 1.0))
        if self._chime is not None:
            self._chime.set_volume(self.volume)

    # ── Collaborator API ────────────────────────────────────────────────────

    def play_chime(self) -> None:
        if not self._ensure_mixer():
            return
        try:
            self._chime.play()
        except Exception as e:
            logger.warning("Chime failed: %s", e)

    def play_background_track(self, track_id: str, volume: int) -> None:
        """Loop ``track_id`` at ``volume`` (0–100); "none" just stops playback."""
        if track_id == BackgroundMusic.NONE or track_id not in BackgroundMusic.ALL:
            self.stop_background_track()
            return
        if not self._ensure_mixer():
            return
        try:
            path = self._track_path(track_id)
            pygame.mixer.music.load(str(path))
            pygame.mixer.music.set_volume(max(0, min(volume, 100)) / 100)
            pygame.mixer.music.play(loops=-1)
            self._current_track = track_id
            logger.info("Playing %s music at volume %d", track_id, volume)
        except Exception as e:
            self._current_track = None
            logger.warning("Background music failed: %s", e)

    def stop_background_track(self) -> None:
        if self._current_track is None:
            return
        self._current_track = None
        if not self._initialized:
            return
        try:
            pygame.mixer.music.stop()
        except Exception as e:
            logger.warning("Could not stop music: %s", e)

    # ── Track cache ─────────────────────────────────────────────────────────

    def _track_path(self, track_id: str) -> Path:
        path = self.music_dir / f"{track_id}.wav"
        if not path.exists():
            self.music_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                f.write(self.render_track(track_id))
        return path

    # ── Synthesis (numpy) ───────────────────────────────────────────────────

    @staticmethod
    def _pcm(samples: np.ndarray) -> bytes:
        return np.clip(samples, -32767, 32767).astype("<i2").tobytes()

    @classmethod
    def _make_wav(cls, samples: np.ndarray, sample_rate: int = SAMPLE_RATE) -> bytes:
        """Pack float samples into a mono 16-bit WAV byte string."""
        buf = BytesIO()
        with wave.open(buf, "wb") as w:
            w.setnchannels(1)
            w.setsampwidth(2)
            w.setframerate(sample_rate)
            w.writeframes(cls._pcm(samples))
        return buf.getvalue()

    @staticmethod
    def _tone(freq: float, seconds: float, amp: float) -> np.ndarray:
        t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
        return amp * np.sin(2 * np.pi * freq * t)

    @classmethod
    def _render_chime(cls) -> np.ndarray:
        """Two falling notes (E then C), each with an exponential decay."""
        out = np.zeros(int(SAMPLE_RATE * 0.6))
        for i, (freq, dur) in enumerate([(330, 0.3), (262, 0.4)]):
            note = cls._tone(freq, dur, 6500)
            note *= np.exp(-np.arange(len(note)) / (SAMPLE_RATE * dur / 5))
            start = int(SAMPLE_RATE * 0.15 * i)
            end = min(len(out), start + len(note))
            out[start:end] += note[: end - start]
        return out

    @classmethod
    def render_track(cls, track_id: str, seconds: int = LOOP_SECONDS,
                     seed: int = 7) -> bytes:
        """Synthesize one seamless loop for ``track_id`` as WAV bytes."""
        rng = np.random.default_rng(seed)
        n = SAMPLE_RATE * seconds
        t = np.arange(n) / SAMPLE_RATE

        if track_id == BackgroundMusic.RAINFALL:
            # white noise, softened by a moving-average low-pass
            noise = rng.standard_normal(n)
            kernel = np.ones(8) / 8
            samples = 4000 * np.convolve(noise, kernel, mode="same")
        elif track_id == BackgroundMusic.DEEP_FOCUS:
            # brown noise: integrated white noise, re-centred and normalized
            brown = np.cumsum(rng.standard_normal(n))
            brown -= np.linspace(brown[0], brown[-1], n)
            samples = 5000 * brown / (np.abs(brown).max() or 1.0)
        elif track_id == BackgroundMusic.AMBIENT:
            # low drone with a slow swell
            drone = sum(np.sin(2 * np.pi * f * t) for f in (110, 165, 220))
            samples = 2200 * drone * (0.6 + 0.4 * np.sin(2 * np.pi * t / seconds))
        elif track_id == BackgroundMusic.CHILL:
            # slow arpeggio, one note per second
            notes = [262, 330, 392, 494, 392, 330, 294, 330]
            idx = (t.astype(int)) % len(notes)
            freqs = np.array(notes)[idx]
            envelope = np.exp(-(t % 1.0) * 3)
            samples = 5000 * envelope * np.sin(2 * np.pi * freqs * t)
        elif track_id == BackgroundMusic.LOFI:
            # detuned chord with a gentle wobble and a little hiss
            chord = sum(np.sin(2 * np.pi * f * t) for f in (220, 277.2, 329.6, 221.5))
            wobble = 0.7 + 0.3 * np.sin(2 * np.pi * 0.5 * t)
            samples = 1800 * chord * wobble + 300 * rng.standard_normal(n)
        else:
            raise ValueError(f"Unknown track {track_id!r}")

        return cls._make_wav(samples)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Plays the start/stop chime and loops a background track during focus.
#   Everything is synthesized, so there are no copyrighted audio files.
#
# Key design decisions:
#   - The mixer is an owned resource: opened on first use, closed in
#     shutdown(). No module-level "current player" variable.
#   - pygame.mixer.music streams the looping track; the chime is a
#     pygame.mixer.Sound built straight from a numpy buffer.
#   - Graceful degradation: no pygame, no audio device, or a decode error
#     all end in a log line, never an exception.
#
# Interviewer-friendly talking points:
#   1. Seamless loops: brown noise drifts, so the linear trend from first
#      to last sample is subtracted to make the loop point click-free.
#   2. A fixed RNG seed means the cached WAV is identical every time it's
#      regenerated.
