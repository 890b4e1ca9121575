"""
Settings Panel — timer durations and background music.

Raw widget values go through clamp_settings() before an UpdateSettings
intent is dispatched, so the store only ever sees in-range settings.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QCheckBox, QComboBox, QFormLayout, QGroupBox, QHBoxLayout, QLabel,
    QPushButton, QSlider, QSpinBox, QVBoxLayout, QWidget,
)

from focusforge.audio.sound_manager import SoundManager
from focusforge.data.models import (
    FOCUS_RANGE, LONG_BREAK_RANGE, SHORT_BREAK_RANGE, VOLUME_RANGE,
    AppState, BackgroundMusic, TimerSettings, clamp_settings,
)
from focusforge.engine.intents import UpdateSettings
from focusforge.engine.store import Store

logger = logging.getLogger(__name__)


def _spin(value_range) -> QSpinBox:
    spin = QSpinBox()
    spin.setRange(*value_range)
    spin.setSuffix(" min")
    return spin


class SettingsWidget(QWidget):
    """Settings panel for the app."""

    def __init__(self, store: Store, sound: Optional[SoundManager] = None,
                 parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.store = store
        self.sound = sound
        self._settings: Optional[TimerSettings] = None
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(12)

        title = QLabel("Settings")
        title.setObjectName("title")
        layout.addWidget(title)

        # ── Timer ───────────────────────────────────────────────────
        timer_group = QGroupBox("Timer")
        tf = QFormLayout(timer_group)
        self.focus_spin = _spin(FOCUS_RANGE)
        self.short_spin = _spin(SHORT_BREAK_RANGE)
        self.long_spin = _spin(LONG_BREAK_RANGE)
        tf.addRow("Focus", self.focus_spin)
        tf.addRow("Short break", self.short_spin)
        tf.addRow("Long break", self.long_spin)
        layout.addWidget(timer_group)

        # ── Sound ───────────────────────────────────────────────────
        sound_group = QGroupBox("Sound")
        sf = QFormLayout(sound_group)
        self.music_combo = QComboBox()
        for track in BackgroundMusic.ALL:
            self.music_combo.addItem(BackgroundMusic.LABELS[track], track)
        sf.addRow("Background music", self.music_combo)

        vol_row = QHBoxLayout()
        self.volume_slider = QSlider(Qt.Orientation.Horizontal)
        self.volume_slider.setRange(*VOLUME_RANGE)
        self.volume_slider.valueChanged.connect(self._on_volume_moved)
        vol_row.addWidget(self.volume_slider)
        self.vol_label = QLabel("50%")
        self.vol_label.setMinimumWidth(40)
        vol_row.addWidget(self.vol_label)
        sf.addRow("Music volume", vol_row)

        self.chime_check = QCheckBox("Play a chime on start, pause and phase change")
        self.chime_check.setChecked(self.sound.enabled if self.sound else False)
        self.chime_check.setEnabled(self.sound is not None)
        self.chime_check.toggled.connect(self._on_sound_toggled)
        sf.addRow(self.chime_check)
        layout.addWidget(sound_group)

        buttons = QHBoxLayout()
        buttons.addStretch()
        btn_revert = QPushButton("Revert")
        btn_revert.clicked.connect(self._on_revert)
        buttons.addWidget(btn_revert)
        btn_save = QPushButton("Save Settings")
        btn_save.setObjectName("primary")
        btn_save.clicked.connect(self._on_save)
        buttons.addWidget(btn_save)
        layout.addLayout(buttons)
        layout.addStretch()

    # ── Rendering ───────────────────────────────────────────────────────────

    def render(self, state: AppState) -> None:
        # only overwrite the form when the stored settings actually changed
        if state.settings != self._settings:
            self._settings = state.settings
            self._load(state.settings)

    def _load(self, settings: TimerSettings) -> None:
        self.focus_spin.setValue(settings.focus_duration)
        self.short_spin.setValue(settings.short_break_duration)
        self.long_spin.setValue(settings.long_break_duration)
        self.music_combo.setCurrentIndex(max(0, self.music_combo.findData(settings.background_music)))
        self.volume_slider.setValue(settings.music_volume)

    def current_settings(self) -> TimerSettings:
        return clamp_settings(
            self.focus_spin.value(),
            self.short_spin.value(),
            self.long_spin.value(),
            self.music_combo.currentData(),
            self.volume_slider.value(),
        )

    # ── Slots ───────────────────────────────────────────────────────────────

    @Slot()
    def _on_save(self) -> None:
        settings = self.current_settings()
        logger.info("Settings saved: %s", settings)
        self.store.dispatch(UpdateSettings(settings))

    @Slot()
    def _on_revert(self) -> None:
        self._load(self.store.state.settings)

    @Slot(int)
    def _on_volume_moved(self, value: int) -> None:
        self.vol_label.setText(f"{value}%")

    @Slot(bool)
    def _on_sound_toggled(self, enabled: bool) -> None:
        if self.sound is not None:
            self.sound.set_enabled(enabled)
