"""
Main Window — the central hub of FocusForge.

Contains:
  - Header strip (streak, tasks left, today's focus, level, theme toggle)
  - Tabs: Focus, Notes, Weekly Review, Analytics, Settings
  - System tray icon used for toast notifications

The window subscribes to the store once and redraws every tab from the new
snapshot; tabs skip work when their slice of the state hasn't changed.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QApplication, QFrame, QHBoxLayout, QLabel, QMainWindow, QMenu, QPushButton,
    QStyle, QSystemTrayIcon, QTabWidget, QVBoxLayout, QWidget,
)

from focusforge.audio.sound_manager import SoundManager
from focusforge.data.models import AppState, Severity, Theme
from focusforge.engine.intents import ToggleTheme, ToggleTimer
from focusforge.engine.store import Store, Transition
from focusforge.engine.timeutils import format_minutes, format_time, now_ms
from focusforge.services.analytics import pending_task_count
from focusforge.ui.dashboard_widget import DashboardWidget
from focusforge.ui.focus_widget import FocusWidget
from focusforge.ui.notes_widget import NotesWidget
from focusforge.ui.review_widget import ReviewWidget
from focusforge.ui.settings_widget import SettingsWidget
from focusforge.ui.styles import stylesheet_for

logger = logging.getLogger(__name__)

_TRAY_ICONS = {
    Severity.INFO: QSystemTrayIcon.MessageIcon.Information,
    Severity.SUCCESS: QSystemTrayIcon.MessageIcon.Information,
    Severity.WARNING: QSystemTrayIcon.MessageIcon.Warning,
}


def header_texts(state: AppState) -> dict:
    """Text for each header stat, keyed by label name."""
    stats = state.stats
    return {
        "streak": f"🔥 {stats.streak_days} day streak",
        "tasks": f"✅ {pending_task_count(state.tasks)} tasks left",
        "today": f"⏱ {format_minutes(stats.total_focus_minutes_today)} today",
        "level": f"🏆 {stats.current_level}",
    }


class MainWindow(QMainWindow):
    """The main application window."""

    def __init__(
        self,
        store: Store,
        sound: Optional[SoundManager] = None,
        toast_duration_ms: int = 3000,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        super().__init__()
        self.setWindowTitle("FocusForge")
        self.setMinimumSize(900, 650)
        self.resize(1080, 760)

        self.store = store
        self.sound = sound
        self.toast_duration_ms = toast_duration_ms
        self._applied_theme: Optional[str] = None

        self._build_ui(clock)
        self._setup_tray()

        self._unsubscribe = self.store.subscribe(self._on_transition)
        self._render(self.store.state)

    # ── UI Construction ─────────────────────────────────────────────────────

    def _build_ui(self, clock: Callable[[], int]) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setSpacing(0)
        main_layout.setContentsMargins(0, 0, 0, 0)

        main_layout.addWidget(self._build_header())

        self.tabs = QTabWidget()
        main_layout.addWidget(self.tabs)

        self.focus_tab = FocusWidget(self.store)
        self.notes_tab = NotesWidget(self.store)
        self.review_tab = ReviewWidget(self.store, clock=clock)
        self.dashboard = DashboardWidget(self.store, clock=clock)
        self.settings_widget = SettingsWidget(self.store, self.sound)

        self.tabs.addTab(self.focus_tab, "Focus")
        self.tabs.addTab(self.notes_tab, "Notes")
        self.tabs.addTab(self.review_tab, "Weekly Review")
        self.tabs.addTab(self.dashboard, "Analytics")
        self.tabs.addTab(self.settings_widget, "Settings")

        # Analytics depends on "now", so refresh it whenever it's opened
        self.tabs.currentChanged.connect(self._on_tab_changed)

        self.statusBar().showMessage("Ready")

    def _build_header(self) -> QFrame:
        header = QFrame()
        header.setObjectName("header")
        header.setFixedHeight(52)
        hl = QHBoxLayout(header)
        hl.setContentsMargins(20, 0, 20, 0)

        brand = QLabel("FocusForge")
        brand.setObjectName("title")
        hl.addWidget(brand)
        hl.addStretch()

        self.header_labels = {}
        for key in ("streak", "tasks", "today", "level"):
            label = QLabel("")
            label.setObjectName("header_stat")
            self.header_labels[key] = label
            hl.addWidget(label)

        self.btn_theme = QPushButton("")
        self.btn_theme.setToolTip("Switch between light and dark mode")
        self.btn_theme.clicked.connect(lambda: self.store.dispatch(ToggleTheme()))
        hl.addWidget(self.btn_theme)
        return header

    def _setup_tray(self) -> None:
        """System tray icon for notifications and quick controls."""
        self.tray = QSystemTrayIcon(self)
        self.tray.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_MediaPlay))
        self.tray.setToolTip("FocusForge")

        tray_menu = QMenu(self)
        show_action = tray_menu.addAction("Show")
        show_action.triggered.connect(self._show_window)
        toggle_action = tray_menu.addAction("Start / Pause")
        toggle_action.triggered.connect(lambda: self.store.dispatch(ToggleTimer()))
        tray_menu.addSeparator()
        quit_action = tray_menu.addAction("Quit")
        quit_action.triggered.connect(QApplication.quit)
        self.tray.setContextMenu(tray_menu)
        self.tray.activated.connect(self._on_tray_activated)

        if QSystemTrayIcon.isSystemTrayAvailable():
            self.tray.show()

    # ── Store wiring ────────────────────────────────────────────────────────

    def _on_transition(self, transition: Transition) -> None:
        if transition.changed:
            self._render(transition.current)

    def _render(self, state: AppState) -> None:
        for key, text in header_texts(state).items():
            self.header_labels[key].setText(text)
        self.btn_theme.setText("☀️ Light" if state.theme == Theme.DARK else "🌙 Dark")
        self._apply_theme(state.theme)

        self.focus_tab.render(state)
        self.notes_tab.render(state)
        self.review_tab.render(state)
        self.settings_widget.render(state)
        if self.tabs.currentWidget() is self.dashboard:
            self.dashboard.render(state)

        self.setWindowTitle(self._title(state))

    @staticmethod
    def _title(state: AppState) -> str:
        if state.is_running:
            return f"{format_time(state.remaining_seconds)} · FocusForge"
        return "FocusForge"

    def _apply_theme(self, theme: str) -> None:
        if theme == self._applied_theme:
            return
        app = QApplication.instance()
        if app is not None:
            app.setStyleSheet(stylesheet_for(theme))
        self._applied_theme = theme
        logger.info("Theme set to %s", theme)

    # ── Toasts ──────────────────────────────────────────────────────────────

    def show_toast(self, message: str, severity: str = Severity.INFO) -> None:
        """Notify via the tray balloon when possible, the status bar otherwise."""
        if self.tray.isVisible() and QSystemTrayIcon.supportsMessages():
            self.tray.showMessage(
                "FocusForge", message,
                _TRAY_ICONS.get(severity, QSystemTrayIcon.MessageIcon.Information),
                self.toast_duration_ms,
            )
        self.statusBar().showMessage(message, self.toast_duration_ms)
        logger.info("Toast (%s): %s", severity, message)

    # ── Slots ───────────────────────────────────────────────────────────────

    @Slot(int)
    def _on_tab_changed(self, index: int) -> None:
        if self.tabs.widget(index) is self.dashboard:
            self.dashboard.render(self.store.state, force=True)

    def _on_tray_activated(self, reason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.DoubleClick:
            self._show_window()

    @Slot()
    def _show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def closeEvent(self, event: QCloseEvent) -> None:
        self._unsubscribe()
        self.tray.hide()
        event.accept()


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Hosts the tabs and the header strip. It owns no state: the store is
#   passed in, and every tab turns clicks into intents.
#
# Data flow:
#   click -> intent -> store.dispatch -> reducer -> Transition ->
#   MainWindow._render -> each tab's render(state).
#   The same transition also reaches the scheduler, the autosave and the
#   sound effects, which subscribe independently.
#
# Interviewer-friendly talking points:
#   1. One-way data flow: widgets never write to each other, so the header
#      and the Focus tab can't disagree about the task count.
#   2. Toasts degrade: tray balloon where the desktop supports it, status
#      bar message always.
#   3. Theme is state: ToggleTheme flows through the reducer, gets saved
#      with everything else, and the stylesheet follows the snapshot.
