"""
Focus Tab — timer controls and the task list.

Widgets never change state themselves: every click becomes an intent on the
store, and render() redraws from whatever snapshot comes back.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from PySide6.QtCore import Qt, QTimer, Slot
from PySide6.QtWidgets import (
    QComboBox, QGroupBox, QHBoxLayout, QLabel, QLineEdit, QListWidget,
    QListWidgetItem, QProgressBar, QPushButton, QVBoxLayout, QWidget,
)

from focusforge.data.models import AppState, Priority, PriorityFilter, TimerMode
from focusforge.engine.intents import (
    AddTask, DeleteTask, ResetTimer, SetMode, SetTaskPriorityFilter,
    ToggleTask, ToggleTimer,
)
from focusforge.engine.store import Store
from focusforge.engine.timeutils import format_time
from focusforge.services.analytics import visible_tasks

logger = logging.getLogger(__name__)

MODE_LABELS = {
    TimerMode.FOCUS: "Focus",
    TimerMode.SHORT_BREAK: "Short Break",
    TimerMode.LONG_BREAK: "Long Break",
}

PRIORITY_ICONS = {Priority.HIGH: "🔴", Priority.MEDIUM: "🟡", Priority.LOW: "🟢"}

FILTER_LABELS = {
    PriorityFilter.ALL_TASKS: "All tasks",
    Priority.HIGH: "High",
    Priority.MEDIUM: "Medium",
    Priority.LOW: "Low",
}


def status_text(state: AppState) -> str:
    """One-line description of what the timer is doing."""
    if not state.is_running:
        full = state.settings.duration_for(state.timer_mode) * 60
        return "Paused" if state.remaining_seconds < full else "Ready"
    if state.timer_mode == TimerMode.FOCUS:
        return "Focusing… stay on task"
    return "On a break… step away from the screen"


class FocusWidget(QWidget):
    """Mode switcher, countdown, start/pause/reset and the priority task list."""

    def __init__(self, store: Store, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.store = store
        self._mode_buttons: Dict[str, QPushButton] = {}
        self._rendered_mode: Optional[str] = None
        self._rendered_tasks: Optional[tuple] = None
        self._setup_ui()

    # ── UI Construction ─────────────────────────────────────────────────────

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(16)
        layout.setContentsMargins(24, 24, 24, 24)

        # ── Mode buttons ────────────────────────────────────────────
        modes = QHBoxLayout()
        modes.addStretch()
        for mode in TimerMode.ALL:
            btn = QPushButton(MODE_LABELS[mode])
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked=False, m=mode: self.store.dispatch(SetMode(m)))
            self._mode_buttons[mode] = btn
            modes.addWidget(btn)
        modes.addStretch()
        layout.addLayout(modes)

        # ── Countdown ───────────────────────────────────────────────
        self.timer_label = QLabel("25:00")
        self.timer_label.setObjectName("timer")
        self.timer_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.timer_label)

        self.progress = QProgressBar()
        self.progress.setTextVisible(False)
        self.progress.setRange(0, 1000)
        layout.addWidget(self.progress)

        self.status_label = QLabel("Ready")
        self.status_label.setObjectName("status")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.status_label)

        controls = QHBoxLayout()
        controls.addStretch()
        self.btn_toggle = QPushButton("Start")
        self.btn_toggle.setObjectName("primary")
        self.btn_toggle.setMinimumHeight(44)
        self.btn_toggle.setMinimumWidth(140)
        self.btn_toggle.clicked.connect(lambda: self.store.dispatch(ToggleTimer()))
        controls.addWidget(self.btn_toggle)

        self.btn_reset = QPushButton("Reset")
        self.btn_reset.setMinimumHeight(44)
        self.btn_reset.clicked.connect(lambda: self.store.dispatch(ResetTimer()))
        controls.addWidget(self.btn_reset)
        controls.addStretch()
        layout.addLayout(controls)

        # ── Tasks ───────────────────────────────────────────────────
        tasks_group = QGroupBox("Tasks")
        tl = QVBoxLayout(tasks_group)

        add_row = QHBoxLayout()
        self.task_input = QLineEdit()
        self.task_input.setPlaceholderText("What do you want to get done?")
        self.task_input.returnPressed.connect(self._on_add_task)
        add_row.addWidget(self.task_input, 1)

        self.priority_combo = QComboBox()
        for priority in Priority.ALL:
            self.priority_combo.addItem(f"{PRIORITY_ICONS[priority]} {priority.title()}", priority)
        self.priority_combo.setCurrentIndex(Priority.ALL.index(Priority.MEDIUM))
        add_row.addWidget(self.priority_combo)

        btn_add = QPushButton("Add")
        btn_add.setObjectName("primary")
        btn_add.clicked.connect(self._on_add_task)
        add_row.addWidget(btn_add)
        tl.addLayout(add_row)

        filter_row = QHBoxLayout()
        filter_row.addWidget(QLabel("Show:"))
        self.filter_combo = QComboBox()
        for key in PriorityFilter.ALL:
            self.filter_combo.addItem(FILTER_LABELS[key], key)
        self.filter_combo.currentIndexChanged.connect(self._on_filter_changed)
        filter_row.addWidget(self.filter_combo)
        filter_row.addStretch()

        self.btn_delete = QPushButton("Delete")
        self.btn_delete.setObjectName("danger")
        self.btn_delete.clicked.connect(self._on_delete_task)
        filter_row.addWidget(self.btn_delete)
        tl.addLayout(filter_row)

        self.task_list = QListWidget()
        self.task_list.itemChanged.connect(self._on_item_changed)
        tl.addWidget(self.task_list)

        layout.addWidget(tasks_group, 1)

    # ── Rendering ───────────────────────────────────────────────────────────

    def render(self, state: AppState) -> None:
        mode = state.timer_mode
        for m, btn in self._mode_buttons.items():
            btn.setChecked(m == mode)

        self.timer_label.setText(format_time(state.remaining_seconds))
        if mode != self._rendered_mode:
            # re-polish so the [mode=...] stylesheet selector applies
            self.timer_label.setProperty("mode", mode)
            self.timer_label.style().unpolish(self.timer_label)
            self.timer_label.style().polish(self.timer_label)
            self._rendered_mode = mode

        total = state.settings.duration_for(mode) * 60
        elapsed = max(0, total - state.remaining_seconds)
        self.progress.setValue(int(1000 * elapsed / total) if total else 0)

        self.status_label.setText(status_text(state))
        self.btn_toggle.setText("Pause" if state.is_running else "Start")

        self.filter_combo.blockSignals(True)
        self.filter_combo.setCurrentIndex(
            max(0, self.filter_combo.findData(state.task_priority_filter)))
        self.filter_combo.blockSignals(False)

        shown = (state.tasks, state.task_priority_filter)
        if shown != self._rendered_tasks:
            self._render_tasks(state)
            self._rendered_tasks = shown

    def _render_tasks(self, state: AppState) -> None:
        self.task_list.blockSignals(True)
        selected = self._selected_task_id()
        self.task_list.clear()
        for task in visible_tasks(state.tasks, state.task_priority_filter):
            item = QListWidgetItem(f"{PRIORITY_ICONS.get(task.priority, '')} {task.title}")
            item.setData(Qt.ItemDataRole.UserRole, task.id)
            item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
            item.setCheckState(
                Qt.CheckState.Checked if task.is_completed else Qt.CheckState.Unchecked)
            font = item.font()
            font.setStrikeOut(task.is_completed)
            item.setFont(font)
            self.task_list.addItem(item)
            if task.id == selected:
                self.task_list.setCurrentItem(item)
        self.task_list.blockSignals(False)

    def _selected_task_id(self) -> Optional[str]:
        item = self.task_list.currentItem()
        return item.data(Qt.ItemDataRole.UserRole) if item else None

    # ── Slots ───────────────────────────────────────────────────────────────

    @Slot()
    def _on_add_task(self) -> None:
        title = self.task_input.text().strip()
        if not title:
            return
        self.store.dispatch(AddTask(title=title, priority=self.priority_combo.currentData()))
        self.task_input.clear()

    @Slot(int)
    def _on_filter_changed(self, index: int) -> None:
        self.store.dispatch(SetTaskPriorityFilter(self.filter_combo.itemData(index)))

    @Slot(QListWidgetItem)
    def _on_item_changed(self, item: QListWidgetItem) -> None:
        task_id = item.data(Qt.ItemDataRole.UserRole)
        # the list is rebuilt on render, so leave the item signal before dispatching
        QTimer.singleShot(0, lambda: self.store.dispatch(ToggleTask(task_id)))

    @Slot()
    def _on_delete_task(self) -> None:
        task_id = self._selected_task_id()
        if task_id is not None:
            self.store.dispatch(DeleteTask(task_id))
