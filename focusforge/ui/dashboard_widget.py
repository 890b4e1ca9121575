"""
Dashboard Widget — the Analytics tab.

Metric cards and live QtCharts views built from analytics.summarize(), plus
a quick distraction logger. Colours come from the global stylesheet, so the
tab follows the light/dark theme without its own palette.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtCharts import QChartView
from PySide6.QtWidgets import (
    QFrame, QGridLayout, QGroupBox, QHBoxLayout, QLabel, QLineEdit,
    QProgressBar, QPushButton, QScrollArea, QSizePolicy, QVBoxLayout, QWidget,
)

from focusforge.data.models import AppState
from focusforge.engine.intents import LogDistraction
from focusforge.engine.store import Store
from focusforge.engine.timeutils import format_minutes, now_ms
from focusforge.services.analytics import DISTRACTION_CATEGORIES, AnalyticsSummary, summarize
from focusforge.ui import plot_backend

logger = logging.getLogger(__name__)


class MetricCard(QFrame):
    """Big value over a small caption, with an optional help tooltip."""

    def __init__(self, label: str, tooltip: str = "",
                 parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("card")
        self.setMinimumWidth(130)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        self.setFixedHeight(84)
        if tooltip:
            self.setToolTip(tooltip)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(14, 10, 14, 8)
        layout.setSpacing(2)

        self.value_label = QLabel("—")
        self.value_label.setObjectName("metric_value")
        self.name_label = QLabel(label)
        self.name_label.setObjectName("metric_label")
        self.name_label.setWordWrap(True)

        layout.addWidget(self.value_label)
        layout.addWidget(self.name_label)

    def set_text(self, text: str) -> None:
        self.value_label.setText(text or "—")


class ChartSlot(QFrame):
    """Container that holds a QChartView widget — swappable on refresh."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("card")
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(2, 2, 2, 2)
        self._current_view: Optional[QChartView] = None
        self.setMinimumHeight(240)

    def set_chart(self, view: QChartView) -> None:
        if self._current_view is not None:
            self._layout.removeWidget(self._current_view)
            self._current_view.deleteLater()
        self._current_view = view
        self._layout.addWidget(view)


class DashboardWidget(QWidget):
    """Analytics tab: weekly focus, task completion, level progress, distractions."""

    def __init__(self, store: Store, clock: Callable[[], int] = now_ms,
                 parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.store = store
        self.clock = clock
        self._rendered: Optional[tuple] = None
        self._setup_ui()

    def _setup_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)

        content = QWidget()
        cl = QVBoxLayout(content)
        cl.setContentsMargins(24, 20, 24, 24)
        cl.setSpacing(16)

        title = QLabel("Analytics")
        title.setObjectName("title")
        cl.addWidget(title)

        # ── Overview cards ──────────────────────────────────────────
        cards = QGridLayout()
        cards.setSpacing(8)
        self.card_week = MetricCard("focus this week",
            "Focus minutes completed in the last 7 days.")
        self.card_best_day = MetricCard("most productive day",
            "The day with the most focus time in the last 7 days.")
        self.card_avg = MetricCard("avg focus session",
            "Mean length of completed focus sessions.")
        self.card_completion = MetricCard("task completion",
            "Completed tasks as a share of all tasks.")
        self.card_pending = MetricCard("tasks left")
        self.card_distractions = MetricCard("distractions logged")
        for i, card in enumerate([self.card_week, self.card_best_day, self.card_avg,
                                  self.card_completion, self.card_pending,
                                  self.card_distractions]):
            cards.addWidget(card, i // 3, i % 3)
        cl.addLayout(cards)

        # ── Level ───────────────────────────────────────────────────
        level_group = QGroupBox("Level")
        ll = QVBoxLayout(level_group)
        self.level_label = QLabel("")
        ll.addWidget(self.level_label)
        self.level_bar = QProgressBar()
        self.level_bar.setRange(0, 100)
        self.level_bar.setTextVisible(False)
        ll.addWidget(self.level_bar)
        cl.addWidget(level_group)

        # ── Charts ──────────────────────────────────────────────────
        charts = QHBoxLayout()
        charts.setSpacing(10)
        self.chart_weekly = ChartSlot()
        self.chart_distractions = ChartSlot()
        charts.addWidget(self.chart_weekly, 3)
        charts.addWidget(self.chart_distractions, 2)
        cl.addLayout(charts)

        # ── Distraction logger ──────────────────────────────────────
        logger_group = QGroupBox("Got distracted? Log it")
        gl = QVBoxLayout(logger_group)
        self.distraction_note = QLineEdit()
        self.distraction_note.setPlaceholderText("Optional note…")
        gl.addWidget(self.distraction_note)
        buttons = QHBoxLayout()
        for category in DISTRACTION_CATEGORIES:
            btn = QPushButton(category)
            btn.setObjectName("distraction")
            btn.clicked.connect(lambda _checked=False, c=category: self._log_distraction(c))
            buttons.addWidget(btn)
        gl.addLayout(buttons)
        cl.addWidget(logger_group)

        cl.addStretch()
        scroll.setWidget(content)
        outer.addWidget(scroll)

    # ── Rendering ───────────────────────────────────────────────────────────

    def render(self, state: AppState, force: bool = False) -> None:
        key = (state.sessions, state.tasks, state.distractions, state.stats, state.theme)
        if not force and key == self._rendered:
            return
        self._rendered = key
        self._show(summarize(state, self.clock()), state.theme)

    def _show(self, summary: AnalyticsSummary, theme: str) -> None:
        week_total = sum(day.minutes for day in summary.weekly)
        self.card_week.set_text(format_minutes(week_total))
        best = summary.most_productive
        self.card_best_day.set_text(f"{best.label} · {format_minutes(best.minutes)}" if best.label else "")
        self.card_avg.set_text(f"{summary.average_focus_minutes} min" if summary.average_focus_minutes else "")
        self.card_completion.set_text(f"{summary.completion_rate}%")
        self.card_pending.set_text(str(summary.pending_tasks))
        self.card_distractions.set_text(str(summary.distraction_total))

        level = summary.level
        if level.next_level:
            self.level_label.setText(
                f"{level.current_level}: {level.percent}% of the way to "
                f"{level.next_level} ({level.next_threshold} min a week)"
            )
        else:
            self.level_label.setText(f"{level.current_level} — top level reached")
        self.level_bar.setValue(level.percent)

        self.chart_weekly.set_chart(plot_backend.plot_weekly_focus(summary.weekly, theme))
        self.chart_distractions.set_chart(
            plot_backend.plot_distractions(summary.distractions_by_category, theme))
        logger.debug("Dashboard refreshed: %d min this week", week_total)

    # ── Distraction logger ──────────────────────────────────────────────────

    def _log_distraction(self, category: str) -> None:
        note = self.distraction_note.text().strip() or None
        self.store.dispatch(LogDistraction(category=category, note=note))
        self.distraction_note.clear()
