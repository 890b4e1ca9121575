"""
Interactive Chart Backend — QtCharts views for the analytics tab.

Each public function takes plain analytics values (no Qt types) and returns
a QChartView with hover tooltips, coloured from the current theme palette.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from PySide6.QtCore import Qt, QMargins
from PySide6.QtGui import QBrush, QColor, QCursor, QFont, QPainter
from PySide6.QtWidgets import QToolTip
from PySide6.QtCharts import (
    QBarCategoryAxis, QBarSeries, QBarSet, QChart, QChartView,
    QHorizontalBarSeries, QValueAxis,
)

from focusforge.engine.timeutils import format_minutes
from focusforge.services.analytics import DayTotal
from focusforge.ui.styles import palette_for

logger = logging.getLogger(__name__)


def _base_chart(title: str, palette: dict) -> QChart:
    chart = QChart()
    chart.setBackgroundBrush(QBrush(QColor(palette["mantle"])))
    chart.setBackgroundRoundness(0)
    chart.setMargins(QMargins(8, 8, 8, 8))
    chart.setTitle(title)
    chart.setTitleFont(QFont("Segoe UI", 10))
    chart.setTitleBrush(QBrush(QColor(palette["subtext"])))
    chart.legend().setVisible(False)
    chart.setAnimationOptions(QChart.AnimationOption.SeriesAnimations)
    chart.setAnimationDuration(400)
    return chart


def _value_axis(palette: dict) -> QValueAxis:
    axis = QValueAxis()
    axis.setLabelsColor(QColor(palette["subtext"]))
    axis.setLabelsFont(QFont("Segoe UI", 8))
    axis.setGridLineColor(QColor(palette["surface"]))
    axis.setLineVisible(False)
    axis.setMinorGridLineVisible(False)
    axis.setLabelFormat("%d")
    return axis


def _cat_axis(categories: List[str], palette: dict) -> QBarCategoryAxis:
    axis = QBarCategoryAxis()
    axis.append(categories)
    axis.setLabelsColor(QColor(palette["subtext"]))
    axis.setLabelsFont(QFont("Segoe UI", 8))
    axis.setGridLineVisible(False)
    axis.setLineVisible(False)
    return axis


def make_chart_view(chart: QChart) -> QChartView:
    """Wrap chart in a styled view with antialiasing."""
    view = QChartView(chart)
    view.setRenderHint(QPainter.RenderHint.Antialiasing)
    view.setStyleSheet("background: transparent; border: none;")
    view.setMinimumHeight(220)
    return view


# ── Public chart functions ───────────────────────────────────────────────────

def plot_weekly_focus(weekly: Sequence[DayTotal], theme: str) -> QChartView:
    """Vertical bars: focus minutes for each of the last 7 days."""
    palette = palette_for(theme)
    chart = _base_chart("focus time, last 7 days", palette)

    bar_set = QBarSet("focus")
    bar_set.setColor(QColor(palette["focus"]))
    bar_set.setBorderColor(QColor(0, 0, 0, 0))
    for day in weekly:
        bar_set.append(float(day.minutes))

    series = QBarSeries()
    series.append(bar_set)
    series.setBarWidth(0.6)

    def _hover(status, idx, barset):
        if status and 0 <= idx < len(weekly):
            day = weekly[idx]
            QToolTip.showText(QCursor.pos(), f"{day.date_key}: {format_minutes(day.minutes)}")

    series.hovered.connect(_hover)

    x_axis = _cat_axis([day.label for day in weekly], palette)
    y_axis = _value_axis(palette)
    chart.addSeries(series)
    chart.addAxis(x_axis, Qt.AlignmentFlag.AlignBottom)
    chart.addAxis(y_axis, Qt.AlignmentFlag.AlignLeft)
    series.attachAxis(x_axis)
    series.attachAxis(y_axis)

    peak = max((day.minutes for day in weekly), default=0)
    y_axis.setRange(0, max(30, peak * 1.2))
    return make_chart_view(chart)


def plot_distractions(counts: Sequence[Tuple[str, int]], theme: str) -> QChartView:
    """Horizontal bars: logged distractions per category, most frequent on top."""
    palette = palette_for(theme)
    if not counts:
        chart = _base_chart("distractions — none logged yet", palette)
        return make_chart_view(chart)

    chart = _base_chart("distractions by category", palette)
    ordered = list(counts)[::-1]

    bar_set = QBarSet("distractions")
    bar_set.setColor(QColor(palette["warning"]))
    bar_set.setBorderColor(QColor(0, 0, 0, 0))
    for _, n in ordered:
        bar_set.append(float(n))

    series = QHorizontalBarSeries()
    series.append(bar_set)
    series.setBarWidth(0.5)

    def _hover(status, idx, barset):
        if status and 0 <= idx < len(ordered):
            name, n = ordered[idx]
            QToolTip.showText(QCursor.pos(), f"{name}: {n}")

    series.hovered.connect(_hover)

    y_axis = _cat_axis([name for name, _ in ordered], palette)
    x_axis = _value_axis(palette)
    chart.addSeries(series)
    chart.addAxis(x_axis, Qt.AlignmentFlag.AlignBottom)
    chart.addAxis(y_axis, Qt.AlignmentFlag.AlignLeft)
    series.attachAxis(x_axis)
    series.attachAxis(y_axis)

    x_axis.setRange(0, max(n for _, n in ordered) + 1)
    return make_chart_view(chart)
