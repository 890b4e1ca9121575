"""
Weekly Review Tab — one reflection per Sunday-start week.

Saving a week that already has a review replaces it; the week selector always
offers the current week plus every week that has been reviewed.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict, Optional

from PySide6.QtCore import Slot
from PySide6.QtWidgets import (
    QComboBox, QFormLayout, QHBoxLayout, QLabel, QPlainTextEdit, QPushButton,
    QVBoxLayout, QWidget,
)

from focusforge.data.models import AppState, WeeklyReview
from focusforge.engine.intents import SaveReview
from focusforge.engine.store import Store
from focusforge.engine.timeutils import generate_id, now_ms
from focusforge.services.analytics import available_review_weeks, find_review

logger = logging.getLogger(__name__)

# (attribute, label, placeholder)
REVIEW_FIELDS = [
    ("wins", "Wins", "What went well this week?"),
    ("distractions", "Distractions", "What pulled you off track?"),
    ("what_worked", "What worked", "Which habits or techniques helped?"),
    ("improvement_plan", "Next week", "What will you change?"),
]


def week_label(week_key: str) -> str:
    return "Week of " + date.fromisoformat(week_key).strftime("%b %d, %Y")


class ReviewWidget(QWidget):

    def __init__(self, store: Store, clock: Callable[[], int] = now_ms,
                 parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.store = store
        self.clock = clock
        self._reviews: Optional[tuple] = None
        self._editors: Dict[str, QPlainTextEdit] = {}
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 24, 24, 24)

        header = QHBoxLayout()
        title = QLabel("Weekly Review")
        title.setObjectName("title")
        header.addWidget(title)
        header.addStretch()
        self.week_combo = QComboBox()
        self.week_combo.currentIndexChanged.connect(self._on_week_changed)
        header.addWidget(self.week_combo)
        layout.addLayout(header)

        form = QFormLayout()
        for attr, label, placeholder in REVIEW_FIELDS:
            editor = QPlainTextEdit()
            editor.setPlaceholderText(placeholder)
            editor.setMaximumHeight(110)
            self._editors[attr] = editor
            form.addRow(label, editor)
        layout.addLayout(form)

        footer = QHBoxLayout()
        self.saved_label = QLabel("")
        self.saved_label.setObjectName("subtitle")
        footer.addWidget(self.saved_label)
        footer.addStretch()
        btn_save = QPushButton("Save Review")
        btn_save.setObjectName("primary")
        btn_save.clicked.connect(self._on_save)
        footer.addWidget(btn_save)
        layout.addLayout(footer)
        layout.addStretch()

    # ── Rendering ───────────────────────────────────────────────────────────

    def render(self, state: AppState) -> None:
        if state.reviews is self._reviews:
            return
        self._reviews = state.reviews

        selected = self.week_combo.currentData()
        weeks = available_review_weeks(state.reviews, self.clock())
        self.week_combo.blockSignals(True)
        self.week_combo.clear()
        for key in weeks:
            self.week_combo.addItem(week_label(key), key)
        index = self.week_combo.findData(selected) if selected else 0
        self.week_combo.setCurrentIndex(max(0, index))
        self.week_combo.blockSignals(False)
        self._load_week(self.week_combo.currentData())

    def _load_week(self, week_key: Optional[str]) -> None:
        review = find_review(self._reviews or (), week_key) if week_key else None
        for attr, editor in self._editors.items():
            editor.setPlainText(getattr(review, attr) if review else "")
        self.saved_label.setText("Saved" if review else "Not reviewed yet")

    # ── Slots ───────────────────────────────────────────────────────────────

    @Slot(int)
    def _on_week_changed(self, index: int) -> None:
        self._load_week(self.week_combo.itemData(index))

    @Slot()
    def _on_save(self) -> None:
        week_key = self.week_combo.currentData()
        if not week_key:
            return
        existing = find_review(self.store.state.reviews, week_key)
        texts = {attr: editor.toPlainText().strip() for attr, editor in self._editors.items()}
        review = WeeklyReview(
            id=existing.id if existing else generate_id(),
            week_start_date=week_key,
            created_at=existing.created_at if existing else self.clock(),
            **texts,
        )
        self.store.dispatch(SaveReview(review))
        logger.info("Saved review for week %s", week_key)
