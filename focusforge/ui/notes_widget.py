"""
Notes Tab — a list of notes (most recently edited first) beside an editor.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QHBoxLayout, QLabel, QLineEdit, QListWidget, QListWidgetItem, QMessageBox,
    QPlainTextEdit, QPushButton, QSplitter, QVBoxLayout, QWidget,
)

from focusforge.data.models import AppState, Note
from focusforge.engine.intents import AddNote, DeleteNote, UpdateNote
from focusforge.engine.store import Store
from focusforge.engine.timeutils import to_datetime

logger = logging.getLogger(__name__)


class NotesWidget(QWidget):

    def __init__(self, store: Store, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.store = store
        self._notes: tuple = ()
        self._current_id: Optional[str] = None
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 24, 24, 24)

        title = QLabel("Notes")
        title.setObjectName("title")
        layout.addWidget(title)

        splitter = QSplitter(Qt.Orientation.Horizontal)

        # ── List side ───────────────────────────────────────────────
        left = QWidget()
        ll = QVBoxLayout(left)
        ll.setContentsMargins(0, 0, 0, 0)
        btn_new = QPushButton("New Note")
        btn_new.setObjectName("primary")
        btn_new.clicked.connect(self._on_new)
        ll.addWidget(btn_new)
        self.note_list = QListWidget()
        self.note_list.currentItemChanged.connect(self._on_selected)
        ll.addWidget(self.note_list)
        splitter.addWidget(left)

        # ── Editor side ─────────────────────────────────────────────
        right = QWidget()
        rl = QVBoxLayout(right)
        rl.setContentsMargins(0, 0, 0, 0)
        self.title_edit = QLineEdit()
        self.title_edit.setPlaceholderText("Title")
        rl.addWidget(self.title_edit)
        self.content_edit = QPlainTextEdit()
        self.content_edit.setPlaceholderText("Write something…")
        rl.addWidget(self.content_edit, 1)

        self.meta_label = QLabel("")
        self.meta_label.setObjectName("subtitle")
        rl.addWidget(self.meta_label)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self.btn_delete = QPushButton("Delete")
        self.btn_delete.setObjectName("danger")
        self.btn_delete.clicked.connect(self._on_delete)
        buttons.addWidget(self.btn_delete)
        self.btn_save = QPushButton("Save")
        self.btn_save.setObjectName("primary")
        self.btn_save.clicked.connect(self._on_save)
        buttons.addWidget(self.btn_save)
        rl.addLayout(buttons)
        splitter.addWidget(right)

        splitter.setStretchFactor(1, 2)
        layout.addWidget(splitter, 1)
        self._load_editor(None)

    # ── Rendering ───────────────────────────────────────────────────────────

    def render(self, state: AppState) -> None:
        if state.notes is self._notes:
            return
        self._notes = state.notes

        self.note_list.blockSignals(True)
        self.note_list.clear()
        current_item = None
        for note in state.notes:
            item = QListWidgetItem(note.title or "Untitled")
            item.setData(Qt.ItemDataRole.UserRole, note.id)
            self.note_list.addItem(item)
            if note.id == self._current_id:
                current_item = item
        if current_item is not None:
            self.note_list.setCurrentItem(current_item)
        self.note_list.blockSignals(False)

        self._load_editor(self._find(self._current_id))

    def _find(self, note_id: Optional[str]) -> Optional[Note]:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def _load_editor(self, note: Optional[Note]) -> None:
        self._current_id = note.id if note else None
        enabled = note is not None
        self.title_edit.setText(note.title if note else "")
        self.content_edit.setPlainText(note.content if note else "")
        for w in (self.title_edit, self.content_edit, self.btn_save, self.btn_delete):
            w.setEnabled(enabled)
        if note:
            edited = to_datetime(note.updated_at).strftime("%b %d, %Y %H:%M")
            self.meta_label.setText(f"Last edited {edited}")
        else:
            self.meta_label.setText("Select or create a note.")

    # ── Slots ───────────────────────────────────────────────────────────────

    @Slot()
    def _on_new(self) -> None:
        intent = AddNote(title="Untitled")
        self._current_id = intent.new_id
        self.store.dispatch(intent)
        self.title_edit.setFocus()
        self.title_edit.selectAll()

    @Slot(QListWidgetItem, QListWidgetItem)
    def _on_selected(self, current: Optional[QListWidgetItem], _previous) -> None:
        note_id = current.data(Qt.ItemDataRole.UserRole) if current else None
        self._load_editor(self._find(note_id))

    @Slot()
    def _on_save(self) -> None:
        note = self._find(self._current_id)
        if note is None:
            return
        edited = replace(
            note,
            title=self.title_edit.text().strip() or "Untitled",
            content=self.content_edit.toPlainText(),
        )
        self.store.dispatch(UpdateNote(note=edited))

    @Slot()
    def _on_delete(self) -> None:
        note = self._find(self._current_id)
        if note is None:
            return
        reply = QMessageBox.question(
            self, "Delete Note", f"Delete \"{note.title}\"?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self._current_id = None
            self.store.dispatch(DeleteNote(note.id))
