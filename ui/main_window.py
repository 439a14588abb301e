# ui/main_window.py
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QMessageBox, QPushButton
)
from PySide6.QtCore import Qt, QTimer
import json
import logging

from app.config import TutorConfig
from app.errors import StorageError
from core.chrono import QtScheduler
from services.adaptive_engine import AdaptiveEngine
from services.session import CompletionResult, NextAction, SessionOrchestrator
from services.weakkeys import ranked
from ui.lesson_panel import LessonPanel
from ui.session_summary import SessionSummary
from ui.weakkeys_dialog import WeakKeysDialog
from ui.widgets import LessonList
from utils.db_helper import insert_result

logger = logging.getLogger(__name__)

MESSAGE_MS = 5000

_QSS = """
QWidget { background: #0f1115; color: #e5e7eb; }
QLabel#lblWPM { color: #eab308; }
QLabel#lblAcc, QLabel#lblReaction, QLabel#lblHeader { color: #9aa1a9; }
QLabel#MessageBar {
    background: rgba(239,68,68,0.15);
    border: 1px solid rgba(239,68,68,0.5);
    border-radius: 9px;
    padding: 8px 12px;
}
QWidget#TopBar {
    background: rgba(255,255,255,0.04);
    border: 1px solid rgba(255,255,255,0.08);
    border-radius: 14px;
}
QPushButton#TopBtn {
    background: transparent;
    border: 1px solid rgba(255,255,255,0.10);
    border-radius: 9px;
    padding: 6px 12px;
}
QPushButton#TopBtn:hover {
    border-color: rgba(255,255,255,0.32);
    background: rgba(255,255,255,0.06);
}
"""


class MainWindow(QMainWindow):
    def __init__(self, engine: AdaptiveEngine, config: TutorConfig):
        super().__init__()
        self.setWindowTitle("Typemaster")
        self.resize(1200, 720)
        self.engine = engine
        self.config = config
        self._last_result = None
        self._last_wpms = []

        self.session = SessionOrchestrator(
            engine,
            scheduler=QtScheduler(self),
            on_session_started=self._on_session_started,
            on_completed=self._on_completed,
        )

        root = QWidget(self)
        root_v = QVBoxLayout(root)
        root_v.setContentsMargins(16, 24, 16, 16)
        root_v.setSpacing(16)
        self._build_top_bar(root_v)

        body = QHBoxLayout()
        self.lessons = LessonList(self)
        self.lessons.populate(self.session.get_lesson_list())
        self.lessons.lessonChosen.connect(self._on_lesson_chosen)
        body.addWidget(self.lessons)

        center = QVBoxLayout()
        self.panel = LessonPanel(self.session, self)
        center.addWidget(self.panel, 1)

        self.btnNext = QPushButton("Next lesson →", self)
        self.btnNext.setObjectName("TopBtn")
        self.btnNext.setFocusPolicy(Qt.NoFocus)
        self.btnNext.clicked.connect(self._on_next)
        self.btnNext.setVisible(False)
        center.addWidget(self.btnNext, alignment=Qt.AlignHCenter)

        self.messageBar = QLabel("", self)
        self.messageBar.setObjectName("MessageBar")
        self.messageBar.setAlignment(Qt.AlignCenter)
        self.messageBar.setVisible(False)
        center.addWidget(self.messageBar)
        self._message_timer = QTimer(self)
        self._message_timer.setSingleShot(True)
        self._message_timer.timeout.connect(lambda: self.messageBar.setVisible(False))

        body.addLayout(center, 1)
        root_v.addLayout(body, 1)
        self.setCentralWidget(root)
        self.setStyleSheet(_QSS)
        self.setFocusPolicy(Qt.NoFocus)

        self.session.start_session()

    # ---------------- Top Bar ----------------
    def _build_top_bar(self, parent_layout):
        bar = QWidget(self)
        bar.setObjectName("TopBar")
        h = QHBoxLayout(bar)
        h.setContentsMargins(14, 12, 14, 12)
        h.setSpacing(10)

        for label, handler in [
            ("Weak Keys…", self._open_weakkeys),
            ("Muscle memory", self._on_routine),
            ("Last session…", self._open_summary),
            ("Restart lesson", self._on_restart),
        ]:
            btn = QPushButton(label, bar)
            btn.clicked.connect(handler)
            btn.setObjectName("TopBtn")
            btn.setFocusPolicy(Qt.NoFocus)
            h.addWidget(btn)
        h.addStretch(1)
        parent_layout.addWidget(bar)

    # ---------------- Session hooks ----------------
    def _on_session_started(self, header: str, text: str):
        self.btnNext.setVisible(False)
        lesson = self.session.get_current_lesson()
        self.lessons.highlight(lesson.level, lesson.index)
        self.setWindowTitle(f"Typemaster — {header}")
        self.panel.on_session_started(header, text)

    def _on_completed(self, result: CompletionResult):
        stats = result.stats
        self.panel.show_metrics(stats)
        self._last_result = result
        self._last_wpms = list(self.panel.wpm_series)
        self._save_result(result)

        for badge in result.badges:
            QMessageBox.information(self, "Badge earned", badge.label)
        if result.stagnation_message:
            self._show_message(result.stagnation_message)

        if result.next_action is NextAction.LESSON_COMPLETE:
            self.btnNext.setVisible(True)
            self.lessons.highlight(result.lesson.level, result.lesson.index)
            self.setWindowTitle(f"Typemaster — Lesson complete: {stats.wpm} WPM, {stats.accuracy}%")
        elif result.next_action is NextAction.START_DRILL:
            self.setWindowTitle("Typemaster — Drill incoming…")

    def _save_result(self, result: CompletionResult):
        stats = result.stats
        name = "drill" if result.was_drill else f"{result.lesson.level}/{result.lesson.index}"
        weak = {k: {"hits": v.hits, "errors": v.errors} for k, v in stats.per_key_stats.items()}
        try:
            insert_result(
                name, result.was_drill, stats.wpm, stats.accuracy, stats.reaction,
                stats.duration_ms / 1000.0, json.dumps(weak), db_path=self.config.results_db,
            )
        except StorageError as e:
            logger.warning("Could not record session result: %s", e)

    def _show_message(self, text: str):
        self.messageBar.setText(text)
        self.messageBar.setVisible(True)
        self._message_timer.start(MESSAGE_MS)

    # ---------------- Actions ----------------
    def _on_lesson_chosen(self, level: str, index: int):
        self.session.select_lesson(level, index)

    def _on_next(self):
        self.session.advance()

    def _on_restart(self):
        self.session.start_session()

    def _on_routine(self):
        self.session.start_muscle_memory_routine()

    def _open_weakkeys(self):
        rows = ranked(self.engine.progress.error_rates)
        WeakKeysDialog(rows, min_hits=self.config.min_hits, parent=self).exec()
        self.panel.setFocus()

    def _open_summary(self):
        if self._last_result is None:
            QMessageBox.information(self, "Last session", "No session completed yet.")
            return
        SessionSummary(self._last_result, self._last_wpms, self).exec()
        self.panel.setFocus()
