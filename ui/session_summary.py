# ui/session_summary.py
from __future__ import annotations
from PySide6.QtWidgets import QDialog, QVBoxLayout, QLabel, QPushButton
import pyqtgraph as pg

from app.calculation import smooth
from services.session import CompletionResult, NextAction
from utils.graph_helper import wpm_curve

_NEXT_TEXT = {
    NextAction.START_DRILL: "A drill for your weakest keys starts next.",
    NextAction.REPEAT_LESSON: "Drill done. Back to the lesson.",
    NextAction.LESSON_COMPLETE: "Lesson complete.",
}


class SessionSummary(QDialog):
    """Final stats plus the live WPM curve recorded during the session."""

    def __init__(self, result: CompletionResult, wpms: list[float], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Session Summary")
        self.resize(640, 400)

        stats = result.stats
        root = QVBoxLayout(self)
        root.addWidget(QLabel(f"WPM: {stats.wpm}"))
        root.addWidget(QLabel(f"Accuracy: {stats.accuracy}%"))
        root.addWidget(QLabel(f"Avg reaction: {stats.reaction} ms"))
        root.addWidget(QLabel(f"Time: {stats.duration_ms / 1000.0:.1f}s"))
        root.addWidget(QLabel(_NEXT_TEXT[result.next_action]))

        if wpms:
            plot = pg.PlotWidget()
            wpm_curve(plot, smooth([float(v) for v in wpms]))
            root.addWidget(plot, stretch=1)

        btn = QPushButton("OK", self)
        btn.clicked.connect(self.accept)
        root.addWidget(btn)
