from __future__ import annotations
from html import escape

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtWidgets import QWidget, QLabel, QVBoxLayout, QHBoxLayout, QSizePolicy

from app.state import Metrics
from services.session import KeystrokeResult, SessionOrchestrator

COLORS = {
    "ok": "#22c55e",
    "err": "#ef4444",
    "mut": "#9aa1a9",
    "caret": "#eab308",
    "err_ul": "rgba(239,68,68,0.9)",
}


class LessonPanel(QWidget):
    """Typing surface: header, live metrics and the colour-marked practice text."""

    keystroke = Signal(object)  # KeystrokeResult

    def __init__(self, session: SessionOrchestrator, parent=None):
        super().__init__(parent)
        self.session = session
        self.setFocusPolicy(Qt.StrongFocus)
        self.wpm_series: list[float] = []

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 30, 0, 30)
        root.setSpacing(28)

        self.lblHeader = QLabel("", self)
        self.lblHeader.setObjectName("lblHeader")
        self.lblHeader.setAlignment(Qt.AlignCenter)
        root.addWidget(self.lblHeader)

        stats = QHBoxLayout()
        stats.setSpacing(40)
        self.lblWPM = QLabel("0 WPM", self)
        self.lblWPM.setObjectName("lblWPM")
        self.lblAcc = QLabel("100 %", self)
        self.lblAcc.setObjectName("lblAcc")
        self.lblReaction = QLabel("0 ms", self)
        self.lblReaction.setObjectName("lblReaction")
        for lab in (self.lblWPM, self.lblAcc, self.lblReaction):
            lab.setAlignment(Qt.AlignCenter)
            stats.addWidget(lab)
        root.addLayout(stats)

        self.lblLine = QLabel("", self)
        self.lblLine.setObjectName("lblLine")
        self.lblLine.setTextFormat(Qt.RichText)
        self.lblLine.setWordWrap(True)
        self.lblLine.setAlignment(Qt.AlignCenter)
        self.lblLine.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.lblLine.setMinimumWidth(700)
        self.lblLine.setMinimumHeight(140)
        self.lblLine.setStyleSheet("font-size: 30px; line-height: 1.35;")
        root.addWidget(self.lblLine, stretch=1)

        self._caret_on = True
        self._caret_timer = QTimer(self)
        self._caret_timer.setInterval(500)
        self._caret_timer.timeout.connect(self._toggle_caret)
        self._caret_timer.start()

    # ---------------- session hooks ----------------
    def on_session_started(self, header: str, text: str):
        self.lblHeader.setText(header)
        self.wpm_series = []
        self.show_metrics(Metrics(wpm=0, accuracy=100, reaction=0))
        self._caret_on = True
        self.render_text()
        self.setFocus()

    def show_metrics(self, m: Metrics):
        self.lblWPM.setText(f"{m.wpm} WPM")
        self.lblAcc.setText(f"{m.accuracy} %")
        self.lblReaction.setText(f"{m.reaction} ms")

    # ---------------- input ----------------
    def keyPressEvent(self, ev):
        if ev.modifiers() & (Qt.ControlModifier | Qt.AltModifier | Qt.MetaModifier):
            return super().keyPressEvent(ev)
        result: KeystrokeResult | None = self.session.record_keystroke(ev.text())
        if result is None:
            return super().keyPressEvent(ev)
        ev.accept()
        if result.completion is None:
            self.show_metrics(result.metrics)
            self.wpm_series.append(float(result.metrics.wpm))
        self.render_text()
        self.keystroke.emit(result)

    # ---------------- rendering ----------------
    def _toggle_caret(self):
        self._caret_on = not self._caret_on
        self.render_text()

    def render_text(self):
        text = self.session.text
        marks = self.session.marks
        pos = self.session.position
        parts: list[str] = []
        for idx, ch in enumerate(text):
            glyph = escape(ch)
            if idx < len(marks):
                if marks[idx]:
                    parts.append(f'<span style="color:{COLORS["ok"]}">{glyph}</span>')
                else:
                    parts.append(
                        f'<span style="color:{COLORS["err"]};'
                        f'border-bottom:2px solid {COLORS["err_ul"]}">{glyph}</span>'
                    )
            elif idx == pos:
                caret = COLORS["caret"] if self._caret_on else COLORS["mut"]
                parts.append(f'<span style="color:{caret};text-decoration:underline">{glyph}</span>')
            else:
                parts.append(f'<span style="color:{COLORS["mut"]}">{glyph}</span>')
        self.lblLine.setText("".join(parts))
