# ui/weakkeys_dialog.py
from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QSpinBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QFileDialog,
)
import csv
import pyqtgraph as pg

from utils.graph_helper import setup_plot


def _label(key: str) -> str:
    return "␣" if key == " " else key


class WeakKeysDialog(QDialog):
    def __init__(self, weak_keys_ranked, min_hits: int = 5, parent=None):
        """
        weak_keys_ranked: iterable of tuples (key, error_rate_0to1, hits, errors)
        accumulated across every session so far.
        """
        super().__init__(parent)
        self.setWindowTitle("Weak Keys")
        self.resize(680, 520)
        self._raw = list(weak_keys_ranked)
        self._filtered = self._raw[:]

        root = QVBoxLayout(self)

        ctrl = QHBoxLayout()
        ctrl.addWidget(QLabel("Min hits:"))
        self.min_hits = QSpinBox()
        self.min_hits.setRange(0, 9999)
        self.min_hits.setValue(min_hits)
        self.min_hits.valueChanged.connect(self._apply_filter)
        ctrl.addWidget(self.min_hits)
        ctrl.addStretch(1)
        self.btn_export = QPushButton("Export CSV…")
        self.btn_export.clicked.connect(self._export_csv)
        ctrl.addWidget(self.btn_export)
        root.addLayout(ctrl)

        self.plot = pg.PlotWidget()
        setup_plot(self.plot, "Error %")
        self.plot.enableAutoRange("y", True)
        root.addWidget(self.plot, stretch=2)

        # persistent bar item, updated in place
        self._bar = pg.BarGraphItem(x=[], height=[], width=0.8)
        self.plot.addItem(self._bar)
        self._last_keys = None

        self.table = QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["Key", "Error %", "Hits", "Errors"])
        self.table.horizontalHeader().setStretchLastSection(True)
        root.addWidget(self.table, stretch=1)

        self._apply_filter()

    def _apply_filter(self):
        floor = self.min_hits.value()
        self._filtered = [r for r in self._raw if r[2] >= floor]
        self._render()

    def _render(self):
        keys = [_label(r[0]) for r in self._filtered]
        rates = [int(round(r[1] * 100)) for r in self._filtered]
        x = list(range(len(keys)))

        self._bar.setOpts(x=x, height=rates, width=0.8)
        if keys != self._last_keys:
            self.plot.getAxis("bottom").setTicks([[(i, k) for i, k in enumerate(keys)]])
            self._last_keys = keys

        self.table.setRowCount(len(self._filtered))
        for i, (k, rate, hits, errors) in enumerate(self._filtered):
            self.table.setItem(i, 0, QTableWidgetItem(_label(k)))
            self.table.setItem(i, 1, QTableWidgetItem(f"{rate*100:.0f}%"))
            self.table.setItem(i, 2, QTableWidgetItem(str(hits)))
            self.table.setItem(i, 3, QTableWidgetItem(str(errors)))

    def _export_csv(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Weak Keys", "weak_keys.csv", "CSV (*.csv)"
        )
        if not path:
            return
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["Key", "ErrorPercent", "Hits", "Errors"])
            for k, rate, hits, errors in self._filtered:
                w.writerow([k, f"{rate*100:.0f}", hits, errors])
