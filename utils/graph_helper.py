from typing import List
import pyqtgraph as pg


def setup_plot(plot_widget: pg.PlotWidget, left_label: str):
    plot_widget.setBackground(None)
    plot_widget.showGrid(x=False, y=True, alpha=0.15)
    plot_widget.setMenuEnabled(False)
    plot_widget.setMouseEnabled(x=False, y=False)
    plot_widget.hideButtons()
    plot_widget.setClipToView(True)
    plot_widget.setLabel("left", left_label)


def wpm_curve(plot_widget: pg.PlotWidget, y: List[float], line_color: str = "#eab308"):
    setup_plot(plot_widget, "WPM")
    plot_widget.setLabel("bottom", "Keystroke")
    x = list(range(1, len(y) + 1))
    return plot_widget.plot(x, y, pen=pg.mkPen(line_color, width=2.5), antialias=True)
