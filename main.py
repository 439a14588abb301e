# main.py
from __future__ import annotations
import sys
import logging

from PySide6.QtWidgets import QApplication, QMessageBox

from app.config import load_config
from services.adaptive_engine import AdaptiveEngine
from ui.main_window import MainWindow
from utils.file_handler import JsonProgressStore, ensure_app_files


def setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler("app.log", encoding="utf-8"),
        ],
    )

    # Log any uncaught exceptions rather than silently dying
    def excepthook(exctype, value, tb):
        logging.critical("Unhandled exception", exc_info=(exctype, value, tb))
        try:
            QMessageBox.critical(
                None, "Application Error", f"{exctype.__name__}: {value}"
            )
        except RuntimeError:
            pass
        sys.exit(1)

    sys.excepthook = excepthook


def main() -> int:
    setup_logging()
    ensure_app_files()
    config = load_config()

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("Typemaster")
    app.setOrganizationName("Typemaster")

    store = JsonProgressStore(config.progress_path, history_limit=config.history_limit)
    engine = AdaptiveEngine(store, config)
    win = MainWindow(engine, config)
    win.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
