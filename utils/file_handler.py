import json, os
import logging
from pathlib import Path
from typing import Optional

from app.curriculum import LEVEL_ORDER
from app.errors import StorageError
from app.state import Progress

logger = logging.getLogger(__name__)

PROGRESS_PATH = "data/progress.json"


def ensure_app_files(data_dir: str = "data"):
    os.makedirs(data_dir, exist_ok=True)


def read_json(path: Path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise StorageError(f"could not read {path}: {e}") from e


def write_json(path: Path, payload) -> None:
    """Write via a temp file + rename so a failed write leaves the old file intact."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except (OSError, TypeError, ValueError) as e:
        raise StorageError(f"could not write {path}: {e}") from e


class JsonProgressStore:
    """Progress persisted as a single JSON document. Failures are logged, never raised."""

    def __init__(self, path: str = PROGRESS_PATH, history_limit: int = 5):
        self.path = Path(path)
        self.history_limit = history_limit

    def load(self) -> Optional[Progress]:
        if not self.path.exists():
            return None
        try:
            data = read_json(self.path)
        except StorageError as e:
            logger.warning("Could not load progress: %s", e)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed progress file %s", self.path)
            return None
        try:
            return Progress.from_dict(data, default_level=LEVEL_ORDER[0], history_limit=self.history_limit)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring malformed progress file %s: %s", self.path, e)
            return None

    def save(self, progress: Progress) -> bool:
        try:
            write_json(self.path, progress.to_dict())
        except StorageError as e:
            logger.warning("Could not save progress: %s", e)
            return False
        return True
