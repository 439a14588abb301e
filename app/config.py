# app/config.py
from __future__ import annotations
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict
import json
import logging

logger = logging.getLogger(__name__)

_SETTINGS_FILE = Path("data/settings.json")


@dataclass(frozen=True)
class TutorConfig:
    # curriculum movement (accuracy percent)
    advance_above: float = 90.0
    retreat_below: float = 80.0
    # stagnation
    history_limit: int = 5
    stagnation_window: int = 3
    stagnation_delta: float = 2.0
    # weak keys / drills
    min_hits: int = 5
    error_threshold: float = 0.15
    drill_clusters: int = 10
    drill_cluster_size: int = 4
    drill_delay_ms: int = 1000
    # badges
    wpm_badge: int = 50
    accuracy_badge: int = 90
    # storage
    progress_path: str = "data/progress.json"
    results_db: str = "data/results.db"


DEFAULT_CONFIG = TutorConfig()


def _coerce(current: Any, value: Any) -> Any:
    if isinstance(current, bool) or isinstance(value, bool):
        raise ValueError("booleans are not valid settings")
    if isinstance(current, int):
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if not isinstance(value, int):
            raise ValueError(f"expected int, got {type(value).__name__}")
        return value
    if isinstance(current, float):
        if not isinstance(value, (int, float)):
            raise ValueError(f"expected number, got {type(value).__name__}")
        return float(value)
    if isinstance(current, str):
        if not isinstance(value, str):
            raise ValueError(f"expected string, got {type(value).__name__}")
        return value
    return value


def config_from_dict(d: Dict[str, Any], base: TutorConfig = DEFAULT_CONFIG) -> TutorConfig:
    """Overlay known keys from ``d`` onto ``base``. Unknown or ill-typed keys are skipped."""
    known = {f.name for f in fields(TutorConfig)}
    changes: Dict[str, Any] = {}
    for key, value in d.items():
        if key not in known:
            logger.warning("Ignoring unknown setting %r", key)
            continue
        try:
            changes[key] = _coerce(getattr(base, key), value)
        except ValueError as e:
            logger.warning("Ignoring setting %r: %s", key, e)
    return replace(base, **changes)


def load_config(path: Path | str = _SETTINGS_FILE) -> TutorConfig:
    """Load settings.json (if present) on top of the defaults. Never raises."""
    p = Path(path)
    if not p.exists():
        return DEFAULT_CONFIG
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Failed to read settings from %s: %s", p, e)
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        logger.warning("Settings file %s does not contain an object", p)
        return DEFAULT_CONFIG
    return config_from_dict(data)
