# services/weakkeys.py
from __future__ import annotations
from typing import Dict, List, Sequence, Tuple
import random

from app.state import KeyStat

MUSCLE_MEMORY_ROUTINE = "asdf jkl; fdsa ;lkj asdfg hjkl; gfdsa ;lkjh"


def high_error_keys(
    error_rates: Dict[str, KeyStat],
    threshold: float = 0.15,
    min_hits: int = 5,
) -> List[str]:
    """Keys seen at least ``min_hits`` times whose error rate is >= threshold, in insertion order."""
    out = []
    for key, stat in error_rates.items():
        if stat.hits >= min_hits and stat.errors / stat.hits >= threshold:
            out.append(key)
    return out


def ranked(error_rates: Dict[str, KeyStat]) -> List[Tuple[str, float, int, int]]:
    """(key, error_rate, hits, errors) sorted worst first, then by volume."""
    rows = [(k, v.error_rate, v.hits, v.errors) for k, v in error_rates.items() if v.hits]
    return sorted(rows, key=lambda r: (-r[1], -r[2]))


def generate_drill(
    keys: Sequence[str],
    rng: random.Random,
    clusters: int = 10,
    size: int = 4,
) -> str:
    """Space-separated clusters of characters drawn uniformly (with replacement) from keys."""
    if not keys:
        return ""
    pool = list(keys)
    parts = ["".join(rng.choice(pool) for _ in range(size)) for _ in range(clusters)]
    return " ".join(parts)
