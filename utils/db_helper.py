import sqlite3, os
from typing import Dict, List

from app.errors import StorageError

DB_PATH = "data/results.db"


def _ensure_schema(conn):
    conn.execute("""
    CREATE TABLE IF NOT EXISTS results(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        lesson TEXT NOT NULL,
        is_drill INTEGER NOT NULL DEFAULT 0,
        wpm INTEGER,
        accuracy INTEGER,
        reaction INTEGER,
        duration REAL,
        weak_keys_json TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );
    """)


def get_conn(db_path: str = DB_PATH):
    folder = os.path.dirname(db_path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    _ensure_schema(conn)
    return conn


def insert_result(
    lesson: str,
    is_drill: bool,
    wpm: int,
    accuracy: int,
    reaction: int,
    duration: float,
    weak_keys_json: str,
    db_path: str = DB_PATH,
) -> int:
    conn = None
    try:
        conn = get_conn(db_path)
        cur = conn.execute(
            "INSERT INTO results(lesson, is_drill, wpm, accuracy, reaction, duration, weak_keys_json)"
            " VALUES (?,?,?,?,?,?,?)",
            (lesson, int(is_drill), wpm, accuracy, reaction, duration, weak_keys_json),
        )
        conn.commit()
        return int(cur.lastrowid)
    except (sqlite3.Error, OSError) as e:
        raise StorageError(str(e)) from e
    finally:
        if conn is not None:
            conn.close()


def recent_results(limit: int = 20, db_path: str = DB_PATH) -> List[Dict]:
    """Newest first."""
    conn = None
    try:
        conn = get_conn(db_path)
        rows = conn.execute(
            "SELECT lesson, is_drill, wpm, accuracy, reaction, duration, weak_keys_json, created_at"
            " FROM results ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [dict(row, is_drill=bool(row["is_drill"])) for row in rows]
    except (sqlite3.Error, OSError) as e:
        raise StorageError(str(e)) from e
    finally:
        if conn is not None:
            conn.close()
