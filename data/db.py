import json
import sqlite3
import threading
from datetime import datetime


def connect_db(path):
    """Connect to SQLite database and ensure the offline queue table exists."""
    db_lock = threading.Lock()
    db = sqlite3.connect(path, check_same_thread=False)
    cur = db.cursor()
    cur.execute(
        "CREATE TABLE IF NOT EXISTS pending_writes ("
        "id INTEGER PRIMARY KEY AUTOINCREMENT, method TEXT, tbl TEXT, "
        "filter TEXT, body TEXT, queued_at TEXT)"
    )
    db.commit()
    return db, db_lock


def queue_write(db, db_lock, method, table, body, filter_=None):
    """Store a write that could not reach the table store."""
    with db_lock:
        cur = db.cursor()
        cur.execute(
            "INSERT INTO pending_writes(method, tbl, filter, body, queued_at) VALUES (?, ?, ?, ?, ?)",
            (
                method,
                table,
                filter_,
                json.dumps(body),
                datetime.now().isoformat(sep=" ", timespec="seconds"),
            ),
        )
        db.commit()
        return cur.lastrowid


def load_pending(db, db_lock):
    """Return queued writes oldest first."""
    with db_lock:
        cur = db.cursor()
        cur.execute(
            "SELECT id, method, tbl, filter, body, queued_at FROM pending_writes ORDER BY id"
        )
        rows = [
            {
                "id": r[0],
                "method": r[1],
                "table": r[2],
                "filter": r[3],
                "body": json.loads(r[4]),
                "queued_at": r[5],
            }
            for r in cur.fetchall()
        ]
    return rows


def delete_pending(db, db_lock, write_id):
    with db_lock:
        db.execute("DELETE FROM pending_writes WHERE id=?", (write_id,))
        db.commit()
