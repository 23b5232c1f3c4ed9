from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .config import DB_PATH, ensure_data_directories
from .moods import LEGACY_MOOD_ALIASES

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS users (
    uid TEXT PRIMARY KEY,
    display_name TEXT,
    savings REAL NOT NULL DEFAULT 0,
    last_budget_reset TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS budgets (
    user_id TEXT PRIMARY KEY,
    total_budget REAL NOT NULL DEFAULT 0,
    remaining_budget REAL NOT NULL DEFAULT 0,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT,
    description TEXT,
    amount REAL NOT NULL,
    date TEXT NOT NULL,
    mood TEXT NOT NULL,
    timestamp REAL,
    created_at TEXT,
    updated_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_txn_user_date ON transactions (user_id, date);
CREATE INDEX IF NOT EXISTS ix_txn_mood ON transactions (mood);

CREATE TABLE IF NOT EXISTS notifications (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    message TEXT NOT NULL,
    type TEXT NOT NULL DEFAULT 'info',
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_notif_user ON notifications (user_id, created_at);

CREATE TABLE IF NOT EXISTS conversations (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    last_message TEXT DEFAULT '',
    unread_count INTEGER DEFAULT 0,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS messages (
    id TEXT PRIMARY KEY,
    conversation_id TEXT NOT NULL,
    text TEXT NOT NULL,
    sender TEXT NOT NULL,
    timestamp TEXT
);

CREATE INDEX IF NOT EXISTS ix_msg_conversation ON messages (conversation_id, timestamp);
"""

TRANSACTION_FIELDS = ('title', 'description', 'amount', 'date', 'mood', 'timestamp')
BUDGET_FIELDS = ('total_budget', 'remaining_budget')
USER_FIELDS = ('display_name', 'savings', 'last_budget_reset')
CONVERSATION_FIELDS = ('name', 'last_message', 'unread_count')


def _now() -> str:
    return datetime.now().isoformat()


def new_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def connect() -> Iterator[sqlite3.Connection]:
    ensure_data_directories()
    Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db() -> None:
    with connect() as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
        _migrate_database(conn)


def _migrate_database(conn: sqlite3.Connection) -> None:
    """Add columns introduced after the first release and canonicalize moods."""
    cursor = conn.cursor()

    cursor.execute("PRAGMA table_info(transactions)")
    existing_columns = [row[1] for row in cursor.fetchall()]
    new_columns = [
        ('timestamp', 'REAL'),
        ('updated_at', 'TEXT'),
    ]
    for column_name, column_type in new_columns:
        if column_name not in existing_columns:
            try:
                cursor.execute(f"ALTER TABLE transactions ADD COLUMN {column_name} {column_type}")
                logger.info("Added column %s to transactions table", column_name)
            except sqlite3.OperationalError as e:
                if "duplicate column name" not in str(e):
                    raise

    _rewrite_legacy_moods(cursor)
    conn.commit()


def _rewrite_legacy_moods(cursor: sqlite3.Cursor) -> Dict[str, int]:
    changed: Dict[str, int] = {}
    for alias, mood in LEGACY_MOOD_ALIASES.items():
        cursor.execute("UPDATE transactions SET mood = ? WHERE lower(trim(mood)) = ?", (mood.value, alias))
        if cursor.rowcount:
            changed[alias] = cursor.rowcount
            logger.info("Migrated %d transactions from mood '%s' to '%s'", cursor.rowcount, alias, mood.value)
    return changed


def count_legacy_moods() -> Dict[str, int]:
    """Number of stored transactions per legacy mood alias (only non-zero)."""
    placeholders = ",".join("?" for _ in LEGACY_MOOD_ALIASES)
    sql = (
        "SELECT lower(trim(mood)) AS alias, COUNT(*) AS n FROM transactions "
        f"WHERE lower(trim(mood)) IN ({placeholders}) GROUP BY lower(trim(mood))"
    )
    with connect() as conn:
        rows = conn.execute(sql, list(LEGACY_MOOD_ALIASES)).fetchall()
    return {row['alias']: row['n'] for row in rows}


def migrate_legacy_moods() -> Dict[str, int]:
    """Rewrite legacy mood tags in place. Returns per-alias counts."""
    with connect() as conn:
        changed = _rewrite_legacy_moods(conn.cursor())
        conn.commit()
    return changed


def _row_to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    return dict(row) if row is not None else None


def _update(table: str, key_column: str, key: Any, fields: Dict[str, Any], allowed: tuple, stamp: Optional[str] = None) -> bool:
    updates = []
    params: List[Any] = []
    for name, value in fields.items():
        if name not in allowed:
            raise ValueError(f"Unknown {table} field: {name}")
        updates.append(f"{name} = ?")
        params.append(value)
    if stamp:
        updates.append(f"{stamp} = ?")
        params.append(_now())
    if not updates:
        return False
    params.append(key)
    sql = f"UPDATE {table} SET {', '.join(updates)} WHERE {key_column} = ?"
    with connect() as conn:
        cursor = conn.cursor()
        cursor.execute(sql, params)
        conn.commit()
        return cursor.rowcount > 0


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def ensure_user(uid: str, display_name: Optional[str] = None) -> Dict[str, Any]:
    with connect() as conn:
        conn.execute(
            "INSERT OR IGNORE INTO users (uid, display_name, savings, created_at) VALUES (?, ?, 0, ?)",
            (uid, display_name or uid, _now()),
        )
        conn.commit()
    return fetch_user(uid)


def fetch_user(uid: str) -> Optional[Dict[str, Any]]:
    with connect() as conn:
        row = conn.execute("SELECT * FROM users WHERE uid = ?", (uid,)).fetchone()
    return _row_to_dict(row)


def fetch_user_ids() -> List[str]:
    with connect() as conn:
        rows = conn.execute("SELECT uid FROM users ORDER BY uid").fetchall()
    return [row['uid'] for row in rows]


def update_user(uid: str, **fields: Any) -> bool:
    return _update('users', 'uid', uid, fields, USER_FIELDS)


def increment_savings(uid: str, delta: float) -> float:
    """Atomically add ``delta`` to a user's savings and return the new balance."""
    with connect() as conn:
        conn.execute("UPDATE users SET savings = savings + ? WHERE uid = ?", (delta, uid))
        conn.commit()
        row = conn.execute("SELECT savings FROM users WHERE uid = ?", (uid,)).fetchone()
    return float(row['savings']) if row else 0.0


# ---------------------------------------------------------------------------
# Budget
# ---------------------------------------------------------------------------


def fetch_budget(user_id: str) -> Dict[str, Any]:
    """Return the user's budget row, creating a zeroed one if missing."""
    with connect() as conn:
        row = conn.execute("SELECT * FROM budgets WHERE user_id = ?", (user_id,)).fetchone()
        if row is None:
            conn.execute(
                "INSERT INTO budgets (user_id, total_budget, remaining_budget, updated_at) VALUES (?, 0, 0, ?)",
                (user_id, _now()),
            )
            conn.commit()
            row = conn.execute("SELECT * FROM budgets WHERE user_id = ?", (user_id,)).fetchone()
    return dict(row)


def update_budget(user_id: str, **fields: Any) -> bool:
    fetch_budget(user_id)
    return _update('budgets', 'user_id', user_id, fields, BUDGET_FIELDS, stamp='updated_at')


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def insert_transaction(user_id: str, record: Dict[str, Any]) -> str:
    txn_id = record.get('id') or new_id()
    with connect() as conn:
        conn.execute(
            "INSERT INTO transactions (id, user_id, title, description, amount, date, mood, timestamp, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                txn_id,
                user_id,
                record.get('title'),
                record.get('description'),
                record['amount'],
                record['date'],
                record['mood'],
                record.get('timestamp'),
                _now(),
            ),
        )
        conn.commit()
    return txn_id


def fetch_transaction(txn_id: str) -> Optional[Dict[str, Any]]:
    with connect() as conn:
        row = conn.execute("SELECT * FROM transactions WHERE id = ?", (txn_id,)).fetchone()
    return _row_to_dict(row)


def fetch_transactions(user_id: str, order: str = 'desc') -> List[Dict[str, Any]]:
    direction = 'DESC' if order == 'desc' else 'ASC'
    sql = f"SELECT * FROM transactions WHERE user_id = ? ORDER BY date {direction}, rowid {direction}"
    with connect() as conn:
        rows = conn.execute(sql, (user_id,)).fetchall()
    return [dict(row) for row in rows]


def update_transaction(txn_id: str, **fields: Any) -> bool:
    """Partial update. Returns True if a row changed."""
    return _update('transactions', 'id', txn_id, fields, TRANSACTION_FIELDS, stamp='updated_at')


def delete_transaction(txn_id: str) -> bool:
    with connect() as conn:
        cursor = conn.execute("DELETE FROM transactions WHERE id = ?", (txn_id,))
        conn.commit()
        return cursor.rowcount > 0


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


def insert_notification(user_id: str, message: str, type_: str = 'info') -> Dict[str, Any]:
    record = {'id': new_id(), 'user_id': user_id, 'message': message, 'type': type_, 'created_at': _now()}
    with connect() as conn:
        conn.execute(
            "INSERT INTO notifications (id, user_id, message, type, created_at) VALUES (?, ?, ?, ?, ?)",
            (record['id'], user_id, message, type_, record['created_at']),
        )
        conn.commit()
    return record


def fetch_notifications(user_id: str) -> List[Dict[str, Any]]:
    with connect() as conn:
        rows = conn.execute(
            "SELECT * FROM notifications WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
            (user_id,),
        ).fetchall()
    return [dict(row) for row in rows]


def delete_notification(notification_id: str) -> bool:
    with connect() as conn:
        cursor = conn.execute("DELETE FROM notifications WHERE id = ?", (notification_id,))
        conn.commit()
        return cursor.rowcount > 0


# ---------------------------------------------------------------------------
# Conversations and messages
# ---------------------------------------------------------------------------


def insert_conversation(user_id: str, name: str = 'New Chat') -> Dict[str, Any]:
    record = {
        'id': new_id(),
        'user_id': user_id,
        'name': name,
        'last_message': '',
        'unread_count': 0,
        'created_at': _now(),
    }
    with connect() as conn:
        conn.execute(
            "INSERT INTO conversations (id, user_id, name, last_message, unread_count, created_at) "
            "VALUES (:id, :user_id, :name, :last_message, :unread_count, :created_at)",
            record,
        )
        conn.commit()
    return record


def fetch_conversation(conversation_id: str) -> Optional[Dict[str, Any]]:
    with connect() as conn:
        row = conn.execute("SELECT * FROM conversations WHERE id = ?", (conversation_id,)).fetchone()
    return _row_to_dict(row)


def fetch_conversations(user_id: str) -> List[Dict[str, Any]]:
    with connect() as conn:
        rows = conn.execute(
            "SELECT * FROM conversations WHERE user_id = ? ORDER BY created_at ASC, rowid ASC",
            (user_id,),
        ).fetchall()
    return [dict(row) for row in rows]


def update_conversation(conversation_id: str, **fields: Any) -> bool:
    return _update('conversations', 'id', conversation_id, fields, CONVERSATION_FIELDS)


def delete_conversation(conversation_id: str) -> bool:
    with connect() as conn:
        conn.execute("DELETE FROM messages WHERE conversation_id = ?", (conversation_id,))
        cursor = conn.execute("DELETE FROM conversations WHERE id = ?", (conversation_id,))
        conn.commit()
        return cursor.rowcount > 0


def insert_message(conversation_id: str, text: str, sender: str) -> Dict[str, Any]:
    record = {
        'id': new_id(),
        'conversation_id': conversation_id,
        'text': text,
        'sender': sender,
        'timestamp': _now(),
    }
    with connect() as conn:
        conn.execute(
            "INSERT INTO messages (id, conversation_id, text, sender, timestamp) "
            "VALUES (:id, :conversation_id, :text, :sender, :timestamp)",
            record,
        )
        conn.commit()
    return record


def fetch_messages(conversation_id: str) -> List[Dict[str, Any]]:
    with connect() as conn:
        rows = conn.execute(
            "SELECT * FROM messages WHERE conversation_id = ? ORDER BY timestamp ASC, rowid ASC",
            (conversation_id,),
        ).fetchall()
    return [dict(row) for row in rows]
