"""
Database Management Module

Local transaction store backing the export/import pipeline:
- SQLite connection management
- Fetch all transactions, newest first
- Single and all-or-nothing batch inserts
- Integrity check with corrupt-file quarantine
"""

import math
import sqlite3
import shutil
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from transaction_vault.core.errors import EncodingError
from transaction_vault.core.models import Category, Transaction
from transaction_vault.utils import constants

logger = logging.getLogger("transaction_vault")


_EPOCH = datetime(1970, 1, 1)
_EPOCH_UTC = _EPOCH.replace(tzinfo=timezone.utc)


def _sort_key(date: datetime) -> float:
    # Naive datetimes count as UTC; timestamp() would go through local time and
    # overflow at the ends of the datetime range
    epoch = _EPOCH if date.tzinfo is None else _EPOCH_UTC
    return (date - epoch).total_seconds()


class DatabaseManager:
    """
    SQLite-backed transaction store.

    Implements the two operations the transfer pipeline needs:
    get_all() for export and insert()/insert_many() for import.
    Every insert assigns a fresh id; ids inside an export file are
    never reused as storage identity.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Open (or create) the database and ensure the schema exists."""
        self.db_path = Path(db_path) if db_path is not None else constants.DB_FILE
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_integrity()
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.cursor = self.conn.cursor()
        self._init_tables()

    @property
    def lock_path(self) -> Path:
        """Path of the file lock guarding this store."""
        return self.db_path.with_name(self.db_path.name + '.lock')

    def _ensure_integrity(self):
        """
        Check database integrity before opening.
        Moves a corrupted database aside so a fresh one can be created.
        """
        if not self.db_path.exists():
            return
        conn = None
        try:
            conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
            result = conn.execute("PRAGMA integrity_check").fetchone()
            healthy = result is not None and result[0] == 'ok'
        except sqlite3.DatabaseError as e:
            logger.error(f"[DB] Integrity check failed: {e}")
            healthy = False
        finally:
            if conn:
                conn.close()
        if not healthy:
            self._recover_db()

    def _recover_db(self):
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        corrupt_path = self.db_path.with_name(f"CORRUPT_{timestamp}_{self.db_path.name}")
        shutil.move(str(self.db_path), str(corrupt_path))
        logger.error(f"[DB] Database corrupted. Moved to {corrupt_path}. Created fresh DB.")

    def _init_tables(self):
        self.cursor.execute('''CREATE TABLE IF NOT EXISTS transactions (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            date TEXT NOT NULL,
            sort_ts REAL NOT NULL,
            amount REAL NOT NULL,
            category TEXT NOT NULL
        )''')
        self.cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_transactions_sort ON transactions (sort_ts)"
        )
        self.conn.commit()

    @staticmethod
    def _row_values(record: Transaction):
        amount = float(record.amount)
        if not math.isfinite(amount):
            raise EncodingError(f"Transaction amount must be finite, got {amount}")
        return (
            record.id,
            record.name,
            record.date.isoformat(),
            _sort_key(record.date),
            amount,
            Category(record.category).value,
        )

    @staticmethod
    def _row_to_transaction(row) -> Transaction:
        record_id, name, date, amount, category = row
        return Transaction(
            name=name,
            date=datetime.fromisoformat(date),
            amount=float(amount),
            category=Category(category),
            id=record_id,
        )

    def get_all(self) -> List[Transaction]:
        """
        Retrieve all transactions sorted by date, newest first.

        Returns:
            List of Transaction records
        """
        rows = self.cursor.execute(
            "SELECT id, name, date, amount, category FROM transactions "
            "ORDER BY sort_ts DESC, rowid DESC"
        ).fetchall()
        return [self._row_to_transaction(r) for r in rows]

    def get_frame(self) -> pd.DataFrame:
        """All transactions as a DataFrame, newest first."""
        return pd.read_sql_query(
            "SELECT id, name, date, amount, category FROM transactions "
            "ORDER BY sort_ts DESC, rowid DESC",
            self.conn,
        )

    def insert(self, record: Transaction) -> Transaction:
        """
        Insert one transaction under a freshly assigned id.

        Returns:
            The stored record (with its new id)
        """
        stored = record.with_new_id()
        with self.conn:
            self.conn.execute(
                "INSERT INTO transactions (id, name, date, sort_ts, amount, category) "
                "VALUES (?,?,?,?,?,?)",
                self._row_values(stored),
            )
        return stored

    def insert_many(self, records: Iterable[Transaction]) -> List[Transaction]:
        """
        Insert several transactions in one SQLite transaction.
        Either all rows are committed or none are.
        """
        stored = [r.with_new_id() for r in records]
        with self.conn:
            self.conn.executemany(
                "INSERT INTO transactions (id, name, date, sort_ts, amount, category) "
                "VALUES (?,?,?,?,?,?)",
                [self._row_values(r) for r in stored],
            )
        return stored

    def delete(self, record_id: str) -> bool:
        """Delete a transaction. Returns True if a row was removed."""
        with self.conn:
            cur = self.conn.execute("DELETE FROM transactions WHERE id = ?", (record_id,))
        return cur.rowcount > 0

    def count(self) -> int:
        return self.cursor.execute("SELECT COUNT(*) FROM transactions").fetchone()[0]

    def close(self):
        """Close database connection."""
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
