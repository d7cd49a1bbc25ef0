"""
SQLite database layer for the product transactions service.

Holds the single `transactions` collection. It is written only by the seed
operation (a full replace) and read by the listing and statistics endpoints.

Usage:
    from database import DatabaseManager
    from models import TransactionFilter

    db = DatabaseManager()
    db.replace_all(transactions)
    db.find(TransactionFilter(month=3), skip=0, limit=10)
"""

import os
import sqlite3
import threading

from api.config import settings
from errors import RepositoryError
from models import Aggregation, Transaction, TransactionFilter


# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS transactions (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    title         TEXT NOT NULL,
    description   TEXT DEFAULT '',
    price         REAL NOT NULL,
    category      TEXT DEFAULT '',
    image         TEXT DEFAULT '',
    sold          INTEGER NOT NULL DEFAULT 0,
    date_of_sale  TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tx_date_of_sale ON transactions(date_of_sale);
CREATE INDEX IF NOT EXISTS idx_tx_category ON transactions(category);
"""

INSERT_SQL = """
    INSERT INTO transactions
        (title, description, price, category, image, sold, date_of_sale)
    VALUES (?, ?, ?, ?, ?, ?, ?)
"""

SQLITE_MAX_INT = 2**63 - 1


def _escape_like(text: str) -> str:
    """Escape LIKE wildcards so the search term matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_where(flt: TransactionFilter) -> tuple[str, list]:
    """Compile a TransactionFilter into a WHERE clause and bound parameters."""
    clauses = []
    params = []

    if flt.month is not None:
        # Month of the stored UTC timestamp, irrespective of year
        clauses.append("CAST(strftime('%m', date_of_sale) AS INTEGER) = ?")
        params.append(flt.month)

    if flt.search:
        pattern = f"%{_escape_like(flt.search)}%"
        clauses.append(
            "(title LIKE ? ESCAPE '\\'"
            " OR description LIKE ? ESCAPE '\\'"
            " OR CAST(price AS TEXT) LIKE ? ESCAPE '\\')"
        )
        params.extend([pattern, pattern, pattern])

    if flt.sold is not None:
        clauses.append("sold = ?")
        params.append(1 if flt.sold else 0)

    if not clauses:
        return "", []
    return "WHERE " + " AND ".join(clauses), params


def _row_to_transaction(row: sqlite3.Row) -> Transaction:
    return Transaction(
        id=row["id"],
        title=row["title"],
        description=row["description"] or "",
        price=row["price"],
        category=row["category"] or "",
        image=row["image"] or "",
        sold=bool(row["sold"]),
        date_of_sale=row["date_of_sale"],
    )


class DatabaseManager:
    """
    SQLite-backed repository for Transaction records.

    One connection is shared by every API worker thread; a re-entrant lock
    serializes access so a replace is observed as a single step.
    """

    def __init__(self, db_uri: str = None):
        self.db_uri = db_uri or settings.DATABASE_URI

        is_uri = self.db_uri.startswith("file:")
        if not is_uri and self.db_uri != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(self.db_uri)), exist_ok=True)

        self._lock = threading.RLock()
        try:
            self.conn = sqlite3.connect(
                self.db_uri,
                uri=is_uri,
                check_same_thread=False,
                timeout=settings.DB_TIMEOUT,
            )
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.row_factory = sqlite3.Row
            self._create_schema()
        except sqlite3.Error as e:
            raise RepositoryError(f"Failed to open database {self.db_uri}: {e}") from e

    def _create_schema(self):
        self.conn.executescript(SCHEMA_SQL)
        self.conn.commit()

    def close(self):
        self.conn.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def replace_all(self, transactions: list[Transaction]) -> int:
        """
        Delete every stored transaction and insert the given ones.

        Both steps run in one SQLite transaction: if the insert fails the
        delete is rolled back and the previous collection stays in place.

        Returns:
            Number of records inserted
        """
        rows = [
            (
                t.title,
                t.description,
                t.price,
                t.category,
                t.image,
                1 if t.sold else 0,
                t.date_of_sale.isoformat(timespec="seconds"),
            )
            for t in transactions
        ]
        with self._lock:
            try:
                with self.conn:
                    self.conn.execute("DELETE FROM transactions")
                    self.conn.executemany(INSERT_SQL, rows)
            except sqlite3.Error as e:
                raise RepositoryError(f"Failed to replace transactions: {e}") from e
        return len(rows)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find(self, flt: TransactionFilter, skip: int = 0, limit: int = None) -> list[Transaction]:
        """
        Return transactions matching a filter in insertion order.

        Args:
            flt: Filter to apply
            skip: Number of matching records to skip
            limit: Max records to return (None for all)
        """
        where, params = build_where(flt)
        sql = f"SELECT * FROM transactions {where} ORDER BY id LIMIT ? OFFSET ?"
        # SQLite binds 64-bit integers; larger values mean "all" or "past the end"
        if limit is None or limit > SQLITE_MAX_INT:
            limit = -1
        params = params + [limit, min(skip, SQLITE_MAX_INT)]
        rows = self._fetch(sql, params)
        return [_row_to_transaction(r) for r in rows]

    def count(self, flt: TransactionFilter) -> int:
        """Count transactions matching a filter."""
        where, params = build_where(flt)
        rows = self._fetch(f"SELECT COUNT(*) AS n FROM transactions {where}", params)
        return rows[0]["n"]

    def aggregate(self, pipeline: Aggregation) -> list[dict]:
        """
        Run a grouped reduction.

        Returns:
            List of {"_id": group key, "value": accumulated value}, ordered
            by group key. Without a group key, a single row with _id None.
        """
        where, params = build_where(pipeline.match)
        group = pipeline.group_by or "NULL"
        sql = f"SELECT {group} AS _id, {pipeline.accumulator} AS value FROM transactions {where}"
        if pipeline.group_by:
            sql += " GROUP BY _id ORDER BY _id"
        return [dict(r) for r in self._fetch(sql, params)]

    # ------------------------------------------------------------------
    # Generic query
    # ------------------------------------------------------------------

    def query(self, sql: str, params: tuple = ()) -> list[dict]:
        """Execute a raw SQL query and return results as list of dicts."""
        return [dict(r) for r in self._fetch(sql, params)]

    def _fetch(self, sql: str, params) -> list[sqlite3.Row]:
        with self._lock:
            try:
                cur = self.conn.execute(sql, tuple(params))
                return cur.fetchall()
            except (sqlite3.Error, OverflowError) as e:
                raise RepositoryError(f"Query failed: {e}") from e
