"""SQLite storage for categories, budgets and transactions."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Tuple, TypeVar, Union

import pandas as pd

from . import config
from .errors import NotFoundError, ProtectedCategoryError, ValidationError
from .models import (
    Budget,
    Category,
    Period,
    Transaction,
    name_key,
    parse_amount,
    parse_budget_amount,
    parse_color,
    parse_date,
    parse_name,
)
from .settings import get_default_categories

logger = logging.getLogger(__name__)

T = TypeVar('T')

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    name_key TEXT NOT NULL,
    icon TEXT NOT NULL DEFAULT '',
    color TEXT NOT NULL,
    is_custom INTEGER NOT NULL DEFAULT 1,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE UNIQUE INDEX IF NOT EXISTS ux_category_name
ON categories (user_id, name_key);

CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    category_id INTEGER NOT NULL UNIQUE REFERENCES categories(id) ON DELETE CASCADE,
    amount TEXT NOT NULL,
    period TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    category_id INTEGER REFERENCES categories(id) ON DELETE CASCADE,
    amount TEXT NOT NULL,
    transaction_date TEXT NOT NULL,
    description TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS ix_txn_user_date ON transactions (user_id, transaction_date);
CREATE INDEX IF NOT EXISTS ix_txn_category ON transactions (category_id);
"""

CATEGORY_COLUMNS = "id, user_id, name, icon, color, is_custom"
BUDGET_COLUMNS = "id, category_id, amount, period"
TRANSACTION_COLUMNS = "id, user_id, category_id, amount, transaction_date, description"


def _rows_to_records(rows: List[sqlite3.Row], factory: Callable[[sqlite3.Row], T]) -> List[T]:
    records: List[T] = []
    for row in rows:
        try:
            records.append(factory(row))
        except ValidationError as exc:
            logger.debug("Skipping malformed row %s: %s", dict(row), exc)
    return records


class FinanceStore:
    """SQLite-backed store for categories, budgets and transactions.

    Each public method opens its own connection and either commits or rolls
    back before returning, so a failed call leaves no partial writes.
    """

    def __init__(self, db_path: Union[str, Path, None] = None):
        """Initialize the store.

        Args:
            db_path: Optional path to the SQLite file.
                     Defaults to DB_PATH from config.
        """
        self.db_path = Path(db_path) if db_path is not None else config.DB_PATH

    # Connection -------------------------------------------------------------

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Connection whose writes are committed together or not at all."""
        with self.connect() as conn:
            try:
                yield conn
                conn.commit()
            except BaseException:
                conn.rollback()
                raise

    def init_db(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    # Categories -------------------------------------------------------------

    def _fetch_category(self, conn: sqlite3.Connection, category_id: int) -> Category:
        row = conn.execute(
            f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE id = ?", (category_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError('Category', category_id)
        return Category.from_row(row)

    def _ensure_unique_name(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        name: str,
        exclude_id: Optional[int] = None,
    ) -> None:
        sql = "SELECT id FROM categories WHERE user_id = ? AND name_key = ?"
        params: List[Any] = [user_id, name_key(name)]
        if exclude_id is not None:
            sql += " AND id != ?"
            params.append(exclude_id)
        if conn.execute(sql, params).fetchone() is not None:
            raise ValidationError(f"A category named '{name}' already exists")

    def get_category(self, category_id: int) -> Category:
        with self.connect() as conn:
            return self._fetch_category(conn, category_id)

    def list_categories(self, user_id: str) -> List[Category]:
        with self.connect() as conn:
            rows = conn.execute(
                f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE user_id = ? ORDER BY name COLLATE NOCASE",
                (user_id,),
            ).fetchall()
        return _rows_to_records(rows, Category.from_row)

    def add_category(
        self,
        user_id: str,
        name: str,
        icon: str = '',
        color: str = '#4ECDC4',
        is_custom: bool = True,
    ) -> Category:
        """Create a category.

        Raises:
            ValidationError: If the name is empty or already used by this user
                             (case-insensitive), or the colour is malformed
        """
        name = parse_name(name)
        color = parse_color(color)
        with self.transaction() as conn:
            self._ensure_unique_name(conn, user_id, name)
            try:
                cursor = conn.execute(
                    "INSERT INTO categories (user_id, name, name_key, icon, color, is_custom) VALUES (?, ?, ?, ?, ?, ?)",
                    (user_id, name, name_key(name), icon or '', color, int(bool(is_custom))),
                )
            except sqlite3.IntegrityError as exc:
                raise ValidationError(f"A category named '{name}' already exists") from exc
            category = self._fetch_category(conn, cursor.lastrowid)
        logger.info("Created category %s (%s) for user %s", category.id, category.name, user_id)
        return category

    def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Category:
        updates = []
        params: List[Any] = []
        with self.transaction() as conn:
            current = self._fetch_category(conn, category_id)
            if name is not None:
                name = parse_name(name)
                self._ensure_unique_name(conn, current.user_id, name, exclude_id=category_id)
                updates.append("name = ?, name_key = ?")
                params.extend([name, name_key(name)])
            if icon is not None:
                updates.append("icon = ?")
                params.append(icon)
            if color is not None:
                updates.append("color = ?")
                params.append(parse_color(color))
            if not updates:
                return current
            params.append(category_id)
            conn.execute(f"UPDATE categories SET {', '.join(updates)} WHERE id = ?", params)
            return self._fetch_category(conn, category_id)

    def missing_default_categories(self, user_id: str) -> List[dict]:
        """Predefined category entries this user does not have yet."""
        defaults = get_default_categories()
        existing = {name_key(c.name) for c in self.list_categories(user_id)}
        return [entry for entry in defaults if name_key(entry['name']) not in existing]

    def seed_default_categories(self, user_id: str, limit: Optional[int] = None) -> List[Category]:
        """Create the predefined categories this user does not have yet.

        Args:
            user_id: Owner of the new categories
            limit: Create at most this many; ``None`` creates all of them
        """
        created: List[Category] = []
        for entry in self.missing_default_categories(user_id):
            if limit is not None and len(created) >= limit:
                break
            created.append(self.add_category(
                user_id,
                entry['name'],
                icon=entry.get('icon', ''),
                color=entry.get('color', '#4ECDC4'),
                is_custom=False,
            ))
        return created

    def delete_category(self, category_id: int) -> None:
        """Delete a custom category together with its budget and transactions.

        Raises:
            NotFoundError: If the category does not exist
            ProtectedCategoryError: If the category is predefined
        """
        with self.transaction() as conn:
            category = self._fetch_category(conn, category_id)
            if not category.is_custom:
                logger.warning("Refusing to delete predefined category %s (%s)", category.id, category.name)
                raise ProtectedCategoryError(category.id, category.name)
            removed = conn.execute(
                "DELETE FROM transactions WHERE category_id = ?", (category_id,)
            ).rowcount
            conn.execute("DELETE FROM budgets WHERE category_id = ?", (category_id,))
            conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        logger.info(
            "Deleted category %s (%s) and %d transaction(s)", category.id, category.name, removed
        )

    def count_categories(self, user_id: str) -> int:
        with self.connect() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM categories WHERE user_id = ?", (user_id,)
            ).fetchone()[0]

    # Budgets ----------------------------------------------------------------

    def _fetch_budget(self, conn: sqlite3.Connection, category_id: int) -> Optional[Budget]:
        row = conn.execute(
            f"SELECT {BUDGET_COLUMNS} FROM budgets WHERE category_id = ?", (category_id,)
        ).fetchone()
        return Budget.from_row(row) if row is not None else None

    def get_budget(self, category_id: int) -> Optional[Budget]:
        with self.connect() as conn:
            return self._fetch_budget(conn, category_id)

    def list_categories_with_budgets(self, user_id: str) -> List[Tuple[Category, Optional[Budget]]]:
        sql = (
            "SELECT c.id, c.user_id, c.name, c.icon, c.color, c.is_custom, "
            "b.id AS budget_id, b.amount, b.period "
            "FROM categories c LEFT JOIN budgets b ON b.category_id = c.id "
            "WHERE c.user_id = ? ORDER BY c.name COLLATE NOCASE"
        )
        with self.connect() as conn:
            rows = conn.execute(sql, (user_id,)).fetchall()

        pairs: List[Tuple[Category, Optional[Budget]]] = []
        for row in rows:
            try:
                category = Category.from_row(row)
            except ValidationError as exc:
                logger.debug("Skipping malformed category row %s: %s", dict(row), exc)
                continue
            budget = None
            if row['budget_id'] is not None:
                try:
                    budget = Budget(
                        id=row['budget_id'],
                        category_id=category.id,
                        amount=parse_budget_amount(row['amount']),
                        period=Period.parse(row['period']),
                    )
                except ValidationError as exc:
                    logger.debug("Ignoring malformed budget for category %s: %s", category.id, exc)
            pairs.append((category, budget))
        return pairs

    def upsert_budget(self, category_id: int, amount: Any, period: Union[Period, str]) -> Budget:
        """Create the category's budget or overwrite its amount and period.

        Raises:
            NotFoundError: If the category does not exist
            ValidationError: If the amount is not positive or the period unknown
        """
        amount = parse_budget_amount(amount)
        period = Period.parse(period)
        with self.transaction() as conn:
            self._fetch_category(conn, category_id)
            conn.execute(
                "INSERT INTO budgets (category_id, amount, period) VALUES (?, ?, ?) "
                "ON CONFLICT(category_id) DO UPDATE SET amount = excluded.amount, "
                "period = excluded.period, updated_at = CURRENT_TIMESTAMP",
                (category_id, str(amount), period.value),
            )
            budget = self._fetch_budget(conn, category_id)
        logger.info("Set %s budget of %s for category %s", period.value, amount, category_id)
        return budget

    def delete_budget(self, category_id: int) -> None:
        with self.transaction() as conn:
            removed = conn.execute(
                "DELETE FROM budgets WHERE category_id = ?", (category_id,)
            ).rowcount
        if not removed:
            raise NotFoundError('Budget for category', category_id)
        logger.info("Deleted budget for category %s", category_id)

    def count_budgets(self, user_id: str) -> int:
        """Number of this user's categories that have a positive budget."""
        with self.connect() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM budgets b JOIN categories c ON c.id = b.category_id "
                "WHERE c.user_id = ? AND CAST(b.amount AS REAL) > 0",
                (user_id,),
            ).fetchone()[0]

    # Transactions -----------------------------------------------------------

    def _fetch_transaction(self, conn: sqlite3.Connection, transaction_id: int) -> Transaction:
        row = conn.execute(
            f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE id = ?", (transaction_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError('Transaction', transaction_id)
        return Transaction.from_row(row)

    def _check_category_owner(self, conn: sqlite3.Connection, category_id: int, user_id: str) -> None:
        category = self._fetch_category(conn, category_id)
        if category.user_id != user_id:
            raise NotFoundError('Category', category_id)

    def add_transaction(
        self,
        user_id: str,
        amount: Any,
        transaction_date: Any,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Transaction:
        amount = parse_amount(amount)
        txn_date = parse_date(transaction_date)
        with self.transaction() as conn:
            if category_id is not None:
                self._check_category_owner(conn, category_id, user_id)
            cursor = conn.execute(
                "INSERT INTO transactions (user_id, category_id, amount, transaction_date, description) "
                "VALUES (?, ?, ?, ?, ?)",
                (user_id, category_id, str(amount), txn_date.isoformat(), (description or '').strip() or None),
            )
            return self._fetch_transaction(conn, cursor.lastrowid)

    def update_transaction(
        self,
        transaction_id: int,
        amount: Any = None,
        transaction_date: Any = None,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Transaction:
        updates = []
        params: List[Any] = []
        with self.transaction() as conn:
            current = self._fetch_transaction(conn, transaction_id)
            if amount is not None:
                updates.append("amount = ?")
                params.append(str(parse_amount(amount)))
            if transaction_date is not None:
                updates.append("transaction_date = ?")
                params.append(parse_date(transaction_date).isoformat())
            if category_id is not None:
                self._check_category_owner(conn, category_id, current.user_id)
                updates.append("category_id = ?")
                params.append(category_id)
            if description is not None:
                updates.append("description = ?")
                params.append(description.strip() or None)
            if not updates:
                return current
            params.append(transaction_id)
            conn.execute(f"UPDATE transactions SET {', '.join(updates)} WHERE id = ?", params)
            return self._fetch_transaction(conn, transaction_id)

    def delete_transaction(self, transaction_id: int) -> None:
        with self.transaction() as conn:
            removed = conn.execute(
                "DELETE FROM transactions WHERE id = ?", (transaction_id,)
            ).rowcount
        if not removed:
            raise NotFoundError('Transaction', transaction_id)

    def _transaction_filters(
        self,
        user_id: str,
        category_id: Optional[int],
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> Tuple[str, List[Any]]:
        where = ["user_id = ?"]
        params: List[Any] = [user_id]
        if category_id is not None:
            where.append("category_id = ?")
            params.append(category_id)
        if date_from is not None:
            where.append("transaction_date >= ?")
            params.append(parse_date(date_from).isoformat())
        if date_to is not None:
            where.append("transaction_date <= ?")
            params.append(parse_date(date_to).isoformat())
        return " WHERE " + " AND ".join(where), params

    def list_transactions(
        self,
        user_id: str,
        category_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Transaction]:
        clause, params = self._transaction_filters(user_id, category_id, date_from, date_to)
        sql = f"SELECT {TRANSACTION_COLUMNS} FROM transactions{clause} ORDER BY transaction_date ASC, id ASC"
        with self.connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return _rows_to_records(rows, Transaction.from_row)

    def count_transactions(self, user_id: str) -> int:
        with self.connect() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM transactions WHERE user_id = ?", (user_id,)
            ).fetchone()[0]

    def transactions_frame(
        self,
        user_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> pd.DataFrame:
        """Transactions joined with their category name, for display."""
        where = ["t.user_id = ?"]
        params: List[Any] = [user_id]
        if date_from is not None:
            where.append("t.transaction_date >= ?")
            params.append(parse_date(date_from).isoformat())
        if date_to is not None:
            where.append("t.transaction_date <= ?")
            params.append(parse_date(date_to).isoformat())
        sql = (
            "SELECT t.id, t.transaction_date AS 'Transaction Date', t.description AS 'Description', "
            "c.name AS 'Category', CAST(t.amount AS REAL) AS 'Amount' "
            "FROM transactions t LEFT JOIN categories c ON c.id = t.category_id "
            "WHERE " + " AND ".join(where) + " ORDER BY t.transaction_date ASC, t.id ASC"
        )
        with self.connect() as conn:
            df = pd.read_sql_query(sql, conn, params=params)
        if not df.empty:
            df['Transaction Date'] = pd.to_datetime(df['Transaction Date'])
        return df
