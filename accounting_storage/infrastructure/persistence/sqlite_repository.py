"""SQLite repository for account and balance persistence."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, Self

from dateutil.parser import isoparse

from accounting_storage.core.money import Money
from accounting_storage.core.types import AccountId, BalanceId
from accounting_storage.domain.account import Account
from accounting_storage.domain.balance import Balance
from accounting_storage.exceptions import (
    AccountNotFoundError,
    BalanceNotFoundError,
    ConnectionStringError,
    FieldValidationError,
    NoBalancesError,
    PersistenceError,
)
from accounting_storage.infrastructure.connection import parse_connection_string
from accounting_storage.infrastructure.persistence.records import (
    StoredAccount,
    StoredBalance,
)
from accounting_storage.infrastructure.persistence.repository_interface import (
    StorageInterface,
)
from accounting_storage.infrastructure.persistence.validation import (
    validate_account_state,
    validate_account_update,
    validate_balance_for_account,
)

logger = logging.getLogger(__name__)

# Current schema version
CURRENT_SCHEMA_VERSION = 1

SCHEMA_V1 = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    date_opened DATE NOT NULL,
    date_closed DATE,
    deleted_at TIMESTAMP,
    currency TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS balances (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    account_id INTEGER NOT NULL REFERENCES accounts(id),
    date DATE NOT NULL,
    balance INTEGER NOT NULL,
    currency TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_accounts_deleted_at ON accounts(deleted_at);
CREATE INDEX IF NOT EXISTS idx_balances_account_date ON balances(account_id, date);
"""

ACCOUNT_SELECT_FIELDS = "id, name, date_opened, date_closed, deleted_at, currency"
BALANCE_SELECT_FIELDS = "id, account_id, date, balance, currency"

QUERY_SELECT_ACCOUNT = f"SELECT {ACCOUNT_SELECT_FIELDS} FROM accounts WHERE id = ?"
QUERY_SELECT_ACCOUNTS = (
    f"SELECT {ACCOUNT_SELECT_FIELDS} FROM accounts "
    "WHERE deleted_at IS NULL ORDER BY id ASC"
)
QUERY_SELECT_OPEN_ACCOUNTS = (
    f"SELECT {ACCOUNT_SELECT_FIELDS} FROM accounts "
    "WHERE deleted_at IS NULL AND date_closed IS NULL ORDER BY id ASC"
)
QUERY_INSERT_ACCOUNT = """INSERT INTO accounts
   (name, date_opened, date_closed, currency)
   VALUES (?, ?, ?, ?)"""
QUERY_UPDATE_ACCOUNT = """UPDATE accounts
   SET name = ?, date_opened = ?, date_closed = ?, currency = ?
   WHERE id = ?"""
QUERY_DELETE_ACCOUNT = "UPDATE accounts SET deleted_at = ? WHERE id = ?"

QUERY_SELECT_BALANCES = (
    f"SELECT {BALANCE_SELECT_FIELDS} FROM balances "
    "WHERE account_id = ? ORDER BY date ASC, id ASC"
)
QUERY_SELECT_BALANCE = (
    f"SELECT {BALANCE_SELECT_FIELDS} FROM balances WHERE account_id = ? AND id = ?"
)
QUERY_INSERT_BALANCE = """INSERT INTO balances
   (account_id, date, balance, currency)
   VALUES (?, ?, ?, ?)"""
QUERY_UPDATE_BALANCE = """UPDATE balances
   SET date = ?, balance = ?, currency = ?
   WHERE id = ? AND account_id = ?"""
QUERY_BALANCE_AT_DATE = (
    f"SELECT {BALANCE_SELECT_FIELDS} FROM balances "
    "WHERE account_id = ? AND date <= ? "
    "ORDER BY date DESC, id DESC LIMIT 1"
)


def _to_db_date(moment: datetime | None) -> str | None:
    """Format a moment at the day granularity used by date columns."""
    return moment.date().isoformat() if moment is not None else None


def _truncate_to_day(moment: datetime | None) -> datetime | None:
    """Drop the time of day, as a round trip through a date column does."""
    if moment is None:
        return None
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _as_stored_account(account: Account) -> Account:
    """Return the account as it will read back from the store."""
    return account._replace(
        opened=_truncate_to_day(account.opened),
        closed=_truncate_to_day(account.closed),
    )


def _as_stored_balance(balance: Balance) -> Balance:
    """Return the balance as it will read back from the store."""
    return balance._replace(date=_truncate_to_day(balance.date))


def _from_db_timestamp(value: str | None) -> datetime | None:
    """Parse a date or timestamp column, keeping NULL as None."""
    return isoparse(value) if value else None


class SqliteRepository(StorageInterface):
    """Repository for persisting accounts and balances in SQLite.

    Every mutating operation validates the caller's copy of the account and
    writes within a single immediate transaction.
    """

    # Migration functions: version -> (from_version, migration_sql_or_callable)
    # Add new migrations here when schema evolves
    _migrations: dict[int, tuple[int, str | Callable[[sqlite3.Connection], None]]] = {
        1: (0, SCHEMA_V1),
    }

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "SqliteRepository":
        """Create a repository from a key-value connection string.

        The ``dbname`` parameter is the database path. Network parameters
        such as ``host`` or ``sslmode`` have no meaning for SQLite and are
        ignored.

        Raises:
            ConnectionStringError: If the connection string has no dbname.
        """
        parameters = parse_connection_string(connection_string)
        if not (dbname := parameters.pop("dbname", "")):
            raise ConnectionStringError("Connection string has no dbname")
        if parameters:
            logger.debug(
                "Ignoring connection parameters for SQLite: %s",
                ", ".join(sorted(parameters)),
            )
        return cls(dbname)

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create a database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(self._db_path)
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA foreign_keys = ON")
        return self._connection

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements in one immediate transaction."""
        conn = self._get_connection()
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        conn.commit()

    def _get_schema_version(self) -> int:
        """Get the current schema version from the database."""
        conn = self._get_connection()
        try:
            cursor = conn.execute("SELECT version FROM schema_version LIMIT 1")
            row = cursor.fetchone()
            return row["version"] if row else 0
        except sqlite3.OperationalError:
            # Table doesn't exist yet
            return 0

    def _set_schema_version(self, version: int) -> None:
        """Set the schema version in the database."""
        conn = self._get_connection()
        conn.execute("DELETE FROM schema_version")
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
        conn.commit()

    def initialize(self) -> None:
        """Initialize the database and run migrations if needed."""
        if (current_version := self._get_schema_version()) >= CURRENT_SCHEMA_VERSION:
            return

        conn = self._get_connection()

        for target_version in range(current_version + 1, CURRENT_SCHEMA_VERSION + 1):
            if target_version not in self._migrations:
                raise ValueError(f"Missing migration for version {target_version}")

            from_version, migration = self._migrations[target_version]
            if from_version != target_version - 1:
                raise ValueError(
                    f"Invalid migration chain: {from_version} -> {target_version}"
                )

            logger.info("Applying migration to schema version %d", target_version)

            if isinstance(migration, str):
                conn.executescript(migration)
            else:
                migration(conn)

            self._set_schema_version(target_version)

        logger.info("Database schema is at version %d", CURRENT_SCHEMA_VERSION)

    def available(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            self._get_connection().execute("SELECT 1").fetchone()
        except sqlite3.Error as e:
            logger.debug("Storage at %s is unavailable: %s", self._db_path, e)
            return False
        return True

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> Self:
        """Enter the context manager."""
        self.initialize()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit the context manager."""
        self.close()

    # Account methods

    def insert_account(self, account: Account) -> StoredAccount:
        """Insert a new account and return it as stored."""
        account.validate()
        with self._transaction() as conn:
            cursor = conn.execute(
                QUERY_INSERT_ACCOUNT,
                (
                    account.name,
                    _to_db_date(account.opened),
                    _to_db_date(account.closed),
                    account.currency,
                ),
            )
            if cursor.lastrowid is None:
                raise PersistenceError("Failed to insert account")
            stored = self._require_account(cursor.lastrowid)
        logger.info("Inserted account %d (%s)", stored.account_id, stored.name)
        return stored

    def select_account(self, account_id: AccountId) -> StoredAccount:
        """Get an account by id, including soft-deleted accounts."""
        if (stored := self._find_account(account_id)) is None:
            raise AccountNotFoundError(account_id)
        return stored

    def select_accounts(self) -> tuple[StoredAccount, ...]:
        """Get all accounts that are not deleted."""
        return self._query_accounts(QUERY_SELECT_ACCOUNTS)

    def select_open_accounts(self) -> tuple[StoredAccount, ...]:
        """Get all accounts that are neither deleted nor closed."""
        return self._query_accounts(QUERY_SELECT_OPEN_ACCOUNTS)

    def validate_account(self, account: StoredAccount) -> None:
        """Check that an in-memory account matches its stored row."""
        validate_account_state(account, self._find_account(account.account_id))

    def update_account(self, original: StoredAccount, updates: Account) -> StoredAccount:
        """Update an account, keeping all its balances within range."""
        with self._transaction() as conn:
            self.validate_account(original)
            try:
                updates.validate()
            except FieldValidationError as e:
                raise FieldValidationError(
                    f"Update account is not valid: {e}", field=e.field
                ) from e
            updates = _as_stored_account(updates)
            validate_account_update(original, updates, self.select_balances(original))
            conn.execute(
                QUERY_UPDATE_ACCOUNT,
                (
                    updates.name,
                    _to_db_date(updates.opened),
                    _to_db_date(updates.closed),
                    updates.currency,
                    original.account_id,
                ),
            )
            updated = self._require_account(original.account_id)
        logger.info("Updated account %d", updated.account_id)
        return updated

    def delete_account(self, account: StoredAccount) -> None:
        """Soft-delete an account and mark the given record as deleted."""
        with self._transaction() as conn:
            self.validate_account(account)
            deleted_at = datetime.now()
            conn.execute(
                QUERY_DELETE_ACCOUNT, (deleted_at.isoformat(), account.account_id)
            )
        account.deleted_at = deleted_at
        logger.info("Deleted account %d", account.account_id)

    def _find_account(self, account_id: AccountId) -> StoredAccount | None:
        """Get an account by id, or None if it does not exist."""
        conn = self._get_connection()
        cursor = conn.execute(QUERY_SELECT_ACCOUNT, (account_id,))
        if (row := cursor.fetchone()) is None:
            return None
        return self._row_to_account(row)

    def _require_account(self, account_id: AccountId) -> StoredAccount:
        """Re-read an account just written in the current transaction."""
        if (stored := self._find_account(account_id)) is None:
            raise PersistenceError(f"Account {account_id} missing after write")
        return stored

    def _query_accounts(self, query: str) -> tuple[StoredAccount, ...]:
        """Run an account query and map every row."""
        conn = self._get_connection()
        logger.debug("Querying accounts: %s", query)
        cursor = conn.execute(query)
        return tuple(self._row_to_account(row) for row in cursor.fetchall())

    def _row_to_account(self, row: sqlite3.Row) -> StoredAccount:
        """Convert a database row to a StoredAccount object."""
        return StoredAccount(
            account_id=row["id"],
            account=Account(
                name=row["name"],
                currency=row["currency"],
                opened=isoparse(row["date_opened"]),
                closed=_from_db_timestamp(row["date_closed"]),
            ),
            deleted_at=_from_db_timestamp(row["deleted_at"]),
        )

    # Balance methods

    def insert_balance(self, account: StoredAccount, balance: Balance) -> StoredBalance:
        """Insert a balance for an account and return it as stored."""
        with self._transaction() as conn:
            self.validate_account(account)
            balance.validate()
            balance = _as_stored_balance(balance)
            account.validate_balance(balance)
            cursor = conn.execute(
                QUERY_INSERT_BALANCE,
                (
                    account.account_id,
                    _to_db_date(balance.date),
                    balance.amount,
                    balance.currency,
                ),
            )
            if cursor.lastrowid is None:
                raise PersistenceError("Failed to insert balance")
            stored = self._require_balance(account.account_id, cursor.lastrowid)
        logger.info(
            "Inserted balance %d for account %d", stored.balance_id, account.account_id
        )
        return stored

    def select_balances(self, account: StoredAccount) -> tuple[StoredBalance, ...]:
        """Get all balances of an account ordered by date, then by id."""
        conn = self._get_connection()
        cursor = conn.execute(QUERY_SELECT_BALANCES, (account.account_id,))
        return tuple(self._row_to_balance(row) for row in cursor.fetchall())

    def select_balance(
        self, account: StoredAccount, balance_id: BalanceId
    ) -> StoredBalance:
        """Get a balance of an account by id."""
        if (stored := self._find_balance(account.account_id, balance_id)) is None:
            raise BalanceNotFoundError(account.account_id, balance_id)
        return stored

    def validate_balance(
        self, account: StoredAccount, balance: Balance | StoredBalance
    ) -> None:
        """Check a balance's date range and, if stored, its ownership."""
        validate_balance_for_account(account, balance, self.select_balances(account))

    def update_balance(
        self, account: StoredAccount, original: StoredBalance, updates: Balance
    ) -> StoredBalance:
        """Update a balance of an account."""
        with self._transaction() as conn:
            self.validate_account(account)
            self.validate_balance(account, original)
            try:
                updates.validate()
            except FieldValidationError as e:
                raise FieldValidationError(
                    f"Update balance is not valid: {e}", field=e.field
                ) from e
            updates = _as_stored_balance(updates)
            account.validate_balance(updates)
            conn.execute(
                QUERY_UPDATE_BALANCE,
                (
                    _to_db_date(updates.date),
                    updates.amount,
                    updates.currency,
                    original.balance_id,
                    account.account_id,
                ),
            )
            updated = self._require_balance(account.account_id, original.balance_id)
        logger.info(
            "Updated balance %d for account %d", updated.balance_id, account.account_id
        )
        return updated

    def balance_at_date(self, account: StoredAccount, moment: datetime) -> StoredBalance:
        """Get the most recent balance dated at or before the moment."""
        conn = self._get_connection()
        cursor = conn.execute(
            QUERY_BALANCE_AT_DATE, (account.account_id, _to_db_date(moment))
        )
        if (row := cursor.fetchone()) is None:
            raise NoBalancesError(account.account_id)
        return self._row_to_balance(row)

    def _find_balance(
        self, account_id: AccountId, balance_id: BalanceId
    ) -> StoredBalance | None:
        """Get a balance of an account by id, or None if it does not exist."""
        conn = self._get_connection()
        cursor = conn.execute(QUERY_SELECT_BALANCE, (account_id, balance_id))
        if (row := cursor.fetchone()) is None:
            return None
        return self._row_to_balance(row)

    def _require_balance(
        self, account_id: AccountId, balance_id: BalanceId
    ) -> StoredBalance:
        """Re-read a balance just written in the current transaction."""
        if (stored := self._find_balance(account_id, balance_id)) is None:
            raise PersistenceError(f"Balance {balance_id} missing after write")
        return stored

    def _row_to_balance(self, row: sqlite3.Row) -> StoredBalance:
        """Convert a database row to a StoredBalance object."""
        return StoredBalance(
            balance_id=row["id"],
            account_id=row["account_id"],
            balance=Balance(
                date=isoparse(row["date"]),
                money=Money(row["balance"], row["currency"]),
            ),
        )


def create_storage(db_path: Path | str) -> None:
    """Create a new database file holding an empty schema.

    Raises:
        FieldValidationError: If the path is blank.
        PersistenceError: If a database already exists at the path.
    """
    if not str(db_path).strip():
        raise FieldValidationError(
            "Storage name must be non-whitespace and longer than 0 characters",
            field="db_path",
        )
    path = Path(db_path)
    if path.exists():
        raise PersistenceError(f"Storage already exists: {path}")
    with SqliteRepository(path):
        pass
    logger.info("Created storage %s", path)


def delete_storage(db_path: Path | str) -> None:
    """Delete a database file.

    Raises:
        FieldValidationError: If the path is blank.
        PersistenceError: If the database file cannot be removed.
    """
    if not str(db_path).strip():
        raise FieldValidationError(
            "Storage name must be non-whitespace and longer than 0 characters",
            field="db_path",
        )
    path = Path(db_path)
    try:
        path.unlink()
    except OSError as e:
        raise PersistenceError(f"Failed to delete storage {path}: {e}") from e
    logger.info("Deleted storage %s", path)
