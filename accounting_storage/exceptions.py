"""Custom exception hierarchy for accounting storage."""

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from accounting_storage.core.time_range import AccountTimeRange


class AccountingStorageError(Exception):
    """Base exception for all accounting storage errors."""


class FieldValidationError(AccountingStorageError):
    """A domain value has a malformed or missing field."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class AccountNotFoundError(AccountingStorageError):
    """No account with the given ID exists in the store."""

    def __init__(self, account_id: int) -> None:
        super().__init__(f"No account with id: {account_id}")
        self.account_id = account_id


class AccountDifferentInStoreAndRuntimeError(AccountingStorageError):
    """The in-memory account disagrees with the stored row."""

    def __init__(self, account_id: int) -> None:
        super().__init__(
            f"Account (id: {account_id}) in store is different to account in runtime"
        )
        self.account_id = account_id


class AccountDeletedError(AccountingStorageError):
    """The account has been soft-deleted."""

    def __init__(self, account_id: int) -> None:
        super().__init__(f"Account (id: {account_id}) is deleted")
        self.account_id = account_id


class BalanceNotFoundError(AccountingStorageError):
    """No balance with the given ID exists for the account."""

    def __init__(self, account_id: int, balance_id: int) -> None:
        super().__init__(
            f"No balance with id: {balance_id} for account (id: {account_id})"
        )
        self.account_id = account_id
        self.balance_id = balance_id


class NoBalancesError(AccountingStorageError):
    """No balances exist where at least one was expected."""

    def __init__(self, account_id: int) -> None:
        super().__init__(f"No balances exist for account (id: {account_id})")
        self.account_id = account_id


class InvalidAccountBalanceError(AccountingStorageError):
    """A balance does not belong to the account it was validated against."""

    def __init__(self, account_id: int, balance_id: int) -> None:
        super().__init__(
            f"Invalid balance (id: {balance_id}) for account (id: {account_id})"
        )
        self.account_id = account_id
        self.balance_id = balance_id


class DateOutOfAccountTimeRangeError(AccountingStorageError):
    """A balance date falls outside its account's open/close range."""

    def __init__(
        self,
        balance_date: datetime,
        time_range: "AccountTimeRange",
        *,
        prefix: str = "",
    ) -> None:
        super().__init__(
            f"{prefix}Balance date {balance_date.isoformat()} is outside of "
            f"account time range {time_range}"
        )
        self.balance_date = balance_date
        self.time_range = time_range


class AccountUpdateInvalidatesBalanceError(DateOutOfAccountTimeRangeError):
    """Applying an account update would leave a stored balance out of range."""

    def __init__(
        self,
        account_id: int,
        balance_id: int,
        balance_date: datetime,
        time_range: "AccountTimeRange",
    ) -> None:
        super().__init__(
            balance_date,
            time_range,
            prefix=(
                f"Updating account (id: {account_id}) would invalidate balance "
                f"(id: {balance_id}): "
            ),
        )
        self.account_id = account_id
        self.balance_id = balance_id


class PersistenceError(AccountingStorageError):
    """A database operation failed unexpectedly."""


class ConnectionStringError(AccountingStorageError):
    """A connection string could not be built, parsed or loaded."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigError(AccountingStorageError):
    """The configuration is missing a required value."""
