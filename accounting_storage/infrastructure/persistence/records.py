"""Storage records wrapping domain values with their storage metadata."""

from dataclasses import dataclass
from datetime import datetime

from accounting_storage.core.money import Money
from accounting_storage.core.time_range import AccountTimeRange
from accounting_storage.core.types import AccountId, BalanceId
from accounting_storage.domain.account import Account
from accounting_storage.domain.balance import Balance


@dataclass
class StoredAccount:
    """An account as held in a store.

    The record is mutable so that a soft delete can mark the caller's
    in-memory copy as deleted.
    """

    account_id: AccountId
    account: Account
    deleted_at: datetime | None = None

    @property
    def name(self) -> str:
        """Return the account name."""
        return self.account.name

    @property
    def currency(self) -> str:
        """Return the account currency code."""
        return self.account.currency

    @property
    def opened(self) -> datetime:
        """Return the account opening time."""
        return self.account.opened

    @property
    def closed(self) -> datetime | None:
        """Return the account closing time, if any."""
        return self.account.closed

    @property
    def time_range(self) -> AccountTimeRange:
        """Return the period during which the account is open."""
        return self.account.time_range

    @property
    def is_deleted(self) -> bool:
        """Return True if the account has been soft-deleted."""
        return self.deleted_at is not None

    def validate_balance(self, balance: Balance) -> None:
        """Check that a balance date falls within the account time range."""
        self.account.validate_balance(balance)


@dataclass(frozen=True)
class StoredBalance:
    """A balance as held in a store, owned by exactly one account."""

    balance_id: BalanceId
    account_id: AccountId
    balance: Balance

    @property
    def date(self) -> datetime:
        """Return the balance date."""
        return self.balance.date

    @property
    def money(self) -> Money:
        """Return the balance amount."""
        return self.balance.money
