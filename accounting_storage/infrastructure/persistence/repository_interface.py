"""Abstract interfaces for storage operations.

This module defines separate interfaces for accounts and balances, plus a
facade interface that combines them with the storage lifecycle.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Self

from accounting_storage.core.types import AccountId, BalanceId
from accounting_storage.domain.account import Account
from accounting_storage.domain.balance import Balance
from accounting_storage.infrastructure.persistence.records import (
    StoredAccount,
    StoredBalance,
)


class AccountRepositoryInterface(ABC):
    """Interface for Account persistence operations."""

    @abstractmethod
    def insert_account(self, account: Account) -> StoredAccount:
        """Insert a new account.

        Args:
            account: The account to insert.

        Returns:
            The stored account, with its assigned id.

        Raises:
            FieldValidationError: If the account is not well-formed.
        """

    @abstractmethod
    def select_account(self, account_id: AccountId) -> StoredAccount:
        """Get an account by its ID, including soft-deleted accounts.

        Args:
            account_id: The account ID to look up.

        Returns:
            The StoredAccount.

        Raises:
            AccountNotFoundError: If no account with the given ID exists.
        """

    @abstractmethod
    def select_accounts(self) -> tuple[StoredAccount, ...]:
        """Get all accounts that are not deleted.

        Returns:
            Accounts ordered by ID.
        """

    @abstractmethod
    def select_open_accounts(self) -> tuple[StoredAccount, ...]:
        """Get all accounts that are neither deleted nor closed.

        Returns:
            Open accounts ordered by ID.
        """

    @abstractmethod
    def validate_account(self, account: StoredAccount) -> None:
        """Check that an in-memory account matches its stored row.

        Raises:
            AccountNotFoundError: If no account exists for its ID.
            AccountDifferentInStoreAndRuntimeError: If the copies differ.
            AccountDeletedError: If the account is soft-deleted.
        """

    @abstractmethod
    def update_account(self, original: StoredAccount, updates: Account) -> StoredAccount:
        """Update an account.

        Args:
            original: The account as last read from the store.
            updates: The new account fields.

        Returns:
            The updated stored account.

        Raises:
            FieldValidationError: If the updates are not well-formed.
            AccountUpdateInvalidatesBalanceError: If a stored balance would
                fall outside the updated time range.
        """

    @abstractmethod
    def delete_account(self, account: StoredAccount) -> None:
        """Soft-delete an account.

        The account's delete timestamp is set in the store and on the given
        record.

        Args:
            account: The account to delete.
        """


class BalanceRepositoryInterface(ABC):
    """Interface for Balance persistence operations."""

    @abstractmethod
    def insert_balance(self, account: StoredAccount, balance: Balance) -> StoredBalance:
        """Insert a balance for an account.

        Args:
            account: The owning account.
            balance: The balance to insert.

        Returns:
            The stored balance, with its assigned id.

        Raises:
            DateOutOfAccountTimeRangeError: If the balance date is outside of
                the account time range.
        """

    @abstractmethod
    def select_balances(self, account: StoredAccount) -> tuple[StoredBalance, ...]:
        """Get all balances of an account.

        Returns:
            Balances ordered by date, then by ID.
        """

    @abstractmethod
    def select_balance(
        self, account: StoredAccount, balance_id: BalanceId
    ) -> StoredBalance:
        """Get a balance of an account by its ID.

        Raises:
            BalanceNotFoundError: If the account has no balance with this ID.
        """

    @abstractmethod
    def validate_balance(
        self, account: StoredAccount, balance: Balance | StoredBalance
    ) -> None:
        """Check that a balance is valid for an account.

        Raises:
            DateOutOfAccountTimeRangeError: If the date is out of range.
            InvalidAccountBalanceError: If a stored balance does not belong
                to the account.
        """

    @abstractmethod
    def update_balance(
        self, account: StoredAccount, original: StoredBalance, updates: Balance
    ) -> StoredBalance:
        """Update a balance of an account.

        Returns:
            The updated stored balance.
        """

    @abstractmethod
    def balance_at_date(self, account: StoredAccount, moment: datetime) -> StoredBalance:
        """Get the balance of an account at a given moment.

        The latest balance dated at or before the moment is returned. Among
        balances sharing that date, the one with the highest ID wins.

        Raises:
            NoBalancesError: If no balance is dated at or before the moment.
        """


class StorageInterface(
    AccountRepositoryInterface,
    BalanceRepositoryInterface,
    ABC,
):
    """Facade interface combining all storage operations.

    This interface aggregates the entity-specific interfaces and adds
    lifecycle methods for storage initialization and cleanup.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Initialize the storage.

        This method should be called before any other operations.
        It sets up the underlying database schema.
        """

    @abstractmethod
    def available(self) -> bool:
        """Return True if the storage can currently serve queries."""

    @abstractmethod
    def close(self) -> None:
        """Close the storage and release resources."""

    @abstractmethod
    def __enter__(self) -> Self:
        """Enter the context manager.

        Initializes the storage and returns it.
        """

    @abstractmethod
    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit the context manager.

        Closes the storage.
        """
