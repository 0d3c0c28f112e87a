"""Consistency checks run before mutating stored accounts and balances.

These functions are pure: the caller fetches the current stored state and
passes it in, so the same checks serve any storage backend.
"""

from typing import Iterable

from accounting_storage.domain.account import Account
from accounting_storage.domain.balance import Balance
from accounting_storage.exceptions import (
    AccountDeletedError,
    AccountDifferentInStoreAndRuntimeError,
    AccountNotFoundError,
    AccountUpdateInvalidatesBalanceError,
    DateOutOfAccountTimeRangeError,
    InvalidAccountBalanceError,
)
from accounting_storage.infrastructure.persistence.records import (
    StoredAccount,
    StoredBalance,
)


def validate_account_state(
    account: StoredAccount, current: StoredAccount | None
) -> None:
    """Check that an in-memory account still matches its stored row.

    Args:
        account: The caller's copy of the account.
        current: The row freshly fetched for ``account.account_id``, or None
            if no such row exists.

    Raises:
        AccountNotFoundError: If no row exists for the account id.
        AccountDifferentInStoreAndRuntimeError: If the core fields or the
            delete timestamp differ between the copy and the row.
        AccountDeletedError: If the stored account is soft-deleted.
    """
    if current is None:
        raise AccountNotFoundError(account.account_id)
    if account.account != current.account or account.deleted_at != current.deleted_at:
        raise AccountDifferentInStoreAndRuntimeError(account.account_id)
    if current.is_deleted:
        raise AccountDeletedError(account.account_id)


def validate_balance_for_account(
    account: StoredAccount,
    balance: Balance | StoredBalance,
    persisted: Iterable[StoredBalance],
) -> None:
    """Check that a balance is valid for an account.

    The balance date must be within the account time range. A stored balance
    must also be one of the balances persisted for that account.

    Args:
        account: The account the balance is claimed to belong to.
        balance: A new balance, or a balance with an assigned id.
        persisted: The balances currently stored for the account.

    Raises:
        DateOutOfAccountTimeRangeError: If the date is out of range.
        InvalidAccountBalanceError: If the balance id is not one of the
            account's persisted balances.
    """
    inner = balance.balance if isinstance(balance, StoredBalance) else balance
    account.validate_balance(inner)
    if not isinstance(balance, StoredBalance):
        return
    if not any(stored.balance_id == balance.balance_id for stored in persisted):
        raise InvalidAccountBalanceError(account.account_id, balance.balance_id)


def validate_account_update(
    account: StoredAccount,
    updates: Account,
    persisted: Iterable[StoredBalance],
) -> None:
    """Check that updating an account keeps all its balances in range.

    Raises:
        AccountUpdateInvalidatesBalanceError: On the first stored balance
            whose date would fall outside the updated time range.
    """
    for stored in persisted:
        try:
            updates.validate_balance(stored.balance)
        except DateOutOfAccountTimeRangeError as e:
            raise AccountUpdateInvalidatesBalanceError(
                account.account_id, stored.balance_id, e.balance_date, e.time_range
            ) from e
