"""JSON interchange for stored accounts and balances.

The JSON layout is fixed and independent of the record classes:

- account: ``id``, ``name``, ``start``, ``end``, ``currency``
- balance: ``id``, ``date``, ``money`` (``amount`` in minor units, ``currency``)

Timestamps are ISO 8601 strings. The soft-delete timestamp of an account is
never serialized.
"""

import json
from datetime import datetime, timezone
from typing import Any

from dateutil.parser import isoparse

from accounting_storage.core.money import Money
from accounting_storage.core.types import AccountId
from accounting_storage.domain.account import Account
from accounting_storage.domain.balance import Balance
from accounting_storage.exceptions import FieldValidationError
from accounting_storage.infrastructure.persistence.records import (
    StoredAccount,
    StoredBalance,
)


def _format_timestamp(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


def _parse_timestamp(data: dict[str, Any], key: str) -> datetime | None:
    if (value := data.get(key)) is None:
        return None
    try:
        moment = isoparse(value)
    except (TypeError, ValueError) as e:
        raise FieldValidationError(f"Invalid timestamp for {key!r}: {value!r}", field=key) from e
    # Offsets are folded into naive UTC
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise FieldValidationError(f"Missing field {key!r}", field=key)
    return data[key]


def _require_id(data: dict[str, Any]) -> int:
    identifier = _require(data, "id")
    if not isinstance(identifier, int) or isinstance(identifier, bool):
        raise FieldValidationError(f"Invalid id: {identifier!r}", field="id")
    return identifier


def account_to_dict(account: StoredAccount) -> dict[str, Any]:
    """Convert a stored account to its JSON representation."""
    return {
        "id": account.account_id,
        "name": account.name,
        "start": _format_timestamp(account.opened),
        "end": _format_timestamp(account.closed),
        "currency": account.currency,
    }


def account_from_dict(data: dict[str, Any]) -> StoredAccount:
    """Build a stored account from its JSON representation.

    Raises:
        FieldValidationError: If a field is missing or the account is not
            well-formed.
    """
    account = Account(
        name=_require(data, "name"),
        currency=_require(data, "currency"),
        opened=_parse_timestamp(data, "start"),
        closed=_parse_timestamp(data, "end"),
    )
    account.validate()
    return StoredAccount(account_id=_require_id(data), account=account)


def balance_to_dict(balance: StoredBalance) -> dict[str, Any]:
    """Convert a stored balance to its JSON representation."""
    return {
        "id": balance.balance_id,
        "date": _format_timestamp(balance.date),
        "money": {"amount": balance.money.amount, "currency": balance.money.currency},
    }


def balance_from_dict(data: dict[str, Any], account_id: AccountId) -> StoredBalance:
    """Build a stored balance of the given account from its JSON representation.

    Raises:
        FieldValidationError: If a field is missing or the balance is not
            well-formed.
    """
    money = _require(data, "money")
    if not isinstance(money, dict):
        raise FieldValidationError("Field 'money' must be an object", field="money")
    balance = Balance(
        date=_parse_timestamp(data, "date"),
        money=Money(_require(money, "amount"), _require(money, "currency")),
    )
    balance.validate()
    return StoredBalance(
        balance_id=_require_id(data), account_id=account_id, balance=balance
    )


def dumps_account(account: StoredAccount) -> str:
    """Serialize a stored account to a JSON string."""
    return json.dumps(account_to_dict(account))


def loads_account(payload: str | bytes) -> StoredAccount:
    """Deserialize a stored account from a JSON string."""
    return account_from_dict(json.loads(payload))


def dumps_balance(balance: StoredBalance) -> str:
    """Serialize a stored balance to a JSON string."""
    return json.dumps(balance_to_dict(balance))


def loads_balance(payload: str | bytes, account_id: AccountId) -> StoredBalance:
    """Deserialize a stored balance of the given account from a JSON string."""
    return balance_from_dict(json.loads(payload), account_id)
