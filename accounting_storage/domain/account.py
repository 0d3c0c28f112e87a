"""This module contains the Account class."""
from datetime import datetime
from typing import NamedTuple

from accounting_storage.core.money import is_valid_currency_code
from accounting_storage.core.time_range import AccountTimeRange
from accounting_storage.domain.balance import Balance
from accounting_storage.exceptions import (
    DateOutOfAccountTimeRangeError,
    FieldValidationError,
)


class Account(NamedTuple):
    """A named ledger open over a period of time, in a single currency."""

    name: str
    currency: str
    opened: datetime
    closed: datetime | None = None

    @property
    def time_range(self) -> AccountTimeRange:
        """Return the period during which the account is open."""
        return AccountTimeRange(self.opened, self.closed)

    def validate(self) -> None:
        """Check that the account fields are well-formed.

        Raises:
            FieldValidationError: If the name is empty, the opening time is
                missing, a time carries a time zone, the currency code is
                malformed or the account closes before it opens.
        """
        if not self.name or not self.name.strip():
            raise FieldValidationError("Account name cannot be empty", field="name")
        if self.opened is None:
            raise FieldValidationError(
                "Account opening time is required", field="opened"
            )
        for field, moment in (("opened", self.opened), ("closed", self.closed)):
            if moment is not None and moment.tzinfo is not None:
                raise FieldValidationError(
                    f"Account {field} time must be naive, got {moment.isoformat()}",
                    field=field,
                )
        if not is_valid_currency_code(self.currency):
            raise FieldValidationError(
                f"Invalid currency code: {self.currency!r}", field="currency"
            )
        if not self.time_range.is_valid():
            raise FieldValidationError(
                f"Account closes ({self.closed}) before it opens ({self.opened})",
                field="closed",
            )

    def validate_balance(self, balance: Balance) -> None:
        """Check that a balance date falls within the account time range.

        Raises:
            DateOutOfAccountTimeRangeError: If the balance date is outside
                of the account time range.
        """
        if not self.time_range.contains(balance.date):
            raise DateOutOfAccountTimeRangeError(balance.date, self.time_range)
