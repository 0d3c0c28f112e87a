"""This module contains the Balance class."""
from datetime import datetime
from typing import NamedTuple

from accounting_storage.core.money import (
    Money,
    is_minor_units,
    is_valid_currency_code,
)
from accounting_storage.exceptions import FieldValidationError


class Balance(NamedTuple):
    """The amount held in an account at a point in time."""

    date: datetime
    money: Money

    @property
    def amount(self) -> int:
        """Return the amount in minor units."""
        return self.money.amount

    @property
    def currency(self) -> str:
        """Return the currency code of the amount."""
        return self.money.currency

    def validate(self) -> None:
        """Check that the balance fields are well-formed.

        Raises:
            FieldValidationError: If the date or money is missing, the date
                carries a time zone, the amount is not an integer or the
                currency code is malformed.
        """
        if self.date is None:
            raise FieldValidationError("Balance date is required", field="date")
        if self.date.tzinfo is not None:
            raise FieldValidationError(
                f"Balance date must be naive, got {self.date.isoformat()}",
                field="date",
            )
        if self.money is None:
            raise FieldValidationError("Balance money is required", field="money")
        if not is_minor_units(self.money.amount):
            raise FieldValidationError(
                f"Balance amount must be an integer, got {self.money.amount!r}",
                field="money",
            )
        if not is_valid_currency_code(self.money.currency):
            raise FieldValidationError(
                f"Invalid currency code: {self.money.currency!r}", field="money"
            )
