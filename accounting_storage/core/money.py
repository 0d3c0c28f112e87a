"""A module for representing amounts of money."""
from dataclasses import dataclass


def is_valid_currency_code(code: str) -> bool:
    """Check that a currency code is three upper-case ASCII letters."""
    return (
        isinstance(code, str)
        and len(code) == 3
        and code.isascii()
        and code.isalpha()
        and code.isupper()
    )


def is_minor_units(amount: int) -> bool:
    """Check that an amount is an integer number of minor units."""
    return isinstance(amount, int) and not isinstance(amount, bool)


@dataclass(frozen=True)
class Money:
    """An amount of money in integer minor units (e.g. cents)."""

    amount: int
    currency: str

    def __repr__(self) -> str:
        return f"{self.amount} {self.currency}"

    def __add__(self, other: "Money") -> "Money":
        """Add two amounts together."""
        if self.currency != other.currency:
            raise ValueError(f"Cannot add {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        """Subtract another amount from this one."""
        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract {other.currency} from {self.currency}")
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> "Money":
        """Return the negation of this amount."""
        return Money(-self.amount, self.currency)

    def __abs__(self) -> "Money":
        """Return the absolute value of this amount."""
        return Money(abs(self.amount), self.currency)
