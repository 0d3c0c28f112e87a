"""Module with tests for the Money class."""
import pytest

from accounting_storage.core.money import Money, is_minor_units, is_valid_currency_code


class TestMoney:
    """Tests for Money arithmetic."""

    def test_repr(self) -> None:
        """Test that the representation shows amount and currency."""
        assert repr(Money(1050, "EUR")) == "1050 EUR"

    def test_add(self) -> None:
        """Test adding amounts of the same currency."""
        assert Money(100, "EUR") + Money(250, "EUR") == Money(350, "EUR")

    def test_add_different_currency_raises(self) -> None:
        """Test that adding amounts of different currencies raises."""
        with pytest.raises(ValueError, match="Cannot add EUR and USD"):
            _ = Money(100, "EUR") + Money(100, "USD")

    def test_sub(self) -> None:
        """Test subtracting amounts of the same currency."""
        assert Money(100, "EUR") - Money(250, "EUR") == Money(-150, "EUR")

    def test_sub_different_currency_raises(self) -> None:
        """Test that subtracting amounts of different currencies raises."""
        with pytest.raises(ValueError, match="Cannot subtract USD from EUR"):
            _ = Money(100, "EUR") - Money(100, "USD")

    def test_neg_and_abs(self) -> None:
        """Test negation and absolute value."""
        assert -Money(100, "EUR") == Money(-100, "EUR")
        assert abs(Money(-100, "EUR")) == Money(100, "EUR")

    def test_is_immutable(self) -> None:
        """Test that Money cannot be modified."""
        money = Money(100, "EUR")
        with pytest.raises(AttributeError):
            money.amount = 200  # type: ignore[misc]


class TestIsValidCurrencyCode:
    """Tests for currency code validation."""

    @pytest.mark.parametrize("code", ["EUR", "USD", "TST"])
    def test_valid_codes(self, code: str) -> None:
        """Test that three upper-case letters are accepted."""
        assert is_valid_currency_code(code)

    @pytest.mark.parametrize("code", ["", "EU", "EURO", "eur", "E1R", "ÉUR", None])
    def test_invalid_codes(self, code: str) -> None:
        """Test that malformed codes are rejected."""
        assert not is_valid_currency_code(code)


class TestIsMinorUnits:
    """Tests for minor unit amount validation."""

    @pytest.mark.parametrize("amount", [0, -1250, 10**12])
    def test_integers(self, amount: int) -> None:
        """Test that integers are accepted."""
        assert is_minor_units(amount)

    @pytest.mark.parametrize("amount", [1.5, 1.0, "1", True, None])
    def test_non_integers(self, amount: int) -> None:
        """Test that floats, strings and booleans are rejected."""
        assert not is_minor_units(amount)
