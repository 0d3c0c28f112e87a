"""Tests for connection strings."""
from pathlib import Path
from unittest.mock import patch

import pytest

from accounting_storage.exceptions import ConnectionStringError
from accounting_storage.infrastructure.connection import (
    CONNECTION_STRING_FILENAME,
    MAX_CONNECTION_STRING_SIZE,
    default_connection_string_path,
    load_connection_string,
    new_connection_string,
    parse_connection_string,
)


class TestNewConnectionString:
    """Tests for new_connection_string."""

    def test_all_parameters(self) -> None:
        """Test the order and format of the pairs."""
        assert (
            new_connection_string(
                host="localhost", user="me", dbname="accounting", sslmode="disable"
            )
            == "host=localhost user=me dbname=accounting sslmode=disable"
        )

    def test_empty_values_are_skipped(self) -> None:
        """Test that empty parameters are left out."""
        assert new_connection_string(dbname="accounting") == "dbname=accounting"
        assert new_connection_string() == ""

    def test_extra_parameters(self) -> None:
        """Test that extra parameters follow the named ones."""
        assert (
            new_connection_string(dbname="accounting", port="5432")
            == "dbname=accounting port=5432"
        )

    def test_whitespace_in_value(self) -> None:
        """Test that values containing whitespace are rejected."""
        with pytest.raises(ConnectionStringError, match="'dbname'"):
            new_connection_string(dbname="my accounts")


class TestParseConnectionString:
    """Tests for parse_connection_string."""

    def test_parse(self) -> None:
        """Test parsing what new_connection_string builds."""
        connection_string = new_connection_string(
            host="localhost", dbname="accounting", sslmode="disable"
        )
        assert parse_connection_string(connection_string) == {
            "host": "localhost",
            "dbname": "accounting",
            "sslmode": "disable",
        }

    def test_empty(self) -> None:
        """Test that an empty string has no parameters."""
        assert parse_connection_string("  ") == {}

    @pytest.mark.parametrize("connection_string", ["dbname", "=accounting"])
    def test_invalid_pair(self, connection_string: str) -> None:
        """Test that malformed pairs are rejected."""
        with pytest.raises(ConnectionStringError):
            parse_connection_string(connection_string)


class TestLoadConnectionString:
    """Tests for load_connection_string."""

    def test_load(self, tmp_path: Path) -> None:
        """Test loading a connection string file."""
        path = tmp_path / CONNECTION_STRING_FILENAME
        path.write_text("dbname=accounting sslmode=disable\n", encoding="utf-8")
        assert load_connection_string(path) == "dbname=accounting sslmode=disable"

    def test_file_at_size_limit(self, tmp_path: Path) -> None:
        """Test that a file of exactly the maximum size is accepted."""
        path = tmp_path / "connection"
        path.write_text("x" * MAX_CONNECTION_STRING_SIZE, encoding="utf-8")
        assert len(load_connection_string(path)) == MAX_CONNECTION_STRING_SIZE

    def test_file_too_large(self, tmp_path: Path) -> None:
        """Test that an oversized file is rejected."""
        path = tmp_path / "connection"
        path.write_text("x" * (MAX_CONNECTION_STRING_SIZE + 1), encoding="utf-8")
        with pytest.raises(ConnectionStringError, match="too large") as exc_info:
            load_connection_string(path)
        assert exc_info.value.path == path

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file is reported."""
        with pytest.raises(ConnectionStringError, match="Failed to read"):
            load_connection_string(tmp_path / "missing")

    @pytest.mark.parametrize("location", ["", None])
    def test_no_location(self, location: str | None) -> None:
        """Test that an empty location is rejected."""
        with pytest.raises(ConnectionStringError, match="No connection string file"):
            load_connection_string(location)

    def test_default_path(self, tmp_path: Path) -> None:
        """Test that the default file lives in the home directory."""
        with patch(
            "accounting_storage.infrastructure.connection.Path.home"
        ) as mock_home:
            mock_home.return_value = tmp_path
            assert default_connection_string_path() == (
                tmp_path / CONNECTION_STRING_FILENAME
            )
