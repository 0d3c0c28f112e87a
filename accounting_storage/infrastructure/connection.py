"""Key-value connection strings for opening a store."""

import logging
from pathlib import Path

from accounting_storage.exceptions import ConnectionStringError

logger = logging.getLogger(__name__)

MAX_CONNECTION_STRING_SIZE = 200
"""Maximum size, in bytes, of a connection string file."""

CONNECTION_STRING_FILENAME = ".accounting_storage_connection"


def default_connection_string_path() -> Path:
    """Return the fixed location of the connection string file."""
    return Path.home() / CONNECTION_STRING_FILENAME


def new_connection_string(
    host: str = "",
    user: str = "",
    dbname: str = "",
    sslmode: str = "",
    **extra: str,
) -> str:
    """Build a connection string from its parameters.

    Parameters with an empty value are left out. The result is a
    space-separated list of ``key=value`` pairs.

    Raises:
        ConnectionStringError: If a value contains whitespace.
    """
    parameters = {"host": host, "user": user, "dbname": dbname, "sslmode": sslmode}
    parameters.update(extra)
    pairs = []
    for key, value in parameters.items():
        if not value:
            continue
        if any(char.isspace() for char in value):
            raise ConnectionStringError(
                f"Connection string value for {key!r} cannot contain whitespace"
            )
        pairs.append(f"{key}={value}")
    return " ".join(pairs)


def parse_connection_string(connection_string: str) -> dict[str, str]:
    """Split a connection string into its parameters.

    Raises:
        ConnectionStringError: If a pair is not of the form ``key=value``.
    """
    parameters: dict[str, str] = {}
    for pair in connection_string.split():
        key, separator, value = pair.partition("=")
        if not separator or not key:
            raise ConnectionStringError(f"Invalid connection string pair: {pair!r}")
        parameters[key] = value
    return parameters


def load_connection_string(location: Path | str | None) -> str:
    """Load a connection string from a file.

    Args:
        location: Path of the file holding the connection string.

    Returns:
        The connection string, stripped of surrounding whitespace.

    Raises:
        ConnectionStringError: If no location is given, the file is larger
            than MAX_CONNECTION_STRING_SIZE bytes or cannot be read.
    """
    if not location:
        raise ConnectionStringError("No connection string file location given")
    path = Path(location)
    try:
        if (size := path.stat().st_size) > MAX_CONNECTION_STRING_SIZE:
            raise ConnectionStringError(
                f"Connection string file ({path}) is too large. "
                f"Max: {MAX_CONNECTION_STRING_SIZE}, Length: {size}",
                path=path,
            )
        connection_string = path.read_text(encoding="utf-8").strip()
    except OSError as e:
        raise ConnectionStringError(
            f"Failed to read connection string file: {e}", path=path
        ) from e
    logger.debug("Loaded connection string from %s", path)
    return connection_string
