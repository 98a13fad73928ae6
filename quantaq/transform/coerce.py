"""Typed coercion of flattened columns."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from quantaq.errors import ParseError
from quantaq.transform.naming import TIMESTAMP_PREFIX
from quantaq.transform.table import Table

logger = logging.getLogger(__name__)

# YYYY[-]MM[-]DD HH:MM:SS[.fraction], API timestamps are UTC
TIMESTAMP_PATTERN = re.compile(
    r"^(\d{4})-?(\d{2})-?(\d{2})[ T](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?Z?$"
)

ACCOUNT_TIMESTAMP_COLUMNS = ("last_seen", "member_since")


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an API timestamp string into a UTC datetime.

    Fractional seconds beyond microsecond precision are truncated.

    Returns:
        The parsed datetime, or None if the string does not match the format
    """
    match = TIMESTAMP_PATTERN.match(value.strip())
    if not match:
        return None

    year, month, day, hour, minute, second, fraction = match.groups()
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))

    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second),
            microsecond,
            tzinfo=timezone.utc,
        )
    except ValueError:
        # Matched the shape but out of range, e.g. month 13
        return None


def _coerce_value(column: str, row: int, value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        parsed = parse_timestamp(value)
        if parsed is not None:
            return parsed
    raise ParseError(column, row, value)


def coerce_timestamps(table: Table, column_names: Iterable[str]) -> Table:
    """Parse the named columns into timestamps.

    Args:
        table: Flattened table
        column_names: Columns to coerce; names missing from the table are skipped

    Returns:
        New table with the named columns holding datetimes (or None)

    Raises:
        ParseError: On the first non-null value that is not a valid timestamp
    """
    columns = dict(table.columns)

    for name in column_names:
        if name not in columns:
            logger.debug(f"Timestamp column '{name}' not present, skipping")
            continue
        columns[name] = [
            _coerce_value(name, row, value)
            for row, value in enumerate(columns[name])
        ]

    return table.with_columns(columns)


def timestamp_columns(table: Table, prefix: str = TIMESTAMP_PREFIX) -> list[str]:
    """Columns whose name starts with ``prefix``."""
    return [name for name in table.column_names if name.startswith(prefix)]
