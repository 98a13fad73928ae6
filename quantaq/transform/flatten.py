"""Recursive wide-unnesting of nested API records into a flat table."""

import logging
from typing import Any

from quantaq.errors import DuplicateColumnError, InvalidInputError
from quantaq.transform.naming import INDEX_BASE, join_name, position_key
from quantaq.transform.table import Table

logger = logging.getLogger(__name__)


def is_nested(value: Any) -> bool:
    """A value needs widening if it is a record or a list."""
    return isinstance(value, (dict, list))


def _sub_keys(value: Any) -> list[str]:
    if isinstance(value, dict):
        return [str(key) for key in value]
    if isinstance(value, list):
        return [position_key(i) for i in range(len(value))]
    return []


def _sub_value(value: Any, sub_key: str) -> Any:
    if isinstance(value, dict):
        return value.get(sub_key)
    if isinstance(value, list):
        if not sub_key.isdigit():
            return None
        index = int(sub_key) - INDEX_BASE
        if 0 <= index < len(value):
            return value[index]
        return None
    # Scalar rows in a nested column have nothing to contribute
    return None


def nested_columns(table: Table) -> list[str]:
    """Names of the columns holding a record or a list in at least one row."""
    return [
        name
        for name, values in table.columns.items()
        if any(is_nested(value) for value in values)
    ]


def widen_column(table: Table, name: str) -> Table:
    """Replace one nested column by a sibling column per sub-key.

    Sub-keys are the ordered union of record keys and 1-based list positions
    across all rows. The new ``<name>_<sub_key>`` columns take the original
    column's position.
    """
    values = table.columns[name]

    sub_keys: dict[str, None] = {}
    for value in values:
        for key in _sub_keys(value):
            sub_keys.setdefault(key, None)

    widened: dict[str, list] = {}
    for key in sub_keys:
        new_name = join_name(name, key)
        if new_name in table.columns:
            raise DuplicateColumnError(new_name, name)
        widened[new_name] = [_sub_value(value, key) for value in values]

    columns: dict[str, list] = {}
    for existing, existing_values in table.columns.items():
        if existing == name:
            columns.update(widened)
        else:
            columns[existing] = existing_values

    logger.debug(
        f"Widened column '{name}' into {len(widened)} columns",
        extra={"column": name, "new_columns": list(widened)},
    )
    return table.with_columns(columns)


def flatten_table(table: Table) -> Table:
    """Widen nested columns until none remain.

    Each pass widens every nested column in its current order; the loop ends
    once a pass finds no nested column, so a flat table is returned unchanged.
    """
    passes = 0
    while True:
        pending = nested_columns(table)
        if not pending:
            break
        passes += 1
        for name in pending:
            table = widen_column(table, name)

    logger.debug(
        f"Flattened table in {passes} passes",
        extra={"passes": passes, "column_count": table.num_columns},
    )
    return table


def flatten(records: list[dict]) -> Table:
    """Flatten a batch of nested records into a rectangular table.

    Args:
        records: List of nested dictionaries, in response order

    Returns:
        Table with one row per record and only scalar cells

    Raises:
        InvalidInputError: If ``records`` is not a list of dictionaries

    Example:
        >>> flatten([{"id": 1, "loc": {"lat": 1.0, "lon": 2.0}}]).to_records()
        [{"id": 1, "loc_lat": 1.0, "loc_lon": 2.0}]
    """
    if not isinstance(records, (list, tuple)):
        raise InvalidInputError(
            f"Expected a list of records, got {type(records).__name__}", records
        )

    for i, record in enumerate(records):
        if not isinstance(record, dict):
            logger.error(
                f"Record at index {i} is not a mapping",
                extra={"record_index": i, "type": type(record).__name__},
            )
            raise InvalidInputError(
                f"Record at index {i} is {type(record).__name__}, expected a mapping",
                record,
            )

    return flatten_table(Table.from_records(list(records)))
