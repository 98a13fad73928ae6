"""Wide-to-long reshaping of calibration model columns."""

import logging
import re
from typing import Any, Optional, Sequence

from quantaq.errors import DuplicateColumnError, SchemaMismatchError
from quantaq.transform.naming import (
    CALIBRATION_COLUMN_PATTERN,
    CALIBRATION_GROUPS,
    CALIBRATION_SELECTOR,
    INDEX_BASE,
    bare_group_column,
    join_name,
)
from quantaq.transform.table import Table

logger = logging.getLogger(__name__)

ELEMENT_COLUMN = "element"
ELEMENT_ID_COLUMN = "element_id"
VALUE_COLUMN = "value"


def rename_bare_group_columns(
    table: Table,
    groups: Sequence[str] = CALIBRATION_GROUPS,
) -> Table:
    """Rename ``model_<group>`` to ``model_<group>_1``.

    A group that was never widened (or lost its ``_1`` marker during cleanup)
    otherwise has no element id to pivot on.
    """
    renames = {}
    for group in groups:
        bare = bare_group_column(group)
        target = join_name(bare, str(INDEX_BASE))
        if bare in table.columns and target not in table.columns:
            renames[bare] = target
    return table.rename(renames) if renames else table


def _as_string(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def pivot_paired_columns(
    table: Table,
    group_pattern: re.Pattern = CALIBRATION_COLUMN_PATTERN,
    selector: re.Pattern = CALIBRATION_SELECTOR,
    groups: Sequence[str] = CALIBRATION_GROUPS,
) -> Table:
    """Reshape paired ``<prefix>_<group>_<element_id>`` columns into long rows.

    Every column matched by ``selector`` must fully match ``group_pattern``,
    whose two groups capture the group name and the element id. Each input
    row becomes one output row per (group, element id), with element ids
    taken from the union across all groups so a side missing an id gets a
    ``None`` value. Other columns are repeated unchanged.

    Args:
        table: Flattened, suffix-cleaned calibration table
        group_pattern: Pattern capturing (group, element_id)
        selector: Pattern identifying the columns to pivot
        groups: Group names, in output order

    Returns:
        Table of pass-through columns plus ``element``, ``element_id``, ``value``

    Raises:
        SchemaMismatchError: If a selected column does not match ``group_pattern``
    """
    paired: dict[tuple[str, str], str] = {}
    element_ids: dict[str, None] = {}
    passthrough: list[str] = []

    for name in table.column_names:
        if not selector.match(name):
            passthrough.append(name)
            continue
        match = group_pattern.match(name)
        if not match:
            raise SchemaMismatchError(name, group_pattern.pattern)
        group, element_id = match.group(1), match.group(2)
        paired[(group, element_id)] = name
        element_ids.setdefault(element_id, None)

    for reserved in (ELEMENT_COLUMN, ELEMENT_ID_COLUMN, VALUE_COLUMN):
        if reserved in passthrough:
            raise DuplicateColumnError(reserved, reserved)

    columns: dict[str, list] = {name: [] for name in passthrough}
    columns[ELEMENT_COLUMN] = []
    columns[ELEMENT_ID_COLUMN] = []
    columns[VALUE_COLUMN] = []

    num_rows = 0
    for row in range(table.num_rows):
        for group in groups:
            for element_id in element_ids:
                for name in passthrough:
                    columns[name].append(table.columns[name][row])
                source = paired.get((group, element_id))
                value = table.columns[source][row] if source else None
                columns[ELEMENT_COLUMN].append(group)
                columns[ELEMENT_ID_COLUMN].append(element_id)
                columns[VALUE_COLUMN].append(_as_string(value))
                num_rows += 1

    logger.debug(
        f"Pivoted {len(paired)} columns into {num_rows} rows",
        extra={
            "input_rows": table.num_rows,
            "element_ids": list(element_ids),
            "output_rows": num_rows,
        },
    )
    return Table(columns=columns, num_rows=num_rows)
