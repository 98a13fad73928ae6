"""Column-name cleanup after flattening."""

import logging

from quantaq.transform.naming import (
    SINGLETON_SUFFIX,
    has_sibling_index,
    strip_singleton_suffix,
)
from quantaq.transform.table import Table

logger = logging.getLogger(__name__)


def _singleton_renames(names: list[str]) -> dict[str, str]:
    renames = {}
    for name in names:
        if not name.endswith(SINGLETON_SUFFIX):
            continue
        base = strip_singleton_suffix(name)
        if base == name or has_sibling_index(base, names):
            continue
        renames[name] = base
    return renames


def dedupe_suffix(table: Table) -> Table:
    """Strip ``_1`` markers left by single-element containers.

    A trailing ``_1`` is dropped when no ``<base>_<n>`` sibling (n != 1)
    exists to disambiguate. Stripping repeats until nothing changes, so
    ``a_1_1`` becomes ``a`` in one call and a second call is a no-op.

    Known limitation: if the stripped name already exists, the later column
    overwrites it.
    """
    total = 0
    while True:
        renames = _singleton_renames(table.column_names)
        if not renames:
            break
        total += len(renames)
        table = table.rename(renames)

    if total:
        logger.debug(
            f"Stripped singleton suffix from {total} column names",
            extra={"renamed_count": total},
        )
    return table
