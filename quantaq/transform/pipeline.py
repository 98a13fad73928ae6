"""Kind-specific table building: normalize → flatten → post-process."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from quantaq.transform.cleanup import dedupe_suffix
from quantaq.transform.coerce import (
    ACCOUNT_TIMESTAMP_COLUMNS,
    coerce_timestamps,
    timestamp_columns,
)
from quantaq.transform.flatten import flatten
from quantaq.transform.naming import TIMESTAMP_PREFIX
from quantaq.transform.normalize import normalize_response
from quantaq.transform.pivot import pivot_paired_columns, rename_bare_group_columns
from quantaq.transform.table import Table
from quantaq.utils.pipeline_logger import timed_operation

logger = logging.getLogger(__name__)


class ResponseKind(str, Enum):
    """Response category, selects the post-processing applied after flattening."""

    ACCOUNT = "account"
    TEAMS = "teams"
    DEVICES = "devices"
    METADATA = "metadata"
    DEVICE_DATA = "device_data"
    CALIBRATION_MODELS = "calibration_models"
    LOGS = "logs"


def process_account(table: Table) -> Table:
    return coerce_timestamps(table, ACCOUNT_TIMESTAMP_COLUMNS)


def process_teams(table: Table) -> Table:
    return table


def process_devices(table: Table) -> Table:
    return dedupe_suffix(table)


def process_device_data(table: Table) -> Table:
    """Clean suffixes, parse every ``timestamp*`` column, put ``timestamp`` first."""
    table = dedupe_suffix(table)
    table = coerce_timestamps(table, timestamp_columns(table))
    return table.move_to_front(TIMESTAMP_PREFIX)


def process_calibration_models(table: Table) -> Table:
    table = dedupe_suffix(table)
    table = rename_bare_group_columns(table)
    return pivot_paired_columns(table)


POST_PROCESSORS: dict[ResponseKind, Callable[[Table], Table]] = {
    ResponseKind.ACCOUNT: process_account,
    ResponseKind.TEAMS: process_teams,
    ResponseKind.DEVICES: process_devices,
    ResponseKind.METADATA: process_devices,
    ResponseKind.DEVICE_DATA: process_device_data,
    ResponseKind.CALIBRATION_MODELS: process_calibration_models,
    ResponseKind.LOGS: process_devices,
}


def to_table(response: Any, kind: ResponseKind) -> Table:
    """Turn a raw API response into a flat table.

    Args:
        response: A single record or a list of records, as fetched
        kind: Response kind selecting the post-processor

    Returns:
        Flat table; ownership passes to the caller

    Raises:
        InvalidInputError: If the response is not record-shaped
        ParseError: If a timestamp column holds an unparseable value
        SchemaMismatchError: If calibration columns do not follow the naming
    """
    kind = ResponseKind(kind)

    with timed_operation(f"to_table.{kind.value}", logger) as timer:
        records = normalize_response(response)
        table = flatten(records)
        table = POST_PROCESSORS[kind](table)

    logger.info(
        f"Built {kind.value} table",
        extra={
            "kind": kind.value,
            "input_count": len(records),
            "row_count": table.num_rows,
            "column_count": table.num_columns,
            "duration_ms": round(timer.duration_ms, 2),
        },
    )
    return table


@dataclass(frozen=True)
class TaggedResponse:
    """A fetched response together with the kind it was fetched as."""

    kind: ResponseKind
    payload: Any
    endpoint: str = ""

    def to_table(self) -> Table:
        return to_table(self.payload, self.kind)
