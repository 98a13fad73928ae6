"""Data transformation modules.

Handles:
- Response shape normalization (single record vs. list)
- Recursive flattening of nested records
- Column-name cleanup
- Timestamp coercion
- Calibration model pivoting
"""

from .table import Table
from .flatten import flatten, flatten_table, nested_columns, widen_column
from .normalize import Single, Many, classify_response, normalize_response
from .cleanup import dedupe_suffix
from .coerce import coerce_timestamps, parse_timestamp, timestamp_columns
from .pivot import pivot_paired_columns, rename_bare_group_columns
from .pipeline import ResponseKind, TaggedResponse, POST_PROCESSORS, to_table

__all__ = [
    "Table",
    # Flattening
    "flatten",
    "flatten_table",
    "nested_columns",
    "widen_column",
    # Normalization
    "Single",
    "Many",
    "classify_response",
    "normalize_response",
    # Post-processing
    "dedupe_suffix",
    "coerce_timestamps",
    "parse_timestamp",
    "timestamp_columns",
    "pivot_paired_columns",
    "rename_bare_group_columns",
    # Full pipeline
    "ResponseKind",
    "TaggedResponse",
    "POST_PROCESSORS",
    "to_table",
]
