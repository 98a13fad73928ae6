"""File output for flattened tables."""

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


def get_output_path(
    base_path: str,
    kind: str,
    dt: Optional[datetime] = None,
) -> str:
    """Generate an output directory following the partition convention.

    Pattern: base_path/kind=<kind>/dt=YYYY-MM-DD

    Args:
        base_path: Base output directory
        kind: Response kind the table was built from
        dt: Date for partition (defaults to now, UTC)

    Returns:
        Output directory path
    """
    if dt is None:
        dt = datetime.now(timezone.utc)

    date_str = dt.strftime("%Y-%m-%d")
    return f"{base_path.rstrip('/')}/kind={kind}/dt={date_str}"


def generate_filename(run_id: str, extension: str = "jsonl") -> str:
    return f"part-{run_id}.{extension}"


def _metadata(output_path: Path, run_id: str, row_count: int, column_count: int) -> dict:
    return {
        "file_path": str(output_path),
        "run_id": run_id,
        "written_at": datetime.now(timezone.utc).isoformat(),
        "row_count": row_count,
        "column_count": column_count,
        "file_size_bytes": output_path.stat().st_size,
    }


def write_jsonl(
    table,
    output_path: Union[str, Path],
    run_id: Optional[str] = None,
) -> dict:
    """Write a table to a JSONL file, one row per line.

    Timestamps are written as ISO 8601 strings.

    Args:
        table: Table to write
        output_path: Output file path
        run_id: Optional run identifier (generated if not provided)

    Returns:
        Metadata dict with file info
    """
    if run_id is None:
        run_id = uuid.uuid4().hex[:12]

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        for row in table.iter_rows():
            f.write(json.dumps(row, default=_json_default) + "\n")

    metadata = _metadata(output_path, run_id, table.num_rows, table.num_columns)
    logger.info(f"Wrote {table.num_rows} rows to {output_path}", extra=metadata)
    return metadata


def write_parquet(
    table,
    output_path: Union[str, Path],
    run_id: Optional[str] = None,
) -> dict:
    """Write a table to a Parquet file.

    Requires pyarrow to be installed.

    Args:
        table: Table to write
        output_path: Output file path
        run_id: Optional run identifier (generated if not provided)

    Returns:
        Metadata dict with file info
    """
    try:
        import pyarrow.parquet as pq
    except ImportError:
        raise ImportError("pyarrow is required for Parquet support")

    if run_id is None:
        run_id = uuid.uuid4().hex[:12]

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    pq.write_table(table.to_arrow(), output_path)

    metadata = _metadata(output_path, run_id, table.num_rows, table.num_columns)
    logger.info(f"Wrote {table.num_rows} rows to Parquet at {output_path}", extra=metadata)
    return metadata


def read_jsonl(file_path: Union[str, Path]) -> list[dict]:
    """Read rows back from a JSONL file."""
    records = []

    with open(file_path, "r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                records.append(json.loads(line))

    logger.debug(f"Read {len(records)} records from {file_path}")
    return records


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
