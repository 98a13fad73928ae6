"""Main entrypoint: QuantAQ API → flat table → file.

Usage:
    python -m quantaq.fetch_to_table account
    python -m quantaq.fetch_to_table devices --limit 10 --sort id,asc
    python -m quantaq.fetch_to_table device_data --sn MOD-PM-00001 --start "2024-01-01 00:00:00"
    python -m quantaq.fetch_to_table calibration_models --sn MOD-00001 --format parquet
"""

import argparse
import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from quantaq.clients import QuantAQClient
from quantaq.transform import ResponseKind, TaggedResponse
from quantaq.utils import (
    PipelineLogger,
    get_output_path,
    setup_logging,
    timed_operation,
    write_jsonl,
    write_parquet,
)
from quantaq.utils.file_io import generate_filename

logger = logging.getLogger(__name__)

# Kinds whose endpoint needs a device serial number
SN_REQUIRED = {
    ResponseKind.METADATA,
    ResponseKind.DEVICE_DATA,
    ResponseKind.CALIBRATION_MODELS,
    ResponseKind.LOGS,
}


def fetch_kind(client: QuantAQClient, kind: ResponseKind, args: argparse.Namespace) -> TaggedResponse:
    """Call the client endpoint matching ``kind`` with the CLI arguments."""
    if kind in SN_REQUIRED and not args.sn:
        raise ValueError(f"--sn is required for {kind.value}")

    if kind == ResponseKind.ACCOUNT:
        return client.whoami()
    if kind == ResponseKind.TEAMS:
        return client.get_teams(args.team_id)
    if kind == ResponseKind.DEVICES:
        return client.get_devices(args.sn, limit=args.limit, sort=args.sort)
    if kind == ResponseKind.METADATA:
        return client.get_device_metadata(args.sn)
    if kind == ResponseKind.DEVICE_DATA:
        if args.date:
            return client.get_data_by_date(args.sn, args.date, raw=args.raw)
        return client.get_data(
            args.sn,
            limit=args.limit if args.limit is not None else 1000,
            start=args.start,
            stop=args.stop,
            filter=args.filter,
            sort=args.sort,
            raw=args.raw,
        )
    if kind == ResponseKind.LOGS:
        return client.get_logs(args.sn, limit=args.limit)
    return client.get_models(args.sn)


def run(
    args: argparse.Namespace,
    client: Optional[QuantAQClient] = None,
    run_id: Optional[str] = None,
) -> dict:
    """Fetch one kind, flatten it, and write it to disk.

    Returns:
        Run result metadata
    """
    kind = ResponseKind(args.kind)
    run_id = run_id or uuid.uuid4().hex[:12]
    plog = PipelineLogger(kind.value, run_id)

    plog.start("run")
    try:
        client = client or QuantAQClient()

        with timed_operation("fetch") as fetch_timer:
            response = fetch_kind(client, kind, args)
        payload_count = len(response.payload) if isinstance(response.payload, list) else 1
        plog.log_fetch(response.endpoint, payload_count, fetch_timer.duration_ms)

        with timed_operation("transform") as transform_timer:
            table = response.to_table()
        plog.log_transform(
            payload_count, table.num_rows, table.num_columns, transform_timer.duration_ms
        )

        extension = "parquet" if args.format == "parquet" else "jsonl"
        output_path = Path(get_output_path(args.output_dir, kind.value)) / generate_filename(
            run_id, extension
        )
        writer = write_parquet if args.format == "parquet" else write_jsonl

        with timed_operation("write") as write_timer:
            metadata = writer(table, output_path, run_id=run_id)
        plog.log_write(
            metadata["file_path"], table.num_rows, metadata["file_size_bytes"],
            write_timer.duration_ms,
        )

        result = {
            "kind": kind.value,
            "run_id": run_id,
            "status": "success",
            "records_fetched": payload_count,
            "row_count": table.num_rows,
            "column_count": table.num_columns,
            "file_path": metadata["file_path"],
            "request_metrics": client.metrics.to_dict(),
        }
        plog.success("run", row_count=table.num_rows)
        return result

    except Exception as e:
        plog.error("run", e)
        logger.error(f"Failed to build {kind.value} table: {e}", exc_info=True)
        return {
            "kind": kind.value,
            "run_id": run_id,
            "status": "error",
            "error": str(e),
        }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fetch QuantAQ API data and write it as a flat table"
    )
    parser.add_argument(
        "kind",
        choices=[kind.value for kind in ResponseKind],
        help="Kind of data to fetch",
    )
    parser.add_argument("--sn", default=None, help="Device serial number")
    parser.add_argument("--team-id", type=int, default=None, help="Team id (teams only)")
    parser.add_argument("--limit", type=int, default=None, help="Number of records to return")
    parser.add_argument("--start", default=None, help='Earliest timestamp, "YYYY-MM-DD HH:MM:SS"')
    parser.add_argument("--stop", default=None, help='Latest timestamp, "YYYY-MM-DD HH:MM:SS"')
    parser.add_argument("--filter", default=None, help='Filter, e.g. "pm25,ge,25;"')
    parser.add_argument("--sort", default=None, help='Sort order, e.g. "timestamp,asc"')
    parser.add_argument("--date", default=None, help='Single day of data, "YYYY-MM-DD"')
    parser.add_argument("--raw", action="store_true", help="Fetch raw device data")
    parser.add_argument(
        "--output-dir",
        default="output",
        help="Base output directory (default: output)",
    )
    parser.add_argument(
        "--format",
        choices=["jsonl", "parquet"],
        default="jsonl",
        help="Output format (default: jsonl)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log level (default: INFO)",
    )
    return parser


def main(argv: Optional[list[str]] = None):
    """CLI entrypoint."""
    load_dotenv()

    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, json_format=True)

    result = run(args)

    if result["status"] != "success":
        sys.exit(1)


if __name__ == "__main__":
    main()
