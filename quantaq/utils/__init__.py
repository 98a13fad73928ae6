"""Utility modules for the client and CLI.

Includes:
- Logging configuration
- Structured pipeline logging
- Table file output
"""

from .logging_config import setup_logging, JsonFormatter
from .file_io import write_jsonl, write_parquet, read_jsonl, get_output_path
from .pipeline_logger import PipelineLogger, timed_operation

__all__ = [
    "setup_logging",
    "JsonFormatter",
    "write_jsonl",
    "write_parquet",
    "read_jsonl",
    "get_output_path",
    "PipelineLogger",
    "timed_operation",
]
