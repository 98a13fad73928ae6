"""Structured logging utilities for fetch-and-flatten runs.

Every event carries:
- kind
- run_id
- step
- row_count / column_count
- duration_ms
"""

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class PipelineLogContext:
    """Fields attached to every pipeline log event."""

    kind: str
    run_id: str
    step: str = ""
    row_count: int = 0
    column_count: Optional[int] = None
    output_path: Optional[str] = None
    duration_ms: Optional[float] = None
    status: str = "started"
    error: Optional[str] = None
    extra: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = datetime.now(timezone.utc).isoformat()
        return {k: v for k, v in data.items() if v is not None}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class PipelineLogger:
    """Structured logger for one fetch → table → file run."""

    def __init__(self, kind: str, run_id: str):
        """Initialize pipeline logger.

        Args:
            kind: Response kind being processed (e.g. 'devices', 'device_data')
            run_id: Unique run identifier
        """
        self.kind = kind
        self.run_id = run_id
        self.logger = logging.getLogger(f"quantaq.pipeline.{kind}")
        self._start_time: Optional[float] = None

    def _log(self, level: int, step: str, **kwargs) -> None:
        ctx = PipelineLogContext(
            kind=self.kind,
            run_id=self.run_id,
            step=step,
            **kwargs
        )
        self.logger.log(level, ctx.to_json(), extra=ctx.to_dict())

    def _elapsed_ms(self) -> Optional[float]:
        if self._start_time is None:
            return None
        return (time.time() - self._start_time) * 1000

    def start(self, step: str) -> None:
        self._start_time = time.time()
        self._log(logging.INFO, step, status="started")

    def success(self, step: str, **kwargs) -> None:
        self._log(
            logging.INFO,
            step,
            status="success",
            duration_ms=self._elapsed_ms(),
            **kwargs
        )

    def error(self, step: str, error: Exception, **kwargs) -> None:
        self._log(
            logging.ERROR,
            step,
            status="error",
            error=str(error),
            duration_ms=self._elapsed_ms(),
            **kwargs
        )

    def log_fetch(self, endpoint: str, record_count: int, duration_ms: float) -> None:
        """Log a completed fetch (all pages)."""
        self._log(
            logging.INFO,
            step="fetch",
            status="success",
            row_count=record_count,
            duration_ms=duration_ms,
            extra={"endpoint": endpoint},
        )

    def log_transform(
        self,
        input_count: int,
        row_count: int,
        column_count: int,
        duration_ms: float,
    ) -> None:
        """Log the normalize → flatten → post-process step."""
        self._log(
            logging.INFO,
            step="transform",
            status="success",
            row_count=row_count,
            column_count=column_count,
            duration_ms=duration_ms,
            extra={"input_count": input_count},
        )

    def log_write(
        self,
        output_path: str,
        row_count: int,
        file_size_bytes: int,
        duration_ms: float,
    ) -> None:
        self._log(
            logging.INFO,
            step="write",
            status="success",
            output_path=output_path,
            row_count=row_count,
            duration_ms=duration_ms,
            extra={"file_size_bytes": file_size_bytes},
        )


class Timer:
    """Elapsed time of a :func:`timed_operation` block."""

    def __init__(self):
        self.start_time = time.time()
        self.end_time: Optional[float] = None
        self.duration_ms: float = 0


@contextmanager
def timed_operation(name: str, logger: Optional[logging.Logger] = None):
    """Context manager to time an operation.

    Usage:
        with timed_operation("flatten") as timer:
            table = flatten(records)
        print(f"Took {timer.duration_ms}ms")

    Args:
        name: Operation name for logging
        logger: Optional logger instance

    Yields:
        Timer object with duration_ms attribute
    """
    timer = Timer()

    try:
        yield timer
    finally:
        timer.end_time = time.time()
        timer.duration_ms = (timer.end_time - timer.start_time) * 1000

        if logger:
            logger.debug(
                f"Operation '{name}' completed",
                extra={"operation": name, "duration_ms": timer.duration_ms},
            )
