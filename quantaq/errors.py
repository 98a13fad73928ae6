"""Exceptions raised while turning API responses into tables."""

from typing import Any, Optional


class QuantAQError(Exception):
    """Base class for table-building errors."""


class InvalidInputError(QuantAQError):
    """Raised when a response is neither a record nor a sequence of records."""

    def __init__(self, message: str, value: Any = None):
        self.value = value
        super().__init__(message)


class ParseError(QuantAQError):
    """Raised when a timestamp column holds a value that cannot be parsed."""

    def __init__(self, column: str, row: int, value: Any):
        self.column = column
        self.row = row
        self.value = value
        super().__init__(
            f"Could not parse timestamp in column '{column}' at row {row}: {value!r}"
        )


class SchemaMismatchError(QuantAQError):
    """Raised when a calibration column does not follow the group/element naming."""

    def __init__(self, column: str, pattern: Optional[str] = None):
        self.column = column
        self.pattern = pattern
        message = f"Column '{column}' does not match the expected naming"
        if pattern:
            message += f" ({pattern})"
        super().__init__(message)


class DuplicateColumnError(QuantAQError):
    """Raised when widening a nested column would reuse an existing column name."""

    def __init__(self, column: str, source: str):
        self.column = column
        self.source = source
        super().__init__(
            f"Widening column '{source}' produces '{column}', which already exists"
        )
