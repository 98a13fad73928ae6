"""In-memory column-oriented table produced by the transform pipeline."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)


@dataclass
class Table:
    """Ordered named columns of equal length.

    Row ``i`` across all columns describes the same source record. ``num_rows``
    is stored explicitly so a batch of empty records keeps its row count even
    when it has no columns.
    """

    columns: dict[str, list] = field(default_factory=dict)
    num_rows: int = 0

    def __post_init__(self):
        for name, values in self.columns.items():
            if len(values) != self.num_rows:
                raise ValueError(
                    f"Column '{name}' has {len(values)} values, expected {self.num_rows}"
                )

    @classmethod
    def from_records(cls, records: list[dict]) -> "Table":
        """Build a table from records, using the union of their keys as columns.

        Columns appear in first-seen order; a record missing a key gets ``None``.
        """
        names: dict[str, None] = {}
        for record in records:
            for key in record:
                names.setdefault(key, None)

        columns = {
            name: [record.get(name) for record in records]
            for name in names
        }
        return cls(columns=columns, num_rows=len(records))

    @property
    def column_names(self) -> list[str]:
        return list(self.columns)

    @property
    def num_columns(self) -> int:
        return len(self.columns)

    def __len__(self) -> int:
        return self.num_rows

    def column(self, name: str) -> list:
        return self.columns[name]

    def iter_rows(self) -> Iterator[dict[str, Any]]:
        """Yield each row as a dict keyed by column name."""
        for i in range(self.num_rows):
            yield {name: values[i] for name, values in self.columns.items()}

    def to_records(self) -> list[dict[str, Any]]:
        return list(self.iter_rows())

    def with_columns(self, columns: dict[str, list]) -> "Table":
        """Return a new table with the same row count and the given columns."""
        return Table(columns=columns, num_rows=self.num_rows)

    def rename(self, mapping: dict[str, str]) -> "Table":
        """Rename columns, keeping their positions.

        If two columns end up with the same name the later one's values win,
        at the position of the first.
        """
        renamed: dict[str, list] = {}
        for name, values in self.columns.items():
            target = mapping.get(name, name)
            if target in renamed:
                logger.warning(
                    f"Column '{name}' renamed onto existing column '{target}', overwriting",
                    extra={"column": name, "target": target},
                )
            renamed[target] = values
        return self.with_columns(renamed)

    def move_to_front(self, name: str) -> "Table":
        """Return a table with ``name`` as the first column, if it exists."""
        if name not in self.columns:
            return self
        reordered = {name: self.columns[name]}
        reordered.update(
            (other, values) for other, values in self.columns.items() if other != name
        )
        return self.with_columns(reordered)

    def to_arrow(self, schema: Optional[Any] = None):
        """Convert to a ``pyarrow.Table``.

        Requires pyarrow to be installed.
        """
        try:
            import pyarrow as pa
        except ImportError:
            raise ImportError("pyarrow is required for Arrow conversion")

        return pa.Table.from_pydict(dict(self.columns), schema=schema)
