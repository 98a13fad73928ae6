"""QuantAQ API client that turns nested device records into flat tables.

    >>> from quantaq import QuantAQClient
    >>> client = QuantAQClient()  # key from QUANTAQ_API_KEY
    >>> table = client.get_data("MOD-PM-00001", limit=100).to_table()
    >>> table.column_names[0]
    'timestamp'
"""

__version__ = "0.1.0"

from quantaq.clients import QuantAQClient
from quantaq.errors import (
    DuplicateColumnError,
    InvalidInputError,
    ParseError,
    QuantAQError,
    SchemaMismatchError,
)
from quantaq.transform import ResponseKind, Table, TaggedResponse, flatten, to_table

__all__ = [
    "QuantAQClient",
    "QuantAQError",
    "InvalidInputError",
    "ParseError",
    "SchemaMismatchError",
    "DuplicateColumnError",
    "ResponseKind",
    "Table",
    "TaggedResponse",
    "flatten",
    "to_table",
    "__version__",
]
