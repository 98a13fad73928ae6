"""Response arity normalization: single record vs. list of records."""

import logging
from dataclasses import dataclass
from typing import Any, Union

from quantaq.errors import InvalidInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Single:
    """A response that is one record, its field names visible at top level."""

    record: dict

    def records(self) -> list[dict]:
        return [self.record]


@dataclass(frozen=True)
class Many:
    """A response that is a list of records."""

    items: list

    def records(self) -> list[dict]:
        return list(self.items)


Response = Union[Single, Many]


def classify_response(response: Any) -> Response:
    """Tag a raw response as :class:`Single` or :class:`Many`.

    Args:
        response: Decoded JSON body (or concatenated pages) from the API

    Returns:
        ``Single`` for a mapping, ``Many`` for a list of mappings

    Raises:
        InvalidInputError: If the response is neither shape
    """
    if isinstance(response, dict):
        return Single(response)

    if isinstance(response, (list, tuple)):
        for i, item in enumerate(response):
            if not isinstance(item, dict):
                raise InvalidInputError(
                    f"Response item {i} is {type(item).__name__}, expected a record",
                    item,
                )
        return Many(list(response))

    raise InvalidInputError(
        f"Response is {type(response).__name__}, expected a record or a list of records",
        response,
    )


def normalize_response(response: Any) -> list[dict]:
    """Return the response as a list of records, wrapping a single record."""
    tagged = classify_response(response)
    records = tagged.records()

    logger.debug(
        f"Normalized {type(tagged).__name__.lower()} response to {len(records)} records",
        extra={"shape": type(tagged).__name__, "record_count": len(records)},
    )
    return records
