"""QuantAQ device API client - API key auth with next_url pagination."""

import logging
import os
from typing import Any, Generator, Optional

from quantaq.auth.api_key import APIKeyAuth, APIKeyLocation
from quantaq.clients.base import BaseAPIClient
from quantaq.transform.pipeline import ResponseKind, TaggedResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.quant-aq.com/device-api/v1"


def is_paginated(body: Any) -> bool:
    """A paginated body looks like ``{"data": [...], "meta": {...}}``."""
    return (
        isinstance(body, dict)
        and isinstance(body.get("data"), list)
        and isinstance(body.get("meta"), dict)
    )


def endpoint_path(*parts: Optional[Any]) -> str:
    """Join path segments with "/", skipping ``None``."""
    return "/".join(str(part) for part in parts if part is not None)


class QuantAQClient(BaseAPIClient):
    """Client for the QuantAQ device API.

    Features:
    - API key sent as HTTP basic credentials
    - Pagination following ``meta.next_url``
    - Rate limiting and automatic retries
    - One helper per endpoint, each returning a kind-tagged response
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        rate_limit_requests: int = 150,
        rate_limit_period: int = 60,
        **kwargs,
    ):
        """Initialize the QuantAQ client.

        Args:
            api_key: API key (or from env: QUANTAQ_API_KEY)
            base_url: API base URL (or from env: QUANTAQ_BASE_URL)
            rate_limit_requests: Max requests per period
            rate_limit_period: Rate limit period in seconds
            **kwargs: Passed through to :class:`BaseAPIClient`
        """
        base_url = base_url or os.getenv("QUANTAQ_BASE_URL") or DEFAULT_BASE_URL

        super().__init__(
            base_url=base_url,
            rate_limit_requests=rate_limit_requests,
            rate_limit_period=rate_limit_period,
            **kwargs,
        )

        api_key_value = api_key or os.getenv("QUANTAQ_API_KEY")
        if not api_key_value:
            raise ValueError("QUANTAQ_API_KEY is required")

        self.api_key_auth = APIKeyAuth(
            api_key=api_key_value,
            location=APIKeyLocation.BASIC,
        )

    def get_auth_headers(self) -> dict:
        return self.api_key_auth.get_auth_header()

    def _pages(
        self,
        first_page: dict,
    ) -> Generator[dict, None, None]:
        page = first_page
        page_number = 1

        while True:
            for record in page["data"]:
                yield record

            next_url = page["meta"].get("next_url")
            if not next_url:
                logger.debug("No next_url, pagination complete")
                break

            page_number += 1
            logger.debug(f"Fetching page {page_number}", extra={"next_url": next_url})
            # next_url already carries the query string
            page = self.get(next_url)
            if not is_paginated(page):
                raise ValueError(f"Page {page_number} is not a paginated response")

        logger.info(f"Pagination complete after {page_number} pages")

    def paginate(
        self,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> Generator[dict, None, None]:
        """Paginate through results following ``meta.next_url``.

        Assumes API returns:
        {
            "data": [...],
            "meta": {"next_url": "...", "page": 1, "pages": 3, ...}
        }

        Yields:
            Individual records from paginated responses
        """
        first_page = self.get(endpoint, params=params)
        if not is_paginated(first_page):
            raise ValueError(f"Endpoint '{endpoint}' did not return a paginated response")
        yield from self._pages(first_page)

    def fetch(self, endpoint: str, params: Optional[dict] = None) -> Any:
        """Fetch an endpoint, concatenating every page.

        Args:
            endpoint: Path relative to the base URL
            params: Query parameters; ``None`` values are dropped

        Returns:
            A list of records for paginated endpoints, otherwise the decoded
            body as is (typically a single record)
        """
        params = {k: v for k, v in (params or {}).items() if v is not None}

        body = self.get(endpoint, params=params)
        if not is_paginated(body):
            logger.info(f"Fetched single response from '{endpoint}'", extra={"endpoint": endpoint})
            return body

        records = list(self._pages(body))
        logger.info(
            f"Fetched {len(records)} records from '{endpoint}'",
            extra={"endpoint": endpoint, "record_count": len(records)},
        )
        return records

    def _fetch_tagged(
        self,
        kind: ResponseKind,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> TaggedResponse:
        return TaggedResponse(kind=kind, payload=self.fetch(endpoint, params), endpoint=endpoint)

    # ============================================
    # Endpoints
    # ============================================

    def whoami(self) -> TaggedResponse:
        """Get the account information of the API key's user."""
        return self._fetch_tagged(ResponseKind.ACCOUNT, "account")

    def get_teams(self, team_id: Optional[int] = None) -> TaggedResponse:
        """Get all teams, or one team by its numeric id."""
        return self._fetch_tagged(ResponseKind.TEAMS, endpoint_path("teams", team_id))

    def get_devices(
        self,
        sn: Optional[str] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> TaggedResponse:
        """Get the user's devices, or one device by serial number.

        Args:
            sn: Device serial number
            limit: Number of devices to return
            sort: Sort order formatted as "<parameter>,<order>", e.g. "id,asc"
        """
        return self._fetch_tagged(
            ResponseKind.DEVICES,
            endpoint_path("devices", sn),
            {"limit": limit, "sort": sort},
        )

    def get_device_metadata(self, sn: str) -> TaggedResponse:
        return self._fetch_tagged(ResponseKind.METADATA, endpoint_path("meta-data", sn))

    def get_data(
        self,
        sn: str,
        limit: Optional[int] = 1000,
        start: Optional[str] = None,
        stop: Optional[str] = None,
        filter: Optional[str] = None,
        sort: Optional[str] = None,
        raw: bool = False,
    ) -> TaggedResponse:
        """Get device data.

        Args:
            sn: Device serial number
            limit: Number of data points to return
            start: Earliest timestamp, "YYYY-MM-DD HH:MM:SS"
            stop: Latest timestamp, "YYYY-MM-DD HH:MM:SS"
            filter: Filter "<parameter>,<op>,<value>;", e.g. "pm25,ge,25;pm25,le,50;"
            sort: Sort order, e.g. "timestamp,asc"
            raw: Return raw data (developers and admins only)
        """
        endpoint = endpoint_path("devices", sn, "data")
        if raw:
            endpoint = endpoint_path(endpoint, "raw/")

        return self._fetch_tagged(
            ResponseKind.DEVICE_DATA,
            endpoint,
            {"limit": limit, "start": start, "stop": stop, "filter": filter, "sort": sort},
        )

    def get_data_by_date(self, sn: str, date: str, raw: bool = False) -> TaggedResponse:
        """Get one day of device data; ``date`` is "YYYY-MM-DD"."""
        endpoint = endpoint_path("devices", sn, "data-by-date", "raw" if raw else None, date)
        return self._fetch_tagged(ResponseKind.DEVICE_DATA, endpoint)

    def get_logs(self, sn: str, limit: Optional[int] = None) -> TaggedResponse:
        return self._fetch_tagged(ResponseKind.LOGS, endpoint_path("log", sn), {"limit": limit})

    def get_models(self, sn: str) -> TaggedResponse:
        """Get the calibration models of a device."""
        return self._fetch_tagged(
            ResponseKind.CALIBRATION_MODELS, endpoint_path("calibration-models", sn)
        )
