"""API key authentication handler."""

import base64
import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class APIKeyLocation(Enum):
    """Where to place the API key in requests."""

    HEADER = "header"
    QUERY = "query"
    # HTTP basic auth, key as username with an empty password (QuantAQ)
    BASIC = "basic"


class APIKeyAuth:
    """API key authentication handler.

    Supports sending the key as a header, a query parameter, or HTTP basic
    credentials.
    """

    def __init__(
        self,
        api_key: str,
        key_name: str = "Authorization",
        location: APIKeyLocation = APIKeyLocation.BASIC,
    ):
        """Initialize API key auth.

        Args:
            api_key: The API key value
            key_name: Name of the header or query parameter (ignored for BASIC)
            location: Where to place the key
        """
        if not api_key:
            raise ValueError("api_key must not be empty")

        self.api_key = api_key
        self.key_name = key_name
        self.location = location

        logger.debug(
            "APIKeyAuth initialized",
            extra={"key_name": key_name, "location": location.value}
        )

    def get_auth_header(self) -> dict:
        """Get authorization header dict for requests.

        Returns empty dict if location is QUERY.
        """
        if self.location == APIKeyLocation.BASIC:
            credentials = base64.b64encode(f"{self.api_key}:".encode("utf-8")).decode("ascii")
            return {"Authorization": f"Basic {credentials}"}
        if self.location == APIKeyLocation.HEADER:
            return {self.key_name: self.api_key}
        return {}

    def get_auth_params(self) -> dict:
        """Get query parameters dict for requests.

        Returns empty dict unless location is QUERY.
        """
        if self.location == APIKeyLocation.QUERY:
            return {self.key_name: self.api_key}
        return {}

    def apply_auth(
        self,
        headers: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> tuple[dict, dict]:
        """Return copies of ``headers`` and ``params`` with authentication applied."""
        headers = dict(headers or {})
        params = dict(params or {})

        headers.update(self.get_auth_header())
        params.update(self.get_auth_params())

        return headers, params
