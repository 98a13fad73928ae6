"""API client for the QuantAQ device API.

The client handles:
- Authentication
- Pagination
- Rate limiting
- Retries with exponential backoff
"""

from .base import BaseAPIClient, RequestMetrics
from .quantaq_client import QuantAQClient

__all__ = ["BaseAPIClient", "RequestMetrics", "QuantAQClient"]
