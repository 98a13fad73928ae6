"""Authentication for QuantAQ API access.

Supports API keys sent as HTTP basic credentials, a header, or a query
parameter.
"""

from .api_key import APIKeyAuth, APIKeyLocation

__all__ = ["APIKeyAuth", "APIKeyLocation"]
