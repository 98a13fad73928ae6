"""Base API client: session retries, rate limiting, request metrics."""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


@dataclass
class RequestMetrics:
    """Counters for requests made by a client."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_retries: int = 0
    request_durations: list[float] = field(default_factory=list)

    def record_request(self, duration_ms: float, success: bool) -> None:
        self.total_requests += 1
        self.request_durations.append(duration_ms)
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1

    def record_retry(self) -> None:
        self.total_retries += 1

    @property
    def total_duration_ms(self) -> float:
        return sum(self.request_durations)

    @property
    def avg_duration_ms(self) -> float:
        if not self.request_durations:
            return 0
        return self.total_duration_ms / len(self.request_durations)

    def to_dict(self) -> dict:
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "total_retries": self.total_retries,
            "total_duration_ms": round(self.total_duration_ms, 2),
            "avg_duration_ms": round(self.avg_duration_ms, 2),
        }


class BaseAPIClient(ABC):
    """Base class for API clients with retry and rate limiting support.

    Transient 5xx responses are retried by the session's urllib3 ``Retry``;
    429 responses are retried here, honouring ``Retry-After``. Any other
    failure is raised to the caller unchanged.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        rate_limit_requests: int = 100,
        rate_limit_period: int = 60,
        max_rate_limit_retries: int = 5,
    ):
        """Initialize base API client.

        Args:
            base_url: Base URL for the API
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts for 5xx responses
            backoff_factor: Exponential backoff factor
            rate_limit_requests: Max requests per period
            rate_limit_period: Rate limit period in seconds
            max_rate_limit_retries: Max retries after a 429 response
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.rate_limit_requests = rate_limit_requests
        self.rate_limit_period = rate_limit_period
        self.max_rate_limit_retries = max_rate_limit_retries

        self._request_timestamps: list[float] = []
        self.metrics = RequestMetrics()

        self.session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @abstractmethod
    def get_auth_headers(self) -> dict:
        """Get authentication headers for requests."""

    def get_auth_params(self) -> dict:
        """Get authentication query parameters for requests."""
        return {}

    def _wait_for_rate_limit(self) -> None:
        """Sleep if the sliding window already holds the maximum requests."""
        now = time.time()

        self._request_timestamps = [
            ts for ts in self._request_timestamps
            if now - ts < self.rate_limit_period
        ]

        if len(self._request_timestamps) >= self.rate_limit_requests:
            oldest = min(self._request_timestamps)
            wait_time = self.rate_limit_period - (now - oldest)

            if wait_time > 0:
                logger.warning(
                    f"Rate limit reached, waiting {wait_time:.2f}s",
                    extra={"wait_seconds": wait_time}
                )
                time.sleep(wait_time)

        self._request_timestamps.append(time.time())

    def build_url(self, endpoint: str) -> str:
        """Join ``endpoint`` onto the base URL; absolute URLs pass through."""
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> requests.Response:
        """Make an HTTP request with rate limiting, timing, and logging.

        Raises:
            requests.HTTPError: On non-2xx responses
            requests.RequestException: On connection or timeout errors
        """
        url = self.build_url(endpoint)
        request_params = {**(params or {}), **self.get_auth_params()}
        retry_count = 0

        while True:
            self._wait_for_rate_limit()
            start_time = time.time()

            logger.debug(
                f"Making {method} request",
                extra={"url": url, "params": params, "retry_count": retry_count}
            )

            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    params=request_params or None,
                    headers=self.get_auth_headers(),
                    timeout=self.timeout,
                )
            except requests.exceptions.RequestException as e:
                duration_ms = (time.time() - start_time) * 1000
                self.metrics.record_request(duration_ms, success=False)
                logger.error(
                    "API request failed",
                    extra={
                        "method": method,
                        "endpoint": endpoint,
                        "error": str(e),
                        "duration_ms": round(duration_ms, 2),
                        "retry_count": retry_count,
                    }
                )
                raise

            duration_ms = (time.time() - start_time) * 1000

            if response.status_code == 429 and retry_count < self.max_rate_limit_retries:
                retry_after = int(response.headers.get("Retry-After", 60))
                retry_count += 1
                self.metrics.record_retry()
                logger.warning(
                    f"Rate limited (429), waiting {retry_after}s",
                    extra={
                        "retry_after": retry_after,
                        "retry_count": retry_count,
                        "endpoint": endpoint,
                    }
                )
                time.sleep(retry_after)
                continue

            self.metrics.record_request(duration_ms, success=response.ok)
            logger.info(
                "API request completed",
                extra={
                    "method": method,
                    "endpoint": endpoint,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                    "retry_count": retry_count,
                }
            )

            response.raise_for_status()
            return response

    def get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        """Make GET request and return the decoded JSON body."""
        response = self._make_request("GET", endpoint, params=params)
        return response.json()

    @abstractmethod
    def paginate(
        self,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> Generator[dict, None, None]:
        """Yield individual records from a paginated endpoint."""
