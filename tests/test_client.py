"""Tests for the QuantAQ API client."""

from unittest.mock import MagicMock

import pytest
import requests

from quantaq.auth.api_key import APIKeyAuth, APIKeyLocation
from quantaq.clients.quantaq_client import QuantAQClient, endpoint_path, is_paginated
from quantaq.transform.pipeline import ResponseKind

BASE_URL = "https://api.example.com/device-api/v1"


def make_response(body, status_code=200, headers=None):
    """Build a stand-in for ``requests.Response``."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.headers = headers or {}
    response.json.return_value = body
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    return response


def page(data, next_url=None, page_number=1):
    return {"data": data, "meta": {"next_url": next_url, "page": page_number}}


@pytest.fixture
def client():
    client = QuantAQClient(api_key="test-key", base_url=BASE_URL)
    client.session.request = MagicMock()
    return client


def called_urls(client):
    return [call.kwargs["url"] for call in client.session.request.call_args_list]


class TestAPIKeyAuth:
    """Tests for API key authentication."""

    def test_basic_auth_header(self):
        """Test the key is sent as the basic auth username."""
        auth = APIKeyAuth("test-key", location=APIKeyLocation.BASIC)

        assert auth.get_auth_header() == {"Authorization": "Basic dGVzdC1rZXk6"}
        assert auth.get_auth_params() == {}

    def test_query_location(self):
        """Test the key can be sent as a query parameter."""
        auth = APIKeyAuth("test-key", key_name="api_key", location=APIKeyLocation.QUERY)
        headers, params = auth.apply_auth({"Accept": "application/json"}, {"page": 1})

        assert headers == {"Accept": "application/json"}
        assert params == {"page": 1, "api_key": "test-key"}

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError):
            APIKeyAuth("")


class TestClientConfig:
    """Tests for client configuration."""

    def test_api_key_required(self, monkeypatch):
        """Test a missing key fails at construction."""
        monkeypatch.delenv("QUANTAQ_API_KEY", raising=False)

        with pytest.raises(ValueError, match="QUANTAQ_API_KEY"):
            QuantAQClient()

    def test_env_config(self, monkeypatch):
        """Test key and base URL are read from the environment."""
        monkeypatch.setenv("QUANTAQ_API_KEY", "env-key")
        monkeypatch.setenv("QUANTAQ_BASE_URL", "https://env.example.com/v1/")
        client = QuantAQClient()

        assert client.base_url == "https://env.example.com/v1"
        assert client.api_key_auth.api_key == "env-key"

    def test_build_url(self, client):
        """Test relative endpoints are joined and absolute URLs kept."""
        assert client.build_url("devices/") == f"{BASE_URL}/devices/"
        assert client.build_url("https://other.example.com/x") == "https://other.example.com/x"


class TestFetch:
    """Tests for fetching and pagination."""

    def test_single_record(self, client):
        """Test a non-paginated body is returned as is."""
        client.session.request.return_value = make_response({"id": 1, "username": "jdoe"})

        assert client.fetch("account") == {"id": 1, "username": "jdoe"}
        assert called_urls(client) == [f"{BASE_URL}/account"]

    def test_pages_concatenated(self, client):
        """Test every next_url is followed and pages are joined in order."""
        next_url = f"{BASE_URL}/devices?page=2"
        client.session.request.side_effect = [
            make_response(page([{"sn": "A"}, {"sn": "B"}], next_url=next_url)),
            make_response(page([{"sn": "C"}], page_number=2)),
        ]

        records = client.fetch("devices", {"limit": 3})

        assert [r["sn"] for r in records] == ["A", "B", "C"]
        assert called_urls(client) == [f"{BASE_URL}/devices", next_url]
        first, second = client.session.request.call_args_list
        assert first.kwargs["params"] == {"limit": 3}
        assert second.kwargs["params"] is None

    def test_none_params_dropped(self, client):
        """Test unset query parameters are not sent."""
        client.session.request.return_value = make_response(page([]))

        client.get_devices(sort="id,asc")

        assert client.session.request.call_args.kwargs["params"] == {"sort": "id,asc"}

    def test_auth_header_sent(self, client):
        client.session.request.return_value = make_response({})

        client.fetch("account")

        headers = client.session.request.call_args.kwargs["headers"]
        assert headers["Authorization"].startswith("Basic ")

    def test_paginate_generator(self, client):
        """Test paginate yields records one at a time."""
        client.session.request.return_value = make_response(page([{"id": 1}, {"id": 2}]))

        assert list(client.paginate("log/SN")) == [{"id": 1}, {"id": 2}]

    def test_paginate_rejects_single_record(self, client):
        client.session.request.return_value = make_response({"id": 1})

        with pytest.raises(ValueError):
            list(client.paginate("account"))

    def test_http_error_propagates(self, client):
        """Test failures surface unchanged to the caller."""
        client.session.request.return_value = make_response({"error": "nope"}, status_code=401)

        with pytest.raises(requests.HTTPError):
            client.fetch("account")
        assert client.metrics.failed_requests == 1

    def test_rate_limited_then_ok(self, client, monkeypatch):
        """Test a 429 waits Retry-After and retries."""
        sleeps = []
        monkeypatch.setattr("quantaq.clients.base.time.sleep", sleeps.append)
        client.session.request.side_effect = [
            make_response({}, status_code=429, headers={"Retry-After": "2"}),
            make_response({"id": 1}),
        ]

        assert client.fetch("account") == {"id": 1}
        assert sleeps == [2]
        assert client.metrics.total_retries == 1
        assert client.metrics.successful_requests == 1

    def test_rate_limit_retries_bounded(self, client, monkeypatch):
        """Test repeated 429s eventually raise."""
        monkeypatch.setattr("quantaq.clients.base.time.sleep", lambda seconds: None)
        client.max_rate_limit_retries = 1
        client.session.request.side_effect = [
            make_response({}, status_code=429, headers={"Retry-After": "1"}),
            make_response({}, status_code=429, headers={"Retry-After": "1"}),
        ]

        with pytest.raises(requests.HTTPError):
            client.fetch("account")


class TestEndpoints:
    """Tests for the endpoint helpers."""

    @pytest.mark.parametrize(
        "call, path, kind",
        [
            (lambda c: c.whoami(), "account", ResponseKind.ACCOUNT),
            (lambda c: c.get_teams(), "teams", ResponseKind.TEAMS),
            (lambda c: c.get_teams(5), "teams/5", ResponseKind.TEAMS),
            (lambda c: c.get_devices("SN1"), "devices/SN1", ResponseKind.DEVICES),
            (lambda c: c.get_device_metadata("SN1"), "meta-data/SN1", ResponseKind.METADATA),
            (lambda c: c.get_data("SN1"), "devices/SN1/data", ResponseKind.DEVICE_DATA),
            (lambda c: c.get_data("SN1", raw=True), "devices/SN1/data/raw/", ResponseKind.DEVICE_DATA),
            (
                lambda c: c.get_data_by_date("SN1", "2024-01-15"),
                "devices/SN1/data-by-date/2024-01-15",
                ResponseKind.DEVICE_DATA,
            ),
            (
                lambda c: c.get_data_by_date("SN1", "2024-01-15", raw=True),
                "devices/SN1/data-by-date/raw/2024-01-15",
                ResponseKind.DEVICE_DATA,
            ),
            (lambda c: c.get_logs("SN1"), "log/SN1", ResponseKind.LOGS),
            (lambda c: c.get_models("SN1"), "calibration-models/SN1", ResponseKind.CALIBRATION_MODELS),
        ],
    )
    def test_paths_and_kinds(self, client, call, path, kind):
        """Test each helper hits its path and tags the response kind."""
        client.session.request.return_value = make_response(page([]))

        response = call(client)

        assert called_urls(client) == [f"{BASE_URL}/{path}"]
        assert response.kind == kind
        assert response.endpoint == path

    def test_get_data_params(self, client):
        """Test data query parameters, with the default limit."""
        client.session.request.return_value = make_response(page([]))

        client.get_data("SN1", start="2024-01-01 00:00:00", filter="pm25,ge,25;")

        assert client.session.request.call_args.kwargs["params"] == {
            "limit": 1000,
            "start": "2024-01-01 00:00:00",
            "filter": "pm25,ge,25;",
        }

    def test_fetched_data_to_table(self, client, device_data_records):
        """Test a fetched response flattens into a table."""
        client.session.request.return_value = make_response(page(device_data_records))

        table = client.get_data("SN1").to_table()

        assert table.column_names[0] == "timestamp"
        assert table.num_rows == 2


def test_endpoint_path_skips_none():
    assert endpoint_path("teams", None) == "teams"
    assert endpoint_path("devices", "SN1", "data") == "devices/SN1/data"


def test_is_paginated():
    assert is_paginated(page([]))
    assert not is_paginated({"data": [], "id": 1})
    assert not is_paginated([{"id": 1}])
