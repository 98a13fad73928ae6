"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timezone


@pytest.fixture
def account_record():
    """Single account response, as returned by the account endpoint."""
    return {
        "id": 42,
        "username": "jdoe",
        "email": "jdoe@example.com",
        "last_seen": "2024-01-15 10:30:00.123456",
        "member_since": "2021-06-01 08:00:00",
        "is_admin": False,
    }


@pytest.fixture
def device_records():
    """List of devices with nested geo, a singleton list and a two-element list."""
    return [
        {
            "sn": "MOD-PM-00001",
            "geo": {"lat": 42.36, "lon": -71.06},
            "teams": [{"id": 1, "name": "Boston"}],
            "status": "ACTIVE",
        },
        {
            "sn": "MOD-PM-00002",
            "geo": {"lat": 40.71, "lon": -74.0},
            "teams": [{"id": 2, "name": "NYC"}],
            "status": "INACTIVE",
        },
    ]


@pytest.fixture
def device_data_records():
    """Device data rows with a nested geo and timestamps."""
    return [
        {
            "pm25": 12.5,
            "geo": {"lat": 42.36, "lon": -71.06},
            "timestamp_local": "2024-01-15 05:30:00",
            "timestamp": "2024-01-15 10:30:00",
            "sn": "MOD-PM-00001",
        },
        {
            "pm25": 14.0,
            "geo": {"lat": 42.36, "lon": -71.06},
            "timestamp_local": "2024-01-15 05:31:00",
            "timestamp": "2024-01-15 10:31:00",
            "sn": "MOD-PM-00001",
        },
    ]


@pytest.fixture
def calibration_records():
    """Calibration models with paired features/params structures."""
    return [
        {
            "id": 7,
            "model": {
                "features": {"pm1": 0.1, "pm25": 0.2},
                "params": {"pm1": 0.5, "rh": 0.9},
            },
            "sn": "MOD-00001",
        },
    ]


@pytest.fixture
def nested_record():
    """Deeply nested record for testing flattening."""
    return {
        "id": "nested-1",
        "user": {
            "name": "John Doe",
            "profile": {
                "age": 30,
                "location": {
                    "city": "New York",
                    "country": "USA",
                },
            },
        },
        "items": [
            {"sku": "A1", "qty": 2},
            {"sku": "B2", "qty": 1},
        ],
    }


@pytest.fixture
def fixed_datetime():
    """Fixed datetime for partition paths."""
    return datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)
