"""Tests for kind-specific table building."""

from datetime import datetime, timezone

import pytest

from quantaq.errors import InvalidInputError, ParseError
from quantaq.transform.pipeline import ResponseKind, TaggedResponse, to_table


class TestAccount:
    """Tests for account responses."""

    def test_single_record_wrapped_and_coerced(self):
        """Test a bare account record becomes one row with a parsed last_seen."""
        table = to_table({"id": 1, "last_seen": "2023-01-01 00:00:00"}, ResponseKind.ACCOUNT)

        assert table.num_rows == 1
        assert table.column("last_seen") == [datetime(2023, 1, 1, tzinfo=timezone.utc)]

    def test_both_timestamp_columns(self, account_record):
        """Test last_seen and member_since are parsed, other columns untouched."""
        table = to_table(account_record, "account")
        row = table.to_records()[0]

        assert row["last_seen"] == datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc)
        assert row["member_since"] == datetime(2021, 6, 1, 8, 0, tzinfo=timezone.utc)
        assert row["is_admin"] is False
        assert row["email"] == "jdoe@example.com"


class TestTeams:
    """Tests for teams responses."""

    def test_single_team(self):
        """Test one team (a record) gives one row."""
        table = to_table({"id": 3, "name": "Boston"}, ResponseKind.TEAMS)

        assert table.to_records() == [{"id": 3, "name": "Boston"}]

    def test_team_list(self):
        """Test a list of teams keeps response order."""
        table = to_table([{"id": 2}, {"id": 1}], ResponseKind.TEAMS)

        assert table.column("id") == [2, 1]


class TestDevices:
    """Tests for device responses."""

    def test_devices_flattened(self, device_records):
        """Test nested geo and team lists are widened."""
        table = to_table(device_records, ResponseKind.DEVICES)

        assert table.column_names == [
            "sn",
            "geo_lat",
            "geo_lon",
            "teams_1_id",
            "teams_1_name",
            "status",
        ]
        assert table.column("teams_1_name") == ["Boston", "NYC"]

    def test_singleton_suffix_stripped(self):
        """Test single-element lists don't leave a _1 column."""
        table = to_table({"sn": "MOD-PM-00001", "tags": ["outdoor"]}, ResponseKind.DEVICES)

        assert table.column_names == ["sn", "tags"]
        assert table.column("tags") == ["outdoor"]


class TestDeviceData:
    """Tests for device data responses."""

    def test_timestamp_first_and_parsed(self, device_data_records):
        """Test timestamp columns are parsed and timestamp leads."""
        table = to_table(device_data_records, ResponseKind.DEVICE_DATA)

        assert table.column_names == [
            "timestamp",
            "pm25",
            "geo_lat",
            "geo_lon",
            "timestamp_local",
            "sn",
        ]
        assert table.column("timestamp")[1] == datetime(2024, 1, 15, 10, 31, tzinfo=timezone.utc)
        assert table.column("timestamp_local")[0] == datetime(2024, 1, 15, 5, 30, tzinfo=timezone.utc)

    def test_malformed_timestamp(self, device_data_records):
        """Test a bad timestamp fails the whole run with its location."""
        device_data_records[1]["timestamp"] = "not-a-date"

        with pytest.raises(ParseError) as exc_info:
            to_table(device_data_records, ResponseKind.DEVICE_DATA)

        assert exc_info.value.column == "timestamp"
        assert exc_info.value.row == 1

    def test_empty_response(self):
        """Test no data gives an empty table."""
        table = to_table([], ResponseKind.DEVICE_DATA)

        assert table.num_rows == 0


class TestCalibrationModels:
    """Tests for calibration model responses."""

    def test_pivot(self, calibration_records):
        """Test features/params are pivoted to element rows."""
        table = to_table(calibration_records, ResponseKind.CALIBRATION_MODELS)

        assert table.column_names == ["id", "sn", "element", "element_id", "value"]
        assert table.num_rows == 6

    def test_singleton_features(self):
        """Test single-element feature lists go through the rename pre-pass."""
        record = {"id": 1, "model": {"features": ["pm25"], "params": {"1": 2.5}}}
        table = to_table([record], ResponseKind.CALIBRATION_MODELS)

        assert table.to_records() == [
            {"id": 1, "element": "features", "element_id": "1", "value": "pm25"},
            {"id": 1, "element": "params", "element_id": "1", "value": "2.5"},
        ]


class TestDispatch:
    """Tests for kind dispatch."""

    def test_kind_from_string(self):
        """Test kinds can be given by value."""
        table = to_table([{"id": 1}], "logs")

        assert table.column("id") == [1]

    def test_unknown_kind(self):
        """Test an unknown kind is rejected."""
        with pytest.raises(ValueError):
            to_table([{"id": 1}], "weather")

    def test_tagged_response(self, device_records):
        """Test a tagged response builds its own table."""
        response = TaggedResponse(kind=ResponseKind.DEVICES, payload=device_records)

        assert response.to_table().num_rows == 2

    def test_invalid_response(self):
        """Test a malformed response fails before flattening."""
        with pytest.raises(InvalidInputError):
            to_table("oops", ResponseKind.DEVICES)
