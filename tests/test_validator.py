"""Tests for check record validation and normalization."""

import json

import pytest

from uptime_monitor.core.validator import InvalidCheckError, validate_check_data
from uptime_monitor.models.check import CheckState, HttpMethod, Protocol

from tests.factories import CHECK_ID, EARLIER_MS, make_check_record


@pytest.mark.unit
class TestValidCheckData:
    """Records that pass validation."""

    def test_valid_record_is_normalized(self, check_record):
        check = validate_check_data(check_record)

        assert check.id == CHECK_ID
        assert check.user_phone == "5551234567"
        assert check.protocol == Protocol.HTTPS
        assert check.method == HttpMethod.GET
        assert check.success_codes == [200, 201]
        assert check.timeout_seconds == 3
        assert check.target_url == "https://example.com/health?full=1"

    def test_missing_state_defaults_to_down(self, check_record):
        check = validate_check_data(check_record)

        assert check.state == CheckState.DOWN
        assert check.last_checked is None
        assert check.was_checked is False

    def test_existing_state_and_last_checked_are_kept(self):
        check = validate_check_data(make_check_record(state="up", lastChecked=EARLIER_MS))

        assert check.state == CheckState.UP
        assert check.last_checked == EARLIER_MS
        assert check.was_checked is True

    @pytest.mark.parametrize("state", ["sideways", "", None, 1, "UP"])
    def test_unknown_state_defaults_to_down(self, state):
        check = validate_check_data(make_check_record(state=state))
        assert check.state == CheckState.DOWN

    @pytest.mark.parametrize("last_checked", [
        False, 0, -5, "1700000000000", None, True,
        float("nan"), float("inf"), float("-inf"),
    ])
    def test_unusable_last_checked_means_never_checked(self, last_checked):
        check = validate_check_data(make_check_record(lastChecked=last_checked))
        assert check.last_checked is None

    def test_strings_are_trimmed(self):
        check = validate_check_data(make_check_record(
            id=f"  {CHECK_ID} ",
            userPhone=" 5551234567 ",
            url="  example.com  "
        ))

        assert check.id == CHECK_ID
        assert check.user_phone == "5551234567"
        assert check.url == "example.com"

    @pytest.mark.parametrize("timeout", [1, 5, 2.0])
    def test_timeout_bounds_are_inclusive(self, timeout):
        check = validate_check_data(make_check_record(timeoutSeconds=timeout))
        assert check.timeout_seconds == int(timeout)

    def test_unknown_fields_survive_round_trip(self):
        check = validate_check_data(make_check_record(label="homepage"))
        record = check.to_record()

        assert record["label"] == "homepage"
        assert record["userPhone"] == "5551234567"
        assert record["successCodes"] == [200, 201]
        assert "lastChecked" not in record

    def test_input_record_is_not_mutated(self, check_record):
        original = dict(check_record)
        validate_check_data(check_record)
        assert check_record == original


@pytest.mark.unit
class TestInvalidCheckData:
    """Records that must be rejected."""

    @pytest.mark.parametrize("field", [
        "id", "userPhone", "protocol", "url", "method", "successCodes", "timeoutSeconds"
    ])
    def test_missing_required_field(self, field):
        record = make_check_record()
        del record[field]

        with pytest.raises(InvalidCheckError):
            validate_check_data(record)

    @pytest.mark.parametrize("overrides", [
        {"id": "short"},
        {"id": "x" * 21},
        {"id": 12345678901234567890},
        {"userPhone": "555123456"},
        {"userPhone": 5551234567},
        {"protocol": "ftp"},
        {"protocol": "HTTPS"},
        {"url": "   "},
        {"url": None},
        {"method": "patch"},
        {"method": "GET"},
        {"successCodes": []},
        {"successCodes": 200},
        {"successCodes": "200"},
        {"successCodes": ["200"]},
        {"successCodes": [True]},
        {"timeoutSeconds": 0},
        {"timeoutSeconds": 6},
        {"timeoutSeconds": 2.5},
        {"timeoutSeconds": "3"},
        {"timeoutSeconds": True},
        {"timeoutSeconds": float("inf")},
        {"timeoutSeconds": float("nan")},
    ])
    def test_malformed_field(self, overrides):
        with pytest.raises(InvalidCheckError):
            validate_check_data(make_check_record(**overrides))

    @pytest.mark.parametrize("raw", [None, "check", 42, ["id"]])
    def test_non_object_record(self, raw):
        with pytest.raises(InvalidCheckError) as exc_info:
            validate_check_data(raw)

        assert "invalid check data" in str(exc_info.value)

    def test_error_lists_every_failing_field(self):
        with pytest.raises(InvalidCheckError) as exc_info:
            validate_check_data(make_check_record(protocol="ftp", method="patch"))

        fields = " ".join(exc_info.value.errors)
        assert "protocol" in fields
        assert "method" in fields

    @pytest.mark.parametrize("alias,name", [
        ("userPhone", "user_phone"),
        ("successCodes", "success_codes"),
        ("timeoutSeconds", "timeout_seconds"),
    ])
    def test_snake_case_key_does_not_replace_stored_key(self, alias, name):
        record = make_check_record()
        record[name] = record.pop(alias)

        with pytest.raises(InvalidCheckError) as exc_info:
            validate_check_data(record)

        assert alias in " ".join(exc_info.value.errors)

    def test_non_finite_last_checked_from_stored_json(self):
        record = json.loads(json.dumps(make_check_record(lastChecked=float("inf"))))

        check = validate_check_data(record)

        assert check.last_checked is None
        assert check.was_checked is False
