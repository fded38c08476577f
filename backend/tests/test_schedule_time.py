import pytest

from app.core.exceptions import ScheduleValidationError, ValidationKind
from app.services.schedule_time import format_minutes, is_valid_range, normalize_time, parse_time


@pytest.mark.parametrize(
    "value, expected",
    [("00:00", 0), ("08:00", 480), ("8:00", 480), ("12:30", 750), ("23:59", 1439)],
)
def test_parse_time_returns_minutes_since_midnight(value, expected):
    assert parse_time(value) == expected


def test_canonical_times_survive_format_round_trip():
    for minutes in range(0, 24 * 60, 7):
        text = format_minutes(minutes)
        assert parse_time(text) == minutes
        assert format_minutes(parse_time(text)) == text


@pytest.mark.parametrize("value", ["25:00", "24:00", "08:60", "abc", "", "8", "08:5", "08:00:00", " 08:00", "-1:00"])
def test_parse_time_rejects_malformed_input(value):
    with pytest.raises(ScheduleValidationError) as excinfo:
        parse_time(value)
    assert excinfo.value.kind == ValidationKind.malformed_time
    assert excinfo.value.status_code == 400


@pytest.mark.parametrize("value", [None, 800, 8.5, True, ["08:00"]])
def test_parse_time_rejects_non_strings(value):
    with pytest.raises(ScheduleValidationError) as excinfo:
        parse_time(value)  # type: ignore[arg-type]
    assert excinfo.value.kind == ValidationKind.malformed_time


def test_parse_time_rejects_oversized_strings_with_short_message():
    with pytest.raises(ScheduleValidationError) as excinfo:
        parse_time("08:00" + "x" * 500, field="startTime")
    assert excinfo.value.kind == ValidationKind.malformed_time
    assert len(excinfo.value.message) < 80


def test_parse_time_records_field_name():
    with pytest.raises(ScheduleValidationError) as excinfo:
        parse_time("xx:yy", field="startTime")
    assert excinfo.value.details == {"kind": "malformed_time", "field": "startTime"}


def test_normalize_time_pads_single_digit_hours():
    assert normalize_time("8:05") == "08:05"
    assert normalize_time("17:45") == "17:45"


def test_format_minutes_rejects_out_of_range():
    with pytest.raises(ValueError):
        format_minutes(1440)
    with pytest.raises(ValueError):
        format_minutes(-1)


def test_is_valid_range():
    assert is_valid_range("08:00", "09:00")
    assert is_valid_range("7:59", "08:00")
    assert not is_valid_range("09:00", "09:00")
    assert not is_valid_range("10:00", "09:00")


def test_is_valid_range_propagates_malformed_time():
    with pytest.raises(ScheduleValidationError) as excinfo:
        is_valid_range("08:00", "9h")
    assert excinfo.value.field == "endTime"
