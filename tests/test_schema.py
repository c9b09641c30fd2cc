import pytest

from busboard.errors import InvalidStatusError, ValidationError
from busboard.schema import (
    COLUMNS,
    COMPONENT_NAMES,
    build_unit,
    is_listed,
    merge_unit,
    next_id,
    normalize_unit,
    parse_int,
    row_to_unit,
    unit_to_row,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (12, 12),
        (12.0, 12),
        (12.9, 12),
        ("12", 12),
        (" 12 ", 12),
        ("12abc", 12),
        ("-3", -3),
        ("", None),
        ("abc", None),
        (None, None),
        (float("nan"), None),
    ],
)
def test_parse_int_takes_the_leading_integer(value, expected):
    assert parse_int(value) == expected


def test_row_to_unit_defaults_blank_components_to_listo():
    unit = row_to_unit(["4", "120", "taller", "", None], position=1)

    assert unit["id"] == 4
    assert unit["unitNumber"] == 120
    assert unit["MOT"] == "taller"
    assert all(unit[c] == "listo" for c in COMPONENT_NAMES[1:])


def test_row_to_unit_falls_back_to_position_for_missing_id():
    unit = row_to_unit(["", "55"], position=3)
    assert unit["id"] == 3
    assert unit["unitNumber"] == 55


def test_row_to_unit_marks_unreadable_unit_number_as_zero():
    assert row_to_unit(["1", "n/a"], position=1)["unitNumber"] == 0
    assert not is_listed(row_to_unit([], position=1))
    assert not is_listed(row_to_unit(["2", "-5"], position=2))


def test_unit_to_row_follows_column_order():
    unit = build_unit(9, {"unitNumber": 301, "HOJ": "taller"})
    row = unit_to_row(unit)

    assert len(row) == len(COLUMNS) == 11
    assert row[:2] == [9, 301]
    assert row[COLUMNS.index("HOJ")] == "taller"


def test_build_unit_fills_every_omitted_component():
    unit = build_unit(1, {"unitNumber": 10, "TEL": "taller", "ELE": ""})

    assert unit == {
        "id": 1, "unitNumber": 10,
        "MOT": "listo", "TRAN": "listo", "ELE": "listo", "AA": "listo",
        "FRE": "listo", "SUS": "listo", "DIR": "listo", "HOJ": "listo",
        "TEL": "taller",
    }


def test_build_unit_rejects_unknown_status():
    with pytest.raises(InvalidStatusError):
        build_unit(1, {"unitNumber": 10, "MOT": "broken"})


def test_build_unit_requires_unit_number():
    with pytest.raises(ValidationError):
        build_unit(1, {"MOT": "listo"})


def test_merge_unit_overrides_only_patched_fields():
    unit = build_unit(2, {"unitNumber": 20})
    merged = merge_unit(unit, {"MOT": "taller", "id": 99, "color": "red"})

    assert merged["id"] == 2
    assert merged["MOT"] == "taller"
    assert "color" not in merged
    assert {k: v for k, v in merged.items() if k != "MOT"} == {
        k: v for k, v in unit.items() if k != "MOT"
    }
    # the input record is untouched
    assert unit["MOT"] == "listo"


def test_merge_unit_validates_status():
    with pytest.raises(InvalidStatusError):
        merge_unit(build_unit(1, {"unitNumber": 1}), {"SUS": "maybe"})


def test_normalize_unit_coerces_json_records():
    unit = normalize_unit({"id": "3", "unitNumber": 44.0, "MOT": "taller", "TRAN": None})
    assert unit["id"] == 3
    assert unit["unitNumber"] == 44
    assert unit["MOT"] == "taller"
    assert unit["TRAN"] == "listo"


def test_next_id():
    assert next_id([]) == 1
    assert next_id([1, 5, 2]) == 6
