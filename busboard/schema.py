# busboard/schema.py
# Defines the bus-unit record, the fixed 11-column row layout shared by every tabular store, and the row <-> record mapping.

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .errors import InvalidStatusError, ValidationError

# ─── Record layout ──────────────────────────────────────────────────────────
COMPONENT_NAMES = ("MOT", "TRAN", "ELE", "AA", "FRE", "SUS", "DIR", "HOJ", "TEL")

STATUS_READY = "listo"
STATUS_WORKSHOP = "taller"
STATUSES = (STATUS_READY, STATUS_WORKSHOP)

COLUMNS = ("id", "unitNumber") + COMPONENT_NAMES
HEADER_ROW = 1
FIRST_DATA_ROW = 2

# fields a patch may touch; "id" is owned by the store
UPDATABLE_FIELDS = ("unitNumber",) + COMPONENT_NAMES

MIN_UNIT_NUMBER = 1
MAX_UNIT_NUMBER = 9999

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any) -> Optional[int]:
    """
    Leading-integer parse, the way spreadsheet cells come back:
    12, 12.0, "12", " 12 ", "12abc" all give 12. Blank or garbage gives None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value:  # NaN
            return None
        return int(value)
    m = _LEADING_INT.match(str(value))
    return int(m.group(1)) if m else None


def _cell_status(value: Any) -> str:
    if value is None:
        return STATUS_READY
    text = str(value).strip()
    return text or STATUS_READY


def check_status(component: str, value: Any) -> None:
    if value not in STATUSES:
        raise InvalidStatusError(
            f"Invalid status {value!r} for {component}; expected one of {STATUSES}"
        )


# ─── Rows ───────────────────────────────────────────────────────────────────
def header_row() -> List[str]:
    return list(COLUMNS)


def row_to_unit(row: Optional[Sequence[Any]], position: int) -> Dict[str, Any]:
    """
    Map one data row to a record.
    `position` is the 1-based index among data rows; it stands in for a
    missing or unreadable id. A missing unit number becomes 0 so callers
    can drop the row.
    """
    cells = list(row or [])
    cells += [None] * (len(COLUMNS) - len(cells))

    unit: Dict[str, Any] = {
        "id": parse_int(cells[0]) or position,
        "unitNumber": parse_int(cells[1]) or 0,
    }
    for name, value in zip(COMPONENT_NAMES, cells[2:len(COLUMNS)]):
        unit[name] = _cell_status(value)
    return unit


def unit_to_row(unit: Dict[str, Any]) -> List[Any]:
    return [unit.get(col) for col in COLUMNS]


def is_listed(unit: Dict[str, Any]) -> bool:
    """Rows without a positive unit number never reach callers."""
    return unit.get("unitNumber", 0) > 0


# ─── Records ────────────────────────────────────────────────────────────────
def build_unit(unit_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    """Complete a new record: assigned id, every omitted component set to "listo"."""
    number = parse_int(data.get("unitNumber"))
    if number is None:
        raise ValidationError("unitNumber is required")

    unit: Dict[str, Any] = {"id": unit_id, "unitNumber": number}
    for name in COMPONENT_NAMES:
        value = data.get(name) or STATUS_READY
        check_status(name, value)
        unit[name] = value
    return unit


def merge_unit(unit: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """Patch fields override, everything else is kept. Unknown keys and "id" are ignored."""
    merged = dict(unit)
    for key, value in (updates or {}).items():
        if key not in UPDATABLE_FIELDS:
            continue
        if key == "unitNumber":
            number = parse_int(value)
            if number is None:
                raise ValidationError(f"Invalid unitNumber {value!r}")
            merged[key] = number
        else:
            check_status(key, value)
            merged[key] = value
    return merged


def normalize_unit(record: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce a record that came back as JSON into the canonical shape."""
    unit: Dict[str, Any] = {
        "id": parse_int(record.get("id")) or 0,
        "unitNumber": parse_int(record.get("unitNumber")) or 0,
    }
    for name in COMPONENT_NAMES:
        unit[name] = _cell_status(record.get(name))
    return unit


def next_id(ids: Iterable[int]) -> int:
    """max existing + 1, or 1 for an empty store."""
    return max(ids, default=0) + 1
