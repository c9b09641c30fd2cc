# busboard/fleet_view.py
# Read-only projections of the unit list for the dashboard: validation of new unit numbers, status toggling, search/filters and the summary counters.

from typing import Any, Dict, Iterable, List

from .errors import ValidationError
from .schema import (
    COMPONENT_NAMES,
    MAX_UNIT_NUMBER,
    MIN_UNIT_NUMBER,
    STATUS_READY,
    STATUS_WORKSHOP,
    parse_int,
)

# status filter values understood by filter_units
FILTER_ALL = "all"
FILTER_READY = "ready"
FILTER_WORKSHOP = "workshop"
FILTER_PARTIAL = "partial"
STATUS_FILTERS = (FILTER_ALL, FILTER_READY, FILTER_WORKSHOP, FILTER_PARTIAL)


def validate_unit_number(raw: Any) -> int:
    """Parse the number typed by the user; must land in 1..9999."""
    number = parse_int(raw)
    if not number or number < MIN_UNIT_NUMBER or number > MAX_UNIT_NUMBER:
        raise ValidationError(
            f"Por favor, ingrese un número de unidad válido ({MIN_UNIT_NUMBER}-{MAX_UNIT_NUMBER})."
        )
    return number


def next_status(current: str) -> str:
    return STATUS_WORKSHOP if current == STATUS_READY else STATUS_READY


def ready_count(unit: Dict[str, Any]) -> int:
    return sum(1 for comp in COMPONENT_NAMES if unit.get(comp) == STATUS_READY)


def unit_condition(unit: Dict[str, Any]) -> str:
    """
    "ready"    every component listo
    "workshop" every component taller
    "partial"  anything in between
    """
    if all(unit.get(comp) == STATUS_READY for comp in COMPONENT_NAMES):
        return FILTER_READY
    if all(unit.get(comp) == STATUS_WORKSHOP for comp in COMPONENT_NAMES):
        return FILTER_WORKSHOP
    return FILTER_PARTIAL


def _matches_status(unit: Dict[str, Any], status_filter: str) -> bool:
    if status_filter == FILTER_READY:
        return unit_condition(unit) == FILTER_READY
    if status_filter == FILTER_WORKSHOP:
        return unit_condition(unit) == FILTER_WORKSHOP
    if status_filter == FILTER_PARTIAL:
        n = ready_count(unit)
        return 0 < n < len(COMPONENT_NAMES)
    return True


def filter_units(
    units: Iterable[Dict[str, Any]],
    search: str = "",
    status_filter: str = FILTER_ALL,
    component_filter: str = FILTER_ALL,
) -> List[Dict[str, Any]]:
    """
    search            substring of the unit number ("12" matches 12, 112, 1205)
    status_filter     all | ready | workshop | partial
    component_filter  all, or a component name: keep units with it in the workshop
    """
    needle = str(search or "").strip()
    out = []
    for unit in units:
        if needle and needle not in str(unit.get("unitNumber", "")):
            continue
        if not _matches_status(unit, status_filter or FILTER_ALL):
            continue
        if component_filter and component_filter != FILTER_ALL:
            if unit.get(component_filter) != STATUS_WORKSHOP:
                continue
        out.append(unit)
    return out


def compute_stats(units: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    units = list(units)
    total = len(units)
    ready = sum(1 for u in units if unit_condition(u) == FILTER_READY)
    workshop = sum(1 for u in units if unit_condition(u) == FILTER_WORKSHOP)
    return {
        "total_units": total,
        "ready_units": ready,
        "partial_units": total - ready - workshop,
        "workshop_units": workshop,
    }
