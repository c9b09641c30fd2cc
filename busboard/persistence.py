# busboard/persistence.py
# Declares the BaseRepo abstract interface that every unit store (Excel, Google Sheets, Apps Script, local file, SQL) must implement,
# and TabularRepo, which implements the CRUD rules once for every header-row-plus-data-rows store.

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .schema import (
    FIRST_DATA_ROW,
    build_unit,
    header_row,
    is_listed,
    merge_unit,
    next_id,
    parse_int,
    row_to_unit,
    unit_to_row,
)

logger = logging.getLogger(__name__)


class BaseRepo(ABC):
    # short name used in config and in the UI
    kind = "base"
    # "max_plus_one" can hand a deleted id to a new unit; "counter" never does
    id_policy = "max_plus_one"

    @abstractmethod
    def get_all_bus_units(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def create_bus_unit(self, unit_data: dict) -> Dict[str, Any]:
        ...

    @abstractmethod
    def update_bus_unit(self, unit_id: int, updates: dict) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def delete_bus_unit(self, unit_id: int) -> bool:
        ...

    @abstractmethod
    def delete_all_bus_units(self) -> None:
        ...

    def get_bus_unit_by_number(self, unit_number: int) -> Optional[Dict[str, Any]]:
        return next(
            (u for u in self.get_all_bus_units() if u["unitNumber"] == unit_number),
            None,
        )

    def get_bus_unit(self, unit_id: int) -> Optional[Dict[str, Any]]:
        return next((u for u in self.get_all_bus_units() if u["id"] == unit_id), None)


class TabularRepo(BaseRepo):
    """
    Row 1 is the header, data starts at row 2, columns are schema.COLUMNS.
    Subclasses only move rows around; the record rules live here.
    Row numbers are 1-based sheet rows.
    """

    # ─── Row primitives ─────────────────────────────────
    @abstractmethod
    def _read_rows(self) -> List[Sequence[Any]]:
        """Every row of the table, header included."""

    @abstractmethod
    def _append_row(self, row: List[Any]) -> None:
        ...

    @abstractmethod
    def _write_row(self, row_number: int, row: List[Any]) -> None:
        ...

    @abstractmethod
    def _delete_row(self, row_number: int) -> None:
        ...

    @abstractmethod
    def _clear_data_rows(self) -> None:
        ...

    # ─── Helpers ────────────────────────────────────────
    @staticmethod
    def _index(rows: List[Sequence[Any]]) -> Tuple[List[Tuple[int, Dict[str, Any]]], List[int]]:
        """
        Returns ([(row_number, unit), ...] for listed units, [ids of every data row]).
        Unlisted rows still count towards the next id when their id cell parses.
        """
        entries = []
        ids = []
        for position, row in enumerate(rows[FIRST_DATA_ROW - 1:], start=1):
            unit = row_to_unit(row, position)
            if is_listed(unit):
                entries.append((position + FIRST_DATA_ROW - 1, unit))
                ids.append(unit["id"])
            else:
                ids.append(parse_int(row[0] if row else None) or 0)
        return entries, ids

    def _locate(self, unit_id: int) -> Tuple[Optional[int], Optional[Dict[str, Any]]]:
        entries, _ = self._index(self._read_rows())
        for row_number, unit in entries:
            if unit["id"] == unit_id:
                return row_number, unit
        return None, None

    # ─── Contract ───────────────────────────────────────
    def get_all_bus_units(self) -> List[Dict[str, Any]]:
        entries, _ = self._index(self._read_rows())
        return [unit for _, unit in entries]

    def create_bus_unit(self, unit_data: dict) -> Dict[str, Any]:
        rows = self._read_rows()
        if not rows:
            # brand-new sheet: lay down the header so the first unit lands on row 2
            self._append_row(header_row())
        _, ids = self._index(rows)
        unit = build_unit(next_id(ids), unit_data)
        self._append_row(unit_to_row(unit))
        logger.info("%s: created unit %s with id %s", self.kind, unit["unitNumber"], unit["id"])
        return unit

    def update_bus_unit(self, unit_id: int, updates: dict) -> Optional[Dict[str, Any]]:
        row_number, unit = self._locate(unit_id)
        if row_number is None:
            logger.info("%s: update skipped, id %s not found", self.kind, unit_id)
            return None
        merged = merge_unit(unit, updates)
        self._write_row(row_number, unit_to_row(merged))
        return merged

    def delete_bus_unit(self, unit_id: int) -> bool:
        row_number, _ = self._locate(unit_id)
        if row_number is None:
            logger.info("%s: delete skipped, id %s not found", self.kind, unit_id)
            return False
        self._delete_row(row_number)
        logger.info("%s: deleted id %s (row %s)", self.kind, unit_id, row_number)
        return True

    def delete_all_bus_units(self) -> None:
        self._clear_data_rows()
        logger.info("%s: cleared all units", self.kind)
