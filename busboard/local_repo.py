# busboard/local_repo.py
# A BaseRepo backed by a small JSON key/value file laid out like the browser storage of the web build:
# one key holds every unit, the other holds the next id.

import json
import logging
import os
import threading

from .config import LOCAL_ID_POLICY, LOCAL_STORE_PATH
from .errors import StoreConnectionError, StoreError
from .persistence import BaseRepo
from .schema import build_unit, merge_unit, next_id, normalize_unit, parse_int

logger = logging.getLogger(__name__)

STORAGE_KEY = "busUnits"
CURRENT_ID_KEY = "busUnitsCurrentId"
ID_POLICIES = ("counter", "max_plus_one")

_lock = threading.Lock()


class LocalRepo(BaseRepo):
    """
    Units come back sorted by unitNumber. With the "counter" policy a
    deleted id is never handed out again until delete_all_bus_units()
    resets the counter to 1.
    """

    kind = "local"

    def __init__(self, path: str = LOCAL_STORE_PATH, id_policy: str = LOCAL_ID_POLICY):
        if id_policy not in ID_POLICIES:
            raise ValueError(f"Unknown id policy {id_policy!r}; expected one of {ID_POLICIES}")
        self.path = path
        self.id_policy = id_policy

    # ─── Storage ────────────────────────────────────────
    def _load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError as exc:
            raise StoreError(f"Local storage file {self.path} is not UTF-8 text: {exc}") from exc
        except OSError as exc:
            logger.error("Cannot read %s: %s", self.path, exc)
            raise StoreConnectionError(f"Local storage file {self.path} is not readable: {exc}") from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise StoreError(f"Local storage file {self.path} is not valid JSON: {exc}") from exc
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        tmp = f"{self.path}.tmp"
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as exc:
            logger.error("Cannot write %s: %s", self.path, exc)
            raise StoreConnectionError(f"Local storage file {self.path} is not writable: {exc}") from exc

    @staticmethod
    def _units(data: dict) -> list:
        return [normalize_unit(u) for u in data.get(STORAGE_KEY, []) if isinstance(u, dict)]

    @staticmethod
    def _current_id(data: dict) -> int:
        return parse_int(data.get(CURRENT_ID_KEY)) or 1

    # ─── Contract ───────────────────────────────────────
    def get_all_bus_units(self):
        with _lock:
            units = self._units(self._load())
        return sorted(units, key=lambda u: u["unitNumber"])

    def create_bus_unit(self, unit_data: dict):
        with _lock:
            data = self._load()
            units = self._units(data)
            if self.id_policy == "counter":
                unit_id = self._current_id(data)
            else:
                unit_id = next_id(u["id"] for u in units)
            unit = build_unit(unit_id, unit_data)
            units.append(unit)
            data[STORAGE_KEY] = units
            data[CURRENT_ID_KEY] = unit_id + 1
            self._save(data)
        logger.info("local: created unit %s with id %s", unit["unitNumber"], unit_id)
        return unit

    def update_bus_unit(self, unit_id: int, updates: dict):
        with _lock:
            data = self._load()
            units = self._units(data)
            for idx, unit in enumerate(units):
                if unit["id"] == unit_id:
                    units[idx] = merge_unit(unit, updates)
                    data[STORAGE_KEY] = units
                    self._save(data)
                    return units[idx]
        logger.info("local: update skipped, id %s not found", unit_id)
        return None

    def delete_bus_unit(self, unit_id: int) -> bool:
        with _lock:
            data = self._load()
            units = self._units(data)
            remaining = [u for u in units if u["id"] != unit_id]
            if len(remaining) == len(units):
                return False
            data[STORAGE_KEY] = remaining
            self._save(data)
        return True

    def delete_all_bus_units(self) -> None:
        with _lock:
            data = self._load()
            data[STORAGE_KEY] = []
            data[CURRENT_ID_KEY] = 1
            self._save(data)
        logger.info("local: cleared all units")
