# busboard/apps_script_repo.py
# A BaseRepo that forwards every operation to a Google Apps Script web app (action query parameter + JSON body), via requests.

import logging

from .config import APPS_SCRIPT_URL, REQUEST_TIMEOUT
from .errors import BackendError, MalformedResponseError
from .http_client import new_session, send_json
from .persistence import BaseRepo
from .schema import build_unit, is_listed, merge_unit, normalize_unit

logger = logging.getLogger(__name__)

# what the script answers when updateUnit can't find the id
NOT_FOUND_ERROR = "Unit not found"


class AppsScriptRepo(BaseRepo):
    """
    The script owns the sheet, so id assignment (max existing + 1), default
    filling and the unit-number filter all happen server side. Any
    ``{"error": ...}`` answer is raised as BackendError.
    """

    kind = "apps_script"

    def __init__(self, url: str = APPS_SCRIPT_URL, session=None, timeout: float = REQUEST_TIMEOUT):
        if not url:
            raise ValueError("Apps Script URL not configured")
        self.url = url
        self.session = session or new_session()
        self.timeout = timeout

    def _call(self, action: str, payload=None):
        method = "GET" if payload is None else "POST"
        data = send_json(
            self.session, method, self.url,
            params={"action": action}, payload=payload, timeout=self.timeout,
            label="Apps Script",
        )
        if isinstance(data, dict) and "error" in data:
            raise BackendError(str(data["error"]))
        return data

    @staticmethod
    def _record(data, action: str):
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Apps Script {action} returned {type(data).__name__}, expected an object")
        return normalize_unit(data)

    def get_all_bus_units(self):
        data = self._call("getAllUnits")
        if not isinstance(data, list):
            return []
        units = [normalize_unit(rec) for rec in data if isinstance(rec, dict)]
        return [u for u in units if is_listed(u)]

    def create_bus_unit(self, unit_data: dict):
        body = build_unit(0, unit_data)
        body.pop("id")
        return self._record(self._call("createUnit", body), "createUnit")

    def update_bus_unit(self, unit_id: int, updates: dict):
        # merging onto an empty record validates and keeps only updatable keys
        clean = merge_unit({}, updates)
        try:
            data = self._call("updateUnit", {"id": unit_id, "updates": clean})
        except BackendError as exc:
            if str(exc) == NOT_FOUND_ERROR:
                logger.info("apps_script: update skipped, id %s not found", unit_id)
                return None
            raise
        return self._record(data, "updateUnit")

    def delete_bus_unit(self, unit_id: int) -> bool:
        data = self._call("deleteUnit", {"id": unit_id})
        if not isinstance(data, bool):
            raise MalformedResponseError(f"Apps Script deleteUnit returned {data!r}, expected a boolean")
        return data

    def delete_all_bus_units(self) -> None:
        self._call("deleteAll", {})
