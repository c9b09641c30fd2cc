# busboard/sheets_api_repo.py
# A TabularRepo that talks to the Google Sheets REST API (v4 values endpoints) with an API key, via requests.

import logging
from typing import Any, List, Sequence
from urllib.parse import quote

from .config import REQUEST_TIMEOUT, SHEET_NAME, SHEETS_API_KEY, SHEETS_API_URL, SPREADSHEET_ID
from .errors import StoreError
from .http_client import new_session, send_json
from .persistence import TabularRepo
from .schema import COLUMNS, FIRST_DATA_ROW

logger = logging.getLogger(__name__)

LAST_COLUMN = "K"  # 11 columns: A..K


def a1_range(sheet_name: str, start_row: int = None, end_row: int = None) -> str:
    """'Sheet1!A:K', 'Sheet1!A2:K' or 'Sheet1!A5:K9'."""
    if start_row is None:
        return f"{sheet_name}!A:{LAST_COLUMN}"
    end = "" if end_row is None else end_row
    return f"{sheet_name}!A{start_row}:{LAST_COLUMN}{end}"


class SheetsApiRepo(TabularRepo):
    """
    The values API can read, append, overwrite and clear ranges but has no
    row delete, so a delete rewrites the block from the deleted row to the
    bottom in a single PUT: every row below moves up by one and the row left
    over at the bottom is blanked. Ids are never rewritten.
    """

    kind = "sheets_api"

    def __init__(
        self,
        spreadsheet_id: str = SPREADSHEET_ID,
        api_key: str = SHEETS_API_KEY,
        sheet_name: str = SHEET_NAME,
        session=None,
        base_url: str = SHEETS_API_URL,
        timeout: float = REQUEST_TIMEOUT,
    ):
        if not spreadsheet_id:
            raise ValueError("Google Sheets spreadsheet ID not configured")
        self.spreadsheet_id = spreadsheet_id
        self.api_key = api_key
        self.sheet_name = sheet_name
        self.session = session or new_session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ─── Helpers ────────────────────────────────────────
    def _range(self, start_row: int = None, end_row: int = None) -> str:
        return a1_range(self.sheet_name, start_row, end_row)

    def _url(self, rng: str, suffix: str = "") -> str:
        return f"{self.base_url}/{self.spreadsheet_id}/values/{quote(rng, safe='!:')}{suffix}"

    def _call(self, method: str, url: str, params: dict = None, payload: Any = None):
        query = dict(params or {})
        if self.api_key:
            query["key"] = self.api_key
        return send_json(
            self.session, method, url,
            params=query, payload=payload, timeout=self.timeout,
            label="Google Sheets API",
        )

    @staticmethod
    def _pad(row: Sequence[Any]) -> List[Any]:
        cells = list(row)[:len(COLUMNS)]
        return cells + [""] * (len(COLUMNS) - len(cells))

    # ─── Row primitives ─────────────────────────────────
    def _read_rows(self):
        data = self._call("GET", self._url(self._range())) or {}
        return data.get("values", [])

    def _append_row(self, row):
        self._call(
            "POST", self._url(self._range(), ":append"),
            params={"valueInputOption": "RAW"},
            payload={"values": [row]},
        )

    def _write_row(self, row_number, row):
        self._call(
            "PUT", self._url(self._range(row_number, row_number)),
            params={"valueInputOption": "RAW"},
            payload={"values": [row]},
        )

    def _delete_row(self, row_number):
        rows = self._read_rows()
        last = len(rows)
        # one write: the rows below move up and a blank row wipes the old last row
        values = [self._pad(r) for r in rows[row_number:last]]
        values.append([""] * len(COLUMNS))
        # values come back as text; USER_ENTERED turns "12" back into a number
        self._call(
            "PUT", self._url(self._range(row_number, last)),
            params={"valueInputOption": "USER_ENTERED"},
            payload={"values": values},
        )

    def _clear_data_rows(self):
        self._call("POST", self._url(self._range(FIRST_DATA_ROW), ":clear"))

    # ─── Contract ───────────────────────────────────────
    def get_all_bus_units(self):
        # listing treats a failed fetch as an empty sheet
        try:
            return super().get_all_bus_units()
        except StoreError as exc:
            logger.error("Error fetching from Google Sheets: %s", exc)
            return []
