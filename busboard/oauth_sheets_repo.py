# busboard/oauth_sheets_repo.py
# A TabularRepo over the Google Sheets API using the credentials held by a caller-owned SheetsSession (google-api-python-client).

import logging

from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from .config import SHEET_GID, SHEET_NAME, SPREADSHEET_ID
from .errors import AuthenticationError, StoreConnectionError
from .persistence import TabularRepo
from .schema import FIRST_DATA_ROW
from .sheets_api_repo import a1_range
from .sheets_session import SheetsSession

logger = logging.getLogger(__name__)


class OAuthSheetsRepo(TabularRepo):
    kind = "oauth_sheets"

    def __init__(
        self,
        session: SheetsSession = None,
        spreadsheet_id: str = SPREADSHEET_ID,
        sheet_name: str = SHEET_NAME,
        sheet_gid: int = SHEET_GID,
    ):
        if not spreadsheet_id:
            raise ValueError("Google Sheets spreadsheet ID not configured")
        self.session = session or SheetsSession()
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.sheet_gid = sheet_gid

    # ─── Helpers ────────────────────────────────────────
    def _spreadsheets(self):
        # every call authenticates first if the session isn't already
        if not self.session.is_authenticated and not self.session.authenticate():
            raise AuthenticationError("Authentication failed")
        return self.session.service().spreadsheets()

    def _execute(self, request):
        try:
            return request.execute()
        except HttpError as exc:
            logger.error("Google Sheets API error: %s", exc)
            raise StoreConnectionError(f"Google Sheets API error: {exc.resp.status} - {exc}") from exc
        except GoogleAuthError as exc:
            raise AuthenticationError(f"Google rejected the credentials: {exc}") from exc
        except OSError as exc:
            raise StoreConnectionError(f"Google Sheets API unreachable: {exc}") from exc

    # ─── Row primitives ─────────────────────────────────
    def _read_rows(self):
        result = self._execute(
            self._spreadsheets().values().get(
                spreadsheetId=self.spreadsheet_id,
                range=a1_range(self.sheet_name),
            )
        )
        return (result or {}).get("values", [])

    def _append_row(self, row):
        self._execute(
            self._spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=a1_range(self.sheet_name),
                valueInputOption="RAW",
                body={"values": [row]},
            )
        )

    def _write_row(self, row_number, row):
        self._execute(
            self._spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=a1_range(self.sheet_name, row_number, row_number),
                valueInputOption="RAW",
                body={"values": [row]},
            )
        )

    def _delete_row(self, row_number):
        # deleteDimension indexes are 0-based, end exclusive
        self._execute(
            self._spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={
                    "requests": [{
                        "deleteDimension": {
                            "range": {
                                "sheetId": self.sheet_gid,
                                "dimension": "ROWS",
                                "startIndex": row_number - 1,
                                "endIndex": row_number,
                            }
                        }
                    }]
                },
            )
        )

    def _clear_data_rows(self):
        self._execute(
            self._spreadsheets().values().clear(
                spreadsheetId=self.spreadsheet_id,
                range=a1_range(self.sheet_name, FIRST_DATA_ROW),
                body={},
            )
        )
