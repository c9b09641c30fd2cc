# busboard/excel_repo.py
# A TabularRepo that keeps the units in a local .xlsx workbook (one sheet, header in row 1) via openpyxl.

import logging
import os
import threading
import zipfile
from contextlib import contextmanager

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException

from .config import SHEET_NAME, WORKBOOK_PATH
from .errors import StoreConnectionError, StoreError
from .persistence import TabularRepo
from .schema import FIRST_DATA_ROW, HEADER_ROW, header_row

logger = logging.getLogger(__name__)

_lock = threading.Lock()


class ExcelRepo(TabularRepo):
    kind = "excel"

    def __init__(self, path: str = WORKBOOK_PATH, sheet_name: str = SHEET_NAME):
        self.path = path
        self.sheet_name = sheet_name
        self._ensure_workbook()

    @contextmanager
    def _guard(self):
        """Hold the file lock; turn file and workbook failures into store errors."""
        with _lock:
            try:
                yield
            except (zipfile.BadZipFile, InvalidFileException, KeyError) as exc:
                logger.error("Workbook %s is unreadable: %s", self.path, exc)
                raise StoreError(f"Workbook {self.path} is unreadable: {exc}") from exc
            except OSError as exc:
                # e.g. the workbook is open and locked in Excel
                logger.error("Workbook %s is not accessible: %s", self.path, exc)
                raise StoreConnectionError(f"Workbook {self.path} is not accessible: {exc}") from exc

    def _ensure_workbook(self):
        """
        Guarantee the workbook exists and carries our sheet with the
        header row in bold. An existing sheet is left alone.
        """
        with self._guard():
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            if os.path.exists(self.path):
                wb = load_workbook(self.path)
                if self.sheet_name in wb.sheetnames:
                    return
                ws = wb.create_sheet(title=self.sheet_name)
            else:
                wb = Workbook()
                ws = wb.active
                ws.title = self.sheet_name

            for idx, col in enumerate(header_row(), start=1):
                c = ws.cell(row=HEADER_ROW, column=idx, value=col)
                c.font = Font(bold=True)
            wb.save(self.path)

    def _open(self, data_only: bool = False):
        wb = load_workbook(self.path, data_only=data_only)
        return wb, wb[self.sheet_name]

    # ─── Row primitives ─────────────────────────────────
    def _read_rows(self):
        with self._guard():
            _, ws = self._open(data_only=True)
            return [list(row) for row in ws.iter_rows(values_only=True)]

    def _append_row(self, row):
        with self._guard():
            wb, ws = self._open()
            ws.append(row)
            wb.save(self.path)

    def _write_row(self, row_number, row):
        with self._guard():
            wb, ws = self._open()
            for idx, value in enumerate(row, start=1):
                ws.cell(row=row_number, column=idx, value=value)
            wb.save(self.path)

    def _delete_row(self, row_number):
        with self._guard():
            wb, ws = self._open()
            ws.delete_rows(row_number)
            wb.save(self.path)

    def _clear_data_rows(self):
        with self._guard():
            wb, ws = self._open()
            if ws.max_row >= FIRST_DATA_ROW:
                ws.delete_rows(FIRST_DATA_ROW, ws.max_row - FIRST_DATA_ROW + 1)
            wb.save(self.path)
