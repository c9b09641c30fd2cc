import json
import re
from urllib.parse import unquote

import pytest

from busboard.schema import header_row


class SheetTable:
    """In-memory worksheet that answers the way the Sheets values API does."""

    def __init__(self, rows=None):
        self.rows = [list(r) for r in (rows or [])]

    @staticmethod
    def parse_range(rng):
        cells = rng.split("!", 1)[-1]
        m = re.match(r"A(\d*):K(\d*)$", cells)
        start = int(m.group(1)) if m.group(1) else 1
        end = int(m.group(2)) if m.group(2) else None
        return start, end

    def _trimmed(self):
        out = []
        for row in self.rows:
            cells = ["" if v is None else str(v) for v in row]
            while cells and cells[-1] == "":
                cells.pop()
            out.append(cells)
        while out and not out[-1]:
            out.pop()
        return out

    def get(self, rng):
        values = self._trimmed()
        return {"values": values} if values else {}

    def append(self, values):
        del self.rows[len(self._trimmed()):]
        for row in values:
            self.rows.append(list(row))
        return {}

    def update(self, rng, values):
        start, _ = self.parse_range(rng)
        for offset, row in enumerate(values):
            idx = start - 1 + offset
            while len(self.rows) <= idx:
                self.rows.append([])
            self.rows[idx] = list(row)
        return {}

    def clear(self, rng):
        start, end = self.parse_range(rng)
        end = len(self.rows) if end is None else min(end, len(self.rows))
        for idx in range(start - 1, end):
            self.rows[idx] = []
        return {}

    def delete_rows(self, start_index, end_index):
        del self.rows[start_index:end_index]
        return {}


# ─── requests fakes ─────────────────────────────────────────────────────────
class FakeResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400


class FakeSheetsHttp:
    """Stands in for a requests.Session pointed at sheets.googleapis.com."""

    def __init__(self, table):
        self.table = table
        self.calls = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json})
        path = unquote(url.split("/values/", 1)[1])
        if path.endswith(":append"):
            result = self.table.append(json["values"])
        elif path.endswith(":clear"):
            result = self.table.clear(path[:-len(":clear")])
        elif method == "GET":
            result = self.table.get(path)
        elif method == "PUT":
            result = self.table.update(path, json["values"])
        else:
            return FakeResponse(400, "unsupported")
        return FakeResponse(200, _dumps(result))


class FakeScriptEndpoint:
    """Stands in for a requests.Session pointed at the Apps Script web app."""

    def __init__(self, table):
        self.table = table
        self.calls = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({"method": method, "params": params, "json": json})
        action = (params or {}).get("action")
        handler = {
            "getAllUnits": self._get_all,
            "createUnit": self._create,
            "updateUnit": self._update,
            "deleteUnit": self._delete,
            "deleteAll": self._delete_all,
        }.get(action)
        if handler is None:
            return FakeResponse(200, _dumps({"error": "Invalid action"}))
        return FakeResponse(200, _dumps(handler(json or {})))

    @property
    def data(self):
        return self.table.rows[1:]

    def _get_all(self, _):
        units = []
        for idx, row in enumerate(self.data):
            row = list(row) + [""] * (11 - len(row))
            units.append({
                "id": int(row[0] or 0) or idx + 1,
                "unitNumber": int(row[1] or 0),
                **{name: row[2 + i] or "listo" for i, name in enumerate(header_row()[2:])},
            })
        return [u for u in units if u["unitNumber"] > 0]

    def _create(self, data):
        next_id = max([int(r[0] or 0) for r in self.data] or [0]) + 1
        unit = {"id": next_id, "unitNumber": data["unitNumber"]}
        for name in header_row()[2:]:
            unit[name] = data.get(name) or "listo"
        self.table.rows.append([unit[c] for c in header_row()])
        return unit

    def _find(self, unit_id):
        for idx, row in enumerate(self.table.rows):
            if idx > 0 and int(row[0] or 0) == unit_id:
                return idx
        return None

    def _update(self, data):
        idx = self._find(data["id"])
        if idx is None:
            return {"error": "Unit not found"}
        row = list(self.table.rows[idx])
        cols = header_row()
        for key, value in data["updates"].items():
            if key in cols[2:]:
                row[cols.index(key)] = value
        self.table.rows[idx] = row
        return dict(zip(cols, row))

    def _delete(self, data):
        idx = self._find(data["id"])
        if idx is None:
            return False
        del self.table.rows[idx]
        return True

    def _delete_all(self, _):
        del self.table.rows[1:]
        return True


def _dumps(obj):
    return json.dumps(obj)


# ─── googleapiclient fakes ──────────────────────────────────────────────────
class FakeRequest:
    def __init__(self, fn):
        self._fn = fn

    def execute(self):
        return self._fn()


class FakeValues:
    def __init__(self, service):
        self.service = service

    def _record(self, name, **kwargs):
        self.service.calls.append((name, kwargs))

    def get(self, spreadsheetId, range):
        self._record("get", spreadsheetId=spreadsheetId, range=range)
        return FakeRequest(lambda: self.service.table.get(range))

    def append(self, spreadsheetId, range, valueInputOption, body):
        self._record("append", range=range, valueInputOption=valueInputOption, body=body)
        return FakeRequest(lambda: self.service.table.append(body["values"]))

    def update(self, spreadsheetId, range, valueInputOption, body):
        self._record("update", range=range, valueInputOption=valueInputOption, body=body)
        return FakeRequest(lambda: self.service.table.update(range, body["values"]))

    def clear(self, spreadsheetId, range, body):
        self._record("clear", range=range)
        return FakeRequest(lambda: self.service.table.clear(range))


class FakeSpreadsheets:
    def __init__(self, service):
        self.service = service

    def values(self):
        return FakeValues(self.service)

    def batchUpdate(self, spreadsheetId, body):
        self.service.calls.append(("batchUpdate", {"body": body}))

        def run():
            for req in body["requests"]:
                rng = req["deleteDimension"]["range"]
                self.service.table.delete_rows(rng["startIndex"], rng["endIndex"])
            return {}
        return FakeRequest(run)


class FakeSheetsService:
    def __init__(self, table):
        self.table = table
        self.calls = []

    def spreadsheets(self):
        return FakeSpreadsheets(self)


# ─── fixtures ───────────────────────────────────────────────────────────────
@pytest.fixture
def sheet_table():
    return SheetTable([header_row()])


@pytest.fixture
def sheets_http(sheet_table):
    return FakeSheetsHttp(sheet_table)


@pytest.fixture
def script_endpoint(sheet_table):
    return FakeScriptEndpoint(sheet_table)


@pytest.fixture
def sheets_service(sheet_table):
    return FakeSheetsService(sheet_table)
