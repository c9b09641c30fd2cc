# busboard/config.py
# Holds configuration flags (which store backend to use) and the connection settings for each backend.

import os

HERE = os.path.dirname(__file__)
DATA_DIR = os.path.abspath(os.environ.get("BUSBOARD_DATA_DIR", os.path.join(HERE, '..', 'data')))

# One of: excel, sheets_api, oauth_sheets, apps_script, local, db
STORE_BACKEND = os.environ.get("BUSBOARD_STORE", "excel")

# ─── Excel workbook ─────────────────────────────────────────────────────────
WORKBOOK_PATH = os.path.join(DATA_DIR, 'bus_units.xlsx')
SHEET_NAME = os.environ.get("BUSBOARD_SHEET_NAME", "Sheet1")

# ─── Local key/value file (mirrors the browser storage layout) ─────────────
LOCAL_STORE_PATH = os.path.join(DATA_DIR, 'local_storage.json')
# "counter" never reuses ids; "max_plus_one" behaves like the spreadsheets
LOCAL_ID_POLICY = os.environ.get("BUSBOARD_LOCAL_ID_POLICY", "counter")

# ─── SQL ────────────────────────────────────────────────────────────────────
DB_URL = os.environ.get("BUSBOARD_DB_URL", "sqlite:///data/app.db")

# ─── Google Sheets ──────────────────────────────────────────────────────────
SPREADSHEET_ID = os.environ.get("BUSBOARD_SPREADSHEET_ID", "")
SHEETS_API_KEY = os.environ.get("GOOGLE_SHEETS_API_KEY", "")
SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
# numeric gid of the worksheet, needed for row deletes
SHEET_GID = int(os.environ.get("BUSBOARD_SHEET_GID", "0"))

GOOGLE_TOKEN_FILE = os.environ.get("GOOGLE_TOKEN_FILE", os.path.join(DATA_DIR, 'token.json'))
GOOGLE_SA_FILE = os.environ.get("GOOGLE_SA_FILE", "")
GOOGLE_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# ─── Apps Script web app ────────────────────────────────────────────────────
APPS_SCRIPT_URL = os.environ.get("BUSBOARD_APPS_SCRIPT_URL", "")

# seconds before an HTTP call is treated as a connection failure
REQUEST_TIMEOUT = float(os.environ.get("BUSBOARD_REQUEST_TIMEOUT", "30"))

LOG_LEVEL = os.environ.get("BUSBOARD_LOG_LEVEL", "INFO")
