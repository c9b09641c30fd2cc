# busboard/csv_export.py
# Renders the unit list as the CSV the dashboard downloads (one row per unit, header first), via pandas.

import datetime
import os
from typing import Any, Dict, Iterable, Optional

import pandas as pd

from .schema import COMPONENT_NAMES

UNIT_COLUMN = "Autobús"
CSV_COLUMNS = [UNIT_COLUMN, *COMPONENT_NAMES]


def export_filename(day: Optional[datetime.date] = None) -> str:
    day = day or datetime.date.today()
    return f"unidades_autobus_{day.isoformat()}.csv"


def units_to_frame(units: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    rows = [
        [u.get("unitNumber"), *[u.get(comp) for comp in COMPONENT_NAMES]]
        for u in units
    ]
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def units_to_csv(units: Iterable[Dict[str, Any]]) -> str:
    return units_to_frame(units).to_csv(index=False, lineterminator="\n")


def write_units_csv(units: Iterable[Dict[str, Any]], directory: str, day: Optional[datetime.date] = None) -> str:
    """Write the CSV (UTF-8) into `directory` and return its full path."""
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, export_filename(day))
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(units_to_csv(units))
    return path
