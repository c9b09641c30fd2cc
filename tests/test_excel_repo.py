import pytest
from openpyxl import Workbook, load_workbook

from busboard.errors import StoreError
from busboard.excel_repo import ExcelRepo
from busboard.schema import COLUMNS


def _sheet_rows(path, sheet="Sheet1"):
    ws = load_workbook(path)[sheet]
    return [list(r) for r in ws.iter_rows(values_only=True)]


def test_new_workbook_gets_a_bold_header(tmp_path):
    path = tmp_path / "data" / "units.xlsx"
    ExcelRepo(path=str(path))

    ws = load_workbook(path)["Sheet1"]
    assert [c.value for c in ws[1]] == list(COLUMNS)
    assert ws["A1"].font.bold


def test_existing_workbook_gets_the_sheet_added(tmp_path):
    path = tmp_path / "units.xlsx"
    wb = Workbook()
    wb.active.title = "Other"
    wb.save(path)

    ExcelRepo(path=str(path), sheet_name="Flota")

    assert load_workbook(path).sheetnames == ["Other", "Flota"]


def _seed(path, rows):
    wb = Workbook()
    ws = wb.active
    ws.title = "Sheet1"
    ws.append(list(COLUMNS))
    for row in rows:
        ws.append(row)
    wb.save(path)


def test_rows_without_a_positive_unit_number_are_skipped(tmp_path):
    path = tmp_path / "units.xlsx"
    _seed(path, [
        [1, 101, "taller"],
        [2, 0],
        [3, "abc"],
        [4, -7],
        [None, 104],
    ])
    repo = ExcelRepo(path=str(path))

    units = repo.get_all_bus_units()

    assert [u["unitNumber"] for u in units] == [101, 104]
    # missing id falls back to the row's data position
    assert units[1]["id"] == 5
    assert units[0]["MOT"] == "taller"
    assert units[0]["TEL"] == "listo"


def test_next_id_counts_skipped_rows(tmp_path):
    path = tmp_path / "units.xlsx"
    _seed(path, [[1, 101], [8, 0]])
    repo = ExcelRepo(path=str(path))

    assert repo.create_bus_unit({"unitNumber": 102})["id"] == 9


def test_update_writes_the_right_row_after_a_skipped_one(tmp_path):
    path = tmp_path / "units.xlsx"
    _seed(path, [[1, 0], [2, 202]])
    repo = ExcelRepo(path=str(path))

    repo.update_bus_unit(2, {"SUS": "taller"})

    rows = _sheet_rows(path)
    assert rows[1][:2] == [1, 0]
    assert rows[2][:2] == [2, 202]
    assert rows[2][COLUMNS.index("SUS")] == "taller"


def test_deleted_id_is_reused_by_the_next_unit(tmp_path):
    repo = ExcelRepo(path=str(tmp_path / "units.xlsx"))
    for n in (1, 2, 3):
        repo.create_bus_unit({"unitNumber": n})

    repo.delete_bus_unit(3)

    assert repo.create_bus_unit({"unitNumber": 4})["id"] == 3


def test_delete_all_keeps_the_header(tmp_path):
    path = tmp_path / "units.xlsx"
    repo = ExcelRepo(path=str(path))
    repo.create_bus_unit({"unitNumber": 1})
    repo.create_bus_unit({"unitNumber": 2})

    repo.delete_all_bus_units()

    assert _sheet_rows(path) == [list(COLUMNS)]


def test_corrupt_workbook_raises_store_error(tmp_path):
    path = tmp_path / "units.xlsx"
    repo = ExcelRepo(path=str(path))
    path.write_bytes(b"not a zip archive")

    with pytest.raises(StoreError):
        repo.get_all_bus_units()
    with pytest.raises(StoreError):
        repo.create_bus_unit({"unitNumber": 1})


def test_corrupt_workbook_is_rejected_on_open(tmp_path):
    path = tmp_path / "units.xlsx"
    path.write_bytes(b"not a zip archive")

    with pytest.raises(StoreError):
        ExcelRepo(path=str(path))


def test_unreadable_workbook_path_raises_store_error(tmp_path):
    path = tmp_path / "units.xlsx"
    repo = ExcelRepo(path=str(path))
    path.unlink()
    path.mkdir()

    with pytest.raises(StoreError):
        repo.get_all_bus_units()
