# staffbook/services/workbook.py
import csv
import io
import json
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"

# Excel rejects sheet titles longer than 31 characters
MAX_SHEET_TITLE = 31


def collect_columns(records: Sequence[Dict[str, Any]]) -> List[str]:
    """Union of the record keys, in the order they are first seen."""
    columns: Dict[str, None] = {}
    for record in records:
        for key in record:
            columns.setdefault(key, None)
    return list(columns)


def cell_value(value: Any):
    if value is None or isinstance(value, (str, bool, int, float, date, time)):
        if isinstance(value, datetime) and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


def _append_row(ws, values: Sequence[Any]) -> None:
    row = []
    for value in values:
        value = cell_value(value)
        if isinstance(value, str):
            # control characters are not allowed in worksheet XML
            value = ILLEGAL_CHARACTERS_RE.sub("", value)
        row.append(value)
    ws.append(row)
    # stored text is written as text, never as a formula
    for cell in ws[ws.max_row]:
        if cell.data_type == "f":
            cell.data_type = "s"


def build_workbook(sheets: Sequence[Tuple[str, Sequence[Dict[str, Any]]]]) -> bytes:
    """One sheet per ``(title, records)`` pair, in the order given."""
    wb = Workbook()
    wb.remove(wb.active)
    for title, records in sheets:
        ws = wb.create_sheet(title=title[:MAX_SHEET_TITLE])
        columns = collect_columns(records)
        if not columns:
            continue
        _append_row(ws, columns)
        for record in records:
            _append_row(ws, [record.get(column) for column in columns])
    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def build_csv(records: Sequence[Dict[str, Any]]) -> bytes:
    columns = collect_columns(records)
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(columns)
    for record in records:
        row = []
        for column in columns:
            value = cell_value(record.get(column))
            row.append("" if value is None else value)
        writer.writerow(row)
    return output.getvalue().encode("utf-8-sig")
