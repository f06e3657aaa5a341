# staffbook/services/exports.py
"""
Export assembler: turns document-store collections into downloadable files.

Single-collection exports produce one sheet (or a CSV). Composite exports
fetch their collections concurrently and write one sheet per collection in
a fixed order.
"""
import asyncio
import logging
from datetime import date
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from staffbook.core.store import DocumentStore
from staffbook.schemas.canonical import parse_date, parse_number, to_text
from staffbook.schemas.registry import get_schema
from staffbook.services.workbook import (
    CSV_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    build_csv,
    build_workbook,
)

logger = logging.getLogger(__name__)


class ExportKind(str, Enum):
    EMPLOYEES = "employees"
    ATTENDANCE = "attendance"
    ALLOWANCES = "allowances"
    MASTER_DATA = "master-data"
    COMPLETE_BACKUP = "complete-backup"


class ExportFormat(str, Enum):
    XLSX = "xlsx"
    CSV = "csv"


class ExportFile(NamedTuple):
    filename: str
    content: bytes
    media_type: str


class SheetSource(NamedTuple):
    title: str
    collection: str
    order_field: Optional[str] = None


EXPORT_SOURCES: Dict[ExportKind, Tuple[SheetSource, ...]] = {
    ExportKind.EMPLOYEES: (SheetSource("employees", "employees"),),
    ExportKind.ATTENDANCE: (SheetSource("attendance", "attendance", "date"),),
    ExportKind.ALLOWANCES: (SheetSource("allowances", "allowances", "date"),),
    ExportKind.MASTER_DATA: (
        SheetSource("Companies", "companies"),
        SheetSource("Units", "units"),
        SheetSource("Groups", "groups"),
        SheetSource("Shifts", "shifts"),
        SheetSource("Holidays", "holidays"),
    ),
    ExportKind.COMPLETE_BACKUP: (
        SheetSource("Employees", "employees"),
        SheetSource("Attendance", "attendance", "date"),
        SheetSource("Allowances", "allowances", "date"),
        SheetSource("Companies", "companies"),
        SheetSource("Units", "units"),
        SheetSource("Groups", "groups"),
        SheetSource("Shifts", "shifts"),
        SheetSource("Holidays", "holidays"),
    ),
}

COMPOSITE_KINDS = {ExportKind.MASTER_DATA, ExportKind.COMPLETE_BACKUP}

ALLOWANCE_REPORT_FILENAME = "Allowance_Report.xlsx"


def _file(stem: str, fmt: ExportFormat, sheet_title: str, records: List[Dict[str, Any]]) -> ExportFile:
    if fmt == ExportFormat.CSV:
        return ExportFile(f"{stem}.csv", build_csv(records), CSV_MEDIA_TYPE)
    return ExportFile(f"{stem}.xlsx", build_workbook([(sheet_title, records)]), XLSX_MEDIA_TYPE)


async def export_data(
    kind,
    store: DocumentStore,
    fmt=ExportFormat.XLSX,
    today: Optional[date] = None,
) -> ExportFile:
    kind = ExportKind(kind)
    fmt = ExportFormat(fmt)
    stamp = (today or date.today()).isoformat()
    sources = EXPORT_SOURCES[kind]

    collections = await asyncio.gather(
        *(store.get_all(source.collection, source.order_field) for source in sources)
    )
    logger.info(
        f"Exporting {kind.value}: "
        + ", ".join(f"{s.collection}={len(c)}" for s, c in zip(sources, collections))
    )

    if kind in COMPOSITE_KINDS:
        content = build_workbook([(s.title, c) for s, c in zip(sources, collections)])
        return ExportFile(f"{kind.value}-{stamp}.xlsx", content, XLSX_MEDIA_TYPE)

    return _file(f"{kind.value}-{stamp}", fmt, sources[0].title, collections[0])


def build_template(import_type, fmt=ExportFormat.XLSX) -> ExportFile:
    """A one-row file holding the sample record for an importable type."""
    schema = get_schema(import_type)
    return _file(f"{schema.type.value}-template", ExportFormat(fmt), "Template", [dict(schema.sample)])


def _month_key(value) -> Optional[str]:
    parsed = parse_date(value)
    return parsed.strftime("%B %Y") if parsed else None


async def build_allowance_report(store: DocumentStore) -> ExportFile:
    """
    Allowances grouped by month, one sheet per month, each closed by a
    ``Total Records`` summary row.
    """
    allowances, employees = await asyncio.gather(
        store.get_all("allowances", "date"),
        store.get_all("employees"),
    )

    # Allowances may point at the store id or at the employee code
    employees_by_key: Dict[str, Dict[str, Any]] = {}
    for employee in employees:
        for key in (employee.get("employeeId"), employee.get("id")):
            if key:
                employees_by_key[to_text(key)] = employee

    by_month: Dict[str, List[Dict[str, Any]]] = {}
    for allowance in allowances:
        month = _month_key(allowance.get("date")) or "Undated"
        by_month.setdefault(month, []).append(allowance)

    sheets = []
    for month, records in by_month.items():
        rows: List[Dict[str, Any]] = []
        total = 0
        for rec in records:
            employee = employees_by_key.get(to_text(rec.get("employeeId")))
            amount = parse_number(rec.get("amount")) or 0
            total += amount
            when = parse_date(rec.get("date"))
            rows.append({
                "Employee Name": (employee or {}).get("name") or "Unknown",
                "Employee ID": (employee or {}).get("employeeId"),
                "Date": when.strftime("%d/%m/%Y") if when else None,
                "Type": "Food" if rec.get("type") == "food" else "Advance",
                "Amount": amount,
            })
        rows.append({})
        rows.append({
            "Employee Name": "Total Records",
            "Employee ID": len(records),
            "Amount": total,
        })
        sheets.append((month, rows))

    if not sheets:
        sheets.append(("Allowances", []))

    logger.info(f"Allowance report: {len(allowances)} records over {len(by_month)} months")
    return ExportFile(ALLOWANCE_REPORT_FILENAME, build_workbook(sheets), XLSX_MEDIA_TYPE)
