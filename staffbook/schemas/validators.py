# staffbook/schemas/validators.py
import re
from datetime import datetime, time
from typing import Callable, Dict, List, Sequence

from staffbook.schemas.canonical import (
    ALLOWANCE_TYPES,
    EMPLOYEE_TYPES,
    is_blank,
    parse_date,
    parse_number,
)
from staffbook.schemas.registry import ImportableType, get_schema
from staffbook.schemas.validation import RawRow, RowError, ValidationIssue, ValidationOutcome

# Data rows start on line 2, under the header row
FIRST_DATA_ROW = 2

HH_MM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

Rule = Callable[[RawRow, bool], List[ValidationIssue]]


def _issue(code: str, message: str, field: str) -> ValidationIssue:
    return ValidationIssue(level="error", code=code, message=message, field=field)


def _is_clock(value) -> bool:
    if isinstance(value, (time, datetime)):
        return True
    return isinstance(value, str) and HH_MM.match(value) is not None


def _employee_rules(row: RawRow, strict_dates: bool) -> List[ValidationIssue]:
    issues = []
    employee_type = row.get("employeeType")
    if not is_blank(employee_type) and str(employee_type).lower() not in EMPLOYEE_TYPES:
        issues.append(_issue("invalid_employee_type", "Employee type must be staff or labour", "employeeType"))

    salary = row.get("salaryPerDay")
    if not is_blank(salary) and parse_number(salary) is None:
        issues.append(_issue("invalid_number", "Salary per day must be a number", "salaryPerDay"))
    return issues


def _shift_rules(row: RawRow, strict_dates: bool) -> List[ValidationIssue]:
    issues = []
    for field, label in (("startTime", "Start time"), ("endTime", "End time")):
        value = row.get(field)
        if not is_blank(value) and not _is_clock(value):
            issues.append(_issue("invalid_time_format", f"{label} must be in HH:MM format", field))
    return issues


def _holiday_rules(row: RawRow, strict_dates: bool) -> List[ValidationIssue]:
    value = row.get("date")
    if strict_dates and not is_blank(value) and parse_date(value) is None:
        return [_issue("invalid_date", "Date must be a valid date", "date")]
    return []


def _allowance_rules(row: RawRow, strict_dates: bool) -> List[ValidationIssue]:
    issues = []
    allowance_type = row.get("type")
    if not is_blank(allowance_type) and str(allowance_type).strip().lower() not in ALLOWANCE_TYPES:
        issues.append(_issue("invalid_allowance_type", "Allowance type must be food or advance", "type"))

    amount = row.get("amount")
    if not is_blank(amount) and parse_number(amount) is None:
        issues.append(_issue("invalid_number", "Amount must be a number", "amount"))

    value = row.get("date")
    if not is_blank(value) and parse_date(value) is None:
        issues.append(_issue("invalid_date", "Date must be a valid date", "date"))
    return issues


VALIDATORS: Dict[ImportableType, Rule] = {
    ImportableType.EMPLOYEE: _employee_rules,
    ImportableType.SHIFT: _shift_rules,
    ImportableType.HOLIDAY: _holiday_rules,
    ImportableType.ALLOWANCE: _allowance_rules,
}


def check_row(row: RawRow, import_type, row_number: int, strict_dates: bool = False) -> List[ValidationIssue]:
    """All problems with one row: missing required fields first, then type rules."""
    schema = get_schema(import_type)
    issues = [
        _issue("missing_required_field", f"Missing required field: {field}", field)
        for field in schema.required_fields
        if is_blank(row.get(field))
    ]

    rule = VALIDATORS.get(schema.type)
    if rule is not None:
        issues.extend(rule(row, strict_dates))

    return [issue.model_copy(update={"row": row_number}) for issue in issues]


def validate_rows(rows: Sequence[RawRow], import_type, strict_dates: bool = False) -> ValidationOutcome:
    """Split rows into the ones that can be imported and per-row error messages.

    A row with several problems yields a single error whose message joins
    them with ", ". Valid rows are returned unchanged.
    """
    valid: List[RawRow] = []
    errors: List[RowError] = []

    for idx, row in enumerate(rows, start=FIRST_DATA_ROW):
        issues = check_row(row, import_type, idx, strict_dates)
        if issues:
            errors.append(RowError(row=idx, message=", ".join(i.message for i in issues)))
        else:
            valid.append(row)

    return ValidationOutcome(valid=valid, errors=errors)
