# staffbook/schemas/canonical.py

import logging
from datetime import datetime, time
from typing import Any, Iterable, Optional, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

logger = logging.getLogger(__name__)

Number = Union[int, float]

MARITAL_STATUSES = {"single", "married", "divorced", "widowed"}
SALARY_MODES = {"cash", "bank", "cheque"}
EMPLOYEE_TYPES = {"staff", "labour"}
HOLIDAY_TYPES = {"national", "company", "optional", "festival"}
APPLICABLE_TO = {"staff", "labour", "both"}
ALLOWANCE_TYPES = {"food", "advance"}
ALLOWANCE_DEFAULT_AMOUNTS = {"food": 30, "advance": 0}


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def to_text(value: Any) -> str:
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_number(value: Any) -> Optional[Number]:
    """Return the numeric value of a cell, or None when it isn't numeric."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return None if pd.isna(value) else value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return None
        if pd.isna(number):
            return None
        return int(number) if number.is_integer() else number
    return None


def to_number(value: Any, default: Number) -> Number:
    # zero and non-numeric input both fall back to the default
    number = parse_number(value)
    return number if number else default


def parse_date(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    parsed = pd.to_datetime(value.strip(), errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def to_choice(value: Any, choices: Iterable[str], default: str) -> str:
    if is_blank(value):
        return default
    lowered = str(value).strip().lower()
    return lowered if lowered in choices else default


def to_flag(value: Any) -> bool:
    """True only for an explicit boolean True or the string "true"."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def to_active(value: Any) -> bool:
    """Active unless explicitly false."""
    if isinstance(value, bool):
        return value
    return not (isinstance(value, str) and value.strip().lower() == "false")


class CanonicalRecord(BaseModel):
    # unlisted spreadsheet columns are passed through untouched
    model_config = ConfigDict(extra="allow", validate_default=True)


class EmployeeCanonical(CanonicalRecord):
    name: str
    employeeId: str
    designation: str
    employeeType: str = None
    dob: datetime = None
    dateOfJoining: datetime = None
    salaryPerDay: Number = None
    salaryPerMonth: Number = None
    isActive: bool = None
    esaPf: bool = None
    maritalStatus: str = None
    salaryMode: str = None

    # filled in later by the manual mapping step
    companyId: str = ""
    unitId: str = ""
    groupId: str = ""
    shiftId: str = ""

    @field_validator("name", "employeeId", "designation", mode="before")
    @classmethod
    def text(cls, v):
        return to_text(v)

    @field_validator("employeeType", mode="before")
    @classmethod
    def employee_type(cls, v):
        return to_choice(v, EMPLOYEE_TYPES, "staff")

    @field_validator("dob", "dateOfJoining", mode="before")
    @classmethod
    def date_or_now(cls, v):
        return parse_date(v) or datetime.now()

    @field_validator("salaryPerDay", "salaryPerMonth", mode="before")
    @classmethod
    def salary(cls, v):
        return to_number(v, 0)

    @field_validator("isActive", mode="before")
    @classmethod
    def active(cls, v):
        return to_active(v)

    @field_validator("esaPf", mode="before")
    @classmethod
    def esa_pf(cls, v):
        return to_flag(v)

    @field_validator("maritalStatus", mode="before")
    @classmethod
    def marital_status(cls, v):
        return to_choice(v, MARITAL_STATUSES, "single")

    @field_validator("salaryMode", mode="before")
    @classmethod
    def salary_mode(cls, v):
        return to_choice(v, SALARY_MODES, "cash")

    @field_validator("companyId", "unitId", "groupId", "shiftId", mode="before")
    @classmethod
    def unmapped(cls, v):
        return ""


class HolidayCanonical(CanonicalRecord):
    name: str
    date: Optional[datetime] = None
    type: str = None
    applicableTo: str = None
    isRecurring: bool = None

    @field_validator("name", mode="before")
    @classmethod
    def text(cls, v):
        return to_text(v)

    @field_validator("date", mode="before")
    @classmethod
    def holiday_date(cls, v):
        parsed = parse_date(v)
        if parsed is None:
            logger.warning(f"Holiday date {v!r} could not be parsed, storing it unset")
        return parsed

    @field_validator("type", mode="before")
    @classmethod
    def holiday_type(cls, v):
        return to_choice(v, HOLIDAY_TYPES, "company")

    @field_validator("applicableTo", mode="before")
    @classmethod
    def applicable_to(cls, v):
        return to_choice(v, APPLICABLE_TO, "both")

    @field_validator("isRecurring", mode="before")
    @classmethod
    def recurring(cls, v):
        return to_flag(v)


class ShiftCanonical(CanonicalRecord):
    name: str
    startTime: str
    endTime: str
    duration: Number = None
    applicableTo: str = None
    isActive: bool = None

    @field_validator("name", mode="before")
    @classmethod
    def text(cls, v):
        return to_text(v)

    @field_validator("startTime", "endTime", mode="before")
    @classmethod
    def clock(cls, v):
        if isinstance(v, (time, datetime)):
            return v.strftime("%H:%M")
        return to_text(v)

    @field_validator("duration", mode="before")
    @classmethod
    def hours(cls, v):
        return to_number(v, 8)

    @field_validator("applicableTo", mode="before")
    @classmethod
    def applicable_to(cls, v):
        return to_choice(v, APPLICABLE_TO, "both")

    @field_validator("isActive", mode="before")
    @classmethod
    def active(cls, v):
        return to_active(v)


class AllowanceCanonical(CanonicalRecord):
    employeeId: str
    date: datetime = None
    type: str = None
    amount: Number = None

    @field_validator("employeeId", mode="before")
    @classmethod
    def text(cls, v):
        return to_text(v)

    @field_validator("date", mode="before")
    @classmethod
    def date_or_now(cls, v):
        return parse_date(v) or datetime.now()

    @field_validator("type", mode="before")
    @classmethod
    def allowance_type(cls, v):
        return to_choice(v, ALLOWANCE_TYPES, "food")

    @field_validator("amount", mode="before")
    @classmethod
    def amount_for_type(cls, v, info: ValidationInfo):
        default = ALLOWANCE_DEFAULT_AMOUNTS.get(info.data.get("type"), 0)
        number = parse_number(v)
        return default if number is None or is_blank(v) else number
