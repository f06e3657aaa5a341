# staffbook/schemas/registry.py
"""
Catalogue of the record types that can be bulk imported.

Adding a type means adding an entry to ``IMPORT_SCHEMAS`` plus its rules in
``staffbook.schemas.validators`` and ``staffbook.schemas.canonical``.
"""
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from pydantic import BaseModel, ConfigDict


class ImportableType(str, Enum):
    EMPLOYEE = "employee"
    COMPANY = "company"
    SHIFT = "shift"
    HOLIDAY = "holiday"
    ALLOWANCE = "allowance"

    @classmethod
    def _missing_(cls, value):
        # Collection names ("employees", "companies") are accepted as aliases
        if isinstance(value, str):
            lowered = value.strip().lower()
            for schema in IMPORT_SCHEMAS.values():
                if lowered in (schema.type.value, schema.collection):
                    return schema.type
        return None


class ImportSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ImportableType
    collection: str
    label: str
    description: str
    required_fields: Tuple[str, ...]
    sample: Dict[str, Any]


IMPORT_SCHEMAS: Mapping[ImportableType, ImportSchema] = MappingProxyType({
    ImportableType.EMPLOYEE: ImportSchema(
        type=ImportableType.EMPLOYEE,
        collection="employees",
        label="Employees",
        description="Employee records with personal and job information",
        required_fields=("name", "employeeId", "employeeType", "designation"),
        sample={
            "name": "John Doe",
            "employeeId": "EMP001",
            "employeeType": "staff",
            "designation": "Manager",
            "phone": "9876543210",
            "address": "123 Main St",
            "salaryPerDay": 500,
            "salaryPerMonth": 15000,
        },
    ),
    ImportableType.COMPANY: ImportSchema(
        type=ImportableType.COMPANY,
        collection="companies",
        label="Companies",
        description="Company master data",
        required_fields=("name",),
        sample={"name": "ABC Corporation"},
    ),
    ImportableType.SHIFT: ImportSchema(
        type=ImportableType.SHIFT,
        collection="shifts",
        label="Shifts",
        description="Shift timings and configurations",
        required_fields=("name", "startTime", "endTime"),
        sample={
            "name": "Morning Shift",
            "startTime": "09:00",
            "endTime": "17:00",
            "duration": 8,
            "applicableTo": "both",
        },
    ),
    ImportableType.HOLIDAY: ImportSchema(
        type=ImportableType.HOLIDAY,
        collection="holidays",
        label="Holidays",
        description="Holiday calendar",
        required_fields=("name", "date"),
        sample={
            "name": "Independence Day",
            "date": "2024-08-15",
            "type": "national",
            "applicableTo": "both",
        },
    ),
    ImportableType.ALLOWANCE: ImportSchema(
        type=ImportableType.ALLOWANCE,
        collection="allowances",
        label="Allowances",
        description="Food and advance allowances paid to employees",
        required_fields=("employeeId", "date", "type"),
        sample={
            "employeeId": "EMP001",
            "date": "2024-08-01",
            "type": "food",
            "amount": 30,
        },
    ),
})


def get_schema(import_type) -> ImportSchema:
    """Look up a schema by enum member, type id or collection name.

    Raises ``ValueError`` for unknown types.
    """
    return IMPORT_SCHEMAS[ImportableType(import_type)]


def list_schemas() -> List[ImportSchema]:
    return list(IMPORT_SCHEMAS.values())
