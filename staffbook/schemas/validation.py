# staffbook/schemas/validation.py
from datetime import datetime, time
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

# A single spreadsheet cell after parsing; blank cells are ""
Scalar = Union[str, int, float, bool, datetime, time, None]
RawRow = Dict[str, Scalar]


class ValidationIssue(BaseModel):
    level: Literal["error", "warning"]
    code: str
    message: str
    field: Optional[str] = None
    row: Optional[int] = None


class RowError(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"


class ValidationOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: List[RawRow] = []
    errors: List[RowError] = []

    @property
    def error_messages(self) -> List[str]:
        return [str(e) for e in self.errors]


class RowValidationResult(BaseModel):
    row_number: int
    status: Literal["valid", "error"]
    issues: List[ValidationIssue] = []
    normalized_data: Optional[Dict[str, Any]] = None


class DryRunSummary(BaseModel):
    total_rows: int
    will_succeed: int
    will_fail: int
    issues: List[ValidationIssue] = []


class ImportPreview(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    filename: Optional[str] = None
    headers: List[str]
    total_rows: int
    preview_rows: List[RawRow]
    summary: DryRunSummary
    rows: List[RowValidationResult] = []


class ImportResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: int
    errors: List[str] = []
    warnings: List[str] = []
