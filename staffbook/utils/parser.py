# staffbook/utils/parser.py
import io
import logging
from datetime import datetime, time
from typing import List, NamedTuple, Optional

import pandas as pd

from staffbook.core.exceptions import EmptyFileError, ParseError
from staffbook.schemas.validation import RawRow, Scalar

logger = logging.getLogger(__name__)

XLSX_MAGIC = b"PK\x03\x04"
XLS_MAGIC = b"\xd0\xcf\x11\xe0"


class ParsedTable(NamedTuple):
    headers: List[str]
    rows: List[RawRow]


def _to_scalar(value) -> Scalar:
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return ""
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item"):  # numpy scalar
        value = value.item()
    if isinstance(value, (bool, int, float, datetime, time)):
        return value
    return str(value)


def _read_frame(content: bytes, filename: Optional[str]) -> pd.DataFrame:
    if content.startswith(XLSX_MAGIC) or content.startswith(XLS_MAGIC):
        engine = "openpyxl" if content.startswith(XLSX_MAGIC) else "xlrd"
        try:
            return pd.read_excel(io.BytesIO(content), sheet_name=0, engine=engine)
        except Exception as e:
            logger.error(f"Could not read workbook {filename or ''}: {e}")
            raise ParseError("Error reading file. Please ensure it's a valid Excel or CSV file.") from e

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError("Invalid file encoding, please save the CSV as UTF-8.") from e

    try:
        return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, skipinitialspace=False)
    except pd.errors.EmptyDataError as e:
        raise EmptyFileError("The file appears to be empty.") from e
    except (pd.errors.ParserError, ValueError) as e:
        logger.error(f"Could not read CSV {filename or ''}: {e}")
        raise ParseError("Error reading file. Please ensure it's a valid Excel or CSV file.") from e


def parse_table(content: bytes, filename: Optional[str] = None) -> ParsedTable:
    """Decode the first sheet of a workbook, or a CSV, into headers and rows.

    Headers come from the first row and keep their column order. Fully blank
    rows are dropped and blank cells come back as "".
    """
    if not content:
        raise EmptyFileError("The file appears to be empty.")

    df = _read_frame(content, filename)
    headers = [str(c) for c in df.columns]
    df.columns = headers

    df = df.replace(r"^\s*$", pd.NA, regex=True).dropna(how="all")
    if df.empty:
        raise EmptyFileError("The file appears to be empty.")

    rows = [
        {header: _to_scalar(value) for header, value in record.items()}
        for record in df.astype(object).to_dict(orient="records")
    ]
    logger.info(f"Parsed {len(rows)} rows with {len(headers)} columns from {filename or 'upload'}")
    return ParsedTable(headers=headers, rows=rows)
