# staffbook/core/exceptions.py


class StaffbookError(Exception):
    """Base exception for the import/export pipeline."""


class ParseError(StaffbookError):
    """Raised when an uploaded buffer is not a readable spreadsheet or CSV."""


class EmptyFileError(StaffbookError):
    """Raised when an uploaded file has no data rows."""


class PersistenceError(StaffbookError):
    """A single record could not be written. Non-fatal during imports."""


class StoreUnavailableError(StaffbookError):
    """The document store itself cannot be reached."""
