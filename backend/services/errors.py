# backend/services/errors.py


class LedgerError(Exception):
    """Base class for ledger failures."""


class ValidationRejected(LedgerError):
    """Raised when an operation is refused before any state change
    (insufficient stock or client balance, missing required field)."""


class ExportError(Exception):
    """Base class for document and spreadsheet export failures."""


class ExportUnavailable(ExportError):
    """Raised when the library backing an export is not installed."""


class NothingToExport(ExportError):
    """Raised when an export has no rows to write."""
