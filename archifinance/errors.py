"""
Exception hierarchy for the ArchiFinance engine.

None of these are fatal: every failure means "no-op, report, let the
user retry". Callers catch ArchiFinanceError at the UI boundary.
"""


class ArchiFinanceError(Exception):
    """Base exception for the engine."""
    pass


class ImportFormatError(ArchiFinanceError):
    """An imported document could not be used."""
    pass


class ParseFailedError(ImportFormatError):
    """The imported text is not valid JSON."""
    pass


class InvalidFormatError(ImportFormatError):
    """The imported JSON is not a backup, project list, or single project."""
    pass


class ExportError(ArchiFinanceError):
    """Writing an export file failed."""
    pass


class SyncError(ArchiFinanceError):
    """Pulling projects from the server failed."""
    pass


class ProjectNotFoundError(ArchiFinanceError):
    """No project with the requested id."""
    pass


class InvoiceNotFoundError(ArchiFinanceError):
    """No saved invoice with the requested id."""
    pass


class SettingsError(ArchiFinanceError):
    """A settings change would leave the firm settings unusable."""
    pass


class TransactionNotFoundError(ArchiFinanceError):
    """No general fund transaction with the requested id."""
    pass
