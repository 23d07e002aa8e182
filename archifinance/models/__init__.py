"""
Data Models Package

This package contains all Pydantic models used in the ArchiFinance engine.
All records loaded from or saved to the JSON documents conform to these
schemas.
"""

from archifinance.models.backup import BackupDocument
from archifinance.models.base import RecordModel, coerce_amount, new_id, now_ms
from archifinance.models.events import (
    ChangeEvent,
    ChangeEventBuilder,
    ChangeEventType,
)
from archifinance.models.firm import (
    BankAccount,
    CategoryDefinition,
    FirmInfo,
    FirmSettings,
)
from archifinance.models.ledger import GeneralTransaction, TransactionType
from archifinance.models.project import (
    Cost,
    CostCategory,
    Invoice,
    InvoiceItem,
    PaymentTerm,
    Project,
    ProjectStatus,
    QuoteCategory,
    QuoteData,
    QuoteItem,
    TaxMode,
    create_empty_project,
)
from archifinance.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Base helpers
    "RecordModel",
    "coerce_amount",
    "new_id",
    "now_ms",
    # Project models
    "Cost",
    "CostCategory",
    "Invoice",
    "InvoiceItem",
    "PaymentTerm",
    "Project",
    "ProjectStatus",
    "QuoteCategory",
    "QuoteData",
    "QuoteItem",
    "TaxMode",
    "create_empty_project",
    # Firm-level models
    "BackupDocument",
    "BankAccount",
    "CategoryDefinition",
    "FirmInfo",
    "FirmSettings",
    "GeneralTransaction",
    "TransactionType",
    # Validation signals
    "ValidationIssue",
    "ValidationResult",
    # Change events
    "ChangeEvent",
    "ChangeEventBuilder",
    "ChangeEventType",
]
