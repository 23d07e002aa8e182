"""
General Fund Models

The firm-wide (non-project) income and expense record, stored as its own
document next to the project collection.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from archifinance.models.base import RecordModel, coerce_amount, new_id


class TransactionType(str, Enum):
    """Direction of a general fund transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class GeneralTransaction(RecordModel):
    """
    A firm-level ledger row.
    
    The category is an opaque id resolved against the transaction category
    table in the firm settings; an id with no definition is displayed raw.
    """
    
    id: str = Field(default_factory=new_id)
    date: str = Field(
        default="",
        description="ISO date (YYYY-MM-DD)"
    )
    type: TransactionType = TransactionType.EXPENSE
    category: str = Field(
        default="Misc",
        description="Transaction category id (weak reference)"
    )
    description: str = ""
    amount: float = 0.0
    note: Optional[str] = None
    
    @field_validator('amount', mode='before')
    @classmethod
    def normalize_amount(cls, v: Any) -> float:
        return coerce_amount(v)
