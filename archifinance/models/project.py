"""
Project Models for ArchiFinance

A Project and the records it owns (its Quote, Invoices and Costs) form one
consistency unit: they are loaded, saved and replaced together.

DESIGN DECISION: Records are never mutated in place. Every change builds a
new record with model_copy(update=...), so a snapshot handed to a reader
stays valid after the next write.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from archifinance.models.base import RecordModel, coerce_amount, new_id, now_ms


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TaxMode(str, Enum):
    """
    How a gross service amount relates to the amount actually due.
    
    Tax is always included in the gross figure, never added on top.
    """
    NONE = "none"      # untaxed
    VAT5 = "vat5"      # 5% VAT included
    WHT10 = "wht10"    # 10% withholding included


class ProjectStatus(str, Enum):
    """Project lifecycle status."""
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class CostCategory(str, Enum):
    """
    Closed set of direct project cost categories.
    
    Stored costs keep their raw category string; values outside this set
    are reported as unmapped rather than rejected.
    """
    SUBCONTRACTOR = "Subcontractor"
    GOV_FEE = "GovFee"
    PRINTING = "Printing"
    TRAVEL = "Travel"
    MISC = "Misc"


# =============================================================================
# QUOTE
# =============================================================================

class QuoteItem(RecordModel):
    """A single priced line in a quote category."""
    
    id: str = Field(default_factory=new_id)
    description: str = ""
    amount: float = 0.0
    note: Optional[str] = None
    
    @field_validator('amount', mode='before')
    @classmethod
    def normalize_amount(cls, v: Any) -> float:
        return coerce_amount(v)


class QuoteCategory(RecordModel):
    """An ordered group of quote items (e.g. basic design, permits)."""
    
    id: str = Field(default_factory=new_id)
    name: str = ""
    items: list[QuoteItem] = Field(default_factory=list)


class PaymentTerm(RecordModel):
    """
    A named percentage slice of the contract total.
    
    Percentages are not required to sum to 100 across a quote; a mismatch
    is reported as a validation warning only.
    """
    
    id: str = Field(default_factory=new_id)
    description: str = ""
    percentage: float = Field(
        default=0.0,
        description="Share of the contract total, 0 to 100"
    )
    
    @field_validator('percentage', mode='before')
    @classmethod
    def normalize_percentage(cls, v: Any) -> float:
        return coerce_amount(v)


class QuoteData(RecordModel):
    """
    The contract quote owned 1:1 by a project.
    
    If custom_real_total is unset, the contract total is the sum of every
    item amount across all categories.
    """
    
    categories: list[QuoteCategory] = Field(default_factory=list)
    payment_terms: list[PaymentTerm] = Field(
        default_factory=list,
        alias="paymentTerms"
    )
    custom_real_total: Optional[float] = Field(
        default=None,
        alias="customRealTotal",
        description="Overrides the computed contract total when set"
    )
    notes: list[str] = Field(default_factory=list)
    bank_account: Optional[str] = Field(
        default=None,
        alias="bankAccount",
        description="Id of the selected bank account (weak reference)"
    )
    
    @field_validator('custom_real_total', mode='before')
    @classmethod
    def normalize_custom_total(cls, v: Any) -> Optional[float]:
        if v is None or v == "":
            return None
        return coerce_amount(v)
    
    @field_validator('notes', mode='before')
    @classmethod
    def default_notes(cls, v: Any) -> list:
        return v if v is not None else []


# =============================================================================
# INVOICES
# =============================================================================

class InvoiceItem(RecordModel):
    """
    A billed line on an invoice.
    
    Reimbursable lines pass an expense through at face value, outside tax
    treatment and outside the contract-percentage allocation.
    """
    
    description: str = ""
    amount: float = 0.0
    is_reimbursable: bool = Field(default=False, alias="isReimbursable")
    
    @field_validator('amount', mode='before')
    @classmethod
    def normalize_amount(cls, v: Any) -> float:
        return coerce_amount(v)


class Invoice(RecordModel):
    """
    A payment application billed against the contract.
    
    CRITICAL: total_service and total_expense are cached at save time and
    not recomputed on read. Any change to the items must re-derive both.
    """
    
    id: str = Field(default_factory=new_id)
    invoice_no: str = Field(default="", alias="invoiceNo")
    date: str = Field(
        default="",
        description="ISO date (YYYY-MM-DD)"
    )
    term_id: Optional[str] = Field(
        default=None,
        alias="termId",
        description="Payment term the service line was generated from"
    )
    items: list[InvoiceItem] = Field(default_factory=list)
    notes: Optional[str] = None
    total_service: float = Field(default=0.0, alias="totalService")
    total_expense: float = Field(default=0.0, alias="totalExpense")
    tax_amount: float = Field(
        default=0.0,
        alias="taxAmount",
        description="Reserved; always 0 because tax is included in the gross"
    )
    
    @field_validator('total_service', 'total_expense', 'tax_amount', mode='before')
    @classmethod
    def normalize_totals(cls, v: Any) -> float:
        return coerce_amount(v)
    
    @property
    def billed_total(self) -> float:
        """Service plus reimbursable portion (what counts as revenue)."""
        return self.total_service + self.total_expense


# =============================================================================
# COSTS
# =============================================================================

class Cost(RecordModel):
    """A direct project cost row."""
    
    id: str = Field(default_factory=new_id)
    date: str = ""
    category: str = Field(
        default=CostCategory.MISC.value,
        description="One of CostCategory; unknown values are kept verbatim"
    )
    description: str = ""
    amount: float = 0.0
    
    @field_validator('amount', mode='before')
    @classmethod
    def normalize_amount(cls, v: Any) -> float:
        return coerce_amount(v)
    
    @field_validator('category', mode='before')
    @classmethod
    def category_value(cls, v: Any) -> str:
        if isinstance(v, CostCategory):
            return v.value
        return v if v else CostCategory.MISC.value


# =============================================================================
# PROJECT
# =============================================================================

class Project(RecordModel):
    """
    An architecture project with its quote, invoice history and costs.
    
    Mutated only by whole-record replacement.
    """
    
    id: str = Field(default_factory=new_id)
    name: str = ""
    client: str = ""
    location: str = ""
    project_types: list[str] = Field(
        default_factory=list,
        alias="projectTypes",
        description="Classification tags"
    )
    status: ProjectStatus = ProjectStatus.ACTIVE
    tax_mode: TaxMode = Field(default=TaxMode.NONE, alias="taxMode")
    created_at: int = Field(default_factory=now_ms, alias="createdAt")
    last_modified: int = Field(default_factory=now_ms, alias="lastModified")
    quote: QuoteData = Field(default_factory=QuoteData)
    invoices: list[Invoice] = Field(default_factory=list)
    costs: list[Cost] = Field(default_factory=list)
    
    @model_validator(mode='before')
    @classmethod
    def migrate_legacy_project_type(cls, data: Any) -> Any:
        """Older documents carry a single projectType instead of the list."""
        if isinstance(data, dict) and "projectTypes" not in data and "project_types" not in data:
            legacy = data.get("projectType")
            data = {**data, "projectTypes": [legacy] if legacy else []}
        return data
    
    def touched(self) -> "Project":
        """Copy of this project with lastModified set to now."""
        return self.model_copy(update={"last_modified": now_ms()})


def create_empty_project() -> Project:
    """
    A new project seeded with a starter quote.
    
    Mirrors what a freshly created project looks like in the editor: one
    design category, a 30/40/30 payment schedule and the standard notes.
    """
    return Project(
        name="新專案",
        client="業主名稱",
        location="專案地點",
        project_types=["私人住宅"],
        status=ProjectStatus.ACTIVE,
        tax_mode=TaxMode.VAT5,
        quote=QuoteData(
            categories=[
                QuoteCategory(
                    name="基本設計",
                    items=[QuoteItem(description="建築規劃與設計", amount=50000)],
                ),
            ],
            payment_terms=[
                PaymentTerm(description="簽約訂金", percentage=30),
                PaymentTerm(description="細部設計完成", percentage=40),
                PaymentTerm(description="取得建照執照", percentage=30),
            ],
            notes=[
                "不含代辦各項之機關審查費、規費。",
                "不含台電、自來水外線申請。",
                "不含非乙方因素之建照變更設計階段衍生費用。",
            ],
            bank_account="default-company",
        ),
    )
