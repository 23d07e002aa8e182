"""
Invoice Builder

Assembles a draft invoice from a payment term plus ad hoc reimbursable
items, and appends it to the project's invoice history.

DESIGN DECISION: Saved invoices are an append-then-freeze history. Each
project has exactly one mutable draft slot; committing copies the draft
into the history under a new identity and resets the slot. This keeps the
billed-to-date figure stable while the next invoice is being composed.

The module-level functions are pure. InvoiceBuilder wraps them around the
single draft slot for callers that keep one editor open per project.
"""

from datetime import date
from typing import Any, Optional

from archifinance.calculations.quote import contract_total, find_term, term_amount
from archifinance.config import get_settings
from archifinance.errors import InvoiceNotFoundError
from archifinance.models.base import coerce_amount, new_id
from archifinance.models.firm import BankAccount, FirmSettings
from archifinance.models.project import (
    Invoice,
    InvoiceItem,
    PaymentTerm,
    Project,
    QuoteData,
)


# Account ids written by versions that had a fixed company/personal choice.
LEGACY_BANK_ACCOUNT_IDS = {
    "company": "default-company",
    "personal": "default-personal",
}


# =============================================================================
# PURE OPERATIONS
# =============================================================================

def recalculate(invoice: Invoice) -> Invoice:
    """
    Re-derive the cached totals from the items.
    
    Idempotent. Tax is included in the gross, so taxAmount stays 0.
    """
    service = sum(coerce_amount(i.amount) for i in invoice.items if not i.is_reimbursable)
    expense = sum(coerce_amount(i.amount) for i in invoice.items if i.is_reimbursable)
    return invoice.model_copy(update={
        "total_service": service,
        "total_expense": expense,
        "tax_amount": 0.0,
    })


def suggest_invoice_number(
    saved_count: int,
    year: Optional[int] = None,
    prefix: Optional[str] = None,
) -> str:
    """Next invoice number, e.g. INV-2024-003 when two are already saved."""
    year = year or date.today().year
    prefix = prefix or get_settings().app.invoice_number_prefix
    return f"{prefix}-{year}-{saved_count + 1:03d}"


def new_draft(project: Project, today: Optional[date] = None, prefix: Optional[str] = None) -> Invoice:
    today = today or date.today()
    return Invoice(
        invoice_no=suggest_invoice_number(len(project.invoices), today.year, prefix),
        date=today.isoformat(),
    )


def service_line_description(term: PaymentTerm, label: Optional[str] = None) -> str:
    label = label or get_settings().app.service_fee_label
    return f"{label}: {term.description} ({term.percentage:g}%)"


def select_term(
    draft: Invoice,
    term: PaymentTerm,
    quote: QuoteData,
    label: Optional[str] = None,
) -> Invoice:
    """
    Replace the draft's service line with one billing the given term.
    
    Every non-reimbursable item is dropped and a single new one is put at
    the front; reimbursable items are kept as they are.
    """
    service_line = InvoiceItem(
        description=service_line_description(term, label),
        amount=term_amount(quote, term),
        is_reimbursable=False,
    )
    expenses = [item for item in draft.items if item.is_reimbursable]
    return recalculate(draft.model_copy(update={
        "term_id": term.id,
        "items": [service_line, *expenses],
    }))


def add_reimbursable(draft: Invoice, description: Optional[str] = None) -> Invoice:
    """Append an empty reimbursable line for the user to fill in."""
    description = description if description is not None else get_settings().app.reimbursable_label
    item = InvoiceItem(description=description, amount=0.0, is_reimbursable=True)
    return recalculate(draft.model_copy(update={"items": [*draft.items, item]}))


def update_draft_item(draft: Invoice, index: int, **fields: Any) -> Invoice:
    """Replace fields (description, amount, is_reimbursable) of one line."""
    if not 0 <= index < len(draft.items):
        return draft
    if "amount" in fields:
        fields["amount"] = coerce_amount(fields["amount"])
    items = list(draft.items)
    items[index] = items[index].model_copy(update=fields)
    return recalculate(draft.model_copy(update={"items": items}))


def remove_draft_item(draft: Invoice, index: int) -> Invoice:
    items = [item for i, item in enumerate(draft.items) if i != index]
    return recalculate(draft.model_copy(update={"items": items}))


def commit(
    draft: Invoice,
    project: Project,
    prefix: Optional[str] = None,
    today: Optional[date] = None,
) -> tuple[Project, Invoice]:
    """
    Append a copy of the draft to the project's history.

    Returns the updated project and the next draft: same date and notes,
    no items, numbered after the new history length in the current year.
    The draft's own identity is discarded.
    """
    saved = recalculate(draft).model_copy(update={"id": new_id()}, deep=True)
    invoices = [*project.invoices, saved]
    updated = project.model_copy(update={"invoices": invoices}).touched()

    year = (today or date.today()).year
    next_draft = draft.model_copy(update={
        "id": new_id(),
        "invoice_no": suggest_invoice_number(len(invoices), year, prefix),
        "term_id": None,
        "items": [],
        "total_service": 0.0,
        "total_expense": 0.0,
        "tax_amount": 0.0,
    })
    return updated, next_draft


def previous_billed(project: Project) -> float:
    """Service amount billed by saved invoices (the open draft excluded)."""
    return sum(inv.total_service for inv in project.invoices)


def remaining_contract(project: Project, draft: Optional[Invoice] = None) -> float:
    """
    Contract still to bill after saved invoices and the draft.
    
    Negative values mean the project is overbilled; that is reported, not
    rejected.
    """
    drafted = draft.total_service if draft is not None else 0.0
    return contract_total(project.quote) - previous_billed(project) - drafted


def edit_saved_invoice(project: Project, invoice_id: str, **fields: Any) -> Project:
    """
    Replace fields of a saved invoice and re-derive its totals.
    
    Raises:
        InvoiceNotFoundError: If no saved invoice has this id
    """
    if not any(inv.id == invoice_id for inv in project.invoices):
        raise InvoiceNotFoundError(f"Invoice not found: {invoice_id}")
    
    if "items" in fields:
        fields["items"] = [
            item if isinstance(item, InvoiceItem) else InvoiceItem.model_validate(item)
            for item in fields["items"]
        ]
    invoices = [
        recalculate(inv.model_copy(update=fields)) if inv.id == invoice_id else inv
        for inv in project.invoices
    ]
    return project.model_copy(update={"invoices": invoices}).touched()


def resolve_bank_account(quote: QuoteData, settings: FirmSettings) -> Optional[BankAccount]:
    """
    The account printed on the quote and its invoices.
    
    Falls back to the first configured account when the reference is
    missing or stale, and to None when no accounts exist.
    """
    wanted = LEGACY_BANK_ACCOUNT_IDS.get(quote.bank_account or "", quote.bank_account)
    match = next((acc for acc in settings.bank_accounts if acc.id == wanted), None)
    if match is not None:
        return match
    return settings.bank_accounts[0] if settings.bank_accounts else None


# =============================================================================
# DRAFT SLOT
# =============================================================================

class InvoiceBuilder:
    """
    The single draft slot of one project's invoice editor.
    
    Every draft mutation re-derives the totals before it is stored, so the
    draft never exposes stale figures.
    
    Usage:
        builder = InvoiceBuilder(project)
        builder.select_term(term_id)
        builder.add_reimbursable()
        project = builder.commit()
    """
    
    def __init__(
        self,
        project: Project,
        today: Optional[date] = None,
        invoice_prefix: Optional[str] = None,
    ):
        self._project = project
        self._prefix = invoice_prefix
        self._today = today
        self._draft = new_draft(project, today, invoice_prefix)
    
    @property
    def project(self) -> Project:
        return self._project
    
    @property
    def draft(self) -> Invoice:
        return self._draft
    
    def select_term(self, term_id: str) -> Invoice:
        """Bill a payment term. Unknown term ids leave the draft unchanged."""
        term = find_term(self._project.quote, term_id)
        if term is not None:
            self._draft = select_term(self._draft, term, self._project.quote)
        return self._draft
    
    def add_reimbursable(self, description: Optional[str] = None) -> Invoice:
        self._draft = add_reimbursable(self._draft, description)
        return self._draft
    
    def update_item(self, index: int, **fields: Any) -> Invoice:
        self._draft = update_draft_item(self._draft, index, **fields)
        return self._draft
    
    def remove_item(self, index: int) -> Invoice:
        self._draft = remove_draft_item(self._draft, index)
        return self._draft
    
    def set_header(
        self,
        invoice_no: Optional[str] = None,
        date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Invoice:
        update = {
            key: value for key, value in
            (("invoice_no", invoice_no), ("date", date), ("notes", notes))
            if value is not None
        }
        self._draft = recalculate(self._draft.model_copy(update=update))
        return self._draft
    
    def commit(self, onto: Optional[Project] = None) -> Project:
        """
        Save the draft into the history and start a new one.

        `onto` is the current version of the project when it was written
        since this builder was opened; the invoice is appended to it and
        the builder follows that version from then on.
        """
        base = onto if onto is not None else self._project
        self._project, self._draft = commit(self._draft, base, self._prefix, self._today)
        return self._project
    
    @property
    def previous_billed(self) -> float:
        return previous_billed(self._project)
    
    @property
    def remaining_contract(self) -> float:
        return remaining_contract(self._project, self._draft)
    
    @property
    def contract_total(self) -> float:
        return contract_total(self._project.quote)
