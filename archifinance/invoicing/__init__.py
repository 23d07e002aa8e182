"""Invoice drafting and history."""

from archifinance.invoicing.builder import (
    InvoiceBuilder,
    add_reimbursable,
    commit,
    edit_saved_invoice,
    new_draft,
    previous_billed,
    recalculate,
    remaining_contract,
    remove_draft_item,
    resolve_bank_account,
    select_term,
    suggest_invoice_number,
    update_draft_item,
)

__all__ = [
    "InvoiceBuilder",
    "add_reimbursable",
    "commit",
    "edit_saved_invoice",
    "new_draft",
    "previous_billed",
    "recalculate",
    "remaining_contract",
    "remove_draft_item",
    "resolve_bank_account",
    "select_term",
    "suggest_invoice_number",
    "update_draft_item",
]
