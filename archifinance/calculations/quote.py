"""
Quote Calculator

Derives the contract total and per-term billing amounts from a quote, and
provides the pure edits the quote editor performs (add, update, remove,
reorder). Every edit returns a new QuoteData; the input is never touched.

The contract total computed here is the single source of truth used by
invoices, progress figures and reports.
"""

from typing import Any, Optional

from archifinance.calculations.money import round_half_up
from archifinance.models.base import coerce_amount
from archifinance.models.project import (
    PaymentTerm,
    QuoteCategory,
    QuoteData,
    QuoteItem,
)


# =============================================================================
# DERIVED FIGURES
# =============================================================================

def base_sum(quote: QuoteData) -> float:
    """Sum of every item amount across all categories."""
    return sum(
        coerce_amount(item.amount)
        for category in quote.categories
        for item in category.items
    )


def contract_total(quote: QuoteData) -> float:
    """The custom override when set, otherwise the base sum."""
    if quote.custom_real_total is not None:
        return quote.custom_real_total
    return base_sum(quote)


def term_amount(quote: QuoteData, term: PaymentTerm) -> int:
    """
    Amount billed for a payment term, rounded to the currency unit.
    
    Rounding residue is not redistributed across terms, so the term
    amounts may not add up exactly to the contract total.
    """
    return round_half_up(contract_total(quote) * coerce_amount(term.percentage) / 100)


def term_amounts(quote: QuoteData) -> list[tuple[PaymentTerm, int]]:
    """Every payment term paired with its billing amount, in order."""
    return [(term, term_amount(quote, term)) for term in quote.payment_terms]


def terms_percentage_sum(quote: QuoteData) -> float:
    return sum(coerce_amount(term.percentage) for term in quote.payment_terms)


def find_term(quote: QuoteData, term_id: Optional[str]) -> Optional[PaymentTerm]:
    if term_id is None:
        return None
    return next((t for t in quote.payment_terms if t.id == term_id), None)


# =============================================================================
# LIST HELPERS
# =============================================================================

def _moved(items: list, from_index: int, to_index: int) -> list:
    """Splice one element out and back in at to_index."""
    result = list(items)
    if not 0 <= from_index < len(result):
        return result
    moved = result.pop(from_index)
    result.insert(max(0, min(to_index, len(result))), moved)
    return result


def _replace_category(quote: QuoteData, category_id: str, **update: Any) -> QuoteData:
    categories = [
        c.model_copy(update=update) if c.id == category_id else c
        for c in quote.categories
    ]
    return quote.model_copy(update={"categories": categories})


# =============================================================================
# CATEGORY EDITS
# =============================================================================

def add_category(quote: QuoteData, name: str = "新類別") -> QuoteData:
    return quote.model_copy(update={
        "categories": [*quote.categories, QuoteCategory(name=name)],
    })


def remove_category(quote: QuoteData, category_id: str) -> QuoteData:
    return quote.model_copy(update={
        "categories": [c for c in quote.categories if c.id != category_id],
    })


def rename_category(quote: QuoteData, category_id: str, name: str) -> QuoteData:
    return _replace_category(quote, category_id, name=name)


def move_category(quote: QuoteData, from_index: int, to_index: int) -> QuoteData:
    return quote.model_copy(update={
        "categories": _moved(quote.categories, from_index, to_index),
    })


# =============================================================================
# ITEM EDITS
# =============================================================================

def add_item(
    quote: QuoteData,
    category_id: str,
    description: str = "",
    amount: float = 0.0,
    note: Optional[str] = None,
) -> QuoteData:
    category = next((c for c in quote.categories if c.id == category_id), None)
    if category is None:
        return quote
    item = QuoteItem(description=description, amount=amount, note=note)
    return _replace_category(quote, category_id, items=[*category.items, item])


def update_item(quote: QuoteData, category_id: str, item_id: str, **fields: Any) -> QuoteData:
    """Replace fields of one item (description, amount, note)."""
    category = next((c for c in quote.categories if c.id == category_id), None)
    if category is None:
        return quote
    if "amount" in fields:
        fields["amount"] = coerce_amount(fields["amount"])
    items = [
        item.model_copy(update=fields) if item.id == item_id else item
        for item in category.items
    ]
    return _replace_category(quote, category_id, items=items)


def remove_item(quote: QuoteData, category_id: str, item_id: str) -> QuoteData:
    category = next((c for c in quote.categories if c.id == category_id), None)
    if category is None:
        return quote
    items = [item for item in category.items if item.id != item_id]
    return _replace_category(quote, category_id, items=items)


def move_item(
    quote: QuoteData,
    source_category_id: str,
    source_index: int,
    target_category_id: str,
    drop_index: int,
) -> QuoteData:
    """
    Move an item within a category or into another one.
    
    drop_index is the slot the item was dropped on, counted before the
    item is removed; moving down inside the same category therefore lands
    one slot earlier. Indexes past the end append.
    """
    categories = {c.id: list(c.items) for c in quote.categories}
    source = categories.get(source_category_id)
    target = categories.get(target_category_id)
    if source is None or target is None or not 0 <= source_index < len(source):
        return quote
    
    moved = source.pop(source_index)
    final_index = drop_index
    if source_category_id == target_category_id and source_index < drop_index:
        final_index -= 1
    if final_index >= len(target):
        target.append(moved)
    else:
        target.insert(max(0, final_index), moved)
    
    return quote.model_copy(update={
        "categories": [
            c.model_copy(update={"items": categories[c.id]})
            if c.id in (source_category_id, target_category_id) else c
            for c in quote.categories
        ],
    })


# =============================================================================
# PAYMENT TERM EDITS
# =============================================================================

def add_term(quote: QuoteData, description: str = "新付款階段", percentage: float = 10) -> QuoteData:
    term = PaymentTerm(description=description, percentage=percentage)
    return quote.model_copy(update={"payment_terms": [*quote.payment_terms, term]})


def update_term(quote: QuoteData, term_id: str, **fields: Any) -> QuoteData:
    """Replace fields of one term. Percentages are stored as given."""
    if "percentage" in fields:
        fields["percentage"] = coerce_amount(fields["percentage"])
    terms = [
        t.model_copy(update=fields) if t.id == term_id else t
        for t in quote.payment_terms
    ]
    return quote.model_copy(update={"payment_terms": terms})


def remove_term(quote: QuoteData, term_id: str) -> QuoteData:
    return quote.model_copy(update={
        "payment_terms": [t for t in quote.payment_terms if t.id != term_id],
    })


def move_term(quote: QuoteData, from_index: int, to_index: int) -> QuoteData:
    return quote.model_copy(update={
        "payment_terms": _moved(quote.payment_terms, from_index, to_index),
    })


# =============================================================================
# NOTES, OVERRIDES, BANK ACCOUNT
# =============================================================================

def add_note(quote: QuoteData, text: str = "") -> QuoteData:
    return quote.model_copy(update={"notes": [*quote.notes, text]})


def update_note(quote: QuoteData, index: int, text: str) -> QuoteData:
    notes = list(quote.notes)
    if 0 <= index < len(notes):
        notes[index] = text
    return quote.model_copy(update={"notes": notes})


def remove_note(quote: QuoteData, index: int) -> QuoteData:
    notes = [n for i, n in enumerate(quote.notes) if i != index]
    return quote.model_copy(update={"notes": notes})


def move_note(quote: QuoteData, from_index: int, to_index: int) -> QuoteData:
    return quote.model_copy(update={"notes": _moved(quote.notes, from_index, to_index)})


def set_custom_total(quote: QuoteData, total: Optional[float]) -> QuoteData:
    """Set or clear (None) the contract total override."""
    value = None if total is None else coerce_amount(total)
    return quote.model_copy(update={"custom_real_total": value})


def select_bank_account(quote: QuoteData, account_id: str) -> QuoteData:
    return quote.model_copy(update={"bank_account": account_id})
