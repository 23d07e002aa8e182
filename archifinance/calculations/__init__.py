"""Quote and tax calculations."""

from archifinance.calculations.money import round_half_up
from archifinance.calculations.quote import (
    base_sum,
    contract_total,
    find_term,
    term_amount,
    term_amounts,
    terms_percentage_sum,
)
from archifinance.calculations.tax import (
    TaxBreakdown,
    amount_due,
    invoice_amount_due,
    net_service_due,
    resolve_tax,
    tax_component,
)

__all__ = [
    "round_half_up",
    # Quote
    "base_sum",
    "contract_total",
    "find_term",
    "term_amount",
    "term_amounts",
    "terms_percentage_sum",
    # Tax
    "TaxBreakdown",
    "amount_due",
    "invoice_amount_due",
    "net_service_due",
    "resolve_tax",
    "tax_component",
]
