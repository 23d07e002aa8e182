"""Project cost and general fund aggregation."""

from archifinance.ledger.aggregator import (
    FirmLedgerSummary,
    LedgerEntry,
    LedgerView,
    ProjectFinancials,
    category_distribution,
    cost_distribution,
    firm_ledger_summary,
    project_financials,
    project_revenue,
    total_cost,
    total_project_cost,
    unified_ledger,
)
from archifinance.ledger.categories import (
    COST_CATEGORY_NAMES,
    UNMAPPED_BUCKET,
    CategoryTable,
)

__all__ = [
    "COST_CATEGORY_NAMES",
    "UNMAPPED_BUCKET",
    "CategoryTable",
    "FirmLedgerSummary",
    "LedgerEntry",
    "LedgerView",
    "ProjectFinancials",
    "category_distribution",
    "cost_distribution",
    "firm_ledger_summary",
    "project_financials",
    "project_revenue",
    "total_cost",
    "total_project_cost",
    "unified_ledger",
]
