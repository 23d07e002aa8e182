"""
Cost & Ledger Aggregator

Sums project costs and firm-level general transactions into balances and
category distributions. Everything here is a pure function of the records
passed in; nothing is cached between calls.
"""

from enum import Enum
from typing import Iterable, Optional, Protocol

from pydantic import BaseModel, Field

from archifinance.calculations.quote import contract_total
from archifinance.ledger.categories import UNMAPPED_BUCKET, CategoryTable
from archifinance.models.ledger import GeneralTransaction, TransactionType
from archifinance.models.project import Project


class CategorizedRow(Protocol):
    category: str
    amount: float


class ProjectFinancials(BaseModel):
    """Money figures for one project."""
    
    project_id: str
    contract: float = Field(..., description="Contract total (override or base sum)")
    revenue: float = Field(..., description="Billed service plus reimbursable amounts")
    cost: float = Field(..., description="Direct project costs")
    profit: float
    progress: float = Field(
        ...,
        ge=0,
        le=100,
        description="Billed share of the contract in percent, capped at 100"
    )


class FirmLedgerSummary(BaseModel):
    """General fund balance next to the consolidated project costs."""
    
    income: float
    expense: float
    balance: float
    total_project_cost: float


class LedgerView(str, Enum):
    ALL = "all"
    GENERAL = "general"
    PROJECT = "project"


class LedgerEntry(BaseModel):
    """One row of the combined general fund / project cost list."""
    
    id: str
    date: str
    kind: str = Field(..., pattern="^(general|project)$")
    type: TransactionType
    category: str
    category_name: str
    description: str
    amount: float
    project_id: Optional[str] = None
    project_name: Optional[str] = None


# =============================================================================
# PER PROJECT
# =============================================================================

def total_cost(project: Project) -> float:
    return sum(cost.amount for cost in project.costs)


def project_revenue(project: Project) -> float:
    """Service plus reimbursable totals over saved invoices."""
    return sum(inv.total_service + inv.total_expense for inv in project.invoices)


def project_financials(project: Project) -> ProjectFinancials:
    contract = contract_total(project.quote)
    revenue = project_revenue(project)
    cost = total_cost(project)
    progress = (revenue / contract) * 100 if contract > 0 else 0.0
    return ProjectFinancials(
        project_id=project.id,
        contract=contract,
        revenue=revenue,
        cost=cost,
        profit=revenue - cost,
        progress=min(max(progress, 0.0), 100.0),
    )


# =============================================================================
# FIRM WIDE
# =============================================================================

def sum_by_type(transactions: Iterable[GeneralTransaction], transaction_type: TransactionType) -> float:
    return sum(t.amount for t in transactions if t.type == transaction_type)


def total_project_cost(projects: Iterable[Project]) -> float:
    return sum(total_cost(p) for p in projects)


def firm_ledger_summary(
    transactions: list[GeneralTransaction],
    projects: list[Project],
) -> FirmLedgerSummary:
    income = sum_by_type(transactions, TransactionType.INCOME)
    expense = sum_by_type(transactions, TransactionType.EXPENSE)
    return FirmLedgerSummary(
        income=income,
        expense=expense,
        balance=income - expense,
        total_project_cost=total_project_cost(projects),
    )


def category_distribution(rows: Iterable[CategorizedRow], table: CategoryTable) -> dict[str, float]:
    """
    Amounts grouped by category.
    
    Every category in the table appears (0 when unused), in table order.
    Rows with unknown ids are summed under the unmapped bucket, which only
    appears when such rows exist.
    """
    totals = {category_id: 0.0 for category_id in table.ids}
    for row in rows:
        key = table.bucket(row.category)
        totals[key] = totals.get(key, 0.0) + row.amount
    return totals


def cost_distribution(projects: Iterable[Project]) -> dict[str, float]:
    """Project costs across every project, grouped by cost category."""
    rows = (cost for project in projects for cost in project.costs)
    return category_distribution(rows, CategoryTable.for_costs())


def unified_ledger(
    projects: list[Project],
    transactions: list[GeneralTransaction],
    table: CategoryTable,
    view: LedgerView = LedgerView.ALL,
) -> list[LedgerEntry]:
    """
    General fund rows and project costs in one list, newest first.
    
    Project costs are always expenses. Category names resolve through the
    given table with the raw id as fallback.
    """
    entries: list[LedgerEntry] = []
    
    if view in (LedgerView.ALL, LedgerView.GENERAL):
        for t in transactions:
            entries.append(LedgerEntry(
                id=t.id,
                date=t.date,
                kind="general",
                type=t.type,
                category=t.category,
                category_name=table.display_name(t.category),
                description=t.description,
                amount=t.amount,
            ))
    
    if view in (LedgerView.ALL, LedgerView.PROJECT):
        for project in projects:
            for cost in project.costs:
                entries.append(LedgerEntry(
                    id=cost.id,
                    date=cost.date,
                    kind="project",
                    type=TransactionType.EXPENSE,
                    category=cost.category,
                    category_name=table.display_name(cost.category),
                    description=cost.description,
                    amount=cost.amount,
                    project_id=project.id,
                    project_name=project.name,
                ))
    
    # ISO dates sort chronologically as strings; stable for equal dates
    return sorted(entries, key=lambda e: e.date, reverse=True)
