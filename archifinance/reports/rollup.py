"""
Rollup Reporter

Aggregates every project and the general fund into the consolidated income
statement, a monthly revenue series and the project cost histogram.

Profit layers:
    gross profit = revenue - project costs        (project economics)
    net profit   = gross - overhead + other income (company bottom line)
"""

from typing import Optional

from pydantic import BaseModel, Field

from archifinance.calculations.quote import contract_total
from archifinance.config import get_settings
from archifinance.ledger.aggregator import (
    cost_distribution,
    project_revenue,
    sum_by_type,
    total_project_cost,
)
from archifinance.ledger.categories import COST_CATEGORY_NAMES, UNMAPPED_BUCKET
from archifinance.models.ledger import GeneralTransaction, TransactionType
from archifinance.models.project import CostCategory, Project


class MonthlyRevenue(BaseModel):
    month: str = Field(..., description="YYYY-MM bucket key")
    amount: float


class CostShare(BaseModel):
    category: CostCategory
    label: str
    amount: float
    percentage: float = Field(
        ...,
        description="Share of total project cost in percent (0 when there are no costs)"
    )


class RollupReport(BaseModel):
    """Company-wide figures for the reports view."""
    
    total_contract: float
    total_revenue: float
    total_project_cost: float
    total_overhead: float = Field(..., description="General fund expenses")
    other_income: float = Field(..., description="General fund income")
    gross_profit: float
    net_profit: float
    profit_margin: float = Field(..., description="Net profit over revenue in percent")
    monthly_revenue: list[MonthlyRevenue] = Field(default_factory=list)
    cost_distribution: list[CostShare] = Field(default_factory=list)
    unmapped_cost: float = Field(
        default=0.0,
        description="Costs whose category is outside the fixed five"
    )
    
    @property
    def peak_month_amount(self) -> float:
        """Largest monthly bucket, at least 1 so chart scaling never divides by 0."""
        return max([m.amount for m in self.monthly_revenue] + [1.0])


def gross_profit(total_revenue: float, project_cost: float) -> float:
    return total_revenue - project_cost


def net_profit(gross: float, overhead: float, other_income: float) -> float:
    return gross - overhead + other_income


def profit_margin(net: float, total_revenue: float) -> float:
    """Net margin in percent; 0 when nothing has been billed."""
    if total_revenue == 0:
        return 0.0
    return net / total_revenue * 100


def monthly_revenue_series(projects: list[Project], months: Optional[int] = None) -> list[MonthlyRevenue]:
    """
    Saved invoice totals bucketed by the YYYY-MM prefix of their date.
    
    Keys sort lexicographically, which is chronological for this format.
    Only the last `months` buckets that have any invoices are kept.
    """
    months = months if months is not None else get_settings().app.revenue_series_months
    buckets: dict[str, float] = {}
    for project in projects:
        for invoice in project.invoices:
            key = (invoice.date or "")[:7]
            buckets[key] = buckets.get(key, 0.0) + invoice.total_service + invoice.total_expense
    
    keys = sorted(buckets)[-months:] if months > 0 else []
    return [MonthlyRevenue(month=key, amount=buckets[key]) for key in keys]


def cost_shares(projects: list[Project]) -> tuple[list[CostShare], float]:
    """
    The fixed five-category cost histogram plus the unmapped remainder.
    
    Percentages are shares of all project costs, unmapped included.
    """
    totals = cost_distribution(projects)
    unmapped = totals.get(UNMAPPED_BUCKET, 0.0)
    overall = sum(totals.values())
    shares = [
        CostShare(
            category=category,
            label=COST_CATEGORY_NAMES[category],
            amount=totals[category.value],
            percentage=(totals[category.value] / overall * 100) if overall > 0 else 0.0,
        )
        for category in CostCategory
    ]
    return shares, unmapped


def build_rollup(
    projects: list[Project],
    transactions: list[GeneralTransaction],
    months: Optional[int] = None,
) -> RollupReport:
    """Compute the full report. An empty dataset yields all zeros."""
    total_contract = sum(contract_total(p.quote) for p in projects)
    total_revenue = sum(project_revenue(p) for p in projects)
    project_cost = total_project_cost(projects)
    overhead = sum_by_type(transactions, TransactionType.EXPENSE)
    other_income = sum_by_type(transactions, TransactionType.INCOME)
    
    gross = gross_profit(total_revenue, project_cost)
    net = net_profit(gross, overhead, other_income)
    shares, unmapped = cost_shares(projects)
    
    return RollupReport(
        total_contract=total_contract,
        total_revenue=total_revenue,
        total_project_cost=project_cost,
        total_overhead=overhead,
        other_income=other_income,
        gross_profit=gross,
        net_profit=net,
        profit_margin=profit_margin(net, total_revenue),
        monthly_revenue=monthly_revenue_series(projects, months),
        cost_distribution=shares,
        unmapped_cost=unmapped,
    )
