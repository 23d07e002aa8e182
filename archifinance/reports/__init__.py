"""Company-wide reporting."""

from archifinance.reports.rollup import (
    CostShare,
    MonthlyRevenue,
    RollupReport,
    build_rollup,
    cost_shares,
    gross_profit,
    monthly_revenue_series,
    net_profit,
    profit_margin,
)

__all__ = [
    "CostShare",
    "MonthlyRevenue",
    "RollupReport",
    "build_rollup",
    "cost_shares",
    "gross_profit",
    "monthly_revenue_series",
    "net_profit",
    "profit_margin",
]
