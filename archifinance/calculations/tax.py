"""
Tax Resolver

Applies one of the three tax-mode formulas to a gross service amount.

CRITICAL: Tax is always included in the gross figure. The resolver never
changes the gross amount; it only derives the informational tax line and
the net service amount actually due. Reimbursable expenses are outside
tax treatment and are added back at face value.
"""

from typing import Optional

from pydantic import BaseModel, Field

from archifinance.calculations.money import round_half_up
from archifinance.models.project import Invoice, TaxMode


VAT_RATE = 0.05
WITHHOLDING_RATE = 0.10


class TaxBreakdown(BaseModel):
    """The tax lines shown on a quote or invoice."""
    
    mode: TaxMode
    gross: float = Field(
        ...,
        description="Gross service amount, tax included"
    )
    tax_component: int = Field(
        ...,
        description="Displayed tax line (0 when the mode shows none)"
    )
    net_service_due: float = Field(
        ...,
        description="Service amount actually payable"
    )
    
    @property
    def shows_tax_line(self) -> bool:
        return self.mode != TaxMode.NONE
    
    @property
    def is_withheld(self) -> bool:
        """Withholding reduces what the client pays; VAT does not."""
        return self.mode == TaxMode.WHT10


def tax_component(gross: float, mode: TaxMode) -> int:
    if mode == TaxMode.VAT5:
        return round_half_up(gross - gross / (1 + VAT_RATE))
    if mode == TaxMode.WHT10:
        return round_half_up(gross * WITHHOLDING_RATE)
    return 0


def net_service_due(gross: float, mode: TaxMode) -> float:
    """
    Service amount payable after tax treatment.

    For withholding the net line is rounded on its own, after subtracting,
    so when gross * 10% ends in exactly .5 both lines round up and net + tax
    exceeds the gross by 1 (gross 15: tax 2, net 14).
    """
    if mode == TaxMode.WHT10:
        return round_half_up(gross - gross * WITHHOLDING_RATE)
    return gross


def resolve_tax(gross: float, mode: TaxMode) -> TaxBreakdown:
    return TaxBreakdown(
        mode=mode,
        gross=gross,
        tax_component=tax_component(gross, mode),
        net_service_due=net_service_due(gross, mode),
    )


def amount_due(total_service: float, total_expense: float, mode: TaxMode) -> float:
    """Reimbursable expenses plus the taxed service portion."""
    return total_expense + net_service_due(total_service, mode)


def invoice_amount_due(invoice: Invoice, mode: Optional[TaxMode]) -> float:
    return amount_due(invoice.total_service, invoice.total_expense, mode or TaxMode.NONE)
