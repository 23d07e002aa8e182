"""
Quote Validation Signals

DESIGN DECISION: Payment-term percentages are never required to sum to
100, and the validator never normalizes them. A mismatch is surfaced as a
warning for the editor to colour, and the quote saves as it is.

Signals raised:
- terms_not_100     (warning) percentages do not add up to 100
- out_of_range      (warning) a percentage outside 0-100
- empty_quote       (info)    no priced items at all
- custom_total      (info)    the contract total is overridden
- rounding_residue  (info)    term amounts do not add up to the contract total
"""

from archifinance.calculations.quote import (
    base_sum,
    contract_total,
    term_amounts,
    terms_percentage_sum,
)
from archifinance.models.project import QuoteData
from archifinance.models.validation import ValidationIssue, ValidationResult


PERCENT_TOLERANCE = 1e-9


class QuoteValidator:
    """Collects advisory signals for a quote."""
    
    def validate(self, quote: QuoteData) -> ValidationResult:
        issues: list[ValidationIssue] = []
        issues.extend(self._check_terms(quote))
        issues.extend(self._check_totals(quote))
        return ValidationResult(issues=issues)
    
    def _check_terms(self, quote: QuoteData) -> list[ValidationIssue]:
        issues = []
        if not quote.payment_terms:
            return issues
        
        total = terms_percentage_sum(quote)
        if abs(total - 100) > PERCENT_TOLERANCE:
            issues.append(ValidationIssue(
                field="paymentTerms",
                issue_type="terms_not_100",
                message=f"Payment terms add up to {total:g}%, not 100%",
                severity="warning",
            ))
        
        for term in quote.payment_terms:
            if term.percentage < 0 or term.percentage > 100:
                issues.append(ValidationIssue(
                    field=f"paymentTerms.{term.id}",
                    issue_type="out_of_range",
                    message=f"'{term.description}' is {term.percentage:g}%, outside 0-100%",
                    severity="warning",
                ))
        return issues
    
    def _check_totals(self, quote: QuoteData) -> list[ValidationIssue]:
        issues = []
        items = [item for category in quote.categories for item in category.items]
        if not items:
            issues.append(ValidationIssue(
                field="categories",
                issue_type="empty_quote",
                message="The quote has no priced items",
                severity="info",
            ))
        
        if quote.custom_real_total is not None and quote.custom_real_total != base_sum(quote):
            issues.append(ValidationIssue(
                field="customRealTotal",
                issue_type="custom_total",
                message=(
                    f"Contract total is set to {quote.custom_real_total:,.0f}; "
                    f"items add up to {base_sum(quote):,.0f}"
                ),
                severity="info",
            ))
        
        amounts = term_amounts(quote)
        if amounts and abs(terms_percentage_sum(quote) - 100) <= PERCENT_TOLERANCE:
            residue = contract_total(quote) - sum(amount for _, amount in amounts)
            if residue != 0:
                issues.append(ValidationIssue(
                    field="paymentTerms",
                    issue_type="rounding_residue",
                    message=f"Term amounts differ from the contract total by {residue:g}",
                    severity="info",
                ))
        return issues
