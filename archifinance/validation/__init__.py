"""Advisory validation."""

from archifinance.validation.validator import QuoteValidator

__all__ = ["QuoteValidator"]
