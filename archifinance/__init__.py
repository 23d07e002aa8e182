"""
ArchiFinance - Source Package

The financial document and ledger engine behind an architecture firm's
project bookkeeping: quotes, progressive invoices, project costs, the
firm-wide general fund, and roll-up reports.

DESIGN PRINCIPLES:
1. Computations are pure functions of the records they are given
2. Records are replaced whole, never patched in place
3. Missing references degrade to a documented fallback
4. Every write path marks the dataset as unexported
"""

__version__ = "1.3.0"
__author__ = "ArchiFinance Team"
