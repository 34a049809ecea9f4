"""Transaction ledger domain package."""

from portfolio_ledger.ledger.models import Holding, Transaction, ValidationIssue
from portfolio_ledger.ledger.normalizer import normalize_transactions
from portfolio_ledger.ledger.projector import LedgerProjection, project, project_ledger
from portfolio_ledger.ledger.validation import validate_transactions

__all__ = [
    "Holding",
    "LedgerProjection",
    "Transaction",
    "ValidationIssue",
    "normalize_transactions",
    "project",
    "project_ledger",
    "validate_transactions",
]
