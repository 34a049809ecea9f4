"""Transaction validation run ahead of projection."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from portfolio_ledger.ledger.models import BUY, QUANTITY_TOLERANCE, SELL, Transaction, ValidationIssue
from portfolio_ledger.ledger.normalizer import normalize_transactions

TICKER_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9.\-^=]{0,19}$")


def validate_transactions(transactions: Iterable[Transaction | Mapping[str, Any]]) -> list[ValidationIssue]:
    """Check a ledger in chronological order.

    Rows are 1-based positions in the replay order. Over-sells are detected by
    tracking the running quantity per ticker.
    """
    issues: list[ValidationIssue] = []
    held: dict[str, float] = {}

    for row, tx in enumerate(normalize_transactions(transactions), start=1):
        if not TICKER_PATTERN.match(tx.ticker):
            issues.append(
                ValidationIssue(
                    field="ticker",
                    row=row,
                    code="invalid_ticker",
                    message=f"Invalid ticker: {tx.ticker!r}",
                    ticker=tx.ticker or None,
                )
            )

        if tx.kind not in {BUY, SELL}:
            issues.append(
                ValidationIssue(
                    field="kind",
                    row=row,
                    code="invalid_kind",
                    message=f"Transaction kind must be Buy or Sell, received {tx.kind!r}.",
                    ticker=tx.ticker,
                )
            )
            continue

        if tx.quantity <= 0:
            issues.append(
                ValidationIssue(
                    field="quantity",
                    row=row,
                    code="invalid_quantity",
                    message="Quantity must be a positive number.",
                    ticker=tx.ticker,
                )
            )
        if tx.unit_price <= 0:
            issues.append(
                ValidationIssue(
                    field="unit_price",
                    row=row,
                    code="invalid_unit_price",
                    message="Unit price must be a positive number.",
                    ticker=tx.ticker,
                )
            )

        quantity = max(0.0, tx.quantity)
        current = held.get(tx.ticker, 0.0)
        if tx.kind == BUY:
            held[tx.ticker] = current + quantity
            continue

        if quantity - current > QUANTITY_TOLERANCE:
            issues.append(
                ValidationIssue(
                    field="quantity",
                    row=row,
                    code="oversell",
                    message=f"Sell of {quantity:g} {tx.ticker} exceeds the {current:g} held.",
                    ticker=tx.ticker,
                )
            )
        held[tx.ticker] = max(0.0, current - quantity)

    return issues
