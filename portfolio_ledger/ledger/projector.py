"""Weighted-average-cost projection of a transaction ledger into holdings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from portfolio_ledger.ledger.models import BUY, EQUITY, QUANTITY_TOLERANCE, SELL, Holding, Transaction
from portfolio_ledger.ledger.normalizer import normalize_transactions

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerProjection:
    holdings: dict[str, Holding]
    closed: dict[str, Holding] = field(default_factory=dict)
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def realized_profit(self) -> float:
        return sum(tx.realized_profit or 0.0 for tx in self.transactions)


def _seed_holding(tx: Transaction) -> Holding:
    return Holding(
        ticker=tx.ticker,
        current_price=tx.unit_price,
        name=tx.name,
        asset_type=tx.asset_type or EQUITY,
        sector=tx.sector,
        country=tx.country,
        currency=tx.currency,
    )


def apply_buy(holding: Holding, quantity: float, unit_price: float) -> Holding:
    quantity = max(0.0, quantity)
    unit_price = max(0.0, unit_price)
    total_invested = holding.total_invested + quantity * unit_price
    new_quantity = holding.quantity + quantity
    average_cost = total_invested / new_quantity if new_quantity > 0 else 0.0
    return replace(holding, quantity=new_quantity, total_invested=total_invested, average_cost=average_cost)


def apply_sell(holding: Holding, quantity: float, unit_price: float) -> tuple[Holding, float]:
    """Remove ``quantity`` at the current average cost.

    Returns the updated holding and the profit realized by the sale. Selling
    more than is held closes the position; only held units realize profit.
    """
    quantity = max(0.0, quantity)
    sold = min(quantity, holding.quantity)
    realized = sold * (unit_price - holding.average_cost)

    cost_of_sold = quantity * holding.average_cost
    total_invested = max(0.0, holding.total_invested - cost_of_sold)
    remaining = holding.quantity - quantity
    if remaining <= QUANTITY_TOLERANCE:
        if remaining < -QUANTITY_TOLERANCE:
            LOGGER.debug("oversell clamped: ticker=%s held=%s sold=%s", holding.ticker, holding.quantity, quantity)
        return replace(holding, quantity=0.0, average_cost=0.0, total_invested=0.0), realized
    return replace(holding, quantity=remaining, total_invested=total_invested), realized


def project_ledger(
    transactions: Iterable[Transaction | Mapping[str, Any]],
    default_asset_type: str = EQUITY,
) -> LedgerProjection:
    """Fold the ledger into holdings, keeping closed positions and annotated history."""
    book: dict[str, Holding] = {}
    history: list[Transaction] = []

    for tx in normalize_transactions(transactions, default_asset_type=default_asset_type):
        holding = book.get(tx.ticker) or _seed_holding(tx)
        if tx.kind == BUY:
            holding = apply_buy(holding, tx.quantity, tx.unit_price)
        elif tx.kind == SELL:
            holding, realized = apply_sell(holding, tx.quantity, tx.unit_price)
            tx = replace(tx, realized_profit=realized)
        book[tx.ticker] = holding
        history.append(tx)

    return LedgerProjection(
        holdings={ticker: holding for ticker, holding in book.items() if holding.quantity > 0},
        closed={ticker: holding for ticker, holding in book.items() if holding.quantity <= 0},
        transactions=history,
    )


def project(
    transactions: Iterable[Transaction | Mapping[str, Any]],
    default_asset_type: str = EQUITY,
) -> dict[str, Holding]:
    """Return the live portfolio: holdings whose quantity is above zero."""
    return project_ledger(transactions, default_asset_type=default_asset_type).holdings
