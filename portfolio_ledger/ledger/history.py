"""Transaction history queries used by the history and asset screens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable

from portfolio_ledger.lib.numeric import safe_percent
from portfolio_ledger.ledger.models import BUY, QUANTITY_TOLERANCE, SELL, Transaction
from portfolio_ledger.ledger.normalizer import coerce_date, normalize_kind, normalize_ticker

PERIOD_WINDOWS = {
    "month": timedelta(days=30),
    "quarter": timedelta(days=90),
}


@dataclass
class TransactionTotals:
    total_bought: float
    total_sold: float
    realized_profit: float
    realized_profit_percent: float


@dataclass
class AssetStats:
    ticker: str
    name: str
    total_bought: float = 0.0
    quantity_held: float = 0.0
    average_price: float = 0.0
    total_invested: float = 0.0
    realized_profit: float = 0.0


def filter_by_type(transactions: Iterable[Transaction], kind: str) -> list[Transaction]:
    if kind == "all":
        return list(transactions)
    wanted = normalize_kind(kind)
    return [tx for tx in transactions if tx.kind == wanted]


def filter_by_period(
    transactions: Iterable[Transaction],
    period: str,
    now: datetime | None = None,
) -> list[Transaction]:
    """Keep transactions inside ``month``, ``quarter`` or ``year``; anything else keeps all.

    An aware ``now`` is converted to naive UTC to match normalized dates.
    """
    reference = coerce_date(now) if now is not None else datetime.now(timezone.utc).replace(tzinfo=None)
    if period == "year":
        try:
            start = reference.replace(year=reference.year - 1)
        except ValueError:
            # Feb 29th
            start = reference.replace(year=reference.year - 1, day=28)
    elif period in PERIOD_WINDOWS:
        start = reference - PERIOD_WINDOWS[period]
    else:
        return list(transactions)
    return [tx for tx in transactions if tx.date >= start]


def search_by_ticker(transactions: Iterable[Transaction], ticker: str) -> list[Transaction]:
    wanted = normalize_ticker(ticker)
    return [tx for tx in transactions if normalize_ticker(tx.ticker) == wanted]


def remove_transaction(transactions: Iterable[Transaction], transaction_id: str) -> list[Transaction]:
    return [tx for tx in transactions if tx.id != transaction_id]


def calculate_totals(transactions: Iterable[Transaction]) -> TransactionTotals:
    """Sum buys, sells and realized profit.

    Realized profit is read from ``Transaction.realized_profit``, so pass the
    annotated history of a :class:`LedgerProjection`.
    """
    total_bought = 0.0
    total_sold = 0.0
    realized = 0.0
    for tx in transactions:
        if tx.kind == BUY:
            total_bought += tx.total
        elif tx.kind == SELL:
            total_sold += tx.total
            realized += tx.realized_profit or 0.0
    return TransactionTotals(
        total_bought=total_bought,
        total_sold=total_sold,
        realized_profit=realized,
        realized_profit_percent=safe_percent(realized, total_bought),
    )


def stats_by_asset(transactions: Iterable[Transaction]) -> dict[str, AssetStats]:
    stats: dict[str, AssetStats] = {}
    for tx in transactions:
        ticker = normalize_ticker(tx.ticker)
        stat = stats.setdefault(ticker, AssetStats(ticker=ticker, name=tx.name))
        if tx.kind == BUY:
            stat.total_bought += tx.total
            stat.total_invested += tx.total
            stat.quantity_held += tx.quantity
        elif tx.kind == SELL:
            stat.total_invested = max(0.0, stat.total_invested - tx.quantity * stat.average_price)
            stat.quantity_held = max(0.0, stat.quantity_held - tx.quantity)
            stat.realized_profit += tx.realized_profit or 0.0
        if stat.quantity_held > QUANTITY_TOLERANCE:
            stat.average_price = stat.total_invested / stat.quantity_held
        else:
            stat.average_price = 0.0
            stat.total_invested = 0.0
            stat.quantity_held = 0.0
    return stats
