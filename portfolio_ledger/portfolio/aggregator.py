"""Portfolio-level totals and allocation analytics."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

import pandas as pd

from portfolio_ledger.lib.numeric import coerce_numeric, safe_percent
from portfolio_ledger.ledger.models import CRYPTO, ETF, FOREIGN_FUND, FOREIGN_STOCK, OTHER
from portfolio_ledger.ledger.normalizer import normalize_ticker
from portfolio_ledger.portfolio.models import AllocationSlice, PortfolioStats, SectorSlice, ValuedHolding
from portfolio_ledger.portfolio.performance import average_performance

USD = "USD"
FOREIGN_ASSET_TYPES = frozenset({FOREIGN_STOCK, FOREIGN_FUND, ETF})
CRYPTO_ASSET_TYPES = frozenset({CRYPTO})
_FRAME_COLUMNS = ["ticker", "asset_type", "sector", "current"]


def _bucket(label: str | None) -> str:
    text = str(label or "").strip()
    return text or OTHER


def _holdings_frame(valued: Iterable[ValuedHolding]) -> pd.DataFrame:
    rows = [
        {
            "ticker": holding.ticker,
            "asset_type": _bucket(holding.asset_type),
            "sector": _bucket(holding.sector),
            "current": coerce_numeric(holding.current),
        }
        for holding in valued
    ]
    return pd.DataFrame(rows, columns=_FRAME_COLUMNS)


def _allocation_records(frame: pd.DataFrame, key: str) -> list[dict]:
    if frame.empty:
        return []
    grouped = (
        frame.groupby(key, sort=False)
        .agg(value=("current", "sum"), holdings=("ticker", "size"), tickers=("ticker", list))
        .reset_index()
        .rename(columns={key: "key"})
    )
    total = float(grouped["value"].sum())
    grouped["percent"] = grouped["value"] / total * 100.0 if total > 0 else 0.0
    # mergesort keeps first-seen order among equal percentages
    grouped = grouped.sort_values("percent", ascending=False, kind="mergesort")
    return grouped.to_dict(orient="records")


def calculate_category_allocation(valued: Iterable[ValuedHolding]) -> list[AllocationSlice]:
    """Share of total current value per asset type, largest first."""
    return [
        AllocationSlice(
            key=str(row["key"]),
            value=float(row["value"]),
            percent=float(row["percent"]),
            holdings=int(row["holdings"]),
        )
        for row in _allocation_records(_holdings_frame(valued), "asset_type")
    ]


def calculate_sector_distribution(valued: Iterable[ValuedHolding]) -> list[SectorSlice]:
    """Share of total current value per sector, with member tickers."""
    return [
        SectorSlice(
            key=str(row["key"]),
            value=float(row["value"]),
            percent=float(row["percent"]),
            holdings=int(row["holdings"]),
            tickers=list(row["tickers"]),
        )
        for row in _allocation_records(_holdings_frame(valued), "sector")
    ]


def is_foreign_usd(holding: ValuedHolding) -> bool:
    return normalize_ticker(holding.currency) == USD and holding.asset_type in FOREIGN_ASSET_TYPES


def count_low_yield(valued: Iterable[ValuedHolding], threshold_percent: float = 5.0) -> int:
    count = 0
    for holding in valued:
        dividend_yield = coerce_numeric(holding.holding.dividend_yield)
        if 0 < dividend_yield < threshold_percent:
            count += 1
    return count


def aggregate(valued: Iterable[ValuedHolding], low_yield_percent: float = 5.0) -> PortfolioStats:
    items = list(valued)
    if not items:
        return PortfolioStats()

    total_invested = sum(coerce_numeric(holding.invested) for holding in items)
    total_current = sum(coerce_numeric(holding.current) for holding in items)
    profit = total_current - total_invested
    crypto_current = sum(
        coerce_numeric(holding.current) for holding in items if holding.asset_type in CRYPTO_ASSET_TYPES
    )
    foreign = [holding for holding in items if is_foreign_usd(holding)]

    return PortfolioStats(
        total_invested=total_invested,
        total_current=total_current,
        profit=profit,
        profit_percent=safe_percent(profit, total_invested),
        diversification_count=len({normalize_ticker(holding.ticker) for holding in items if holding.quantity > 0}),
        total_monthly_dividends=sum(coerce_numeric(holding.holding.monthly_dividends) for holding in items),
        stocks_percent=safe_percent(total_current - crypto_current, total_current),
        crypto_percent=safe_percent(crypto_current, total_current),
        invested_usd=sum(coerce_numeric(holding.invested) for holding in foreign),
        daily_profit_local=sum(
            coerce_numeric(holding.daily_change_local) * coerce_numeric(holding.quantity) for holding in foreign
        ),
        category_allocation=calculate_category_allocation(items),
        sector_distribution=calculate_sector_distribution(items),
        count_by_type=dict(Counter(_bucket(holding.asset_type) for holding in items)),
        count_by_country=dict(Counter(_bucket(holding.country) for holding in items)),
        average_performance=average_performance(items),
        low_yield_count=count_low_yield(items, low_yield_percent),
        holdings_count=len(items),
    )
