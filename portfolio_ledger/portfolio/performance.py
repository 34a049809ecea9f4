"""Performance ranking, filtering and filtered totals over valued holdings."""

from __future__ import annotations

from typing import Iterable, Literal

import numpy as np

from portfolio_ledger.lib.numeric import safe_percent
from portfolio_ledger.ledger.normalizer import normalize_asset_type
from portfolio_ledger.portfolio.models import FilteredStats, PerformanceRanking, ValuedHolding

SortKey = Literal["profit", "name", "value"]
ALL_SEGMENT = "all"


def is_rankable(holding: ValuedHolding) -> bool:
    return holding.invested > 0 and holding.average_cost > 0


def rank(valued: Iterable[ValuedHolding], limit: int = 3) -> PerformanceRanking:
    """Best and worst holdings by profit percent; bottom is worst first."""
    eligible = [holding for holding in valued if is_rankable(holding)]
    ordered = sorted(eligible, key=lambda holding: holding.profit_percent, reverse=True)
    if limit <= 0:
        return PerformanceRanking(top=[], bottom=[])
    return PerformanceRanking(top=ordered[:limit], bottom=list(reversed(ordered[-limit:])))


def average_performance(valued: Iterable[ValuedHolding]) -> float:
    returns = [holding.profit_percent for holding in valued if is_rankable(holding)]
    if not returns:
        return 0.0
    return float(np.mean(returns))


def rank_by_segment(valued: Iterable[ValuedHolding], limit: int = 3) -> dict[str, PerformanceRanking]:
    """Rankings for the whole portfolio (``"all"``) and for each asset type present."""
    items = list(valued)
    segments: dict[str, PerformanceRanking] = {}
    overall = rank(items, limit=limit)
    if overall.top:
        segments[ALL_SEGMENT] = overall
    for asset_type in dict.fromkeys(holding.asset_type for holding in items):
        ranking = rank([holding for holding in items if holding.asset_type == asset_type], limit=limit)
        if ranking.top:
            segments[asset_type] = ranking
    return segments


def filter_holdings(
    valued: Iterable[ValuedHolding],
    country: str | None = None,
    asset_type: str | None = None,
    query: str | None = None,
) -> list[ValuedHolding]:
    """Filter by exact country, asset type and a case-insensitive ticker/name search."""
    filtered = list(valued)
    if country and country != "all":
        filtered = [holding for holding in filtered if holding.country == country]
    if asset_type and asset_type != "all":
        wanted = normalize_asset_type(asset_type)
        filtered = [holding for holding in filtered if holding.asset_type == wanted]
    needle = (query or "").strip().lower()
    if needle:
        filtered = [
            holding
            for holding in filtered
            if needle in holding.ticker.lower() or needle in (holding.name or "").lower()
        ]
    return filtered


def sort_holdings(valued: Iterable[ValuedHolding], by: SortKey = "profit") -> list[ValuedHolding]:
    items = list(valued)
    if by == "profit":
        return sorted(items, key=lambda holding: holding.profit_percent, reverse=True)
    if by == "name":
        return sorted(items, key=lambda holding: holding.ticker)
    if by == "value":
        return sorted(items, key=lambda holding: holding.current, reverse=True)
    return items


def filtered_stats(valued: Iterable[ValuedHolding]) -> FilteredStats:
    items = list(valued)
    invested = sum(holding.invested for holding in items)
    current = sum(holding.current for holding in items)
    profit = current - invested
    return FilteredStats(
        count=len(items),
        invested=invested,
        current=current,
        profit=profit,
        profit_percent=safe_percent(profit, invested),
    )
