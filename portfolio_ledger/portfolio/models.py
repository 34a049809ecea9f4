"""Typed valuation and analytics models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from portfolio_ledger.ledger.models import Holding

Priority = Literal["high", "medium", "low"]
AssetRating = Literal["STRONG BUY", "BUY", "HOLD", "WATCH", "SELL"]


@dataclass(frozen=True)
class Quote:
    price: float
    previous_close: float | None = None
    change: float | None = None
    change_percent: float | None = None
    is_mock: bool = False


@dataclass(frozen=True)
class ValuedHolding:
    holding: Holding
    current_price_local: float
    invested: float
    current: float
    profit: float
    profit_percent: float
    daily_change_percent: float = 0.0
    daily_change: float = 0.0
    daily_change_local: float = 0.0
    is_mock: bool = False

    @property
    def ticker(self) -> str:
        return self.holding.ticker

    @property
    def name(self) -> str:
        return self.holding.name

    @property
    def quantity(self) -> float:
        return self.holding.quantity

    @property
    def average_cost(self) -> float:
        return self.holding.average_cost

    @property
    def asset_type(self) -> str:
        return self.holding.asset_type

    @property
    def sector(self) -> str:
        return self.holding.sector

    @property
    def country(self) -> str:
        return self.holding.country

    @property
    def currency(self) -> str:
        return self.holding.currency


@dataclass
class AllocationSlice:
    key: str
    value: float
    percent: float
    holdings: int


@dataclass
class SectorSlice(AllocationSlice):
    tickers: list[str] = field(default_factory=list)


@dataclass
class PortfolioStats:
    total_invested: float = 0.0
    total_current: float = 0.0
    profit: float = 0.0
    profit_percent: float = 0.0
    diversification_count: int = 0
    total_monthly_dividends: float = 0.0
    stocks_percent: float = 0.0
    crypto_percent: float = 0.0
    invested_usd: float = 0.0
    daily_profit_local: float = 0.0
    category_allocation: list[AllocationSlice] = field(default_factory=list)
    sector_distribution: list[SectorSlice] = field(default_factory=list)
    count_by_type: dict[str, int] = field(default_factory=dict)
    count_by_country: dict[str, int] = field(default_factory=dict)
    average_performance: float = 0.0
    low_yield_count: int = 0
    holdings_count: int = 0


@dataclass
class PerformanceRanking:
    top: list[ValuedHolding]
    bottom: list[ValuedHolding]


@dataclass
class FilteredStats:
    count: int
    invested: float
    current: float
    profit: float
    profit_percent: float


@dataclass(frozen=True)
class Recommendation:
    icon: str
    title: str
    description: str
    priority: Priority


@dataclass(frozen=True)
class Fundamentals:
    """Valuation multiples for one asset; percentages are in percent units."""

    price_to_earnings: float | None = None
    price_to_book: float | None = None
    return_on_equity: float | None = None
    dividend_yield: float | None = None
    net_margin: float | None = None
    vacancy: float | None = None


@dataclass(frozen=True)
class AnalysisPoint:
    label: str
    value: str
    reason: str


@dataclass
class AssetAnalysis:
    ticker: str
    score: int = 0
    rating: AssetRating | None = None
    strengths: list[AnalysisPoint] = field(default_factory=list)
    weaknesses: list[AnalysisPoint] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)
    performance_percent: float | None = None
