"""Rule-based portfolio and per-asset recommendations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping

from portfolio_ledger.config.settings import Settings
from portfolio_ledger.lib.numeric import coerce_numeric, optional_numeric, safe_percent
from portfolio_ledger.ledger.models import EQUITY, FUND, Holding
from portfolio_ledger.portfolio.models import (
    AnalysisPoint,
    AssetAnalysis,
    AssetRating,
    Fundamentals,
    PortfolioStats,
    Recommendation,
)

LOGGER = logging.getLogger(__name__)

ALERT_PERFORMANCE_PERCENT = 20.0
RATING_BANDS: tuple[tuple[int, AssetRating], ...] = (
    (5, "STRONG BUY"),
    (3, "BUY"),
    (1, "HOLD"),
    (-1, "WATCH"),
)


@dataclass(frozen=True)
class AdvisorThresholds:
    concentration_percent: float = 70.0
    strong_performance_percent: float = 10.0
    weak_performance_percent: float = -5.0
    low_yield_percent: float = 5.0
    min_sector_count: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdvisorThresholds":
        return cls(
            concentration_percent=settings.concentration_threshold_percent,
            strong_performance_percent=settings.strong_performance_percent,
            weak_performance_percent=settings.weak_performance_percent,
            low_yield_percent=settings.low_yield_percent,
            min_sector_count=settings.min_sector_count,
        )


def recommend(stats: PortfolioStats, thresholds: AdvisorThresholds | None = None) -> list[Recommendation]:
    """Evaluate the rules in order; output order is evaluation order."""
    limits = thresholds or AdvisorThresholds()
    if stats.holdings_count == 0:
        return [
            Recommendation(
                icon="📊",
                title="Empty portfolio",
                description="Add assets to your portfolio to receive recommendations.",
                priority="low",
            )
        ]

    recs: list[Recommendation] = []

    if stats.category_allocation:
        largest = stats.category_allocation[0]
        if largest.percent > limits.concentration_percent:
            recs.append(
                Recommendation(
                    icon="⚠️",
                    title="Concentrated portfolio",
                    description=(
                        f"{largest.percent:.1f}% of the portfolio is in {largest.key}. Consider diversifying."
                    ),
                    priority="high",
                )
            )

    equities = stats.count_by_type.get(EQUITY, 0)
    funds = stats.count_by_type.get(FUND, 0)
    if equities > 0 and funds == 0:
        recs.append(
            Recommendation(
                icon="⚠️",
                title="Diversify with funds",
                description="Portfolio holds only equities. Consider adding funds for passive income.",
                priority="high",
            )
        )
    elif funds > 0 and equities == 0:
        recs.append(
            Recommendation(
                icon="⚠️",
                title="Diversify with equities",
                description="Portfolio holds only funds. Consider adding equities for growth.",
                priority="high",
            )
        )

    if stats.average_performance > limits.strong_performance_percent:
        recs.append(
            Recommendation(
                icon="🎯",
                title="Excellent performance",
                description=(
                    f"Average performance of {stats.average_performance:.2f}%. Keep the current strategy."
                ),
                priority="low",
            )
        )
    elif stats.average_performance < limits.weak_performance_percent:
        recs.append(
            Recommendation(
                icon="⚠️",
                title="Review portfolio",
                description="Negative performance. Analyse the worst performing assets.",
                priority="high",
            )
        )

    if 0 < stats.low_yield_count <= stats.holdings_count / 2:
        recs.append(
            Recommendation(
                icon="💰",
                title="Low-yield assets",
                description=(
                    f"{stats.low_yield_count} asset(s) yield below {limits.low_yield_percent:g}%. "
                    "Evaluate whether to keep them."
                ),
                priority="medium",
            )
        )

    sector_count = len(stats.sector_distribution)
    if sector_count < limits.min_sector_count and stats.holdings_count >= limits.min_sector_count:
        recs.append(
            Recommendation(
                icon="🌐",
                title="Diversify sectors",
                description=f"Portfolio concentrated in {sector_count} sector(s). Look for more diversification.",
                priority="medium",
            )
        )

    if not recs:
        recs.append(
            Recommendation(
                icon="✅",
                title="Healthy portfolio",
                description="Your portfolio is well structured. Keep monitoring.",
                priority="low",
            )
        )
    return recs


def fundamentals_from_record(record: Mapping[str, Any]) -> Fundamentals:
    """Build Fundamentals from a data-provider payload (long or short keys)."""

    def pick(*keys: str) -> float | None:
        for key in keys:
            if record.get(key) is not None:
                return optional_numeric(record[key])
        return None

    return Fundamentals(
        price_to_earnings=pick("price_to_earnings", "pe", "pl"),
        price_to_book=pick("price_to_book", "pb", "pvp"),
        return_on_equity=pick("return_on_equity", "roe"),
        dividend_yield=pick("dividend_yield", "dy"),
        net_margin=pick("net_margin", "margLiq"),
        vacancy=pick("vacancy", "vacancia"),
    )


def rating_for_score(score: int) -> AssetRating:
    for floor, rating in RATING_BANDS:
        if score >= floor:
            return rating
    return "SELL"


def _score_equity(analysis: AssetAnalysis, f: Fundamentals) -> None:
    pe = optional_numeric(f.price_to_earnings)
    if pe is not None:
        if pe < 6:
            analysis.score += 2
            analysis.strengths.append(AnalysisPoint("Attractive P/E", f"{pe:.2f}", "Shares may be undervalued"))
        elif pe > 15:
            analysis.score -= 1
            analysis.weaknesses.append(AnalysisPoint("High P/E", f"{pe:.2f}", "Possible overvaluation"))

    pb = optional_numeric(f.price_to_book)
    if pb is not None:
        if pb < 1:
            analysis.score += 2
            analysis.strengths.append(AnalysisPoint("P/B below 1", f"{pb:.2f}", "Trading below book value"))
        elif pb > 2:
            analysis.score -= 1
            analysis.weaknesses.append(AnalysisPoint("High P/B", f"{pb:.2f}", "Large premium over book value"))

    roe = optional_numeric(f.return_on_equity)
    if roe is not None:
        if roe > 20:
            analysis.score += 2
            analysis.strengths.append(AnalysisPoint("Excellent ROE", f"{roe:.1f}%", "High return on equity"))
        elif roe < 10:
            analysis.score -= 1
            analysis.weaknesses.append(AnalysisPoint("Low ROE", f"{roe:.1f}%", "Return on equity below average"))

    dy = optional_numeric(f.dividend_yield)
    if dy is not None and dy > 8:
        analysis.score += 1
        analysis.strengths.append(AnalysisPoint("Attractive yield", f"{dy:.1f}%", "Strong dividend payments"))

    margin = optional_numeric(f.net_margin)
    if margin is not None:
        if margin > 20:
            analysis.score += 1
            analysis.strengths.append(AnalysisPoint("Healthy margin", f"{margin:.1f}%", "Good operating efficiency"))
        elif margin < 10:
            analysis.score -= 1
            analysis.weaknesses.append(AnalysisPoint("Thin margin", f"{margin:.1f}%", "Limited operating efficiency"))


def _score_fund(analysis: AssetAnalysis, f: Fundamentals) -> None:
    dy = optional_numeric(f.dividend_yield)
    if dy is not None:
        if dy > 10:
            analysis.score += 2
            analysis.strengths.append(AnalysisPoint("Exceptional yield", f"{dy:.1f}%", "Very attractive income"))
        elif dy < 6:
            analysis.score -= 1
            analysis.weaknesses.append(AnalysisPoint("Low yield", f"{dy:.1f}%", "Income below the fund average"))

    pb = optional_numeric(f.price_to_book)
    if pb is not None:
        if pb < 0.95:
            analysis.score += 2
            analysis.strengths.append(AnalysisPoint("Discount to book", f"{pb:.2f}", "Trading at a discount"))
        elif pb > 1.1:
            analysis.score -= 1
            analysis.weaknesses.append(AnalysisPoint("Premium to book", f"{pb:.2f}", "Trading at a premium"))

    vacancy = optional_numeric(f.vacancy)
    if vacancy is not None:
        if vacancy < 5:
            analysis.score += 1
            analysis.strengths.append(AnalysisPoint("Low vacancy", f"{vacancy:.1f}%", "Properties highly occupied"))
        elif vacancy > 10:
            analysis.score -= 1
            analysis.weaknesses.append(AnalysisPoint("High vacancy", f"{vacancy:.1f}%", "Income may decline"))


def analyze_asset(
    holding: Holding,
    fundamentals: Fundamentals | Mapping[str, Any] | None = None,
    current_price: float | None = None,
) -> AssetAnalysis:
    """Score one holding from its fundamentals and price versus average cost.

    Equities and funds are scored from their fundamentals; other asset types
    only get price alerts and a neutral rating. An equity or fund with neither
    fundamentals nor a stored dividend yield gets no rating.
    ``current_price`` is in the holding's own currency and defaults to the
    stored price.
    """
    analysis = AssetAnalysis(ticker=holding.ticker)
    if isinstance(fundamentals, Mapping):
        fundamentals = fundamentals_from_record(fundamentals)
    if holding.dividend_yield is not None:
        if fundamentals is None:
            fundamentals = Fundamentals(dividend_yield=holding.dividend_yield)
        elif fundamentals.dividend_yield is None:
            fundamentals = replace(fundamentals, dividend_yield=holding.dividend_yield)

    scored = holding.asset_type in {EQUITY, FUND}
    if scored and fundamentals is None:
        LOGGER.debug("fundamentals missing, scoring skipped: ticker=%s", holding.ticker)
    elif holding.asset_type == EQUITY:
        _score_equity(analysis, fundamentals)
    elif holding.asset_type == FUND:
        _score_fund(analysis, fundamentals)

    price = coerce_numeric(holding.current_price if current_price is None else current_price)
    average_cost = coerce_numeric(holding.average_cost)
    if price > 0 and average_cost > 0:
        performance = safe_percent(price - average_cost, average_cost)
        analysis.performance_percent = performance
        if performance > ALERT_PERFORMANCE_PERCENT:
            analysis.alerts.append(f"Up {performance:.1f}%, consider taking profits")
        elif performance < -ALERT_PERFORMANCE_PERCENT:
            analysis.alerts.append(f"Down {abs(performance):.1f}%, revisit the investment thesis")

    if not (scored and fundamentals is None):
        analysis.rating = rating_for_score(analysis.score)
    return analysis
