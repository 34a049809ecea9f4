"""Portfolio analytics orchestration service."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict
from typing import Any, Iterable, Mapping, Union

from portfolio_ledger.config.settings import Settings, get_settings
from portfolio_ledger.lib.formatters import format_response, line_money, line_number, line_percent
from portfolio_ledger.lib.numeric import coerce_numeric
from portfolio_ledger.ledger.history import calculate_totals
from portfolio_ledger.ledger.models import Transaction, ValidationIssue
from portfolio_ledger.ledger.normalizer import normalize_ticker
from portfolio_ledger.ledger.projector import project_ledger
from portfolio_ledger.ledger.validation import validate_transactions
from portfolio_ledger.portfolio.advisor import AdvisorThresholds, analyze_asset, recommend
from portfolio_ledger.portfolio.aggregator import aggregate
from portfolio_ledger.portfolio.models import Fundamentals, PerformanceRanking, Quote, ValuedHolding
from portfolio_ledger.portfolio.performance import rank_by_segment
from portfolio_ledger.portfolio.valuation import (
    apply_income_data,
    has_usable_price,
    index_quotes,
    native_price,
    valuate_all,
)
from portfolio_ledger.runtime.monitoring import log_pipeline_event

LOGGER = logging.getLogger(__name__)

TransactionInput = Union[Transaction, Mapping[str, Any]]


def _json_validation_error(errors: list[dict[str, Any]]) -> dict[str, Any]:
    return {"ok": False, "error": {"type": "validation_error", "errors": errors}}


def _issue_payload(issue: ValidationIssue) -> dict[str, Any]:
    return {
        "field": issue.field,
        "message": issue.message,
        "row": issue.row,
        "code": issue.code,
        "ticker": issue.ticker,
    }


def _valued_payload(valued: ValuedHolding) -> dict[str, Any]:
    holding = valued.holding
    return {
        "ticker": holding.ticker,
        "name": holding.name,
        "asset_type": holding.asset_type,
        "sector": holding.sector,
        "country": holding.country,
        "currency": holding.currency,
        "quantity": holding.quantity,
        "average_cost": holding.average_cost,
        "total_invested": holding.total_invested,
        "current_price": holding.current_price,
        "current_price_local": valued.current_price_local,
        "invested": valued.invested,
        "current": valued.current,
        "profit": valued.profit,
        "profit_percent": valued.profit_percent,
        "daily_change_percent": valued.daily_change_percent,
        "is_mock": valued.is_mock,
    }


def _ranking_payload(ranking: PerformanceRanking) -> dict[str, list[dict[str, Any]]]:
    return {
        "top": [{"ticker": v.ticker, "profit_percent": v.profit_percent} for v in ranking.top],
        "bottom": [{"ticker": v.ticker, "profit_percent": v.profit_percent} for v in ranking.bottom],
    }


class PortfolioService:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def resolve_fx_rate(self, fx_rate: float | None) -> float:
        rate = coerce_numeric(fx_rate)
        if rate > 0:
            return rate
        LOGGER.info("fx rate unavailable: received=%r fallback=%s", fx_rate, self.settings.default_fx_rate)
        return self.settings.default_fx_rate

    def validate(self, transactions: Iterable[TransactionInput]) -> dict[str, Any]:
        records = list(transactions)
        issues = validate_transactions(records)
        if issues:
            return _json_validation_error([_issue_payload(issue) for issue in issues])
        return {"ok": True, "message": "Transactions validated.", "transactions": len(records)}

    def analyze(
        self,
        transactions: Iterable[TransactionInput],
        quotes: Mapping[str, Quote | Mapping[str, Any] | None] | None = None,
        fx_rate: float | None = None,
        monthly_dividends: Mapping[str, float] | None = None,
        dividend_yields: Mapping[str, float] | None = None,
        fundamentals: Mapping[str, Fundamentals | Mapping[str, Any]] | None = None,
    ) -> dict[str, Any]:
        started = time.perf_counter()
        records = list(transactions)

        warning = None
        issues = validate_transactions(records)
        if issues:
            if self.settings.reject_invalid_transactions:
                log_pipeline_event(
                    "analyze",
                    (time.perf_counter() - started) * 1000,
                    success=False,
                    transactions=len(records),
                    holdings=0,
                    warning=f"{len(issues)} validation issue(s)",
                )
                return _json_validation_error([_issue_payload(issue) for issue in issues])
            for issue in issues:
                LOGGER.warning(
                    "transaction issue ignored: code=%s row=%s ticker=%s message=%s",
                    issue.code,
                    issue.row,
                    issue.ticker,
                    issue.message,
                )
            warning = f"{len(issues)} transaction issue(s) were tolerated; figures may be inaccurate."

        projection = project_ledger(records, default_asset_type=self.settings.default_asset_type)
        holdings = apply_income_data(projection.holdings.values(), monthly_dividends, dividend_yields)
        rate = self.resolve_fx_rate(fx_rate)
        by_ticker = index_quotes(quotes)
        valued = valuate_all(holdings, by_ticker, rate)
        missing_quotes = sorted(
            holding.ticker for holding in holdings if not has_usable_price(by_ticker.get(holding.ticker))
        )
        if missing_quotes:
            LOGGER.info("quotes missing, using stored prices: tickers=%s", ",".join(missing_quotes))

        stats = aggregate(valued, low_yield_percent=self.settings.low_yield_percent)
        rankings = rank_by_segment(valued, limit=self.settings.performer_count)
        recommendations = recommend(stats, AdvisorThresholds.from_settings(self.settings))
        totals = calculate_totals(projection.transactions)
        asset_fundamentals = {normalize_ticker(key): value for key, value in (fundamentals or {}).items()}
        asset_analysis = [
            analyze_asset(
                holding,
                asset_fundamentals.get(holding.ticker),
                current_price=native_price(holding, by_ticker.get(holding.ticker)),
            )
            for holding in holdings
        ]

        log_pipeline_event(
            "analyze",
            (time.perf_counter() - started) * 1000,
            success=True,
            transactions=len(records),
            holdings=len(valued),
            warning=warning,
        )
        return {
            "ok": True,
            "warning": warning,
            "local_currency": self.settings.local_currency,
            "fx_rate": rate,
            "holdings": [_valued_payload(item) for item in valued],
            "closed_positions": sorted(projection.closed),
            "missing_quotes": missing_quotes,
            "stats": asdict(stats),
            "rankings": {segment: _ranking_payload(ranking) for segment, ranking in rankings.items()},
            "recommendations": [asdict(rec) for rec in recommendations],
            "transaction_totals": asdict(totals),
            "asset_analysis": [asdict(item) for item in asset_analysis],
        }

    def summary_text(self, payload: Mapping[str, Any]) -> str:
        """Render an ``analyze`` payload as a plain-text report."""
        if not payload.get("ok"):
            errors = payload.get("error", {}).get("errors", [])
            lines = [f"- row {err.get('row')}: {err.get('message')}" for err in errors]
            return format_response("Portfolio analysis rejected", lines, include_disclaimer=False)

        currency = str(payload.get("local_currency") or self.settings.local_currency)
        stats = payload["stats"]
        lines = [
            line_money("Invested", stats["total_invested"], currency),
            line_money("Current value", stats["total_current"], currency),
            line_money("Profit", stats["profit"], currency),
            line_percent("Profitability", stats["profit_percent"]),
            line_number("Distinct assets", stats["diversification_count"], decimals=0),
            line_money("Monthly dividends", stats["total_monthly_dividends"], currency),
            line_money("Realized profit", payload["transaction_totals"]["realized_profit"], currency),
        ]
        overall = payload["rankings"].get("all")
        if overall:
            lines.append("Top performers: " + ", ".join(
                f"{item['ticker']} ({item['profit_percent']:.2f}%)" for item in overall["top"]
            ))
            lines.append("Worst performers: " + ", ".join(
                f"{item['ticker']} ({item['profit_percent']:.2f}%)" for item in overall["bottom"]
            ))
        lines.extend(
            f"[{rec['priority']}] {rec['icon']} {rec['title']}: {rec['description']}"
            for rec in payload["recommendations"]
        )
        return format_response("Portfolio summary", lines, warning=payload.get("warning"))
