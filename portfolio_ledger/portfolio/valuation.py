"""Holding valuation against live quotes and the USD exchange rate."""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Iterable, Mapping

from portfolio_ledger.lib.numeric import coerce_numeric, safe_percent
from portfolio_ledger.ledger.models import Holding
from portfolio_ledger.ledger.normalizer import normalize_ticker
from portfolio_ledger.portfolio.models import Quote, ValuedHolding

USD = "USD"


def quote_from_record(record: Mapping[str, Any]) -> Quote:
    """Build a Quote from a market-data payload (snake or camel case keys)."""

    def pick(*keys: str) -> Any:
        for key in keys:
            if record.get(key) is not None:
                return record[key]
        return None

    return Quote(
        price=coerce_numeric(pick("price", "regularMarketPrice")),
        previous_close=pick("previous_close", "previousClose"),
        change=pick("change"),
        change_percent=pick("change_percent", "changePercent"),
        is_mock=bool(pick("is_mock", "isMock")),
    )


def has_usable_price(quote: Quote | None) -> bool:
    return quote is not None and coerce_numeric(quote.price) > 0


def native_price(holding: Holding, quote: Quote | None) -> float:
    """Quote price in the holding's own currency, else the stored price."""
    if has_usable_price(quote):
        return coerce_numeric(quote.price)
    return coerce_numeric(holding.current_price)


def daily_change_percent(quote: Quote | None) -> float:
    if quote is None:
        return 0.0
    previous_close = coerce_numeric(quote.previous_close)
    if previous_close > 0:
        return safe_percent(coerce_numeric(quote.price) - previous_close, previous_close)
    return coerce_numeric(quote.change_percent)


def daily_change(quote: Quote | None) -> float:
    """Per-unit change in native currency."""
    if quote is None:
        return 0.0
    if isinstance(quote.change, (int, float)) and math.isfinite(quote.change):
        return float(quote.change)
    previous_close = coerce_numeric(quote.previous_close)
    if previous_close > 0:
        return coerce_numeric(quote.price) - previous_close
    return 0.0


def localize_price(price: float, currency: str, fx_rate: float) -> float:
    if normalize_ticker(currency) == USD:
        return price * coerce_numeric(fx_rate)
    return price


def valuate(holding: Holding, quote: Quote | None, fx_rate: float) -> ValuedHolding:
    """Value one holding. Pure; a missing quote falls back to the stored price."""
    price_local = localize_price(native_price(holding, quote), holding.currency, fx_rate)
    change = daily_change(quote)
    quantity = coerce_numeric(holding.quantity)
    invested = coerce_numeric(holding.total_invested)
    current = quantity * price_local
    profit = current - invested
    return ValuedHolding(
        holding=holding,
        current_price_local=price_local,
        invested=invested,
        current=current,
        profit=profit,
        profit_percent=safe_percent(profit, invested),
        daily_change_percent=daily_change_percent(quote),
        daily_change=change,
        daily_change_local=localize_price(change, holding.currency, fx_rate),
        is_mock=bool(quote.is_mock) if quote is not None else False,
    )


def index_quotes(quotes: Mapping[str, Quote | Mapping[str, Any] | None] | None) -> dict[str, Quote | None]:
    """Key quotes by normalized ticker, converting raw payloads to Quote."""
    return {
        normalize_ticker(ticker): quote if isinstance(quote, Quote) or quote is None else quote_from_record(quote)
        for ticker, quote in (quotes or {}).items()
    }


def valuate_all(
    holdings: Iterable[Holding],
    quotes: Mapping[str, Quote | Mapping[str, Any] | None] | None,
    fx_rate: float,
) -> list[ValuedHolding]:
    by_ticker = index_quotes(quotes)
    return [valuate(holding, by_ticker.get(holding.ticker), fx_rate) for holding in holdings]


def apply_income_data(
    holdings: Iterable[Holding],
    monthly_dividends: Mapping[str, float] | None = None,
    dividend_yields: Mapping[str, float] | None = None,
) -> list[Holding]:
    """Return copies of ``holdings`` carrying caller-supplied dividend figures."""
    dividends = {normalize_ticker(k): coerce_numeric(v) for k, v in (monthly_dividends or {}).items()}
    yields = {normalize_ticker(k): coerce_numeric(v) for k, v in (dividend_yields or {}).items()}
    enriched: list[Holding] = []
    for holding in holdings:
        updates: dict[str, float] = {}
        if holding.ticker in dividends:
            updates["monthly_dividends"] = dividends[holding.ticker]
        if holding.ticker in yields:
            updates["dividend_yield"] = yields[holding.ticker]
        enriched.append(replace(holding, **updates) if updates else holding)
    return enriched
