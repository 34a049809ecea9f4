import pytest

from portfolio_ledger.ledger.models import Holding
from portfolio_ledger.portfolio.aggregator import (
    aggregate,
    calculate_category_allocation,
    calculate_sector_distribution,
)
from portfolio_ledger.portfolio.models import PortfolioStats, Quote
from portfolio_ledger.portfolio.valuation import valuate


def _valued(ticker: str, current: float, invested: float = 100.0, fx_rate: float = 1.0, quote=None, **fields):
    quantity = fields.pop("quantity", 1.0)
    holding = Holding(
        ticker=ticker,
        quantity=quantity,
        average_cost=invested / quantity if quantity else 0.0,
        total_invested=invested,
        current_price=current / quantity if quantity else 0.0,
        **fields,
    )
    return valuate(holding, quote, fx_rate)


def test_category_allocation_ignores_empty_contributors_without_nan() -> None:
    valued = [
        _valued("PETR4", 600.0, asset_type="Equity"),
        _valued("VALE3", 400.0, asset_type="Equity"),
        _valued("BTC", 0.0, asset_type="Crypto"),
    ]
    allocation = calculate_category_allocation(valued)
    assert [(slice_.key, slice_.percent) for slice_ in allocation] == [("Equity", 100.0), ("Crypto", 0.0)]
    assert allocation[0].value == pytest.approx(1000.0)
    assert allocation[0].holdings == 2


def test_allocation_percentages_sum_to_one_hundred() -> None:
    valued = [
        _valued("PETR4", 300.0, asset_type="Equity", sector="Energy"),
        _valued("HGLG11", 500.0, asset_type="Fund", sector="Logistics"),
        _valued("ETH", 200.0, asset_type="Crypto", sector="Crypto"),
        _valued("PRIO3", 100.0, asset_type="Equity", sector="Energy"),
    ]
    categories = calculate_category_allocation(valued)
    sectors = calculate_sector_distribution(valued)
    assert sum(item.percent for item in categories) == pytest.approx(100.0)
    assert sum(item.percent for item in sectors) == pytest.approx(100.0)
    assert [item.key for item in categories] == ["Fund", "Equity", "Crypto"]


def test_allocation_is_all_zero_when_nothing_has_value() -> None:
    valued = [_valued("A", 0.0, asset_type="Equity"), _valued("B", 0.0, asset_type="Fund", sector="Banks")]
    assert all(item.percent == 0.0 for item in calculate_category_allocation(valued))
    assert all(item.percent == 0.0 for item in calculate_sector_distribution(valued))


def test_sector_distribution_keeps_tickers_and_buckets_blank_sectors() -> None:
    valued = [
        _valued("ITUB4", 200.0, sector="Banks"),
        _valued("BBAS3", 200.0, sector="Banks"),
        _valued("XPTO3", 100.0, sector=""),
    ]
    sectors = calculate_sector_distribution(valued)
    assert sectors[0].key == "Banks"
    assert sectors[0].tickers == ["ITUB4", "BBAS3"]
    assert sectors[0].percent == pytest.approx(80.0)
    assert sectors[1].key == "Other"
    assert sectors[1].tickers == ["XPTO3"]


def test_aggregate_totals_and_profit() -> None:
    valued = [
        _valued("PETR4", 1200.0, invested=1000.0, monthly_dividends=50.0, country="BR"),
        _valued("VALE3", 800.0, invested=1000.0, monthly_dividends=30.0, country="BR"),
        _valued("BTC", 500.0, invested=250.0, asset_type="Crypto", country="Global"),
    ]
    stats = aggregate(valued)
    assert stats.total_invested == pytest.approx(2250.0)
    assert stats.total_current == pytest.approx(2500.0)
    assert stats.profit == pytest.approx(250.0)
    assert stats.profit_percent == pytest.approx(250.0 / 2250.0 * 100)
    assert stats.diversification_count == 3
    assert stats.total_monthly_dividends == pytest.approx(80.0)
    assert stats.crypto_percent == pytest.approx(20.0)
    assert stats.stocks_percent == pytest.approx(80.0)
    assert stats.count_by_type == {"Equity": 2, "Crypto": 1}
    assert stats.count_by_country == {"BR": 2, "Global": 1}
    assert stats.holdings_count == 3


def test_aggregate_single_holding_loss() -> None:
    stats = aggregate([_valued("PETR4", 800.0, invested=1000.0)])
    assert stats.profit == pytest.approx(-200.0)
    assert stats.profit_percent == pytest.approx(-20.0)


def test_usd_subset_only_counts_foreign_asset_types() -> None:
    quote = Quote(price=110.0, previous_close=100.0, change=10.0)
    foreign = _valued("AAPL", 110.0, invested=100.0, quantity=2.0, fx_rate=5.0, quote=quote,
                      asset_type="ForeignStock", currency="USD")
    crypto_usd = _valued("BTC", 110.0, invested=100.0, fx_rate=5.0, quote=quote,
                         asset_type="Crypto", currency="USD")
    local = _valued("PETR4", 110.0, invested=100.0, quote=quote, currency="BRL")
    stats = aggregate([foreign, crypto_usd, local])
    assert stats.invested_usd == pytest.approx(100.0)
    assert stats.daily_profit_local == pytest.approx(10.0 * 2 * 5.0)


def test_aggregate_empty_portfolio_is_all_zero() -> None:
    stats = aggregate([])
    assert stats == PortfolioStats()
    assert stats.profit_percent == 0.0
    assert stats.category_allocation == []


def test_aggregate_counts_low_yield_holdings() -> None:
    valued = [
        _valued("A", 100.0, dividend_yield=3.0),
        _valued("B", 100.0, dividend_yield=7.0),
        _valued("C", 100.0),
    ]
    assert aggregate(valued).low_yield_count == 1
