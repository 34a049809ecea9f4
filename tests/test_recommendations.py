from portfolio_ledger.config.settings import Settings
from portfolio_ledger.portfolio.advisor import AdvisorThresholds, recommend
from portfolio_ledger.portfolio.models import AllocationSlice, PortfolioStats, SectorSlice


def _sectors(*names: str) -> list[SectorSlice]:
    return [SectorSlice(key=name, value=1.0, percent=0.0, holdings=1, tickers=[]) for name in names]


def _healthy_stats(**overrides) -> PortfolioStats:
    data = {
        "category_allocation": [
            AllocationSlice(key="Equity", value=500.0, percent=50.0, holdings=2),
            AllocationSlice(key="Fund", value=500.0, percent=50.0, holdings=2),
        ],
        "sector_distribution": _sectors("Banks", "Energy", "Logistics"),
        "count_by_type": {"Equity": 2, "Fund": 2},
        "average_performance": 5.0,
        "holdings_count": 4,
    }
    data.update(overrides)
    return PortfolioStats(**data)


def test_empty_portfolio_gets_single_note() -> None:
    recs = recommend(PortfolioStats())
    assert [rec.title for rec in recs] == ["Empty portfolio"]
    assert recs[0].priority == "low"


def test_healthy_portfolio_when_no_rule_fires() -> None:
    recs = recommend(_healthy_stats())
    assert [(rec.title, rec.priority) for rec in recs] == [("Healthy portfolio", "low")]


def test_equity_only_portfolio_is_concentrated_and_sparse() -> None:
    stats = _healthy_stats(
        category_allocation=[AllocationSlice(key="Equity", value=1000.0, percent=100.0, holdings=3)],
        count_by_type={"Equity": 3},
        sector_distribution=_sectors("Energy"),
        holdings_count=3,
    )
    recs = recommend(stats)
    assert [rec.title for rec in recs] == ["Concentrated portfolio", "Diversify with funds", "Diversify sectors"]
    assert [rec.priority for rec in recs] == ["high", "high", "medium"]


def test_fund_only_portfolio_suggests_equities() -> None:
    stats = _healthy_stats(
        category_allocation=[
            AllocationSlice(key="Fund", value=600.0, percent=60.0, holdings=1),
            AllocationSlice(key="Crypto", value=400.0, percent=40.0, holdings=1),
        ],
        count_by_type={"Fund": 1, "Crypto": 1},
        holdings_count=2,
    )
    assert [rec.title for rec in recommend(stats)] == ["Diversify with equities"]


def test_performance_rules() -> None:
    strong = recommend(_healthy_stats(average_performance=12.5))
    assert [(rec.title, rec.priority) for rec in strong] == [("Excellent performance", "low")]
    assert "12.50%" in strong[0].description
    weak = recommend(_healthy_stats(average_performance=-6.0))
    assert [(rec.title, rec.priority) for rec in weak] == [("Review portfolio", "high")]


def test_low_yield_rule_requires_minority_of_holdings() -> None:
    assert [rec.title for rec in recommend(_healthy_stats(low_yield_count=2))] == ["Low-yield assets"]
    assert [rec.title for rec in recommend(_healthy_stats(low_yield_count=3))] == ["Healthy portfolio"]


def test_thresholds_follow_settings() -> None:
    thresholds = AdvisorThresholds.from_settings(Settings(strong_performance_percent=4.0))
    recs = recommend(_healthy_stats(), thresholds)
    assert [rec.title for rec in recs] == ["Excellent performance"]
