import random
from datetime import datetime, timedelta

import pytest

from portfolio_ledger.ledger.models import BUY, QUANTITY_TOLERANCE, SELL, Transaction
from portfolio_ledger.ledger.projector import project, project_ledger

START = datetime(2024, 1, 1)


def _ledger(*entries: tuple[str, str, float, float]) -> list[Transaction]:
    return [
        Transaction(
            ticker=ticker,
            kind=kind,
            quantity=quantity,
            unit_price=price,
            date=START + timedelta(days=idx),
            name=f"{ticker.strip().upper()} SA",
            sector="Energy",
            currency="BRL",
        )
        for idx, (ticker, kind, quantity, price) in enumerate(entries)
    ]


def test_two_buys_average_the_cost() -> None:
    holdings = project(_ledger(("PETR4", BUY, 100, 10.0), ("PETR4", BUY, 100, 20.0)))
    holding = holdings["PETR4"]
    assert holding.quantity == 200
    assert holding.average_cost == pytest.approx(15.0)
    assert holding.total_invested == pytest.approx(3000.0)


def test_sell_removes_cost_at_average_and_realizes_profit() -> None:
    projection = project_ledger(
        _ledger(("PETR4", BUY, 100, 10.0), ("PETR4", BUY, 100, 20.0), ("PETR4", SELL, 50, 30.0))
    )
    holding = projection.holdings["PETR4"]
    assert holding.quantity == 150
    assert holding.total_invested == pytest.approx(2250.0)
    assert holding.average_cost == pytest.approx(15.0)
    sale = projection.transactions[-1]
    assert sale.realized_profit == pytest.approx(750.0)
    assert projection.realized_profit == pytest.approx(750.0)
    assert all(tx.realized_profit is None for tx in projection.transactions[:2])


def test_selling_everything_closes_the_position() -> None:
    projection = project_ledger(_ledger(("WEGE3", BUY, 10, 5.0), ("WEGE3", SELL, 10, 8.0)))
    assert "WEGE3" not in projection.holdings
    closed = projection.closed["WEGE3"]
    assert closed.quantity == 0
    assert closed.average_cost == 0
    assert closed.total_invested == 0
    assert projection.transactions[-1].realized_profit == pytest.approx(30.0)
    assert len(projection.transactions) == 2


def test_oversell_clamps_quantity_and_realizes_only_held_units() -> None:
    projection = project_ledger(_ledger(("ABEV3", BUY, 5, 10.0), ("ABEV3", SELL, 8, 12.0)))
    closed = projection.closed["ABEV3"]
    assert closed.quantity == 0
    assert closed.total_invested == 0
    assert closed.average_cost == 0
    assert projection.transactions[-1].realized_profit == pytest.approx(10.0)


def test_tickers_differing_in_case_and_whitespace_share_a_holding() -> None:
    holdings = project(_ledger(("itsa4 ", BUY, 10, 10.0), (" ITSA4", BUY, 10, 12.0), ("Itsa4", SELL, 5, 13.0)))
    assert list(holdings) == ["ITSA4"]
    assert holdings["ITSA4"].quantity == 15
    assert holdings["ITSA4"].average_cost == pytest.approx(11.0)


def test_first_transaction_seeds_metadata_and_price() -> None:
    ledger = _ledger(("BBAS3", BUY, 10, 25.0), ("BBAS3", BUY, 10, 30.0))
    holding = project(ledger)["BBAS3"]
    assert holding.current_price == 25.0
    assert holding.name == "BBAS3 SA"
    assert holding.sector == "Energy"
    assert holding.currency == "BRL"


def test_projection_replays_in_date_order_regardless_of_input_order() -> None:
    ledger = _ledger(("VALE3", BUY, 10, 10.0), ("VALE3", SELL, 10, 20.0), ("VALE3", BUY, 4, 30.0))
    holdings = project(list(reversed(ledger)))
    assert holdings["VALE3"].quantity == 4
    assert holdings["VALE3"].average_cost == pytest.approx(30.0)


def test_replaying_the_same_ledger_is_deterministic() -> None:
    ledger = _ledger(("A", BUY, 3, 1.5), ("B", BUY, 2, 7.0), ("A", SELL, 1, 2.0), ("B", BUY, 1, 9.0))
    first = project_ledger(ledger)
    second = project_ledger(ledger)
    assert first == second
    assert first.holdings is not second.holdings


def test_cost_basis_invariant_holds_for_generated_ledgers() -> None:
    rng = random.Random(7)
    for _ in range(25):
        entries = []
        for _ in range(40):
            ticker = rng.choice(["aaa", "BBB ", "ccc"])
            kind = rng.choice([BUY, BUY, SELL])
            quantity = rng.choice([rng.randint(1, 50), round(rng.uniform(0.0001, 3), 4)])
            entries.append((ticker, kind, quantity, round(rng.uniform(1, 100), 2)))
        projection = project_ledger(_ledger(*entries))
        for holding in projection.holdings.values():
            assert holding.quantity > QUANTITY_TOLERANCE
        for holding in [*projection.holdings.values(), *projection.closed.values()]:
            assert holding.quantity >= 0
            assert holding.total_invested >= 0
            assert holding.total_invested == pytest.approx(holding.quantity * holding.average_cost, abs=1e-6)


def test_raw_records_project_like_transactions() -> None:
    holdings = project(
        [
            {"ticker": "knri11", "type": "Compra", "quantity": 2, "unitPrice": 150, "date": "2024-01-02", "typeAsset": "FII"},
            {"ticker": "KNRI11", "type": "Compra", "quantity": 2, "unitPrice": 170, "date": "2024-01-03"},
        ]
    )
    assert holdings["KNRI11"].average_cost == pytest.approx(160.0)
    assert holdings["KNRI11"].asset_type == "Fund"


def test_selling_a_fractional_position_in_full_closes_it() -> None:
    projection = project_ledger(_ledger(("BTC", BUY, 0.1, 100.0), ("BTC", BUY, 0.2, 100.0), ("BTC", SELL, 0.3, 120.0)))
    assert projection.holdings == {}
    closed = projection.closed["BTC"]
    assert closed.quantity == 0.0
    assert closed.average_cost == 0.0
    assert closed.total_invested == 0.0
    assert projection.realized_profit == pytest.approx(6.0)


def test_negative_buy_price_never_makes_cost_basis_negative() -> None:
    holdings = project(_ledger(("ABEV3", BUY, 10, -5.0), ("ABEV3", BUY, 10, 12.0)))
    holding = holdings["ABEV3"]
    assert holding.quantity == 20
    assert holding.total_invested == pytest.approx(120.0)
    assert holding.average_cost == pytest.approx(6.0)
