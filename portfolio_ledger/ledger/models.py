"""Typed ledger models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

TransactionKind = Literal["Buy", "Sell"]

BUY: TransactionKind = "Buy"
SELL: TransactionKind = "Sell"

EQUITY = "Equity"
FUND = "Fund"
FOREIGN_STOCK = "ForeignStock"
FOREIGN_FUND = "ForeignFund"
ETF = "ETF"
CRYPTO = "Crypto"
OTHER = "Other"

# Quantities within this distance of zero count as a closed position.
QUANTITY_TOLERANCE = 1e-9

ASSET_TYPES = (EQUITY, FUND, FOREIGN_STOCK, FOREIGN_FUND, ETF, CRYPTO)

# Labels written by earlier releases of the app.
ASSET_TYPE_ALIASES = {
    "acao": EQUITY,
    "ação": EQUITY,
    "stock": FOREIGN_STOCK,
    "fii": FUND,
    "reit": FOREIGN_FUND,
    "etf": ETF,
    "crypto": CRYPTO,
    "cripto": CRYPTO,
}

KIND_ALIASES: dict[str, TransactionKind] = {
    "buy": BUY,
    "compra": BUY,
    "sell": SELL,
    "venda": SELL,
}


@dataclass(frozen=True)
class Transaction:
    ticker: str
    kind: str
    quantity: float
    unit_price: float
    date: datetime
    name: str = ""
    asset_type: str = EQUITY
    sector: str = ""
    country: str = ""
    currency: str = ""
    id: str | None = None
    realized_profit: float | None = None

    @property
    def total(self) -> float:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class Holding:
    ticker: str
    quantity: float = 0.0
    average_cost: float = 0.0
    total_invested: float = 0.0
    current_price: float = 0.0
    name: str = ""
    asset_type: str = EQUITY
    sector: str = ""
    country: str = ""
    currency: str = ""
    monthly_dividends: float = 0.0
    dividend_yield: float | None = None

    @property
    def is_open(self) -> bool:
        return self.quantity > 0


@dataclass
class ValidationIssue:
    field: str
    message: str
    row: int | None = None
    code: str = "invalid_value"
    ticker: str | None = None
