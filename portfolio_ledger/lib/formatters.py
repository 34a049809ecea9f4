"""Plain-text rendering helpers for portfolio reports."""

from __future__ import annotations

import math

PORTFOLIO_DISCLAIMER = "Informational use only. This is not financial advice."
CURRENCY_SYMBOLS = {"BRL": "R$", "USD": "$", "EUR": "€", "GBP": "£"}


def _fmt_number(value: float | None, decimals: int = 2) -> str:
    if value is None or not math.isfinite(value):
        return "n/a"
    return f"{value:,.{decimals}f}"


def _fmt_percent(value: float | None) -> str:
    if value is None or not math.isfinite(value):
        return "n/a"
    return f"{value:.2f}%"


def format_response(
    title: str,
    lines: list[str],
    warning: str | None = None,
    include_disclaimer: bool = True,
) -> str:
    chunks: list[str] = [title]
    if warning:
        chunks.append(f"Warning: {warning}")
    chunks.extend(lines)
    if include_disclaimer:
        chunks.extend(["---", PORTFOLIO_DISCLAIMER])
    return "\n".join(chunks)


def line_money(label: str, value: float | None, currency: str = "USD") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    return f"{label}: {symbol}{_fmt_number(value)}"


def line_number(label: str, value: float | None, decimals: int = 2) -> str:
    return f"{label}: {_fmt_number(value, decimals)}"


def line_percent(label: str, value: float | None) -> str:
    return f"{label}: {_fmt_percent(value)}"
