"""Transaction record cleanup and chronological ordering."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping

from portfolio_ledger.lib.numeric import coerce_numeric
from portfolio_ledger.ledger.models import (
    ASSET_TYPE_ALIASES,
    ASSET_TYPES,
    EQUITY,
    KIND_ALIASES,
    Transaction,
)

# Unix timestamps above this are taken to be milliseconds.
_MILLISECOND_THRESHOLD = 10**11


def normalize_ticker(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip().upper()


def normalize_kind(raw: Any) -> str:
    text = str(raw or "").strip()
    return KIND_ALIASES.get(text.lower(), text)


def normalize_asset_type(raw: Any, default: str = EQUITY) -> str:
    text = str(raw or "").strip()
    if not text:
        return default
    lowered = text.lower()
    for canonical in ASSET_TYPES:
        if canonical.lower() == lowered:
            return canonical
    return ASSET_TYPE_ALIASES.get(lowered, text)


def coerce_date(value: Any) -> datetime:
    """Coerce ``value`` into a naive UTC datetime.

    Unparseable values map to ``datetime.min`` so the record still sorts
    (first) instead of being lost.
    """
    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        timestamp = float(value)
        if abs(timestamp) >= _MILLISECOND_THRESHOLD:
            timestamp /= 1000.0
        try:
            parsed = datetime.fromtimestamp(timestamp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            parsed = None
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            parsed = None

    if parsed is None:
        return datetime.min
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def transaction_from_record(record: Mapping[str, Any], default_asset_type: str = EQUITY) -> Transaction:
    """Build a Transaction from a loosely shaped mapping (snake or camel case keys)."""
    raw_id = _first(record, "id", "transaction_id", "transactionId")
    return Transaction(
        ticker=normalize_ticker(_first(record, "ticker", "symbol")),
        kind=normalize_kind(_first(record, "kind", "type", "side")),
        quantity=coerce_numeric(_first(record, "quantity", "qty")),
        unit_price=coerce_numeric(_first(record, "unit_price", "unitPrice", "price")),
        date=coerce_date(_first(record, "date", "timestamp", "created_at", "createdAt")),
        name=str(_first(record, "name") or "").strip(),
        asset_type=normalize_asset_type(
            _first(record, "asset_type", "assetType", "typeAsset"),
            default=default_asset_type,
        ),
        sector=str(_first(record, "sector") or "").strip(),
        country=str(_first(record, "country") or "").strip(),
        currency=normalize_ticker(_first(record, "currency")),
        id=str(raw_id) if raw_id is not None else None,
    )


def _clean(transaction: Transaction, default_asset_type: str) -> Transaction:
    return replace(
        transaction,
        ticker=normalize_ticker(transaction.ticker),
        kind=normalize_kind(transaction.kind),
        quantity=coerce_numeric(transaction.quantity),
        unit_price=coerce_numeric(transaction.unit_price),
        date=coerce_date(transaction.date),
        asset_type=normalize_asset_type(transaction.asset_type, default=default_asset_type),
        currency=normalize_ticker(transaction.currency),
    )


def normalize_transactions(
    transactions: Iterable[Transaction | Mapping[str, Any]],
    default_asset_type: str = EQUITY,
) -> list[Transaction]:
    """Return cleaned copies sorted ascending by date.

    The sort is stable, so same-day records replay in input order. Inputs are
    never mutated and no record is dropped.
    """
    cleaned = [
        _clean(item, default_asset_type)
        if isinstance(item, Transaction)
        else transaction_from_record(item, default_asset_type)
        for item in transactions
    ]
    return sorted(cleaned, key=lambda tx: tx.date)
