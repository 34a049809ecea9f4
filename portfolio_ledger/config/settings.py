"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Valuation defaults and advisor thresholds."""

    app_name: str = "portfolio-ledger"
    app_version: str = "1.0.0"
    local_currency: str = "BRL"
    default_fx_rate: float = 5.0
    default_asset_type: str = "Equity"
    performer_count: int = 3
    concentration_threshold_percent: float = 70.0
    strong_performance_percent: float = 10.0
    weak_performance_percent: float = -5.0
    low_yield_percent: float = 5.0
    min_sector_count: int = 3
    reject_invalid_transactions: bool = True
    log_level: str = "INFO"


def _as_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _as_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_settings() -> Settings:
    """Load runtime settings from environment variables."""
    load_dotenv()

    return Settings(
        local_currency=os.getenv("LEDGER_LOCAL_CURRENCY", "BRL").strip().upper() or "BRL",
        default_fx_rate=_as_float(os.getenv("LEDGER_DEFAULT_FX_RATE"), 5.0),
        default_asset_type=os.getenv("LEDGER_DEFAULT_ASSET_TYPE", "Equity").strip() or "Equity",
        performer_count=max(1, _as_int(os.getenv("LEDGER_PERFORMER_COUNT"), 3)),
        concentration_threshold_percent=_as_float(os.getenv("LEDGER_CONCENTRATION_THRESHOLD"), 70.0),
        strong_performance_percent=_as_float(os.getenv("LEDGER_STRONG_PERFORMANCE"), 10.0),
        weak_performance_percent=_as_float(os.getenv("LEDGER_WEAK_PERFORMANCE"), -5.0),
        low_yield_percent=_as_float(os.getenv("LEDGER_LOW_YIELD"), 5.0),
        min_sector_count=_as_int(os.getenv("LEDGER_MIN_SECTORS"), 3),
        reject_invalid_transactions=_as_bool(os.getenv("LEDGER_REJECT_INVALID_TRANSACTIONS"), True),
        log_level=os.getenv("LEDGER_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
