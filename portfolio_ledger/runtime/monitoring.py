"""Structured logging for pipeline runs."""

from __future__ import annotations

import json
import logging
import os
import time

LOGGER = logging.getLogger("portfolio_ledger.pipeline")


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int | None = None, *, force: bool = False) -> None:
    """Configure root logging; the level defaults to ``LEDGER_LOG_LEVEL`` or INFO."""
    resolved = _coerce_level(level if level is not None else os.getenv("LEDGER_LOG_LEVEL", "INFO"))
    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        root_logger.setLevel(resolved)
        return
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=force,
    )


def log_pipeline_event(
    stage: str,
    latency_ms: float,
    success: bool,
    transactions: int,
    holdings: int,
    warning: str | None = None,
) -> None:
    payload = {
        "stage": stage,
        "latency_ms": round(latency_ms, 3),
        "success": success,
        "transactions": transactions,
        "holdings": holdings,
        "timestamp": int(time.time()),
    }
    if warning:
        payload["warning"] = warning
    LOGGER.info(json.dumps(payload, ensure_ascii=True))
