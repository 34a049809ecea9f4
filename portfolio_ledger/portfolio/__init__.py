"""Portfolio valuation and analytics domain package."""

from portfolio_ledger.portfolio.models import PortfolioStats, Quote, ValuedHolding
from portfolio_ledger.portfolio.portfolio_service import PortfolioService

__all__ = ["PortfolioService", "PortfolioStats", "Quote", "ValuedHolding"]
