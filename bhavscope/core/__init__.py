"""bhavscope core: records, normalization, aggregation and snapshot stores."""

from bhavscope.core.config.settings import BhavscopeConfig, ConfigManager
from bhavscope.core.models import AboveAverageRecord, MarketSummary, RankedRecord, StockRecord

__all__ = [
    "AboveAverageRecord",
    "BhavscopeConfig",
    "ConfigManager",
    "MarketSummary",
    "RankedRecord",
    "StockRecord",
]
