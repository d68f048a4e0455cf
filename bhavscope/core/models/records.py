"""Canonical end-of-day equity records and derived result shapes."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, field_serializer
from pydantic import ConfigDict as PydanticConfigDict

EQUITY_SERIES = "EQ"


class StockRecord(BaseModel):
    """One symbol's end-of-day figures for a single trading date."""

    symbol: str
    series: str
    date: date
    prev_close: Decimal = Decimal(0)
    open: Decimal = Decimal(0)
    high: Decimal = Decimal(0)
    low: Decimal = Decimal(0)
    last: Decimal = Decimal(0)
    close: Decimal = Decimal(0)
    avg_price: Decimal = Decimal(0)
    total_traded_quantity: int = 0
    turnover_lakhs: Decimal = Decimal(0)
    number_of_trades: int = 0
    delivery_quantity: Decimal = Decimal(0)
    delivery_percent: Decimal = Decimal(0)

    model_config = PydanticConfigDict(frozen=True)

    @field_serializer(
        "prev_close",
        "open",
        "high",
        "low",
        "last",
        "close",
        "avg_price",
        "turnover_lakhs",
        "delivery_quantity",
        "delivery_percent",
        when_used="json",
    )
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal to string."""
        return str(value)

    @field_serializer("date", when_used="json")
    def serialize_date(self, value: date) -> str:
        """Serialize date to isoformat string."""
        return value.isoformat()


class RankedRecord(StockRecord):
    """Stock record carrying its day-over-day rate of change."""

    rate_of_change_percent: Decimal

    @field_serializer("rate_of_change_percent", when_used="json")
    def serialize_rate(self, value: Decimal) -> str:
        """Serialize Decimal to string."""
        return str(value)


class AboveAverageRecord(StockRecord):
    """Latest record of a symbol whose volume beat its trailing average."""

    trailing_average_volume: Decimal
    trailing_average_turnover: Decimal
    current_volume: int
    current_turnover: Decimal
    percent_above_average: Decimal
    history_depth: int

    @field_serializer(
        "trailing_average_volume",
        "trailing_average_turnover",
        "current_turnover",
        "percent_above_average",
        when_used="json",
    )
    def serialize_metrics(self, value: Decimal) -> str:
        """Serialize Decimal to string."""
        return str(value)


class MarketSummary(BaseModel):
    """Market-wide statistics for one trading day."""

    total_stocks: int
    gainers: int
    losers: int
    total_turnover_crores: Decimal

    model_config = PydanticConfigDict(frozen=True)

    @field_serializer("total_turnover_crores", when_used="json")
    def serialize_turnover(self, value: Decimal) -> str:
        """Serialize Decimal to string."""
        return str(value)


__all__ = [
    "EQUITY_SERIES",
    "AboveAverageRecord",
    "MarketSummary",
    "RankedRecord",
    "StockRecord",
]
