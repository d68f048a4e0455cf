"""Bhavcopy CSV normalization into canonical equity records.

Exchange exports of the same end-of-day file come with several header
spellings and column orders. Each logical field is looked up through an
ordered alias list, so any of the known variants parse to the same
:class:`~bhavscope.core.models.records.StockRecord`. Individual rows never
fail the parse: unreadable numbers become ``0`` and unreadable dates become
the epoch. Only the equity-series filter drops rows.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from bhavscope.core.logging import get_logger
from bhavscope.core.models.records import EQUITY_SERIES, StockRecord
from bhavscope.core.models.snapshots import DailySnapshot, SnapshotMeta

logger = get_logger(__name__)

EPOCH = date(1970, 1, 1)

_LINE_SPLIT = re.compile(r"\r?\n")
_NUMBER_NOISE = re.compile(r"[,\s]+")
# Beyond this magnitude a cell is noise, not a price or quantity.
_MAX_EXPONENT = 18
_BOM = "\ufeff"

_MONTHS = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

_FALLBACK_DATE_FORMATS = ("%d/%m/%Y", "%d %b %Y")

# Accepted header spellings per field, most preferred first.
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "symbol": ("SYMBOL",),
    "series": ("SERIES",),
    "date": ("DATE1", "DATE"),
    "prev_close": ("PREV_CLOSE", "PREV PRICE"),
    "open": ("OPEN_PRICE", "OPEN"),
    "high": ("HIGH_PRICE", "HIGH"),
    "low": ("LOW_PRICE", "LOW"),
    "last": ("LAST_PRICE", "LAST"),
    "close": ("CLOSE_PRICE", "CLOSE"),
    "avg_price": ("AVG_PRICE", "AVG PRICE"),
    "total_traded_quantity": ("TTL_TRD_QNTY", "TTL_TRD_QTY", "TOTTRDQTY"),
    "turnover_lakhs": ("TURNOVER_LACS", "TURNOVER(LACS)", "TURNOVER"),
    "number_of_trades": ("NO_OF_TRADES",),
    "delivery_quantity": ("DELIV_QTY",),
    "delivery_percent": ("DELIV_PER",),
}

_DECIMAL_FIELDS = (
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
)
_INTEGER_FIELDS = ("total_traded_quantity", "number_of_trades")


@dataclass(slots=True)
class ParseStats:
    """Row counters collected while parsing one CSV document."""

    data_rows: int = 0
    kept_rows: int = 0
    non_equity_rows: int = 0
    short_rows: int = 0


def parse_number(value: str | None) -> Decimal:
    """Parse a provider number such as ``"1,234.50"``; anything unreadable is ``0``."""

    if not value:
        return Decimal(0)
    cleaned = _NUMBER_NOISE.sub("", value)
    if not cleaned:
        return Decimal(0)
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return Decimal(0)
    if not number.is_finite() or number.adjusted() > _MAX_EXPONENT:
        return Decimal(0)
    return number


def parse_trade_date(value: str | None) -> date:
    """Parse ``DD-Mon-YYYY`` trade dates, degrading to the epoch."""

    if not value:
        return EPOCH
    token = value.strip()
    parts = token.split("-")
    if len(parts) == 3 and parts[1].strip().upper() in _MONTHS:
        day_part, month_part, year_part = (part.strip() for part in parts)
        try:
            return date(int(year_part), _MONTHS[month_part.upper()], int(day_part))
        except ValueError:
            return EPOCH
    return _parse_generic_date(token)


def _parse_generic_date(token: str) -> date:
    try:
        return date.fromisoformat(token)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(token).date()
    except ValueError:
        pass
    for fmt in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(token, fmt).date()
        except ValueError:
            continue
    return EPOCH


def _resolve_columns(header: dict[str, int]) -> dict[str, int | None]:
    resolved: dict[str, int | None] = {}
    for field_name, aliases in COLUMN_ALIASES.items():
        resolved[field_name] = next((header[alias] for alias in aliases if alias in header), None)
    return resolved


def _cell(values: list[str], index: int | None) -> str:
    if index is None or index >= len(values):
        return ""
    return values[index]


def _build_record(values: list[str], columns: dict[str, int | None]) -> StockRecord:
    fields: dict[str, object] = {
        "symbol": _cell(values, columns["symbol"]),
        "series": _cell(values, columns["series"]),
        "date": parse_trade_date(_cell(values, columns["date"])),
    }
    for name in _DECIMAL_FIELDS:
        fields[name] = parse_number(_cell(values, columns[name]))
    for name in _INTEGER_FIELDS:
        fields[name] = int(parse_number(_cell(values, columns[name])))
    return StockRecord(**fields)


def parse_csv(csv_text: str, *, stats: ParseStats | None = None) -> list[StockRecord]:
    """Parse one bhavcopy document into equity-series records.

    Args:
        csv_text: Raw CSV text; the first non-empty line is the header.
        stats: Optional counters updated in place.

    Returns:
        Records in file order, restricted to the ``EQ`` series.
    """

    stats = stats if stats is not None else ParseStats()
    lines = [line.strip() for line in _LINE_SPLIT.split((csv_text or "").removeprefix(_BOM))]
    lines = [line for line in lines if line]
    if not lines:
        return []

    header_tokens = [token.strip().upper() for token in lines[0].split(",")]
    header = {name: index for index, name in enumerate(header_tokens)}
    columns = _resolve_columns(header)

    records: list[StockRecord] = []
    for line in lines[1:]:
        stats.data_rows += 1
        values = [value.strip() for value in line.split(",")]
        if len(values) < len(header_tokens):
            stats.short_rows += 1
        if _cell(values, columns["series"]).strip().upper() != EQUITY_SERIES:
            stats.non_equity_rows += 1
            continue
        records.append(_build_record(values, columns))
        stats.kept_rows += 1
    return records


def parse_snapshot(meta: SnapshotMeta, csv_text: str) -> DailySnapshot:
    """Parse the content of a store entry into a :class:`DailySnapshot`."""

    stats = ParseStats()
    records = parse_csv(csv_text, stats=stats)
    logger.debug(
        "Parsed snapshot",
        snapshot=meta.filename,
        data_rows=stats.data_rows,
        kept_rows=stats.kept_rows,
        non_equity_rows=stats.non_equity_rows,
        short_rows=stats.short_rows,
    )
    return DailySnapshot(meta=meta, records=tuple(records))


__all__ = [
    "COLUMN_ALIASES",
    "EPOCH",
    "ParseStats",
    "parse_csv",
    "parse_number",
    "parse_snapshot",
    "parse_trade_date",
]
