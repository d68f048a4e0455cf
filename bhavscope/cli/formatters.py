"""Table and JSON Lines renderers for command output."""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Sequence, TextIO

from rich.box import SIMPLE
from rich.console import Console
from rich.table import Table

_TWO_PLACES = Decimal("0.01")
_NUMERIC = (Decimal, int, float)


def format_number(value: Decimal | float | int) -> str:
    """Two decimals below 1000, grouped thousands with up to two decimals above."""

    number = value if isinstance(value, Decimal) else Decimal(str(value))
    rounded = number.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    if abs(number) < 1000:
        return f"{rounded:.2f}"
    text = f"{rounded:,.2f}"
    return text.rstrip("0").rstrip(".")


def _project(rows: Sequence[Mapping[str, object]], columns: Sequence[str] | None) -> Iterator[dict[str, object]]:
    for row in rows:
        yield {column: row.get(column) for column in columns} if columns else dict(row)


class OutputFormatter:
    """Base class for command output renderers."""

    name: str

    def render(
        self,
        rows: Sequence[Mapping[str, object]],
        *,
        stream: TextIO,
        columns: Sequence[str] | None = None,
        title: str | None = None,
    ) -> None:
        raise NotImplementedError


@dataclass(slots=True)
class TableFormatter(OutputFormatter):
    """Rich table with right-aligned numeric columns."""

    name: str = "table"
    no_color: bool = False

    def render(
        self,
        rows: Sequence[Mapping[str, object]],
        *,
        stream: TextIO,
        columns: Sequence[str] | None = None,
        title: str | None = None,
    ) -> None:
        console = Console(file=stream, color_system=None if self.no_color else "auto", no_color=self.no_color)
        headers = list(columns or (rows[0].keys() if rows else ()))
        if headers:
            console.print(self._build_table(rows, headers, title))
        if not rows:
            console.print("No data available.")

    def _build_table(self, rows: Sequence[Mapping[str, object]], headers: list[str], title: str | None) -> Table:
        table = Table(box=SIMPLE, show_lines=False, title=title)
        header_style = "" if self.no_color else "bold"
        sample = rows[0] if rows else {}
        for header in headers:
            numeric = isinstance(sample.get(header), _NUMERIC) and not isinstance(sample.get(header), bool)
            table.add_column(header, header_style=header_style, justify="right" if numeric else "left")
        for row in rows:
            table.add_row(*(self._cell(row.get(header)) for header in headers))
        return table

    @staticmethod
    def _cell(value: object) -> str:
        if value is None:
            return "-"
        if isinstance(value, (Decimal, float)):
            return format_number(value)
        return str(value)


@dataclass(slots=True)
class JSONLFormatter(OutputFormatter):
    """One JSON object per row; Decimals and dates are written as strings."""

    name: str = "jsonl"

    def render(
        self,
        rows: Sequence[Mapping[str, object]],
        *,
        stream: TextIO,
        columns: Sequence[str] | None = None,
        title: str | None = None,
    ) -> None:
        for payload in _project(rows, columns):
            stream.write(json.dumps(payload, ensure_ascii=False, default=str))
            stream.write("\n")
        stream.flush()


FORMATTERS = ("table", "jsonl")


def create_formatter(name: str, *, no_color: bool = False) -> OutputFormatter:
    """Instantiate a formatter by name."""

    normalized = name.strip().lower()
    if normalized == "table":
        return TableFormatter(no_color=no_color)
    if normalized == "jsonl":
        return JSONLFormatter()
    raise ValueError(f"Unsupported format '{name}'. Available formats: {', '.join(FORMATTERS)}.")


__all__ = ["FORMATTERS", "JSONLFormatter", "OutputFormatter", "TableFormatter", "create_formatter", "format_number"]
