"""Pytest configuration for the bhavscope test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence

import pytest

from bhavscope.core.logging import configure_logging

HEADER = (
    "SYMBOL,SERIES,DATE1,PREV_CLOSE,OPEN_PRICE,HIGH_PRICE,LOW_PRICE,LAST_PRICE,"
    "CLOSE_PRICE,AVG_PRICE,TTL_TRD_QNTY,TURNOVER_LACS,NO_OF_TRADES,DELIV_QTY,DELIV_PER"
)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--bhavscope-run-integration",
        action="store_true",
        default=False,
        help="Run bhavscope integration tests that require external services.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for bhavscope tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks bhavscope tests requiring network or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--bhavscope-run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="integration tests require --bhavscope-run-integration",
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def bhav_row(
    symbol: str,
    *,
    series: str = "EQ",
    trade_date: str = "15-Jan-2026",
    prev_close: str = "100",
    close: str = "100",
    volume: str = "1000",
    turnover: str = "10",
) -> str:
    return (
        f"{symbol},{series},{trade_date},{prev_close},{prev_close},{close},{prev_close},{close},"
        f"{close},{close},{volume},{turnover},10,500,50.00"
    )


def bhav_csv(rows: Sequence[str], header: str = HEADER) -> str:
    return "\n".join([header, *rows]) + "\n"


@pytest.fixture
def make_row() -> Callable[..., str]:
    return bhav_row


@pytest.fixture
def make_csv() -> Callable[..., str]:
    return bhav_csv


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Restore the default stderr sink after tests that reconfigure logging."""

    yield
    configure_logging()
