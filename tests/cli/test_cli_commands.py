from __future__ import annotations

import json
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bhavscope.cli import daily as daily_module
from bhavscope.cli import main as main_module
from bhavscope.cli import snapshots as snapshots_module
from bhavscope.cli.main import create_app
from bhavscope.cli.utils import build_store
from bhavscope.core.config import BhavscopeConfig, LoggingConfig, StoreConfig
from bhavscope.core.store import HttpSnapshotStore, LocalDirectorySnapshotStore

HEADER = "SYMBOL,SERIES,DATE1,PREV_CLOSE,CLOSE_PRICE,TTL_TRD_QNTY,TURNOVER_LACS"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def default_config(monkeypatch: pytest.MonkeyPatch) -> BhavscopeConfig:
    config = BhavscopeConfig()
    monkeypatch.setattr(daily_module, "get_config", lambda: config)
    monkeypatch.setattr(snapshots_module, "get_config", lambda: config)
    monkeypatch.setattr(main_module, "get_config", lambda: config)
    return config


@pytest.fixture
def day_file(tmp_path: Path) -> Path:
    path = tmp_path / "sec_bhavdata_full_15012026.csv"
    path.write_text(
        "\n".join(
            [
                HEADER,
                "UP,EQ,15-Jan-2026,100,120,500,300",
                "DOWN,EQ,15-Jan-2026,100,80,900,100",
                "FLAT,EQ,15-Jan-2026,50,50,100,100",
                "BOND,GB,15-Jan-2026,100,200,999999,999999",
            ]
        ),
        encoding="utf-8",
    )
    return path


def _write_history(root: Path, days: int, surge: dict[str, int]) -> None:
    start = date(2026, 1, 1)
    for offset in range(days):
        day = start + timedelta(days=offset)
        last = offset == days - 1
        rows = [
            f"{symbol},EQ,{day.strftime('%d-%b-%Y')},10,10,{surge[symbol] if last else 100},{offset + 1}"
            for symbol in surge
        ]
        (root / f"sec_bhavdata_full_{day.strftime('%d%m%Y')}.csv").write_text(
            "\n".join([HEADER, *rows]), encoding="utf-8"
        )


def _json_rows(output: str, key: str) -> list[dict[str, object]]:
    rows = []
    for line in output.splitlines():
        if line.startswith("{"):
            payload = json.loads(line)
            if key in payload:
                rows.append(payload)
    return rows


def test_summary_table_output(runner: CliRunner, day_file: Path) -> None:
    result = runner.invoke(create_app(), ["--no-color", "summary", str(day_file)])

    assert result.exit_code == 0, result.output
    assert "total_stocks" in result.output
    assert "gainers" in result.output


def test_summary_jsonl_output(runner: CliRunner, day_file: Path) -> None:
    result = runner.invoke(create_app(), ["--format", "jsonl", "summary", str(day_file)])

    assert result.exit_code == 0, result.output
    rows = _json_rows(result.output, "total_stocks")
    assert rows == [{"total_stocks": 3, "gainers": 1, "losers": 1, "total_turnover_crores": "5"}]


def test_top_gainers_jsonl(runner: CliRunner, day_file: Path) -> None:
    result = runner.invoke(create_app(), ["--format", "jsonl", "top", "gainers", str(day_file), "--limit", "2"])

    assert result.exit_code == 0, result.output
    rows = _json_rows(result.output, "symbol")
    assert [row["symbol"] for row in rows] == ["UP", "FLAT"]
    assert Decimal(rows[0]["rate_of_change_percent"]) == 20


def test_top_by_turnover_includes_rate_of_change(runner: CliRunner, day_file: Path) -> None:
    result = runner.invoke(create_app(), ["--format", "jsonl", "top", "turnover", str(day_file)])

    assert result.exit_code == 0, result.output
    rows = _json_rows(result.output, "symbol")
    assert [row["symbol"] for row in rows] == ["UP", "DOWN", "FLAT"]
    assert Decimal(rows[1]["rate_of_change_percent"]) == -20


def test_output_written_to_file(runner: CliRunner, day_file: Path, tmp_path: Path) -> None:
    target = tmp_path / "out.jsonl"

    result = runner.invoke(create_app(), ["--format", "jsonl", "--output", str(target), "top", "traded", str(day_file)])

    assert result.exit_code == 0, result.output
    lines = target.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[0])["symbol"] == "DOWN"


def test_missing_file_exit_code(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(create_app(), ["summary", str(tmp_path / "absent.csv")])

    assert result.exit_code == 20
    assert "SNAPSHOT_NOT_FOUND" in result.output


def test_invalid_format_rejected(runner: CliRunner, day_file: Path) -> None:
    result = runner.invoke(create_app(), ["--format", "xml", "summary", str(day_file)])

    assert result.exit_code != 0
    assert "Unsupported format" in result.output


def test_snapshots_list(runner: CliRunner, tmp_path: Path) -> None:
    _write_history(tmp_path, 3, {"AAA": 100})

    result = runner.invoke(create_app(), ["--format", "jsonl", "snapshots", "list", "--store", str(tmp_path)])

    assert result.exit_code == 0, result.output
    rows = _json_rows(result.output, "filename")
    assert [row["trading_date"] for row in rows] == ["2026-01-01", "2026-01-02", "2026-01-03"]


def test_surge_reports_above_average_symbols(runner: CliRunner, tmp_path: Path) -> None:
    _write_history(tmp_path, 22, {"AAA": 300, "BBB": 150, "CCC": 50})

    result = runner.invoke(create_app(), ["--format", "jsonl", "surge", "--store", str(tmp_path)])

    assert result.exit_code == 0, result.output
    rows = _json_rows(result.output, "symbol")
    assert [row["symbol"] for row in rows] == ["AAA", "BBB"]
    assert Decimal(rows[0]["percent_above_average"]) == 200
    assert rows[0]["history_depth"] == 22


def test_surge_sort_and_limit(runner: CliRunner, tmp_path: Path) -> None:
    _write_history(tmp_path, 22, {"AAA": 300, "BBB": 150})

    result = runner.invoke(
        create_app(),
        ["--format", "jsonl", "surge", "--store", str(tmp_path), "--sort", "volume-asc", "--limit", "1"],
    )

    assert result.exit_code == 0, result.output
    assert [row["symbol"] for row in _json_rows(result.output, "symbol")] == ["BBB"]


def test_surge_unknown_as_of(runner: CliRunner, tmp_path: Path) -> None:
    _write_history(tmp_path, 3, {"AAA": 100})

    result = runner.invoke(create_app(), ["surge", "--store", str(tmp_path), "--as-of", "2030-01-01"])

    assert result.exit_code == 20
    assert "SNAPSHOT_NOT_FOUND" in result.output


def test_surge_missing_store(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(create_app(), ["surge", "--store", str(tmp_path / "absent")])

    assert result.exit_code == 20
    assert "SNAPSHOT_NOT_FOUND" in result.output


def test_surge_reports_unreadable_snapshot(runner: CliRunner, tmp_path: Path) -> None:
    _write_history(tmp_path, 23, {"AAA": 300})
    (tmp_path / "sec_bhavdata_full_10012026.csv").write_bytes(b"\xff\xfe\xfa")

    result = runner.invoke(create_app(), ["--format", "jsonl", "surge", "--store", str(tmp_path)])

    assert result.exit_code == 0, result.output
    diagnostics = _json_rows(result.output, "code")
    assert [item["snapshot"] for item in diagnostics] == ["sec_bhavdata_full_10012026.csv"]
    assert diagnostics[0]["code"] == "SNAPSHOT_FETCH_ERROR"


@pytest.fixture
def logging_calls(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, dict[str, object]]]:
    calls: list[tuple[str, dict[str, object]]] = []
    monkeypatch.delenv("BHAVSCOPE_LOG_LEVEL", raising=False)
    monkeypatch.setattr(main_module, "configure_logging", lambda level, **kwargs: calls.append((level, kwargs)))
    return calls


def test_logging_follows_configuration(
    runner: CliRunner,
    day_file: Path,
    tmp_path: Path,
    default_config: BhavscopeConfig,
    logging_calls: list[tuple[str, dict[str, object]]],
) -> None:
    log_file = str(tmp_path / "bhavscope.log")
    default_config.logging = LoggingConfig(level="debug", file=log_file)

    result = runner.invoke(create_app(), ["summary", str(day_file)])

    assert result.exit_code == 0, result.output
    assert logging_calls == [("DEBUG", {"file_output": True, "file_path": log_file})]


def test_log_level_option_overrides_configuration(
    runner: CliRunner,
    day_file: Path,
    default_config: BhavscopeConfig,
    logging_calls: list[tuple[str, dict[str, object]]],
) -> None:
    default_config.logging = LoggingConfig(level="DEBUG")

    result = runner.invoke(create_app(), ["--log-level", "error", "summary", str(day_file)])

    assert result.exit_code == 0, result.output
    assert logging_calls == [("ERROR", {"file_output": False, "file_path": None})]


def test_build_store_passes_cloud_name() -> None:
    config = BhavscopeConfig(store=StoreConfig(base_url="https://backend.test", cloud_name="demo"))

    store = build_store(None, config)

    assert isinstance(store, HttpSnapshotStore)
    assert store.config.cloud_name == "demo"
    assert isinstance(build_store("/srv/bhav", config), LocalDirectorySnapshotStore)
