from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

import main as main_module
from db.db import init_db
from domain.cost_book import LotOrder
from domain.taxable_trade import MixedCostError, TaxableTrade
from main import main, run

TRADES_CSV = """Type;Paid Currency;Paid Amount;Exchanged Currency;Exchanged Amount;Date;Vault
Buy;DOGE;39.94;SEK;-20;2022-01-03 09:00:00;true
Buy;DOGE;10000;SEK;-21000;2022-01-04 09:00:00;
Buy;DOGE;200;EOS;-500;2022-02-03 10:30:29;
Sell;DOGE;-50;SEK;200.63;2022-05-05 05:01:12;
Buy;BTC;1;SEK;-100000;2022-06-01 10:00:00;
Sell;BTC;-0.5;SEK;60000;2022-09-01 10:00:00;
Sell;DOGE;-100;BTC;0.0001;2023-01-10 12:00:00;
"""


@pytest.fixture()
def trades_csv(tmp_path: Path) -> Path:
    csv_path = tmp_path / "trades.csv"
    csv_path.write_text(TRADES_CSV, encoding="utf-8")
    return csv_path


def _run(trades_csv: Path, tmp_path: Path, **overrides: object) -> list[TaxableTrade]:
    kwargs: dict[str, object] = {
        "currency": "ALL",
        "base_currency": "SEK",
        "lot_order": LotOrder.NEWEST_FIRST,
        "year": None,
        "sum_by_currency": False,
        "output": None,
        "db_file": tmp_path / "artifacts" / "revolutax.db",
        "delimiter": ";",
    }
    kwargs.update(overrides)
    return run(trades_csv, **kwargs)  # type: ignore[arg-type]


def test_run_all_currencies_to_stdout(
    trades_csv: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    result = _run(trades_csv, tmp_path)

    assert [(trade.currency, trade.net_income) for trade in result] == [
        ("DOGE", Decimal("95.63")),
        ("DOGE", None),
        ("BTC", Decimal("10000")),
    ]
    captured = capsys.readouterr()
    assert captured.err.startswith("Taxable trades per currency:")
    lines = captured.out.splitlines()
    assert len(lines) == 4
    assert lines[0] == "Date;Currency;Amount;Income;Cost;Net Income"
    assert lines[1] == "2022-05-05 05:01:12;DOGE;-50;200.63;-105;95.63"
    assert lines[2] == (
        "2023-01-10 12:00:00;DOGE;-100;(0.0001 BTC 2023-01-10 12:00:00);(-250 EOS 2022-02-03 10:30:29);"
    )
    assert lines[3].split(";")[-1] == "10000"
    assert (tmp_path / "artifacts" / "revolutax.db").exists()


def test_run_single_currency_for_year(trades_csv: Path, tmp_path: Path) -> None:
    result = _run(trades_csv, tmp_path, currency="DOGE", year=2023)

    assert [trade.date for trade in result] == ["2023-01-10 12:00:00"]


def test_run_single_currency_requires_base(trades_csv: Path, tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="base currency"):
        _run(trades_csv, tmp_path, currency="DOGE", base_currency=None)


def test_run_sum_fails_on_coupon_costs(trades_csv: Path, tmp_path: Path) -> None:
    with pytest.raises(MixedCostError):
        _run(trades_csv, tmp_path, sum_by_currency=True)


def test_run_sum_for_year_writes_output_and_summary(
    trades_csv: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = tmp_path / "report.csv"

    result = _run(trades_csv, tmp_path, year=2022, sum_by_currency=True, output=output)

    assert [(trade.date, trade.currency, trade.net_income) for trade in result] == [
        (None, "DOGE", Decimal("95.63")),
        (None, "BTC", Decimal("10000")),
    ]
    rows = output.read_text(encoding="utf-8").splitlines()
    assert rows[0] == "Date;Currency;Amount;Income;Cost;Net Income"
    assert rows[1] == ";DOGE;-50;200.63;-105;95.63"
    assert len(rows) == 3
    assert capsys.readouterr().out.startswith("Taxable trades per currency:")


def test_rerun_replaces_previous_database(trades_csv: Path, tmp_path: Path) -> None:
    _run(trades_csv, tmp_path)
    result = _run(trades_csv, tmp_path)

    assert len(result) == 3


def test_main_parses_arguments(trades_csv: Path, tmp_path: Path) -> None:
    output = tmp_path / "doge.csv"

    main(
        [
            "--csv",
            str(trades_csv),
            "--currency",
            "DOGE",
            "--base-currency",
            "SEK",
            "--lot-order",
            "OLDEST_FIRST",
            "--output",
            str(output),
            "--db-file",
            str(tmp_path / "revolutax.db"),
        ]
    )

    rows = output.read_text(encoding="utf-8").splitlines()
    assert len(rows) == 3
    assert rows[1].startswith("2022-05-05 05:01:12;DOGE;-50;")


def test_run_closes_session(trades_csv: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    closed: list[Session] = []

    def tracking_init_db(**kwargs: object) -> Session:
        session = init_db(**kwargs)  # type: ignore[arg-type]
        close = session.close

        def tracking_close() -> None:
            closed.append(session)
            close()

        monkeypatch.setattr(session, "close", tracking_close)
        return session

    monkeypatch.setattr(main_module, "init_db", tracking_init_db)

    _run(trades_csv, tmp_path)

    assert len(closed) == 1
