from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import Sequence

from config import config
from db.db import init_db
from db.repositories import TaxableTradeRepository, TradeRepository
from domain.calculator import taxable_trades, taxable_trades_all_currencies
from domain.cost_book import LotOrder
from domain.taxable_trade import TaxableTrade, filter_by_year, sum_cash_amount_by_currency
from importers.trades_csv import load_trades
from utils.taxable_trade_summary import compute_taxable_trade_summary, render_taxable_trade_summary
from utils.taxable_trades_csv import write_taxable_trades

ALL_CURRENCIES = "ALL"

logger = logging.getLogger(__name__)


def run(
    csv_path: Path,
    *,
    currency: str,
    base_currency: str | None,
    lot_order: LotOrder,
    year: int | None,
    sum_by_currency: bool,
    output: Path | None,
    db_file: Path,
    delimiter: str,
) -> list[TaxableTrade]:
    # Setup components
    logger.info("Initializing DB at %s", db_file)
    with init_db(db_file=db_file, reset=True) as session:
        trade_repository = TradeRepository(session)
        taxable_trade_repository = TaxableTradeRepository(session)

        # Get data
        logger.info("Loading trades from %s", csv_path)
        load_started = perf_counter()
        trades = load_trades(csv_path, delimiter=delimiter)
        trade_repository.create_many(trades)
        trades = trade_repository.list()
        logger.info("Loaded and stored %d trades in %.2fs", len(trades), perf_counter() - load_started)

        # Process stuff
        calculate_started = perf_counter()
        if currency == ALL_CURRENCIES:
            result = taxable_trades_all_currencies(trades, base_currency=base_currency, lot_order=lot_order)
        else:
            if base_currency is None:
                raise ValueError("A base currency is required when reporting a single currency")
            result = taxable_trades(trades, currency, base_currency, lot_order=lot_order)
        logger.info("Calculated %d taxable trades in %.2fs", len(result), perf_counter() - calculate_started)

        if year is not None:
            result = filter_by_year(result, year)
            logger.info("Kept %d taxable trades from %d", len(result), year)
        if sum_by_currency:
            result = sum_cash_amount_by_currency(result)

        taxable_trade_repository.create_many(result)
        result = taxable_trade_repository.list()

    # Write report
    summary = compute_taxable_trade_summary(result)
    if output is None:
        write_taxable_trades(result, sys.stdout, delimiter=delimiter)
        # stdout carries the CSV
        render_taxable_trade_summary(summary, file=sys.stderr)
    else:
        with output.open("w", encoding="utf-8", newline="") as handle:
            written = write_taxable_trades(result, handle, delimiter=delimiter)
        logger.info("Wrote %d taxable trades to %s", written, output)
        render_taxable_trade_summary(summary)

    return result


def main(argv: Sequence[str] | None = None) -> None:
    settings = config()
    parser = argparse.ArgumentParser(
        description="Calculate weighted-average cost basis tax lines from a reconciled trades CSV."
    )
    parser.add_argument("--csv", type=Path, required=True, help="Trades CSV, one chronological trade per row.")
    parser.add_argument("--currency", default=ALL_CURRENCIES, help="Tracked asset to report, or ALL.")
    parser.add_argument(
        "--base-currency",
        default=settings.base_currency,
        help="Reporting currency. Use an empty value with --currency ALL to give every currency pair its own book.",
    )
    parser.add_argument("--year", type=int, default=None, help="Only report sells made in this year.")
    parser.add_argument("--sum", action="store_true", help="Merge all taxable trades of a currency into one row.")
    parser.add_argument("--output", type=Path, default=None, help="Write the report here instead of stdout.")
    parser.add_argument(
        "--lot-order",
        type=LotOrder,
        choices=list(LotOrder),
        default=settings.lot_order,
        help="Which lot of a category is drawn down first.",
    )
    parser.add_argument("--db-file", type=Path, default=settings.db_file)
    args = parser.parse_args(argv)
    run(
        args.csv,
        currency=args.currency,
        base_currency=args.base_currency or None,
        lot_order=args.lot_order,
        year=args.year,
        sum_by_currency=args.sum,
        output=args.output,
        db_file=args.db_file,
        delimiter=settings.csv_delimiter,
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    main()
