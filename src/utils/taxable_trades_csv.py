from __future__ import annotations

import csv
from typing import Iterable, TextIO

from domain.taxable_trade import TaxableTrade

from .formatting import format_decimal

TAXABLE_TRADE_COLUMNS = ("Date", "Currency", "Amount", "Income", "Cost", "Net Income")


def taxable_trade_row(trade: TaxableTrade) -> dict[str, str]:
    """Flatten a taxable trade into one report row.

    Cost is a single number when every cost is cash, otherwise every component is listed.
    """
    return {
        "Date": trade.date or "",
        "Currency": trade.currency,
        "Amount": format_decimal(trade.amount),
        "Income": str(trade.income),
        "Cost": trade.costs_to_string(),
        "Net Income": "" if trade.net_income is None else format_decimal(trade.net_income),
    }


def write_taxable_trades(trades: Iterable[TaxableTrade], handle: TextIO, *, delimiter: str = ";") -> int:
    writer = csv.DictWriter(handle, fieldnames=TAXABLE_TRADE_COLUMNS, delimiter=delimiter, lineterminator="\n")
    writer.writeheader()
    written = 0
    for trade in trades:
        writer.writerow(taxable_trade_row(trade))
        written += 1
    return written
