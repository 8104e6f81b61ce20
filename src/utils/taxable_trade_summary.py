from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, TextIO

from domain.taxable_trade import TaxableTrade

from .formatting import format_currency, format_decimal


@dataclass
class CurrencyTaxSummary:
    currency: str
    taxable_trades: int
    amount: Decimal
    income: Decimal
    cost: Decimal
    net_income: Decimal
    unresolved_trades: int


def compute_taxable_trade_summary(taxable_trades: Iterable[TaxableTrade]) -> list[CurrencyTaxSummary]:
    """Per-currency totals of the trades that could be netted in the base currency.

    Trades with a coupon income or cost are only counted in `unresolved_trades`.
    """
    totals: dict[str, CurrencyTaxSummary] = {}

    for trade in taxable_trades:
        summary = totals.get(trade.currency)
        if summary is None:
            summary = CurrencyTaxSummary(
                currency=trade.currency,
                taxable_trades=0,
                amount=Decimal(0),
                income=Decimal(0),
                cost=Decimal(0),
                net_income=Decimal(0),
                unresolved_trades=0,
            )
            totals[trade.currency] = summary

        summary.taxable_trades += 1
        summary.amount += trade.amount
        cost = trade.sum_cash_amount()
        if trade.net_income is None or cost is None:
            summary.unresolved_trades += 1
            continue

        summary.income += trade.income.amount
        summary.cost += cost
        summary.net_income += trade.net_income

    return [totals[currency] for currency in sorted(totals)]


def render_taxable_trade_summary(rows: Iterable[CurrencyTaxSummary], file: TextIO | None = None) -> None:
    rows_list = list(rows)
    print("Taxable trades per currency:", file=file)
    if not rows_list:
        print("  (no taxable trades)", file=file)
        return

    table = [
        (
            row.currency,
            str(row.taxable_trades),
            format_decimal(row.amount),
            format_currency(row.income),
            format_currency(row.cost),
            format_currency(row.net_income),
            str(row.unresolved_trades),
        )
        for row in rows_list
    ]
    labels = ("Currency", "Trades", "Amount", "Income", "Cost", "Net income", "Unresolved")
    widths = [max(len(label), max(len(cells[idx]) for cells in table)) for idx, label in enumerate(labels)]

    header = " ".join(
        f"{label:<{widths[idx]}}" if idx == 0 else f"{label:>{widths[idx]}}" for idx, label in enumerate(labels)
    )
    lines = [header, "-" * len(header)]
    for cells in table:
        lines.append(
            " ".join(f"{cell:<{widths[idx]}}" if idx == 0 else f"{cell:>{widths[idx]}}" for idx, cell in enumerate(cells))
        )

    print("\n".join(lines), file=file)
