from __future__ import annotations

import logging
from typing import Iterable

from .cost_book import CostBook, LotOrder
from .money import Currency
from .taxable_trade import TaxableTrade
from .trade import Trade

logger = logging.getLogger(__name__)


def replay(book: CostBook, trades: Iterable[Trade]) -> list[TaxableTrade]:
    """Fold chronologically ordered trades through `book`, one taxable trade per sell."""
    taxable: list[TaxableTrade] = []
    for trade in trades:
        result = book.add(trade)
        if result is not None:
            taxable.append(result)

    logger.debug("Remaining costs for %s/%s:", book.currency, book.base_currency)
    for cost in book.costs:
        logger.debug("  %s", cost)
    logger.debug("Taxable trades for %s/%s:", book.currency, book.base_currency)
    for taxable_trade in taxable:
        logger.debug("  %s", taxable_trade)
    return taxable


def taxable_trades(
    trades: Iterable[Trade],
    currency: Currency,
    base_currency: Currency,
    *,
    lot_order: LotOrder = LotOrder.NEWEST_FIRST,
) -> list[TaxableTrade]:
    """Taxable trades of `currency` valued in `base_currency`.

    Every trade of `currency` is replayed; exchanges into other assets are booked as coupons.
    """
    book = CostBook(currency, base_currency, lot_order=lot_order)
    return replay(book, (trade for trade in trades if trade.paid_currency == currency))


def taxable_trades_for_pair(
    trades: Iterable[Trade],
    currency: Currency,
    base_currency: Currency,
    *,
    lot_order: LotOrder = LotOrder.NEWEST_FIRST,
) -> list[TaxableTrade]:
    """Taxable trades of the exact (`currency`, `base_currency`) pair; other trades are ignored."""
    book = CostBook(currency, base_currency, lot_order=lot_order)
    return replay(book, (trade for trade in trades if trade.pair == (currency, base_currency)))


def taxable_trades_all_currencies(
    trades: Iterable[Trade],
    *,
    base_currency: Currency | None = None,
    lot_order: LotOrder = LotOrder.NEWEST_FIRST,
) -> list[TaxableTrade]:
    """Run one independent cost book per traded asset and concatenate the results.

    With `base_currency` every asset gets one book valued in it. Without it, every
    (paid, exchanged) currency pair found in `trades` gets its own book.
    Books are processed in order of first appearance.
    """
    trades = list(trades)
    result: list[TaxableTrade] = []

    if base_currency is not None:
        currencies = dict.fromkeys(trade.paid_currency for trade in trades if trade.paid_currency != base_currency)
        for currency in currencies:
            result.extend(taxable_trades(trades, currency, base_currency, lot_order=lot_order))
        return result

    for currency, exchanged_currency in dict.fromkeys(trade.pair for trade in trades):
        result.extend(taxable_trades_for_pair(trades, currency, exchanged_currency, lot_order=lot_order))
    return result
