from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from .money import Cash, Currency, Money, sum_amounts


class MixedCostError(Exception):
    pass


class TaxableTrade(BaseModel):
    """Outcome of one sell: what was given, what was received and what it cost.

    `net_income` is None while income or any cost is still a coupon.
    """

    model_config = ConfigDict(frozen=True)

    date: str | None
    currency: Currency
    amount: Decimal
    income: Money
    costs: list[Money]
    net_income: Decimal | None

    def is_aggregate(self) -> bool:
        return self.date is None

    def sum_cash_amount(self) -> Decimal | None:
        if not all(cost.is_cash() for cost in self.costs):
            return None
        return sum_amounts(self.costs)

    def costs_to_string(self) -> str:
        total = self.sum_cash_amount()
        if total is not None:
            return format(total, "f")
        return ", ".join(str(cost) for cost in self.costs)


def sum_cash_amount_by_currency(taxable_trades: Iterable[TaxableTrade]) -> list[TaxableTrade]:
    """Merge all trades of a currency into one undated row.

    Only possible when every trade is fully valued in the same base currency.
    """
    totals: dict[Currency, tuple[Currency, Decimal, Decimal, Decimal]] = {}

    for trade in taxable_trades:
        costs = trade.sum_cash_amount()
        if costs is None or not isinstance(trade.income, Cash):
            raise MixedCostError(
                f"All costs must be cash: {trade.currency} trade @{trade.date} income={trade.income} "
                f"costs={trade.costs_to_string()}"
            )

        base_currency = trade.income.currency
        totals_base, amount, income, cost = totals.get(
            trade.currency, (base_currency, Decimal(0), Decimal(0), Decimal(0))
        )
        if totals_base != base_currency:
            raise MixedCostError(
                f"Cannot sum {trade.currency} trades valued in both {totals_base} and {base_currency}"
            )
        totals[trade.currency] = (base_currency, amount + trade.amount, income + trade.income.amount, cost + costs)

    return [
        TaxableTrade(
            date=None,
            currency=currency,
            amount=amount,
            income=Cash(currency=base_currency, amount=income),
            costs=[Cash(currency=base_currency, amount=cost)],
            net_income=income + cost,
        )
        for currency, (base_currency, amount, income, cost) in totals.items()
    ]


def filter_by_year(taxable_trades: Iterable[TaxableTrade], year: int) -> list[TaxableTrade]:
    prefix = str(year)
    return [trade for trade in taxable_trades if trade.date is None or trade.date.startswith(prefix)]
