from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import Iterable

from .money import Cash, Currency, Money, MoneyKind
from .taxable_trade import TaxableTrade
from .trade import Direction, Trade


class CostBookError(Exception):
    pass


class InsufficientCostBasisError(CostBookError):
    def __init__(
        self,
        message: str,
        *,
        trade: Trade,
        currency: Currency,
        base_currency: Currency,
        requested: Decimal,
        available: Decimal,
    ) -> None:
        super().__init__(message)
        self.trade = trade
        self.currency = currency
        self.base_currency = base_currency
        self.requested = requested
        self.available = available


class LotOrder(StrEnum):
    """Which lot of a category is drawn down first."""

    NEWEST_FIRST = "NEWEST_FIRST"
    OLDEST_FIRST = "OLDEST_FIRST"


@dataclass(frozen=True)
class CostCategory:
    kind: MoneyKind
    is_vault: bool


# Same money kind as the income first, vault holdings only once ordinary ones are exhausted.
CASH_INCOME_ORDER: tuple[CostCategory, ...] = (
    CostCategory(MoneyKind.CASH, is_vault=False),
    CostCategory(MoneyKind.COUPON, is_vault=False),
    CostCategory(MoneyKind.CASH, is_vault=True),
    CostCategory(MoneyKind.COUPON, is_vault=True),
)
COUPON_INCOME_ORDER: tuple[CostCategory, ...] = (
    CostCategory(MoneyKind.COUPON, is_vault=False),
    CostCategory(MoneyKind.CASH, is_vault=False),
    CostCategory(MoneyKind.COUPON, is_vault=True),
    CostCategory(MoneyKind.CASH, is_vault=True),
)


def deduction_order(income: Money) -> tuple[CostCategory, ...]:
    if income.kind == MoneyKind.CASH:
        return CASH_INCOME_ORDER
    return COUPON_INCOME_ORDER


@dataclass
class Cost:
    """A lot of the tracked asset and the value given up to acquire it.

    `exchanged.amount / paid_amount` is the lot's unit cost; it is never stored,
    so merging cash buys yields the weighted average without an explicit step.
    """

    paid_amount: Decimal
    exchanged: Money
    is_vault: bool = False

    @property
    def unit_cost(self) -> Decimal:
        return self.exchanged.amount / self.paid_amount

    def matches(self, category: CostCategory) -> bool:
        return self.exchanged.kind == category.kind and self.is_vault == category.is_vault

    def maybe_deduct(self, paid_amount: Decimal) -> Cost | None:
        """Redeem `paid_amount` (<= 0) units from this lot.

        Returns the consumed slice, or None when the lot holds too little.
        """
        if self.paid_amount + paid_amount < 0:
            return None

        if -paid_amount == self.paid_amount:
            # Draining the lot hands back its whole remaining value.
            exchanged_amount = self.exchanged.amount
        else:
            exchanged_amount = self.exchanged.amount * abs(paid_amount) / self.paid_amount

        deducted = self.exchanged.deduct(exchanged_amount)
        self.paid_amount += paid_amount
        return Cost(paid_amount=-paid_amount, exchanged=deducted, is_vault=self.is_vault)

    def add_cash(self, paid_amount: Decimal, amount: Decimal) -> None:
        if not isinstance(self.exchanged, Cash):
            raise ValueError("Only cash lots can be merged")
        self.exchanged.amount += amount
        self.paid_amount += paid_amount


class Deductor:
    """Consume `paid_amount` units from `costs`, one category pass at a time.

    `costs` is modified in place: slices are taken from the lots and drained lots
    are removed after every pass.
    """

    def __init__(
        self,
        costs: list[Cost],
        paid_amount: Decimal,
        *,
        lot_order: LotOrder = LotOrder.NEWEST_FIRST,
    ) -> None:
        self._costs = costs
        self._lot_order = lot_order
        self.remaining = paid_amount
        self._result: list[Cost] = []

    @property
    def is_satisfied(self) -> bool:
        return self.remaining == 0

    def deduct_in_order(self, categories: Iterable[CostCategory]) -> Deductor:
        for category in categories:
            self.deduct(category)
        return self

    def deduct(self, category: CostCategory) -> Deductor:
        if self.remaining == 0:
            return self

        for cost in self._scan():
            if self.remaining == 0:
                break
            if not cost.matches(category):
                continue

            amount = max(self.remaining, -cost.paid_amount)
            deducted = cost.maybe_deduct(amount)
            if deducted is None:
                continue
            self._result.append(deducted)
            self.remaining -= amount

        self._costs[:] = [cost for cost in self._costs if cost.paid_amount != 0]
        return self

    def collect(self) -> list[Cost]:
        return list(self._result)

    def _scan(self) -> Iterable[Cost]:
        if self._lot_order == LotOrder.NEWEST_FIRST:
            return reversed(self._costs)
        return iter(self._costs)


class CostBook:
    """Weighted-average cost ledger of one tracked asset against one base currency."""

    def __init__(
        self,
        currency: Currency,
        base_currency: Currency,
        *,
        lot_order: LotOrder = LotOrder.NEWEST_FIRST,
    ) -> None:
        self.currency = currency
        self.base_currency = base_currency
        self.lot_order = lot_order
        self.costs: list[Cost] = []

    def remaining_amount(self) -> Decimal:
        return sum((cost.paid_amount for cost in self.costs), start=Decimal(0))

    def add(self, trade: Trade) -> TaxableTrade | None:
        if trade.direction == Direction.BUY:
            self.add_buy(trade)
            return None
        return self.add_sell(trade)

    def add_buy(self, trade: Trade) -> None:
        self._check_currency(trade)
        self._check_direction(trade, Direction.BUY)
        cost = trade.to_money(self.base_currency)
        if isinstance(cost, Cash):
            self._find_and_add_cash(trade.is_vault, trade.paid_amount, cost.amount)
        else:
            self.costs.append(Cost(paid_amount=trade.paid_amount, exchanged=cost, is_vault=trade.is_vault))

    def add_sell(self, trade: Trade) -> TaxableTrade:
        self._check_currency(trade)
        self._check_direction(trade, Direction.SELL)
        income = trade.to_money(self.base_currency)
        costs = [cost.exchanged for cost in self._find_and_deduct_cost(trade, income)]
        return TaxableTrade(
            date=trade.date,
            currency=trade.paid_currency,
            amount=trade.paid_amount,
            income=income,
            costs=costs,
            net_income=income.to_net_income(costs),
        )

    def _check_currency(self, trade: Trade) -> None:
        if trade.paid_currency != self.currency:
            raise CostBookError(f"Trade of {trade.paid_currency} does not belong to the {self.currency} cost book")

    def _check_direction(self, trade: Trade, direction: Direction) -> None:
        if trade.direction != direction:
            raise CostBookError(f"{trade.direction} trade @{trade.date} passed where a {direction} trade was expected")

    def _find_and_add_cash(self, is_vault: bool, paid_amount: Decimal, amount: Decimal) -> None:
        cash_cost = next(
            (cost for cost in self.costs if cost.exchanged.is_cash() and cost.is_vault == is_vault),
            None,
        )
        if cash_cost is None:
            cash_cost = Cost(
                paid_amount=Decimal(0),
                exchanged=Cash(currency=self.base_currency, amount=Decimal(0)),
                is_vault=is_vault,
            )
            self.costs.append(cash_cost)
        cash_cost.add_cash(paid_amount, amount)

    def _find_and_deduct_cost(self, trade: Trade, income: Money) -> list[Cost]:
        """Deduct `trade.paid_amount` units from the book, preferring lots of the income's kind.

        The book is checked as a whole first, so a sell that cannot be covered
        leaves every lot untouched.
        """
        available = self.remaining_amount()
        if available + trade.paid_amount < 0:
            raise self._insufficient_cost_basis(trade, available)

        deductor = Deductor(self.costs, trade.paid_amount, lot_order=self.lot_order)
        deductor.deduct_in_order(deduction_order(income))
        if not deductor.is_satisfied:
            raise self._insufficient_cost_basis(trade, available)
        return deductor.collect()

    def _insufficient_cost_basis(self, trade: Trade, available: Decimal) -> InsufficientCostBasisError:
        return InsufficientCostBasisError(
            f"Not enough costs to deduct from for {trade.paid_currency}/{self.base_currency} "
            f"sell of {abs(trade.paid_amount)} @{trade.date} (available={available})",
            trade=trade,
            currency=self.currency,
            base_currency=self.base_currency,
            requested=abs(trade.paid_amount),
            available=available,
        )
