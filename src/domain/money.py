from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Iterable, Literal, Union

from pydantic import BaseModel, Field, model_validator

Currency = str


class MoneyKind(StrEnum):
    CASH = "CASH"
    COUPON = "COUPON"


class Cash(BaseModel):
    """Amount already denominated in the base (reporting) currency.

    Amount sign convention:
    - Negative amount is value paid out (a cost).
    - Positive amount is value received (income).
    """

    kind: Literal[MoneyKind.CASH] = MoneyKind.CASH
    currency: Currency
    amount: Decimal

    def is_cash(self) -> bool:
        return True

    def deduct(self, amount: Decimal) -> Cash:
        self.amount -= amount
        return Cash(currency=self.currency, amount=amount)

    def to_net_income(self, costs: Iterable[Money]) -> Decimal | None:
        costs = list(costs)
        if not all(cost.is_cash() for cost in costs):
            return None
        return self.amount + sum_amounts(costs)

    def __str__(self) -> str:
        return format(self.amount, "f")


class Coupon(BaseModel):
    """Amount of a non-base asset, dated by the trade that produced it.

    Its base-currency value stays unknown until the asset itself is sold for cash.
    """

    kind: Literal[MoneyKind.COUPON] = MoneyKind.COUPON
    currency: Currency
    amount: Decimal
    date: str

    @model_validator(mode="after")
    def _validate_date(self) -> Coupon:
        if not self.date:
            raise ValueError("Coupon.date must be non-empty")
        return self

    def is_cash(self) -> bool:
        return False

    def deduct(self, amount: Decimal) -> Coupon:
        self.amount -= amount
        return Coupon(currency=self.currency, amount=amount, date=self.date)

    def to_net_income(self, costs: Iterable[Money]) -> Decimal | None:
        # Coupon income has no base-currency value yet.
        return None

    def __str__(self) -> str:
        return f"({self.amount:f} {self.currency} {self.date})"


Money = Annotated[Union[Cash, Coupon], Field(discriminator="kind")]


def sum_amounts(values: Iterable[Money]) -> Decimal:
    return sum((value.amount for value in values), start=Decimal(0))
