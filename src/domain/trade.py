from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator

from .money import Cash, Coupon, Currency, Money


class Direction(StrEnum):
    BUY = "Buy"
    SELL = "Sell"


class Trade(BaseModel):
    """One reconciled exchange of the tracked asset.

    Sign convention:
    - `paid_amount` is positive for a buy and negative for a sell.
    - `exchanged_amount` is negative when value was given up (buy) and positive when received (sell).
    """

    model_config = ConfigDict(frozen=True)

    direction: Direction
    paid_currency: Currency
    paid_amount: Decimal
    exchanged_currency: Currency
    exchanged_amount: Decimal
    date: str
    is_vault: bool = False

    @model_validator(mode="after")
    def _validate_fields(self) -> Trade:
        if not self.paid_currency or not self.exchanged_currency:
            raise ValueError("Trade currencies must be non-empty")
        if not self.date:
            raise ValueError("Trade.date must be non-empty")
        if self.direction == Direction.BUY and self.paid_amount <= 0:
            raise ValueError("Buy trades must have a positive paid_amount")
        if self.direction == Direction.SELL and self.paid_amount >= 0:
            raise ValueError("Sell trades must have a negative paid_amount")
        return self

    @property
    def pair(self) -> tuple[Currency, Currency]:
        return self.paid_currency, self.exchanged_currency

    def to_money(self, base_currency: Currency) -> Money:
        if self.exchanged_currency == base_currency:
            return Cash(currency=self.exchanged_currency, amount=self.exchanged_amount)
        return Coupon(currency=self.exchanged_currency, amount=self.exchanged_amount, date=self.date)
