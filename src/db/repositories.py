from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db import models
from domain.money import Cash, Coupon, Money, MoneyKind
from domain.taxable_trade import TaxableTrade
from domain.trade import Direction, Trade


class TradeRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_many(self, trades: list[Trade]) -> list[Trade]:
        start = self._session.scalar(select(func.count()).select_from(models.TradeOrm)) or 0
        orm_trades = [
            models.TradeOrm(
                position=start + idx,
                direction=trade.direction.value,
                paid_currency=trade.paid_currency,
                paid_amount=trade.paid_amount,
                exchanged_currency=trade.exchanged_currency,
                exchanged_amount=trade.exchanged_amount,
                date=trade.date,
                is_vault=trade.is_vault,
            )
            for idx, trade in enumerate(trades)
        ]
        self._session.add_all(orm_trades)
        self._session.commit()
        return trades

    def list(self) -> list[Trade]:
        orm_trades = self._session.query(models.TradeOrm).order_by(models.TradeOrm.position.asc()).all()
        return [
            Trade(
                direction=Direction(trade.direction),
                paid_currency=trade.paid_currency,
                paid_amount=trade.paid_amount,
                exchanged_currency=trade.exchanged_currency,
                exchanged_amount=trade.exchanged_amount,
                date=trade.date,
                is_vault=trade.is_vault,
            )
            for trade in orm_trades
        ]


class TaxableTradeRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_many(self, taxable_trades: list[TaxableTrade]) -> list[TaxableTrade]:
        start = self._session.scalar(select(func.count()).select_from(models.TaxableTradeOrm)) or 0
        orm_trades: list[models.TaxableTradeOrm] = []
        for idx, trade in enumerate(taxable_trades):
            orm_trade = models.TaxableTradeOrm(
                position=start + idx,
                date=trade.date,
                currency=trade.currency,
                amount=trade.amount,
                income_kind=trade.income.kind.value,
                income_currency=trade.income.currency,
                income_amount=trade.income.amount,
                income_date=trade.income.date if isinstance(trade.income, Coupon) else None,
                net_income=trade.net_income,
            )
            orm_trade.costs = [
                models.TaxableTradeCostOrm(
                    position=cost_idx,
                    kind=cost.kind.value,
                    currency=cost.currency,
                    amount=cost.amount,
                    date=cost.date if isinstance(cost, Coupon) else None,
                )
                for cost_idx, cost in enumerate(trade.costs)
            ]
            orm_trades.append(orm_trade)

        self._session.add_all(orm_trades)
        self._session.commit()
        return taxable_trades

    def list(self) -> list[TaxableTrade]:
        orm_trades = (
            self._session.query(models.TaxableTradeOrm).order_by(models.TaxableTradeOrm.position.asc()).all()
        )
        return [self._to_domain(trade) for trade in orm_trades]

    @staticmethod
    def _to_domain(orm_trade: models.TaxableTradeOrm) -> TaxableTrade:
        return TaxableTrade(
            date=orm_trade.date,
            currency=orm_trade.currency,
            amount=orm_trade.amount,
            income=_to_money(
                orm_trade.income_kind, orm_trade.income_currency, orm_trade.income_amount, orm_trade.income_date
            ),
            costs=[_to_money(cost.kind, cost.currency, cost.amount, cost.date) for cost in orm_trade.costs],
            net_income=orm_trade.net_income,
        )


def _to_money(kind: str, currency: str, amount: Decimal, date: str | None) -> Money:
    if MoneyKind(kind) == MoneyKind.CASH:
        return Cash(currency=currency, amount=amount)
    if date is None:
        raise ValueError(f"Coupon of {currency} stored without a date")
    return Coupon(currency=currency, amount=amount, date=date)
