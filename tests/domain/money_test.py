from decimal import Decimal

import pytest
from pydantic import ValidationError

from domain.money import Cash, Coupon, MoneyKind
from tests.constants import BTC, EOS, SEK


def test_cash_deduct_returns_slice_and_shrinks_self() -> None:
    cash = Cash(currency=SEK, amount=Decimal("-21000"))

    deducted = cash.deduct(Decimal("-105"))

    assert deducted == Cash(currency=SEK, amount=Decimal("-105"))
    assert cash.amount == Decimal("-20895")


def test_coupon_deduct_keeps_currency_and_date() -> None:
    coupon = Coupon(currency=EOS, amount=Decimal("-500"), date="2021-02-03 10:30:29")

    deducted = coupon.deduct(Decimal("-125"))

    assert deducted == Coupon(currency=EOS, amount=Decimal("-125"), date="2021-02-03 10:30:29")
    assert coupon.amount == Decimal("-375")
    assert coupon.date == "2021-02-03 10:30:29"


def test_cash_and_coupon_are_never_equal() -> None:
    cash = Cash(currency=BTC, amount=Decimal("1"))
    coupon = Coupon(currency=BTC, amount=Decimal("1"), date="2022-01-01 00:00:00")

    assert cash != coupon
    assert cash.kind == MoneyKind.CASH
    assert coupon.kind == MoneyKind.COUPON
    assert cash.is_cash()
    assert not coupon.is_cash()


def test_net_income_of_cash_against_cash_costs() -> None:
    income = Cash(currency=SEK, amount=Decimal("200.63"))
    costs = [Cash(currency=SEK, amount=Decimal("-105")), Cash(currency=SEK, amount=Decimal("-10.5"))]

    assert income.to_net_income(costs) == Decimal("85.13")


def test_net_income_without_costs_is_the_income() -> None:
    income = Cash(currency=SEK, amount=Decimal("12.5"))

    assert income.to_net_income([]) == Decimal("12.5")


def test_net_income_is_unknown_with_coupon_cost() -> None:
    income = Cash(currency=SEK, amount=Decimal("200"))
    costs = [
        Cash(currency=SEK, amount=Decimal("-100")),
        Coupon(currency=EOS, amount=Decimal("-5"), date="2021-02-03 10:30:29"),
    ]

    assert income.to_net_income(costs) is None


def test_net_income_is_unknown_for_coupon_income() -> None:
    income = Coupon(currency=BTC, amount=Decimal("0.0000201"), date="2022-07-06 06:02:13")

    assert income.to_net_income([Cash(currency=SEK, amount=Decimal("-100"))]) is None


def test_money_display() -> None:
    assert str(Cash(currency=SEK, amount=Decimal("-105.50"))) == "-105.50"
    coupon = Coupon(currency=BTC, amount=Decimal("-5.05E-7"), date="2021-03-04 11:31:30")
    assert str(coupon) == "(-0.000000505 BTC 2021-03-04 11:31:30)"


def test_coupon_requires_date() -> None:
    with pytest.raises(ValidationError):
        Coupon(currency=EOS, amount=Decimal("-1"), date="")
