from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


class DecimalAsString(TypeDecorator):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: object) -> str | None:
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value: str | None, dialect: object) -> Decimal | None:
        if value is None:
            return None
        return Decimal(value)


class Base(DeclarativeBase):
    pass


class TradeOrm(Base):
    __tablename__ = "trades"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    direction: Mapped[str] = mapped_column(String, nullable=False)
    paid_currency: Mapped[str] = mapped_column(String, nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    exchanged_currency: Mapped[str] = mapped_column(String, nullable=False)
    exchanged_amount: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    date: Mapped[str] = mapped_column(String, nullable=False)
    is_vault: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class TaxableTradeOrm(Base):
    __tablename__ = "taxable_trades"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[str | None] = mapped_column(String, nullable=True)
    currency: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    income_kind: Mapped[str] = mapped_column(String, nullable=False)
    income_currency: Mapped[str] = mapped_column(String, nullable=False)
    income_amount: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    income_date: Mapped[str | None] = mapped_column(String, nullable=True)
    net_income: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)

    costs: Mapped[list["TaxableTradeCostOrm"]] = relationship(
        cascade="all, delete-orphan",
        back_populates="taxable_trade",
        lazy="joined",
        order_by="TaxableTradeCostOrm.position",
    )


class TaxableTradeCostOrm(Base):
    __tablename__ = "taxable_trade_costs"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    taxable_trade_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("taxable_trades.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[str] = mapped_column(String, nullable=False)
    currency: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    date: Mapped[str | None] = mapped_column(String, nullable=True)

    taxable_trade: Mapped[TaxableTradeOrm] = relationship(back_populates="costs")
