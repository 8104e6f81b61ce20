from __future__ import annotations

import logging
from csv import DictReader
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.trade import Direction, Trade

logger = logging.getLogger(__name__)

TRADE_COLUMNS = (
    "Type",
    "Paid Currency",
    "Paid Amount",
    "Exchanged Currency",
    "Exchanged Amount",
    "Date",
    "Vault",
)


class TradeRow(BaseModel):
    """One row of a reconciled trades file (one trade per row)."""

    model_config = ConfigDict(populate_by_name=True)

    direction: Direction = Field(alias="Type")
    paid_currency: str = Field(alias="Paid Currency")
    paid_amount: Decimal = Field(alias="Paid Amount")
    exchanged_currency: str = Field(alias="Exchanged Currency")
    exchanged_amount: Decimal = Field(alias="Exchanged Amount")
    date: str = Field(alias="Date")
    is_vault: bool = Field(default=False, alias="Vault")

    @field_validator("paid_currency", "exchanged_currency", "date", mode="before")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value

    @field_validator("direction", mode="before")
    @classmethod
    def _normalize_direction(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @field_validator("is_vault", mode="before")
    @classmethod
    def _empty_vault(cls, value: str | bool | None) -> str | bool:
        if value is None or value == "":
            return False
        return value

    def to_trade(self) -> Trade:
        return Trade(
            direction=self.direction,
            paid_currency=self.paid_currency,
            paid_amount=self.paid_amount,
            exchanged_currency=self.exchanged_currency,
            exchanged_amount=self.exchanged_amount,
            date=self.date,
            is_vault=self.is_vault,
        )


def load_trades(csv_path: Path, *, delimiter: str = ";") -> list[Trade]:
    """Load trades in file order; the file is expected to be chronological."""
    with csv_path.open(encoding="utf-8", newline="") as handle:
        reader = DictReader(handle, delimiter=delimiter)
        if reader.fieldnames is None:
            raise ValueError(f"Trades CSV {csv_path} is empty or missing headers")

        missing = set(TRADE_COLUMNS) - {"Vault"} - {name.strip() for name in reader.fieldnames}
        if missing:
            raise ValueError(f"Trades CSV {csv_path} missing required columns: {', '.join(sorted(missing))}")

        trades: list[Trade] = []
        for line_number, row in enumerate(reader, start=2):
            cleaned = {key.strip(): value for key, value in row.items() if key is not None}
            try:
                trades.append(TradeRow.model_validate(cleaned).to_trade())
            except ValueError as err:
                raise ValueError(f"Invalid trade on line {line_number} of {csv_path}: {err}") from err

    logger.info("Loaded %d trades from %s", len(trades), csv_path)
    return trades
