from __future__ import annotations

from functools import cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.cost_book import LotOrder

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ARTIFACTS_DIR = PROJECT_ROOT / "artifacts"
DB_FILE = ARTIFACTS_DIR / "revolutax.db"


class AppSettings(BaseSettings):
    base_currency: str = "SEK"
    lot_order: LotOrder = LotOrder.NEWEST_FIRST
    csv_delimiter: str = ";"
    db_file: Path = DB_FILE

    model_config = SettingsConfigDict(
        env_prefix="REVOLUTAX_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@cache
def config() -> AppSettings:
    return AppSettings()
