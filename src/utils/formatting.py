from __future__ import annotations

from decimal import Decimal


def format_decimal(value: Decimal) -> str:
    """Plain notation without trailing zeros, e.g. Decimal("-105.00") -> "-105"."""
    normalized = value.normalize()
    if normalized == 0:
        return "0"
    if normalized == normalized.to_integral():
        return f"{normalized:.0f}"
    return format(normalized, "f")


def format_currency(value: Decimal | None) -> str:
    if value is None:
        return "-"
    cents = value.quantize(Decimal("0.01"))
    return f"{cents:.2f}"
