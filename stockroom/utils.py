from __future__ import annotations

import re
from datetime import datetime, date, timezone
from typing import Union


def iso_today() -> str:
    return date.today().isoformat()


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def safe_div(n: float, d: float) -> float:
    return float(n) / float(d) if d else 0.0


def format_currency(value: Union[int, float, str]) -> str:
    """12500 -> '12.500' (dot thousands separator, up to 3 decimals with comma)."""
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            value = 0
    num = float(value)
    if num.is_integer():
        return f"{int(num):,}".replace(",", ".")
    whole, frac = f"{num:,.3f}".split(".")
    frac = frac.rstrip("0")
    return whole.replace(",", ".") + ("," + frac if frac else "")


def remove_non_digits(value: str) -> str:
    return re.sub(r"\D", "", value)


def format_currency_input(value: str) -> str:
    digits = remove_non_digits(value)
    if digits == "":
        return ""
    return format_currency(int(digits))


def parse_formatted_currency(formatted_value: str) -> int:
    digits = remove_non_digits(formatted_value)
    return int(digits) if digits else 0
