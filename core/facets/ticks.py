"""Locale-aware formatting of numeric axis tick values."""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from numbers import Real
from typing import Dict, Tuple

DEFAULT_LOCALE = "en"
MAX_FRACTION_DIGITS = 3

# locale -> (decimal separator, group separator)
LOCALE_SEPARATORS: Dict[str, Tuple[str, str]] = {
    "en": (".", ","),
    "de": (",", "."),
    "de-ch": (".", "\u2019"),
    "fr": (",", "\u202f"),
    "es": (",", "."),
    "it": (",", "."),
    "nl": (",", "."),
    "pt": (",", "."),
    "ro": (",", "."),
    "pl": (",", "\u00a0"),
    "ru": (",", "\u00a0"),
    "sv": (",", "\u00a0"),
}


def resolve_separators(locale: str | None) -> Tuple[str, str]:
    """Return (decimal, group) separators for a BCP 47 style tag."""
    if not locale:
        return LOCALE_SEPARATORS[DEFAULT_LOCALE]
    tag = locale.replace("_", "-").lower()
    if tag in LOCALE_SEPARATORS:
        return LOCALE_SEPARATORS[tag]
    language = tag.split("-", 1)[0]
    return LOCALE_SEPARATORS.get(language, LOCALE_SEPARATORS[DEFAULT_LOCALE])


def format_tick(value: Real, locale: str | None = DEFAULT_LOCALE) -> str:
    """Render a tick value with grouping and at most three fraction digits.

    >>> format_tick(1234567.891)
    '1,234,567.891'
    >>> format_tick(1234.5, "de")
    '1.234,5'
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"Tick values must be numeric, got {type(value).__name__}")

    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "-∞" if number < 0 else "∞"

    with localcontext() as ctx:
        ctx.prec = 400  # enough for any finite float at three fraction digits
        quantum = Decimal(1).scaleb(-MAX_FRACTION_DIGITS)
        rounded = Decimal(repr(number)).quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = Decimal(0)
    text = f"{abs(rounded):,f}"
    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")

    decimal_sep, group_sep = resolve_separators(locale)
    whole = whole.replace(",", group_sep)
    sign = "-" if rounded < 0 else ""
    if fraction:
        return f"{sign}{whole}{decimal_sep}{fraction}"
    return f"{sign}{whole}"


__all__ = ["DEFAULT_LOCALE", "LOCALE_SEPARATORS", "resolve_separators", "format_tick"]
