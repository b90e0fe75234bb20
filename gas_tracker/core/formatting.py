"""
Fixed-point formatting for SUPRA amounts

format_units() is the only path from base units to a display string used by
the aggregator and the cache. It works on Python ints end to end; the float
helpers further down are for approximate console labels only.
"""

import math

from gas_tracker.core.config import DISPLAY_DECIMALS, SUPRA_DECIMALS


def format_units(
    raw: int,
    decimals: int = SUPRA_DECIMALS,
    display_decimals: int | None = DISPLAY_DECIMALS,
) -> str:
    """
    Render an integer amount in base units as an exact decimal string.

    Args:
        raw: Non-negative amount in base units.
        decimals: Number of decimal places of the unit (8 for SUPRA).
        display_decimals: Fractional digits to keep. Extra digits are cut,
            never rounded. None keeps all `decimals` digits.

    Returns:
        e.g. format_units(123456789, 8) -> "1.234567"
    """
    if raw < 0:
        raise ValueError(f"raw amount must be non-negative, got {raw}")
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")

    denom = 10**decimals
    whole, frac = divmod(raw, denom)
    if decimals == 0:
        return str(whole)

    frac_str = str(frac).rjust(decimals, "0")
    if display_decimals is not None and display_decimals < decimals:
        frac_str = frac_str[:display_decimals]
    if not frac_str:
        return str(whole)
    return f"{whole}.{frac_str}"


def zero_display(decimals: int = SUPRA_DECIMALS, display_decimals: int | None = DISPLAY_DECIMALS) -> str:
    """Zero in the same shape format_units() gives every other amount"""
    return format_units(0, decimals, display_decimals)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)"""
    return math.floor(value + 0.5)


def _plain_number(num: float) -> str:
    if num.is_integer():
        return str(int(num))
    return repr(num)


def format_compact_balance(raw) -> str:
    """Short balance label: 950, 12.5K, 1.23M (prefixed ~ when 3 decimals disagree)"""
    try:
        num = float(raw)
    except (TypeError, ValueError):
        return str(raw)
    if math.isnan(num):
        return str(raw)

    if num < 1000:
        return _plain_number(num)

    if num < 1_000_000:
        rounded = round_half_up(num / 1000 * 10) / 10
        if rounded.is_integer():
            return f"{rounded:.0f}K"
        return f"{rounded}K"

    val = num / 1_000_000
    full = f"{val:.3f}"
    rounded2 = f"{round_half_up(val * 100) / 100:.2f}"
    needs_approx = full[:4] != rounded2[:4]
    return f"{'~' if needs_approx else ''}{rounded2}M"


def format_usd_approx(supra_str: str | None, supra_usd_price: float | None) -> str | None:
    """USD value of a SUPRA display string, with more digits for dust amounts"""
    if not supra_str or supra_usd_price is None:
        return None
    try:
        amount = float(supra_str)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None

    usd = amount * supra_usd_price
    digits = 2
    if abs(usd) < 0.01:
        digits = 3
    if abs(usd) < 0.001:
        digits = 4
    return f"{usd:.{digits}f}"


def format_approx_supra(raw) -> str | None:
    """Approximate SUPRA label: ~1.23M, ~4.5K, ~0.12"""
    if raw is None:
        return None
    try:
        num = float(raw)
    except (TypeError, ValueError):
        return str(raw)
    if not math.isfinite(num):
        return str(raw)

    if abs(num) >= 1_000_000:
        return f"~{round_half_up(num / 1_000_000 * 100) / 100:.2f}M"
    if abs(num) >= 1_000:
        return f"~{round_half_up(num / 1_000 * 10) / 10:.1f}K"
    return f"~{round_half_up(num * 100) / 100:.2f}"
