from __future__ import annotations

from compound_core.domain.models import FORTNIGHTLY, MONTHLY, YEARLY

WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12
WEEKS_PER_MONTH = WEEKS_PER_YEAR / MONTHS_PER_YEAR


def to_weekly(amount: float, frequency: str) -> float:
    """Normalize a periodic amount to its weekly equivalent. Unknown frequencies pass through as weekly."""
    if frequency == FORTNIGHTLY:
        return amount / 2
    if frequency == MONTHLY:
        return amount * MONTHS_PER_YEAR / WEEKS_PER_YEAR
    if frequency == YEARLY:
        return amount / WEEKS_PER_YEAR
    return amount


def from_weekly(weekly_amount: float, frequency: str) -> float:
    """Inverse of `to_weekly`."""
    if frequency == FORTNIGHTLY:
        return weekly_amount * 2
    if frequency == MONTHLY:
        return weekly_amount * WEEKS_PER_YEAR / MONTHS_PER_YEAR
    if frequency == YEARLY:
        return weekly_amount * WEEKS_PER_YEAR
    return weekly_amount


def period_multiplier(frequency: str) -> float:
    """Number of weeks covered by one pay period of `frequency`."""
    return from_weekly(1.0, frequency)
