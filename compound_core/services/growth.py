from __future__ import annotations

import math
from typing import List

from compound_core.domain.models import CumulativeSavingsRow
from compound_core.services.frequency import WEEKS_PER_YEAR

# All rates in this module are decimals (0.07 == 7%).


def weekly_rate(annual_rate: float) -> float:
    """Weekly compounding rate equivalent to `annual_rate`."""
    return math.pow(1 + annual_rate, 1 / WEEKS_PER_YEAR) - 1


def annuity_factor(rate_per_period: float, periods: float) -> float:
    """Future value of 1 paid at the end of each period; plain `periods` when the rate is zero."""
    if rate_per_period == 0:
        return periods
    return (math.pow(1 + rate_per_period, periods) - 1) / rate_per_period


def future_value(present_value: float, annual_rate: float, years: float) -> float:
    return present_value * math.pow(1 + annual_rate, years)


def future_value_of_contributions(weekly_contribution: float, annual_rate: float, years: float) -> float:
    if annual_rate == 0:
        return weekly_contribution * WEEKS_PER_YEAR * years
    return weekly_contribution * annuity_factor(weekly_rate(annual_rate), years * WEEKS_PER_YEAR)


def total_future_value(current_value: float, weekly_contribution: float, annual_rate: float, years: float) -> float:
    """Existing balance and new contributions compound independently."""
    return future_value(current_value, annual_rate, years) + future_value_of_contributions(
        weekly_contribution, annual_rate, years
    )


def adjust_for_inflation(future_amount: float, inflation_rate: float, years: float) -> float:
    """Discount nominal future dollars back to today's purchasing power."""
    return future_amount / math.pow(1 + inflation_rate, years)


def cumulative_savings(weekly_contribution: float, annual_rate_pct: float, years: int) -> List[CumulativeSavingsRow]:
    rows: List[CumulativeSavingsRow] = []
    for year in range(1, years + 1):
        rows.append(
            CumulativeSavingsRow(
                year=year,
                nominal=future_value_of_contributions(weekly_contribution, annual_rate_pct / 100, year),
                contributed=weekly_contribution * WEEKS_PER_YEAR * year,
            )
        )
    return rows
