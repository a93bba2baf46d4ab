from __future__ import annotations

import datetime as dt
import math

from compound_core.domain.models import (
    Investment,
    InvestmentSnapshot,
    Mortgage,
    MortgageSnapshot,
    SavingsBucket,
    SavingsSnapshot,
)
from compound_core.services.frequency import WEEKS_PER_MONTH
from compound_core.services.growth import annuity_factor, weekly_rate
from compound_core.services.investments import net_return_rate
from compound_core.services.mortgage import simulate_months

SECONDS_PER_WEEK = 7 * 24 * 60 * 60


def as_utc(value: dt.datetime) -> dt.datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def weeks_between(updated_at: dt.datetime, now: dt.datetime) -> float:
    """Fractional weeks from a snapshot timestamp to `now`; a snapshot dated in the future counts as zero."""
    return max(0.0, (as_utc(now) - as_utc(updated_at)).total_seconds() / SECONDS_PER_WEEK)


def _grow(stored: float, weekly_contribution: float, annual_rate: float, weeks: float):
    if weeks == 0:
        return stored, 0.0
    r = weekly_rate(annual_rate)
    grown = stored * math.pow(1 + r, weeks)
    return grown + weekly_contribution * annuity_factor(r, weeks), weekly_contribution * weeks


def project_current_investment_value(investment: Investment, now: dt.datetime) -> InvestmentSnapshot:
    """
    Reconstruct today's value of an investment from its last recorded value.

    The stored value is treated as true at `current_value_updated_at`; it compounds at
    the weekly equivalent of the net (after-fee) return, and each week's contribution
    is added as an annuity over the same elapsed weeks.
    """
    weeks = weeks_between(investment.current_value_updated_at, now)
    projected, contributions = _grow(
        investment.current_value,
        investment.weekly_contribution,
        net_return_rate(investment),
        weeks,
    )
    return InvestmentSnapshot(
        projected_value=projected,
        weeks_since_update=weeks,
        contributions_since_update=contributions,
        growth_since_update=projected - investment.current_value - contributions,
    )


def project_current_savings_value(bucket: SavingsBucket, now: dt.datetime) -> SavingsSnapshot:
    """Same as investments, but a bucket without a return rate just accumulates contributions."""
    weeks = weeks_between(bucket.current_amount_updated_at, now)
    if not bucket.expected_return_rate:
        contributions = bucket.weekly_contribution * weeks
        return SavingsSnapshot(
            projected_amount=bucket.current_amount + contributions,
            weeks_since_update=weeks,
            contributions_since_update=contributions,
            growth_since_update=0.0,
        )

    projected, contributions = _grow(
        bucket.current_amount,
        bucket.weekly_contribution,
        bucket.expected_return_rate / 100,
        weeks,
    )
    return SavingsSnapshot(
        projected_amount=projected,
        weeks_since_update=weeks,
        contributions_since_update=contributions,
        growth_since_update=projected - bucket.current_amount - contributions,
    )


def project_current_mortgage_balance(mortgage: Mortgage, now: dt.datetime) -> MortgageSnapshot:
    """Amortize whole months elapsed since `principal_updated_at`."""
    weeks = weeks_between(mortgage.principal_updated_at, now)
    months = math.floor(weeks / WEEKS_PER_MONTH)
    balance, principal_paid, interest_paid = simulate_months(mortgage, months)
    return MortgageSnapshot(
        projected_balance=balance,
        weeks_since_update=weeks,
        months_elapsed=months,
        principal_paid_since_update=principal_paid,
        interest_paid_since_update=interest_paid,
    )
