import datetime as dt
import math

import pytest

from compound_core.domain.models import Mortgage
from compound_core.services.mortgage import (
    MAX_MONTHS,
    amortization_schedule,
    calculate_mortgage_payoff,
    mortgage_extra_payment_impact,
    monthly_payment,
    yearly_schedule,
)

UPDATED = dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc)


def _mortgage(**overrides) -> Mortgage:
    fields = dict(
        id="m",
        name="Home",
        principal=500000.0,
        principal_updated_at=UPDATED,
        original_principal=600000.0,
        interest_rate=6.0,
        weekly_payment=700.0,
        extra_weekly_payment=0.0,
        term_years=30,
    )
    fields.update(overrides)
    return Mortgage(**fields)


def test_monthly_payment_from_weekly():
    assert monthly_payment(_mortgage(extra_weekly_payment=50.0)) == pytest.approx(750 * 52 / 12)


def test_payoff_completes_and_extra_payment_helps():
    base = calculate_mortgage_payoff(_mortgage(), as_of=dt.date(2025, 1, 1))
    faster = calculate_mortgage_payoff(_mortgage(extra_weekly_payment=50.0), as_of=dt.date(2025, 1, 1))

    assert base.is_payable
    assert base.months_remaining < MAX_MONTHS
    assert faster.months_remaining < base.months_remaining
    assert faster.total_interest < base.total_interest
    assert base.total_paid == pytest.approx(500000 + base.total_interest)


def test_payoff_date_counts_months_from_as_of():
    payoff = calculate_mortgage_payoff(_mortgage(principal=6000.0), as_of=dt.date(2025, 1, 31))
    assert payoff.months_remaining == 2
    assert payoff.payoff_date == dt.date(2025, 3, 31)


def test_unpayable_loan_returns_infinite_sentinel():
    # 6% on 500k is 2,500/month of interest; 100/week does not cover it
    payoff = calculate_mortgage_payoff(_mortgage(weekly_payment=100.0), as_of=dt.date(2025, 1, 1))
    assert not payoff.is_payable
    assert math.isinf(payoff.months_remaining)
    assert math.isinf(payoff.total_interest)
    assert math.isinf(payoff.total_paid)
    assert payoff.payoff_date == dt.date.max


def test_paid_off_loan_needs_no_months():
    payoff = calculate_mortgage_payoff(_mortgage(principal=0.0), as_of=dt.date(2025, 1, 1))
    assert payoff.months_remaining == 0
    assert payoff.total_interest == 0
    assert payoff.payoff_date == dt.date(2025, 1, 1)


def test_extra_payment_impact_is_positive():
    impact = mortgage_extra_payment_impact(_mortgage(), 50.0)
    assert impact.months_saved > 0
    assert impact.interest_saved > 0


def test_extra_payment_impact_on_unpayable_loans():
    stuck = _mortgage(weekly_payment=100.0)
    assert mortgage_extra_payment_impact(stuck, 10.0).months_saved == 0
    rescued = mortgage_extra_payment_impact(stuck, 2000.0)
    assert math.isinf(rescued.months_saved)


def test_schedule_lands_on_zero_and_matches_payoff():
    m = _mortgage()
    rows = amortization_schedule(m)
    payoff = calculate_mortgage_payoff(m, as_of=dt.date(2025, 1, 1))

    assert len(rows) == payoff.months_remaining
    assert rows[-1].balance == 0
    assert all(r.balance >= 0 for r in rows)
    assert sum(r.interest for r in rows) == pytest.approx(payoff.total_interest)
    assert sum(r.principal for r in rows) == pytest.approx(500000)
    # the final payment only covers what is left
    assert rows[-1].payment <= rows[0].payment


def test_schedule_is_empty_for_unpayable_loan():
    assert amortization_schedule(_mortgage(weekly_payment=100.0)) == []
    assert yearly_schedule([]) == []


def test_yearly_schedule_rolls_up_months():
    rows = amortization_schedule(_mortgage())
    years = yearly_schedule(rows)

    assert years[0]["year"] == 1
    assert len(years) == math.ceil(len(rows) / 12)
    assert years[0]["interest"] == pytest.approx(sum(r.interest for r in rows[:12]))
    assert years[0]["balance"] == pytest.approx(rows[11].balance)
    assert years[-1]["balance"] == 0


def test_payoff_is_dated_only_from_as_of():
    m = _mortgage()
    first = calculate_mortgage_payoff(m, as_of=dt.date(2025, 1, 1))
    later = calculate_mortgage_payoff(m, as_of=dt.date(2030, 1, 1))

    assert later.months_remaining == first.months_remaining
    assert later.payoff_date.year - first.payoff_date.year == 5
    with pytest.raises(TypeError):
        calculate_mortgage_payoff(m)


def test_extra_payment_impact_matches_dated_payoffs():
    as_of = dt.date(2025, 1, 1)
    base = calculate_mortgage_payoff(_mortgage(), as_of=as_of)
    faster = calculate_mortgage_payoff(_mortgage(extra_weekly_payment=50.0), as_of=as_of)
    impact = mortgage_extra_payment_impact(_mortgage(), 50.0)

    assert impact.months_saved == base.months_remaining - faster.months_remaining
    assert impact.interest_saved == pytest.approx(base.total_interest - faster.total_interest)
