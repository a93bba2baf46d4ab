import pytest

from compound_core.services.frequency import from_weekly, period_multiplier, to_weekly
from compound_core.services.growth import (
    adjust_for_inflation,
    cumulative_savings,
    future_value,
    future_value_of_contributions,
    total_future_value,
)


@pytest.mark.parametrize("frequency", ["weekly", "fortnightly", "monthly", "yearly"])
@pytest.mark.parametrize("amount", [0.0, 1.0, 123.45, -80.0, 1e6])
def test_weekly_conversion_round_trips(frequency, amount):
    assert from_weekly(to_weekly(amount, frequency), frequency) == pytest.approx(amount)


def test_monthly_amount_to_weekly():
    assert to_weekly(100, "monthly") == pytest.approx(23.0769, abs=1e-4)
    assert to_weekly(100, "fortnightly") == 50
    assert to_weekly(5200, "yearly") == 100


def test_unknown_frequency_passes_through():
    assert to_weekly(42.0, "quarterly") == 42.0
    assert from_weekly(42.0, "quarterly") == 42.0


def test_period_multiplier():
    assert period_multiplier("weekly") == 1
    assert period_multiplier("fortnightly") == 2
    assert period_multiplier("monthly") == pytest.approx(52 / 12)


def test_future_value_lump_sum():
    assert future_value(1000, 0.1, 2) == pytest.approx(1210)
    assert future_value(1000, 0.07, 0) == 1000


def test_contributions_without_growth_are_linear():
    assert future_value_of_contributions(50, 0, 10) == 50 * 52 * 10


def test_contributions_compound_above_paid_in():
    fv = future_value_of_contributions(50, 0.07, 10)
    assert fv > 50 * 52 * 10
    # a year of weekly deposits at an equivalent weekly rate lands close to the simple-interest midpoint
    one_year = future_value_of_contributions(100, 0.05, 1)
    assert 5200 < one_year < 5200 * 1.05


def test_growth_is_monotonic_in_years():
    years = [0, 0.5, 1, 2, 5, 10, 30]
    lump = [future_value(10000, 0.06, y) for y in years]
    stream = [future_value_of_contributions(25, 0.06, y) for y in years]
    assert lump == sorted(lump)
    assert stream == sorted(stream)


def test_total_future_value_is_sum_of_parts():
    total = total_future_value(5000, 20, 0.05, 7)
    assert total == pytest.approx(future_value(5000, 0.05, 7) + future_value_of_contributions(20, 0.05, 7))


def test_inflation_adjustment_discounts():
    assert adjust_for_inflation(1102.5, 0.05, 2) == pytest.approx(1000)
    assert adjust_for_inflation(1000, 0.0, 10) == 1000


def test_cumulative_savings_rows():
    rows = cumulative_savings(10, 0, 3)
    assert [r.year for r in rows] == [1, 2, 3]
    assert rows[-1].nominal == rows[-1].contributed == 10 * 52 * 3

    grown = cumulative_savings(10, 7, 3)
    assert all(r.nominal > r.contributed for r in grown)
