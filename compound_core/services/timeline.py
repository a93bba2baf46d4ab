from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd
import structlog

from compound_core.domain.models import Investment, Mortgage, WealthAtAge, WealthPoint, WealthTimeline
from compound_core.services.growth import adjust_for_inflation, future_value
from compound_core.services.investments import project_investment
from compound_core.services.mortgage import balance_after_months

logger = structlog.get_logger(__name__)


def project_wealth_at_age(
    current_age: int,
    target_age: int,
    investments: Sequence[Investment],
    mortgages: Sequence[Mortgage],
    inflation_rate: float,
) -> WealthAtAge:
    """Investments and remaining mortgage debt at `target_age`, nominal and in today's dollars."""
    years = target_age - current_age

    if years <= 0:
        invested = sum(inv.current_value for inv in investments)
        owed = sum(m.principal for m in mortgages)
        return WealthAtAge(
            age=current_age,
            nominal=invested,
            real=invested,
            mortgage_remaining=owed,
            net_wealth=invested - owed,
            net_wealth_real=invested - owed,
        )

    nominal = 0.0
    real = 0.0
    for inv in investments:
        projection = project_investment(inv, years, inflation_rate)
        nominal += projection.nominal
        real += projection.real

    remaining = sum(balance_after_months(m, years * 12) for m in mortgages)

    return WealthAtAge(
        age=target_age,
        nominal=nominal,
        real=real,
        mortgage_remaining=remaining,
        net_wealth=nominal - remaining,
        net_wealth_real=real - adjust_for_inflation(remaining, inflation_rate / 100, years),
    )


def generate_wealth_projection(
    current_age: int,
    retirement_age: int,
    investments: Sequence[Investment],
    mortgages: Sequence[Mortgage],
    property_value: float,
    inflation_rate: float,
) -> WealthTimeline:
    """
    One point per age from `current_age` to `retirement_age` inclusive, in today's dollars.

    Year 0 is today's snapshot values as stored. Later years project investments forward,
    grow the property with inflation before discounting it back, and amortize each
    mortgage for exactly that year's horizon.
    """
    inflation = inflation_rate / 100
    years = np.arange(0, max(0, retirement_age - current_age) + 1)

    investments_real = np.zeros(len(years))
    debt_real = np.zeros(len(years))
    property_real = np.array(
        [adjust_for_inflation(future_value(property_value, inflation, int(y)), inflation, int(y)) for y in years]
    )

    investments_real[0] = sum(inv.current_value for inv in investments)
    debt_real[0] = sum(m.principal for m in mortgages)
    for i, y in enumerate(years[1:], start=1):
        y = int(y)
        investments_real[i] = sum(project_investment(inv, y, inflation_rate).real for inv in investments)
        debt_real[i] = sum(
            adjust_for_inflation(balance_after_months(m, y * 12), inflation, y) for m in mortgages
        )

    points = [
        WealthPoint(
            age=current_age + int(y),
            year=int(y),
            investments=float(investments_real[i]),
            property=float(property_real[i]),
            debt=float(debt_real[i]),
        )
        for i, y in enumerate(years)
    ]
    logger.debug("wealth_timeline_generated", points=len(points), start_age=current_age)
    return WealthTimeline(points=points)


def timeline_frame(timeline: WealthTimeline) -> pd.DataFrame:
    return pd.DataFrame(timeline.to_records()).set_index("age")
