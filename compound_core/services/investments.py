from __future__ import annotations

from typing import Iterable

from compound_core.domain.models import Investment, Projection
from compound_core.services.growth import adjust_for_inflation, total_future_value


def net_return_rate(investment: Investment) -> float:
    """Decimal annual return after fees. May be negative."""
    return (investment.expected_return_rate - (investment.fee_rate or 0.0)) / 100


def project_investment(investment: Investment, years: float, inflation_rate: float) -> Projection:
    """
    Project an investment `years` ahead from its stored value.
    `inflation_rate` is an annual percentage, like the rates on the record.
    """
    nominal = total_future_value(
        investment.current_value,
        investment.weekly_contribution,
        net_return_rate(investment),
        years,
    )
    real = adjust_for_inflation(nominal, inflation_rate / 100, years)
    return Projection(nominal=nominal, real=real)


def average_return_rate(investments: Iterable[Investment]) -> float:
    """Expected annual return (%) weighted by weekly contribution."""
    investments = list(investments)
    if not investments:
        return 0.0
    weighted = sum(inv.expected_return_rate * inv.weekly_contribution for inv in investments)
    total_contribution = sum(inv.weekly_contribution for inv in investments)
    return weighted / max(1.0, total_contribution)
