from __future__ import annotations

from typing import Iterable, List, Tuple

from compound_core.domain.models import HouseExpense, HousingExpenseShare, SharedHousing, SharedHousingSplit
from compound_core.services.frequency import to_weekly


def income_ratios(your_weekly_income: float, partner_weekly_income: float) -> Tuple[float, float]:
    """Each party's share of combined income; an even split when there is no income at all."""
    combined = your_weekly_income + partner_weekly_income
    if combined == 0:
        return 0.5, 0.5
    yours = your_weekly_income / combined
    return yours, 1 - yours


def allocate_expenses(
    expenses: Iterable[HouseExpense],
    your_weekly_income: float,
    partner_weekly_income: float,
) -> SharedHousingSplit:
    """Split housing costs in proportion to income, per line and in total."""
    your_ratio, partner_ratio = income_ratios(your_weekly_income, partner_weekly_income)

    lines: List[HousingExpenseShare] = []
    total = 0.0
    for expense in expenses:
        weekly = to_weekly(expense.amount, expense.frequency)
        total += weekly
        lines.append(
            HousingExpenseShare(
                id=expense.id,
                name=expense.name,
                category=expense.category,
                weekly_amount=weekly,
                your_share=weekly * your_ratio,
                partner_share=weekly * partner_ratio,
            )
        )

    your_share = total * your_ratio
    return SharedHousingSplit(
        total_weekly=total,
        your_ratio=your_ratio,
        partner_ratio=partner_ratio,
        your_share=your_share,
        partner_share=total - your_share,
        expenses=tuple(lines),
    )


def calculate_shared_housing(shared: SharedHousing, your_weekly_income: float) -> SharedHousingSplit:
    return allocate_expenses(shared.expenses, your_weekly_income, shared.partner_weekly_income)
