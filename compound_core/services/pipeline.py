from __future__ import annotations

import datetime as dt
from typing import Dict

from compound_core.domain.models import GOAL_EMERGENCY_FUND, BudgetStore, StoreSummary, WealthAtAge
from compound_core.services import budget, linked_items
from compound_core.services.goals import calculate_emergency_fund_target
from compound_core.services.housing import calculate_shared_housing
from compound_core.services.snapshot import project_current_investment_value, project_current_mortgage_balance
from compound_core.services.timeline import project_wealth_at_age


def _milestones(store: BudgetStore) -> Dict[str, WealthAtAge]:
    s = store.settings
    targets = {"1y": s.age + 1, "5y": s.age + 5, "retirement": s.retirement_age}
    return {
        label: project_wealth_at_age(s.age, age, store.investments, store.mortgages, s.inflation_rate)
        for label, age in targets.items()
    }


def summarize_store(store: BudgetStore, now: dt.datetime) -> StoreSummary:
    """
    Everything the dashboard shows, derived from one immutable store snapshot.
    """
    settings = store.settings
    complete_items = linked_items.build_complete_budget_items(store)
    effective = budget.calculate_weekly_by_category_effective(complete_items)

    investment_value = sum(project_current_investment_value(inv, now).projected_value for inv in store.investments)
    mortgage_balance = sum(project_current_mortgage_balance(m, now).projected_balance for m in store.mortgages)
    property_value = sum(m.property_value or 0.0 for m in store.mortgages)

    emergency_target = 0.0
    emergency = next((g for g in store.goals if g.type == GOAL_EMERGENCY_FUND), None)
    if emergency is not None and emergency.months_of_expenses:
        emergency_target = calculate_emergency_fund_target(store.budget_items, emergency.months_of_expenses)

    housing_split = None
    if store.shared_housing is not None and store.shared_housing.enabled:
        housing_split = calculate_shared_housing(store.shared_housing, settings.after_tax_weekly_income)

    return StoreSummary(
        weekly_by_category=budget.calculate_weekly_by_category(store.budget_items),
        weekly_by_category_effective=effective,
        uncommitted_income=settings.after_tax_weekly_income - effective.total,
        investment_value=investment_value,
        weekly_investment_contributions=sum(inv.weekly_contribution for inv in store.investments),
        mortgage_balance=mortgage_balance,
        property_value=property_value,
        equity=property_value - mortgage_balance,
        milestones=_milestones(store),
        emergency_fund_target=emergency_target,
        shared_housing=housing_split,
    )
