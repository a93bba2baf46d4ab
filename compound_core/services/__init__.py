from compound_core.services.budget import (  # noqa: F401
    calculate_uncommitted_income,
    calculate_weekly_by_category,
    calculate_weekly_by_category_effective,
    get_effective_weekly_amount,
)
from compound_core.services.frequency import from_weekly, to_weekly  # noqa: F401
from compound_core.services.goals import calculate_emergency_fund_target, weekly_to_reach_goal  # noqa: F401
from compound_core.services.growth import (  # noqa: F401
    adjust_for_inflation,
    future_value,
    future_value_of_contributions,
    total_future_value,
)
from compound_core.services.housing import calculate_shared_housing  # noqa: F401
from compound_core.services.investments import project_investment  # noqa: F401
from compound_core.services.linked_items import build_complete_budget_items  # noqa: F401
from compound_core.services.mortgage import calculate_mortgage_payoff, mortgage_extra_payment_impact  # noqa: F401
from compound_core.services.pipeline import summarize_store  # noqa: F401
from compound_core.services.snapshot import (  # noqa: F401
    project_current_investment_value,
    project_current_mortgage_balance,
    project_current_savings_value,
)
from compound_core.services.timeline import generate_wealth_projection, project_wealth_at_age  # noqa: F401

__all__ = [
    "to_weekly",
    "from_weekly",
    "future_value",
    "future_value_of_contributions",
    "total_future_value",
    "adjust_for_inflation",
    "project_investment",
    "calculate_mortgage_payoff",
    "mortgage_extra_payment_impact",
    "project_current_investment_value",
    "project_current_savings_value",
    "project_current_mortgage_balance",
    "calculate_weekly_by_category",
    "calculate_weekly_by_category_effective",
    "get_effective_weekly_amount",
    "calculate_uncommitted_income",
    "build_complete_budget_items",
    "calculate_emergency_fund_target",
    "weekly_to_reach_goal",
    "calculate_shared_housing",
    "generate_wealth_projection",
    "project_wealth_at_age",
    "summarize_store",
]
