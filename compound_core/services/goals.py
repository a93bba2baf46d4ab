from __future__ import annotations

import datetime as dt
import math
from typing import Iterable, List, Optional, Sequence

from compound_core.domain.models import (
    GOAL_EMERGENCY_FUND,
    MONTHLY,
    BucketProgress,
    BudgetItem,
    BudgetStore,
    Goal,
    GoalProgress,
    SavingsBucket,
)
from compound_core.services.budget import calculate_weekly_by_category
from compound_core.services.frequency import from_weekly
from compound_core.services.growth import annuity_factor, weekly_rate
from compound_core.services.snapshot import SECONDS_PER_WEEK, as_utc, project_current_savings_value


def calculate_emergency_fund_target(items: Iterable[BudgetItem], months_of_expenses: float) -> float:
    """Monthly necessity spend times the number of months to cover."""
    necessity_weekly = calculate_weekly_by_category(items).necessity
    return from_weekly(necessity_weekly, MONTHLY) * months_of_expenses


def weekly_to_reach_goal(
    target_amount: float,
    current_amount: float,
    target_date: dt.datetime,
    annual_return_rate: float = 0.0,
    *,
    now: dt.datetime,
) -> float:
    """
    Weekly saving needed to hit `target_amount` by `target_date`.

    `annual_return_rate` is a decimal. With a return, the current amount is grown to the
    deadline first and only the remaining shortfall is funded by the weekly annuity.
    Deadlines less than a week away (or past) are treated as one week out.
    """
    weeks_remaining = max(1.0, (as_utc(target_date) - as_utc(now)).total_seconds() / SECONDS_PER_WEEK)

    needed = target_amount - current_amount
    if needed <= 0:
        return 0.0

    if annual_return_rate == 0:
        return needed / weeks_remaining

    r = weekly_rate(annual_return_rate)
    future_current = current_amount * math.pow(1 + r, weeks_remaining)
    remaining = target_amount - future_current
    if remaining <= 0:
        return 0.0
    return remaining / annuity_factor(r, weeks_remaining)


def goal_target(goal: Goal, items: Iterable[BudgetItem]) -> float:
    if goal.type == GOAL_EMERGENCY_FUND and goal.months_of_expenses:
        return calculate_emergency_fund_target(items, goal.months_of_expenses)
    return goal.target_amount


def goal_progress(goal: Goal, items: Sequence[BudgetItem], now: dt.datetime) -> GoalProgress:
    target = goal_target(goal, items)
    progress = goal.current_amount / target * 100 if target > 0 else 0.0

    weekly_needed = 0.0
    if goal.target_date is not None and target > goal.current_amount:
        weekly_needed = weekly_to_reach_goal(target, goal.current_amount, goal.target_date, now=now)

    return GoalProgress(
        goal_id=goal.id,
        name=goal.name,
        type=goal.type,
        target_amount=target,
        current_amount=goal.current_amount,
        progress_pct=progress,
        weekly_needed=weekly_needed,
    )


def bucket_progress(bucket: SavingsBucket, now: dt.datetime) -> BucketProgress:
    projected = project_current_savings_value(bucket, now).projected_amount
    progress = projected / bucket.target_amount * 100 if bucket.target_amount > 0 else 0.0

    weeks_to_target: Optional[int]
    if projected >= bucket.target_amount:
        weeks_to_target = 0
    elif bucket.weekly_contribution > 0:
        weeks_to_target = math.ceil((bucket.target_amount - projected) / bucket.weekly_contribution)
    else:
        weeks_to_target = None

    return BucketProgress(
        bucket_id=bucket.id,
        name=bucket.name,
        projected_amount=projected,
        target_amount=bucket.target_amount,
        progress_pct=progress,
        weeks_to_target=weeks_to_target,
    )


def evaluate_goals(store: BudgetStore, now: dt.datetime) -> List[GoalProgress]:
    return [goal_progress(goal, store.budget_items, now) for goal in store.goals]
