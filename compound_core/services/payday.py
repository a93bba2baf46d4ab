from __future__ import annotations

import dataclasses
import datetime as dt
from typing import Dict, List, Mapping, Optional

import structlog

from compound_core.domain.models import (
    LINK_INVESTMENT,
    LINK_SAVINGS_BUCKET,
    SAVINGS,
    BudgetStore,
    PaydayLine,
    PaydayPlan,
)
from compound_core.services.frequency import period_multiplier, to_weekly

logger = structlog.get_logger(__name__)


def allocate_payday(
    store: BudgetStore,
    pay_frequency: str,
    adjustments: Optional[Mapping[str, float]] = None,
) -> PaydayPlan:
    """
    Savings transfers for one pay period.

    Every top-level savings item gets its weekly amount scaled to the pay period; an
    entry in `adjustments` (keyed by budget item id) replaces that amount, floored at
    zero. Items linked to a bucket or investment report the balance it will hold after
    the transfer: the stored value plus this period's amount. Contributions are only
    counted once they are actually transferred.
    """
    adjustments = adjustments or {}
    multiplier = period_multiplier(pay_frequency)
    buckets = {b.id: b for b in store.savings_buckets}
    investments = {i.id: i for i in store.investments}

    lines: List[PaydayLine] = []
    new_balances: Dict[str, float] = {}
    for item in store.budget_items:
        if item.category != SAVINGS or item.parent_id:
            continue
        weekly = to_weekly(item.amount, item.frequency)
        period_amount = max(0.0, adjustments.get(item.id, weekly * multiplier))
        lines.append(
            PaydayLine(
                item_id=item.id,
                name=item.name,
                weekly_amount=weekly,
                period_amount=period_amount,
                linked_to_id=item.linked_to_id,
                linked_to_type=item.linked_to_type,
            )
        )

        if item.linked_to_type == LINK_SAVINGS_BUCKET and item.linked_to_id in buckets:
            new_balances[item.linked_to_id] = buckets[item.linked_to_id].current_amount + period_amount
        elif item.linked_to_type == LINK_INVESTMENT and item.linked_to_id in investments:
            new_balances[item.linked_to_id] = investments[item.linked_to_id].current_value + period_amount

    return PaydayPlan(pay_frequency=pay_frequency, lines=lines, new_balances=new_balances)


def apply_payday(store: BudgetStore, plan: PaydayPlan, now: dt.datetime) -> BudgetStore:
    """New store with the plan's balances recorded as fresh snapshots taken at `now`."""
    buckets = tuple(
        dataclasses.replace(b, current_amount=plan.new_balances[b.id], current_amount_updated_at=now)
        if b.id in plan.new_balances
        else b
        for b in store.savings_buckets
    )
    investments = tuple(
        dataclasses.replace(i, current_value=plan.new_balances[i.id], current_value_updated_at=now)
        if i.id in plan.new_balances
        else i
        for i in store.investments
    )
    settings = store.settings
    if settings.pay_frequency != plan.pay_frequency:
        settings = dataclasses.replace(settings, pay_frequency=plan.pay_frequency)

    logger.info("payday_applied", pay_frequency=plan.pay_frequency, updated=len(plan.new_balances))
    return dataclasses.replace(store, settings=settings, savings_buckets=buckets, investments=investments)
