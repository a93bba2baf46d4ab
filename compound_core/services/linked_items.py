from __future__ import annotations

from typing import Iterable, List, Set, Tuple

import structlog

from compound_core.domain.models import (
    LINK_HOUSING,
    LINK_INVESTMENT,
    LINK_MORTGAGE,
    LINK_SAVINGS_BUCKET,
    NECESSITY,
    SAVINGS,
    WEEKLY,
    BudgetItem,
    BudgetStore,
)
from compound_core.services.housing import calculate_shared_housing

logger = structlog.get_logger(__name__)


def _virtual(link_type: str, link_id: str, name: str, weekly_amount: float, category: str) -> BudgetItem:
    return BudgetItem(
        id=f"linked-{link_type}-{link_id}",
        name=name,
        amount=weekly_amount,
        frequency=WEEKLY,
        category=category,
        linked_to_id=link_id,
        linked_to_type=link_type,
    )


def synthesize_linked_items(store: BudgetStore) -> List[BudgetItem]:
    """
    Virtual weekly budget items mirroring contributions made outside the budget list:
    investment and bucket contributions, mortgage repayments, and your share of
    shared housing costs. Zero contributions produce nothing.

    With shared housing enabled the mortgage is expected among the house expenses,
    so mortgages are not mirrored separately.
    """
    virtual: List[BudgetItem] = []

    for inv in store.investments:
        if inv.weekly_contribution:
            virtual.append(_virtual(LINK_INVESTMENT, inv.id, inv.name, inv.weekly_contribution, SAVINGS))

    for bucket in store.savings_buckets:
        if bucket.weekly_contribution:
            virtual.append(_virtual(LINK_SAVINGS_BUCKET, bucket.id, bucket.name, bucket.weekly_contribution, SAVINGS))

    housing = store.shared_housing
    if housing is not None and housing.enabled:
        split = calculate_shared_housing(housing, store.settings.after_tax_weekly_income)
        for line in split.expenses:
            if line.your_share:
                virtual.append(_virtual(LINK_HOUSING, line.id, line.name, line.your_share, line.category))
    else:
        for mortgage in store.mortgages:
            if mortgage.total_weekly_payment:
                virtual.append(
                    _virtual(LINK_MORTGAGE, mortgage.id, mortgage.name, mortgage.total_weekly_payment, NECESSITY)
                )

    return virtual


def manually_linked(items: Iterable[BudgetItem]) -> Set[Tuple[str, str]]:
    """(type, id) pairs the user already linked by hand."""
    return {(item.linked_to_type, item.linked_to_id) for item in items if item.linked_to_id and item.linked_to_type}


def exclude_linked(candidates: Iterable[BudgetItem], linked: Set[Tuple[str, str]]) -> List[BudgetItem]:
    return [item for item in candidates if (item.linked_to_type, item.linked_to_id) not in linked]


def build_complete_budget_items(store: BudgetStore) -> Tuple[BudgetItem, ...]:
    """Manual budget items plus every virtual item whose source is not already linked by hand."""
    candidates = synthesize_linked_items(store)
    virtual = exclude_linked(candidates, manually_linked(store.budget_items))
    logger.debug(
        "linked_items_built",
        manual=len(store.budget_items),
        synthesized=len(candidates),
        kept=len(virtual),
    )
    return tuple(store.budget_items) + tuple(virtual)

