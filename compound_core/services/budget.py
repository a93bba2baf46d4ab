from __future__ import annotations

import dataclasses
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

import structlog

from compound_core.domain.errors import BudgetHierarchyError
from compound_core.domain.models import CATEGORIES, BudgetItem, CategoryTotals
from compound_core.services.frequency import to_weekly

logger = structlog.get_logger(__name__)

ChildIndex = Dict[str, List[BudgetItem]]


def _totals(sums: Dict[str, float]) -> CategoryTotals:
    return CategoryTotals(**{c: sums.get(c, 0.0) for c in CATEGORIES})


def calculate_weekly_by_category(items: Iterable[BudgetItem]) -> CategoryTotals:
    """Flat totals: every item's own amount, hierarchy ignored."""
    sums: Dict[str, float] = defaultdict(float)
    for item in items:
        sums[item.category] += to_weekly(item.amount, item.frequency)
    return _totals(sums)


def calculate_uncommitted_income(weekly_income: float, items: Iterable[BudgetItem]) -> float:
    """Income left after all commitments. Negative means overspent."""
    return weekly_income - calculate_weekly_by_category(items).total


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


def children_index(items: Iterable[BudgetItem]) -> ChildIndex:
    index: ChildIndex = defaultdict(list)
    for item in items:
        if item.parent_id:
            index[item.parent_id].append(item)
    return dict(index)


def validate_hierarchy(items: Sequence[BudgetItem]) -> None:
    """Raise BudgetHierarchyError if any item is (transitively) its own parent."""
    by_id = {item.id: item for item in items}
    for item in items:
        seen = {item.id}
        parent_id = item.parent_id
        while parent_id:
            if parent_id in seen:
                raise BudgetHierarchyError(f"Budget item {item.id!r} is part of a parent cycle via {parent_id!r}")
            seen.add(parent_id)
            parent = by_id.get(parent_id)
            parent_id = parent.parent_id if parent else None


def top_level_items(items: Sequence[BudgetItem]) -> List[BudgetItem]:
    """
    Aggregation roots: items without a parent. An item whose parent no longer exists
    is promoted to the top level so its amount is not lost.
    """
    ids = {item.id for item in items}
    roots = []
    for item in items:
        if not item.parent_id:
            roots.append(item)
        elif item.parent_id not in ids:
            logger.warning("budget_item_dangling_parent", item_id=item.id, parent_id=item.parent_id)
            roots.append(item)
    return roots


def is_auto_calculated(item: BudgetItem, index: ChildIndex) -> bool:
    return bool(index.get(item.id))


def _effective(item: BudgetItem, index: ChildIndex, path: FrozenSet[str]) -> float:
    children = index.get(item.id)
    if not children:
        return to_weekly(item.amount, item.frequency)
    path = path | {item.id}
    total = 0.0
    for child in children:
        if child.id in path:
            raise BudgetHierarchyError(f"Budget item {child.id!r} is part of a parent cycle")
        total += _effective(child, index, path)
    return total


def get_effective_weekly_amount(
    item: BudgetItem, items: Sequence[BudgetItem], index: Optional[ChildIndex] = None
) -> float:
    """
    Weekly amount of `item` as the budget shows it: its own amount for a leaf, or the
    recursive sum of its children's effective amounts (the parent's own amount is ignored).
    """
    if index is None:
        index = children_index(items)
    return _effective(item, index, frozenset())


def _credit_leaves(item: BudgetItem, index: ChildIndex, sums: Dict[str, float], path: FrozenSet[str]) -> None:
    children = index.get(item.id)
    if not children:
        sums[item.category] += to_weekly(item.amount, item.frequency)
        return
    path = path | {item.id}
    for child in children:
        if child.id in path:
            raise BudgetHierarchyError(f"Budget item {child.id!r} is part of a parent cycle")
        _credit_leaves(child, index, sums, path)


def calculate_weekly_by_category_effective(items: Sequence[BudgetItem]) -> CategoryTotals:
    """
    Category totals with auto-calculated parents resolved. Each leaf is credited to its
    own category, and only top-level items are walked so nothing is counted twice.
    """
    items = list(items)
    validate_hierarchy(items)
    index = children_index(items)
    sums: Dict[str, float] = defaultdict(float)
    for root in top_level_items(items):
        _credit_leaves(root, index, sums, frozenset())
    return _totals(sums)


def calculate_uncommitted_income_effective(weekly_income: float, items: Sequence[BudgetItem]) -> float:
    return weekly_income - calculate_weekly_by_category_effective(items).total


def group_by_parent(items: Sequence[BudgetItem]) -> List[Tuple[BudgetItem, List[BudgetItem]]]:
    """Top-level items paired with their direct children, in input order."""
    index = children_index(items)
    return [(root, index.get(root.id, [])) for root in top_level_items(items)]


def walk_hierarchy(items: Sequence[BudgetItem]) -> List[Tuple[int, BudgetItem]]:
    """Every item as (depth, item), depth first from each top-level item. Raises on cycles."""
    validate_hierarchy(items)
    index = children_index(items)
    rows: List[Tuple[int, BudgetItem]] = []

    def visit(item: BudgetItem, depth: int) -> None:
        rows.append((depth, item))
        for child in index.get(item.id, []):
            visit(child, depth + 1)

    for root in top_level_items(items):
        visit(root, 0)
    return rows


def assign_parent(items: Sequence[BudgetItem], item_id: str, parent_id: Optional[str]) -> Tuple[BudgetItem, ...]:
    """
    Return a new item list with `item_id` moved under `parent_id` (None detaches it).
    Rejects unknown ids, self-parenting and any assignment that closes a cycle.
    """
    by_id = {item.id: item for item in items}
    if item_id not in by_id:
        raise KeyError(item_id)
    if parent_id is not None:
        if parent_id not in by_id:
            raise KeyError(parent_id)
        ancestor: Optional[str] = parent_id
        seen = set()
        while ancestor and ancestor not in seen:
            if ancestor == item_id:
                raise BudgetHierarchyError(f"Cannot place {item_id!r} under its own descendant {parent_id!r}")
            seen.add(ancestor)
            ancestor = by_id[ancestor].parent_id if ancestor in by_id else None

    return tuple(
        dataclasses.replace(item, parent_id=parent_id) if item.id == item_id else item for item in items
    )
