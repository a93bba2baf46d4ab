import datetime as dt

import pytest

from compound_core.domain.errors import BudgetHierarchyError
from compound_core.domain.models import (
    BudgetItem,
    BudgetStore,
    HouseExpense,
    Investment,
    Mortgage,
    SavingsBucket,
    SharedHousing,
    UserSettings,
)
from compound_core.services.budget import (
    assign_parent,
    calculate_uncommitted_income,
    calculate_uncommitted_income_effective,
    calculate_weekly_by_category,
    calculate_weekly_by_category_effective,
    children_index,
    get_effective_weekly_amount,
    group_by_parent,
    is_auto_calculated,
    top_level_items,
    validate_hierarchy,
    walk_hierarchy,
)
from compound_core.services.frequency import to_weekly
from compound_core.services.linked_items import build_complete_budget_items, synthesize_linked_items

NOW = dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc)


def _item(id, amount, frequency="weekly", category="necessity", parent_id=None, **kw) -> BudgetItem:
    return BudgetItem(
        id=id, name=id.title(), amount=amount, frequency=frequency, category=category, parent_id=parent_id, **kw
    )


def _subscriptions():
    return [
        _item("subs", 999, "monthly", "cost"),
        _item("netflix", 15, "monthly", "cost", parent_id="subs"),
        _item("spotify", 12, "monthly", "cost", parent_id="subs"),
    ]


def test_parent_effective_amount_is_sum_of_children():
    items = _subscriptions()
    expected = to_weekly(15, "monthly") + to_weekly(12, "monthly")
    assert get_effective_weekly_amount(items[0], items) == pytest.approx(expected)
    assert get_effective_weekly_amount(items[1], items) == pytest.approx(to_weekly(15, "monthly"))


def test_effective_totals_ignore_parent_amount():
    items = _subscriptions() + [_item("rent", 400)]
    effective = calculate_weekly_by_category_effective(items)
    assert effective.cost == pytest.approx(27 * 12 / 52)
    assert effective.necessity == 400
    assert effective.savings == 0


def test_flat_totals_count_every_item():
    items = _subscriptions()
    flat = calculate_weekly_by_category(items)
    assert flat.cost == pytest.approx((999 + 15 + 12) * 12 / 52)


def test_leaves_are_credited_to_their_own_category():
    items = [
        _item("household", 0, category="cost"),
        _item("power", 40, category="necessity", parent_id="household"),
        _item("streaming", 10, category="cost", parent_id="household"),
    ]
    effective = calculate_weekly_by_category_effective(items)
    assert effective.necessity == 40
    assert effective.cost == 10


def test_nested_hierarchy_neither_loses_nor_double_counts():
    items = [
        _item("a", 1000),
        _item("b", 500, parent_id="a"),
        _item("c", 30, "fortnightly", parent_id="b"),
        _item("d", 520, "yearly", "savings", parent_id="b"),
        _item("e", 70, category="cost", parent_id="a"),
        _item("f", 12, "monthly"),
    ]
    parents = {i.parent_id for i in items if i.parent_id}
    leaves = [i for i in items if i.id not in parents]

    roots_total = sum(get_effective_weekly_amount(r, items) for r in top_level_items(items))
    leaves_total = sum(to_weekly(i.amount, i.frequency) for i in leaves)

    assert roots_total == pytest.approx(leaves_total)
    assert calculate_weekly_by_category_effective(items).total == pytest.approx(leaves_total)


def test_cycles_are_rejected():
    items = [_item("x", 10, parent_id="y"), _item("y", 20, parent_id="x"), _item("z", 5)]
    with pytest.raises(BudgetHierarchyError):
        validate_hierarchy(items)
    with pytest.raises(BudgetHierarchyError):
        calculate_weekly_by_category_effective(items)
    with pytest.raises(BudgetHierarchyError):
        get_effective_weekly_amount(items[0], items)


def test_dangling_parent_is_promoted_to_top_level():
    items = [_item("orphan", 25, parent_id="deleted"), _item("rent", 400)]
    assert [i.id for i in top_level_items(items)] == ["orphan", "rent"]
    assert calculate_weekly_by_category_effective(items).necessity == 425


def test_assign_parent_returns_new_items_and_rejects_cycles():
    items = tuple(_subscriptions())
    moved = assign_parent(items, "spotify", None)
    assert moved[2].parent_id is None
    assert items[2].parent_id == "subs"

    with pytest.raises(BudgetHierarchyError):
        assign_parent(items, "subs", "netflix")
    with pytest.raises(BudgetHierarchyError):
        assign_parent(items, "subs", "subs")
    with pytest.raises(KeyError):
        assign_parent(items, "missing", None)


def test_group_by_parent():
    groups = group_by_parent(_subscriptions() + [_item("rent", 400)])
    assert [(p.id, [c.id for c in children]) for p, children in groups] == [
        ("subs", ["netflix", "spotify"]),
        ("rent", []),
    ]


def test_walk_hierarchy_reaches_every_depth():
    items = [
        _item("home", 0),
        _item("utilities", 0, parent_id="home"),
        _item("power", 40, parent_id="utilities"),
        _item("water", 10, parent_id="utilities"),
        _item("rent", 400),
    ]
    rows = walk_hierarchy(items)
    index = children_index(items)

    assert [(depth, item.id) for depth, item in rows] == [
        (0, "home"),
        (1, "utilities"),
        (2, "power"),
        (2, "water"),
        (0, "rent"),
    ]
    assert [item.id for _, item in rows if is_auto_calculated(item, index)] == ["home", "utilities"]

    leaves = [item for _, item in rows if not is_auto_calculated(item, index)]
    assert sum(get_effective_weekly_amount(i, items, index) for i in leaves) == 450
    assert get_effective_weekly_amount(items[0], items, index) == 50


def test_uncommitted_income_can_go_negative():
    items = [_item("rent", 600), _item("car", 300, category="cost")]
    assert calculate_uncommitted_income(1000, items) == 100
    assert calculate_uncommitted_income(800, items) == -100
    assert calculate_uncommitted_income_effective(800, items) == -100


# ---------------------------------------------------------------------------
# Linked items
# ---------------------------------------------------------------------------


def _store(shared_enabled=False, budget_items=()) -> BudgetStore:
    return BudgetStore(
        settings=UserSettings(after_tax_weekly_income=1500),
        budget_items=tuple(budget_items),
        investments=(
            Investment("inv-1", "ETF", 1000, NOW, 50, 7),
            Investment("inv-2", "Idle", 1000, NOW, 0, 7),
        ),
        savings_buckets=(SavingsBucket("b-1", "Travel", 100, NOW, 1000, 25),),
        mortgages=(Mortgage("m-1", "Home", 400000, NOW, 450000, 6, 650, 50),),
        shared_housing=SharedHousing(
            enabled=shared_enabled,
            partner_weekly_income=500,
            expenses=(HouseExpense("mortgage", "Mortgage", 700, "weekly", "necessity"),),
        ),
    )


def test_synthesizes_items_for_nonzero_contributions():
    virtual = synthesize_linked_items(_store())
    linked = {(v.linked_to_type, v.linked_to_id): v for v in virtual}

    assert set(linked) == {("investment", "inv-1"), ("savings_bucket", "b-1"), ("mortgage", "m-1")}
    assert linked[("investment", "inv-1")].category == "savings"
    assert linked[("mortgage", "m-1")].amount == 700
    assert linked[("mortgage", "m-1")].category == "necessity"


def test_shared_housing_replaces_mortgage_item_with_your_share():
    virtual = synthesize_linked_items(_store(shared_enabled=True))
    housing = [v for v in virtual if v.linked_to_type == "housing"]

    assert not [v for v in virtual if v.linked_to_type == "mortgage"]
    assert len(housing) == 1
    assert housing[0].amount == pytest.approx(700 * 0.75)


def test_manually_linked_sources_are_not_duplicated():
    manual = _item("etf", 50, category="savings", linked_to_id="inv-1", linked_to_type="investment")
    items = build_complete_budget_items(_store(budget_items=[manual]))

    investment_items = [i for i in items if i.linked_to_id == "inv-1"]
    assert investment_items == [manual]
    assert items[0] is manual
    totals = calculate_weekly_by_category_effective(items)
    assert totals.savings == 50 + 25
    assert totals.necessity == 700
