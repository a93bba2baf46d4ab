import dataclasses
import datetime as dt
from pathlib import Path

import pytest

from compound_core.domain.models import BudgetItem
from compound_core.io.store import load_store
from compound_core.services.payday import allocate_payday, apply_payday
from compound_core.services.pipeline import summarize_store

STORE_PATH = Path(__file__).parent / "data" / "store.json"
NOW = dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc)


@pytest.fixture
def store():
    return load_store(STORE_PATH)


def test_fortnightly_payday_doubles_weekly_savings(store):
    plan = allocate_payday(store, "fortnightly")

    assert [line.item_id for line in plan.lines] == ["holiday"]
    assert plan.lines[0].period_amount == pytest.approx(200)
    assert plan.new_balances == {"bucket-1": pytest.approx(1200)}


def test_adjustments_override_and_clamp(store):
    assert allocate_payday(store, "weekly", {"holiday": 30}).new_balances["bucket-1"] == pytest.approx(1030)
    assert allocate_payday(store, "weekly", {"holiday": -50}).lines[0].period_amount == 0


def test_apply_payday_counts_each_transfer_once(store):
    later = NOW + dt.timedelta(weeks=2)
    plan = allocate_payday(store, "fortnightly")
    updated = apply_payday(store, plan, later)

    bucket = updated.savings_buckets[0]
    assert bucket.current_amount == pytest.approx(1000 + 200)
    assert bucket.current_amount_updated_at == later
    assert updated.settings.pay_frequency == "fortnightly"
    assert updated.investments == store.investments
    assert store.savings_buckets[0].current_amount == 1000


def test_consecutive_paydays_accumulate_transfers(store):
    once = apply_payday(store, allocate_payday(store, "weekly"), NOW + dt.timedelta(weeks=1))
    twice = apply_payday(once, allocate_payday(once, "weekly"), NOW + dt.timedelta(weeks=2))
    assert twice.savings_buckets[0].current_amount == pytest.approx(1000 + 100 + 100)


def test_investment_linked_item_adds_to_stored_value(store):
    etf = BudgetItem("etf", "ETF", 50, "weekly", "savings", linked_to_id="inv-1", linked_to_type="investment")
    store = dataclasses.replace(store, budget_items=store.budget_items + (etf,))
    plan = allocate_payday(store, "weekly")

    assert plan.new_balances["inv-1"] == pytest.approx(10000 + 50)


def test_summary_of_fixture_store(store):
    summary = summarize_store(store, NOW)

    assert summary.weekly_by_category_effective.necessity == pytest.approx(1400)
    assert summary.weekly_by_category_effective.cost == pytest.approx(27 * 12 / 52)
    assert summary.weekly_by_category_effective.savings == pytest.approx(150)
    assert summary.uncommitted_income == pytest.approx(1500 - 1400 - 150 - 27 * 12 / 52)
    assert summary.uncommitted_income < 0
    assert summary.emergency_fund_target == pytest.approx(700 * 52 / 12 * 3)
    assert summary.mortgage_balance < 500000
    assert summary.equity == pytest.approx(750000 - summary.mortgage_balance)
    assert summary.investment_value > 10000
    assert set(summary.milestones) == {"1y", "5y", "retirement"}
    assert summary.shared_housing is None
