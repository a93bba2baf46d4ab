from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

from compound_core.domain.errors import InvalidStoreError
from compound_core.domain.models import (
    NECESSITY,
    WEEKLY,
    BudgetItem,
    BudgetStore,
    Goal,
    HouseExpense,
    Investment,
    Mortgage,
    SavingsBucket,
    SharedHousing,
    UserSettings,
)

logger = structlog.get_logger(__name__)

STORAGE_VERSION = 1


# ---------------------------------------------------------------------------
# Timestamps: the stored format uses epoch milliseconds.
# ---------------------------------------------------------------------------


def from_epoch_ms(value: Optional[float]) -> Optional[dt.datetime]:
    if value is None:
        return None
    return dt.datetime.fromtimestamp(value / 1000, tz=dt.timezone.utc)


def to_epoch_ms(value: Optional[dt.datetime]) -> Optional[int]:
    if value is None:
        return None
    return int(round(value.timestamp() * 1000))


def _snapshot_time(raw: Dict[str, Any], key: str, kind: str) -> dt.datetime:
    """Records written before snapshot timestamps existed fall back to updatedAt, then createdAt."""
    for candidate in (key, "updatedAt", "createdAt"):
        if raw.get(candidate) is not None:
            return from_epoch_ms(raw[candidate])
    raise InvalidStoreError(f"{kind} {raw.get('id')!r} has no {key}")


# ---------------------------------------------------------------------------
# dict -> records
# ---------------------------------------------------------------------------


def _settings(raw: Dict[str, Any]) -> UserSettings:
    defaults = UserSettings()
    return UserSettings(
        age=int(raw.get("age", defaults.age)),
        retirement_age=int(raw.get("retirementAge", defaults.retirement_age)),
        after_tax_weekly_income=float(raw.get("afterTaxWeeklyIncome", defaults.after_tax_weekly_income)),
        inflation_rate=float(raw.get("inflationRate", defaults.inflation_rate)),
        currency=str(raw.get("currency", defaults.currency)),
        pay_frequency=raw.get("payFrequency"),
    )


def _budget_item(raw: Dict[str, Any]) -> BudgetItem:
    return BudgetItem(
        id=str(raw["id"]),
        name=str(raw.get("name", "")),
        amount=float(raw.get("amount", 0.0)),
        frequency=str(raw.get("frequency", WEEKLY)),
        category=str(raw.get("category", NECESSITY)),
        parent_id=raw.get("parentId") or None,
        linked_to_id=raw.get("linkedToId") or None,
        linked_to_type=raw.get("linkedToType") or None,
        is_subscription=bool(raw.get("isSubscription", False)),
        notes=raw.get("notes"),
        created_at=from_epoch_ms(raw.get("createdAt")),
        updated_at=from_epoch_ms(raw.get("updatedAt")),
    )


def _investment(raw: Dict[str, Any]) -> Investment:
    return Investment(
        id=str(raw["id"]),
        name=str(raw.get("name", "")),
        current_value=float(raw.get("currentValue", 0.0)),
        current_value_updated_at=_snapshot_time(raw, "currentValueUpdatedAt", "Investment"),
        weekly_contribution=float(raw.get("weeklyContribution", 0.0)),
        expected_return_rate=float(raw.get("expectedReturnRate", 0.0)),
        fee_rate=float(raw.get("feeRate") or 0.0),
        type=str(raw.get("type", "other")),
    )


def _mortgage(raw: Dict[str, Any]) -> Mortgage:
    principal = float(raw.get("principal", 0.0))
    return Mortgage(
        id=str(raw["id"]),
        name=str(raw.get("name", "")),
        principal=principal,
        principal_updated_at=_snapshot_time(raw, "principalUpdatedAt", "Mortgage"),
        original_principal=float(raw.get("originalPrincipal", principal)),
        interest_rate=float(raw.get("interestRate", 0.0)),
        weekly_payment=float(raw.get("weeklyPayment", 0.0)),
        extra_weekly_payment=float(raw.get("extraWeeklyPayment") or 0.0),
        term_years=int(raw.get("termYears", 30)),
        property_value=raw.get("propertyValue"),
        start_date=from_epoch_ms(raw.get("startDate")),
    )


def _bucket(raw: Dict[str, Any]) -> SavingsBucket:
    return SavingsBucket(
        id=str(raw["id"]),
        name=str(raw.get("name", "")),
        current_amount=float(raw.get("currentAmount", 0.0)),
        current_amount_updated_at=_snapshot_time(raw, "currentAmountUpdatedAt", "SavingsBucket"),
        target_amount=float(raw.get("targetAmount", 0.0)),
        weekly_contribution=float(raw.get("weeklyContribution", 0.0)),
        expected_return_rate=raw.get("expectedReturnRate"),
        target_date=from_epoch_ms(raw.get("targetDate")),
    )


def _goal(raw: Dict[str, Any]) -> Goal:
    return Goal(
        id=str(raw["id"]),
        name=str(raw.get("name", "")),
        type=str(raw["type"]),
        target_amount=float(raw.get("targetAmount", 0.0)),
        current_amount=float(raw.get("currentAmount", 0.0)),
        current_amount_updated_at=from_epoch_ms(raw.get("currentAmountUpdatedAt", raw.get("updatedAt"))),
        target_date=from_epoch_ms(raw.get("targetDate")),
        months_of_expenses=raw.get("monthsOfExpenses"),
        linked_budget_item_ids=tuple(raw.get("linkedBudgetItemIds") or ()),
    )


def _shared_housing(raw: Optional[Dict[str, Any]]) -> Optional[SharedHousing]:
    if not raw:
        return None
    expenses = tuple(
        HouseExpense(
            id=str(e.get("id", i)),
            name=str(e.get("name", "")),
            amount=float(e.get("amount", 0.0)),
            frequency=str(e.get("frequency", WEEKLY)),
            category=str(e.get("category", NECESSITY)),
        )
        for i, e in enumerate(raw.get("expenses") or [])
    )
    return SharedHousing(
        enabled=bool(raw.get("enabled", False)),
        partner_weekly_income=float(raw.get("partnerWeeklyIncome", 0.0)),
        expenses=expenses,
    )


def validate_payload(data: Any) -> None:
    """The minimum a store payload must have: a settings object and a budget item list."""
    if not isinstance(data, dict):
        raise InvalidStoreError("Invalid data structure")
    if not isinstance(data.get("settings"), dict) or not isinstance(data.get("budgetItems"), list):
        raise InvalidStoreError("Missing required fields: settings, budgetItems")


def store_from_dict(data: Dict[str, Any]) -> BudgetStore:
    validate_payload(data)
    try:
        return BudgetStore(
            settings=_settings(data["settings"]),
            budget_items=tuple(_budget_item(r) for r in data["budgetItems"]),
            savings_buckets=tuple(_bucket(r) for r in data.get("savingsBuckets") or []),
            investments=tuple(_investment(r) for r in data.get("investments") or []),
            mortgages=tuple(_mortgage(r) for r in data.get("mortgages") or []),
            goals=tuple(_goal(r) for r in data.get("goals") or []),
            shared_housing=_shared_housing(data.get("sharedHousing")),
        )
    except InvalidStoreError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidStoreError(f"Malformed store record: {exc}") from exc


# ---------------------------------------------------------------------------
# records -> dict
# ---------------------------------------------------------------------------


def _drop_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def store_to_dict(store: BudgetStore) -> Dict[str, Any]:
    s = store.settings
    data: Dict[str, Any] = {
        "settings": _drop_none(
            {
                "age": s.age,
                "retirementAge": s.retirement_age,
                "afterTaxWeeklyIncome": s.after_tax_weekly_income,
                "inflationRate": s.inflation_rate,
                "currency": s.currency,
                "payFrequency": s.pay_frequency,
            }
        ),
        "budgetItems": [
            _drop_none(
                {
                    "id": i.id,
                    "name": i.name,
                    "amount": i.amount,
                    "frequency": i.frequency,
                    "category": i.category,
                    "parentId": i.parent_id,
                    "linkedToId": i.linked_to_id,
                    "linkedToType": i.linked_to_type,
                    "isSubscription": i.is_subscription or None,
                    "notes": i.notes,
                    "createdAt": to_epoch_ms(i.created_at),
                    "updatedAt": to_epoch_ms(i.updated_at),
                }
            )
            for i in store.budget_items
        ],
        "savingsBuckets": [
            _drop_none(
                {
                    "id": b.id,
                    "name": b.name,
                    "currentAmount": b.current_amount,
                    "currentAmountUpdatedAt": to_epoch_ms(b.current_amount_updated_at),
                    "targetAmount": b.target_amount,
                    "weeklyContribution": b.weekly_contribution,
                    "expectedReturnRate": b.expected_return_rate,
                    "targetDate": to_epoch_ms(b.target_date),
                }
            )
            for b in store.savings_buckets
        ],
        "investments": [
            {
                "id": inv.id,
                "name": inv.name,
                "type": inv.type,
                "currentValue": inv.current_value,
                "currentValueUpdatedAt": to_epoch_ms(inv.current_value_updated_at),
                "weeklyContribution": inv.weekly_contribution,
                "expectedReturnRate": inv.expected_return_rate,
                "feeRate": inv.fee_rate,
            }
            for inv in store.investments
        ],
        "mortgages": [
            _drop_none(
                {
                    "id": m.id,
                    "name": m.name,
                    "principal": m.principal,
                    "principalUpdatedAt": to_epoch_ms(m.principal_updated_at),
                    "originalPrincipal": m.original_principal,
                    "propertyValue": m.property_value,
                    "interestRate": m.interest_rate,
                    "weeklyPayment": m.weekly_payment,
                    "extraWeeklyPayment": m.extra_weekly_payment,
                    "termYears": m.term_years,
                    "startDate": to_epoch_ms(m.start_date),
                }
            )
            for m in store.mortgages
        ],
        "goals": [
            _drop_none(
                {
                    "id": g.id,
                    "name": g.name,
                    "type": g.type,
                    "targetAmount": g.target_amount,
                    "currentAmount": g.current_amount,
                    "currentAmountUpdatedAt": to_epoch_ms(g.current_amount_updated_at),
                    "targetDate": to_epoch_ms(g.target_date),
                    "monthsOfExpenses": g.months_of_expenses,
                    "linkedBudgetItemIds": list(g.linked_budget_item_ids) or None,
                }
            )
            for g in store.goals
        ],
    }
    if store.shared_housing is not None:
        data["sharedHousing"] = {
            "enabled": store.shared_housing.enabled,
            "partnerWeeklyIncome": store.shared_housing.partner_weekly_income,
            "expenses": [
                {"id": e.id, "name": e.name, "amount": e.amount, "frequency": e.frequency, "category": e.category}
                for e in store.shared_housing.expenses
            ],
        }
    return data


# ---------------------------------------------------------------------------
# Files and import/export envelopes
# ---------------------------------------------------------------------------


def load_store(path: str | Path) -> BudgetStore:
    """Read a `{version, data, lastUpdated}` wrapper from disk."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            wrapper = json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidStoreError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(wrapper, dict) or "data" not in wrapper:
        raise InvalidStoreError(f"{path} has no data section")
    if wrapper.get("version") != STORAGE_VERSION:
        logger.warning("storage_version_mismatch", path=str(path), version=wrapper.get("version"))
    return store_from_dict(wrapper["data"])


def save_store(path: str | Path, store: BudgetStore, now: dt.datetime) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wrapper = {"version": STORAGE_VERSION, "data": store_to_dict(store), "lastUpdated": to_epoch_ms(now)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(wrapper, f, indent=2)
    return path


def export_data(store: BudgetStore, now: dt.datetime) -> str:
    return json.dumps(
        {"exportedAt": now.isoformat(), "version": STORAGE_VERSION, "data": store_to_dict(store)},
        indent=2,
    )


def import_data(json_string: str) -> BudgetStore:
    """
    Parse an exported backup. Anything without a `data` object holding `settings`
    and a `budgetItems` list is rejected with InvalidStoreError.
    """
    try:
        parsed = json.loads(json_string)
    except json.JSONDecodeError as exc:
        raise InvalidStoreError(f"Backup is not valid JSON: {exc}") from exc

    if not isinstance(parsed, dict) or not isinstance(parsed.get("data"), dict):
        raise InvalidStoreError("Invalid data structure")
    store = store_from_dict(parsed["data"])
    logger.info("store_imported", budget_items=len(store.budget_items), version=parsed.get("version"))
    return store
