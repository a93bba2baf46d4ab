from __future__ import annotations

import dataclasses
import datetime as dt
from typing import Dict, List, Optional, Tuple

WEEKLY = "weekly"
FORTNIGHTLY = "fortnightly"
MONTHLY = "monthly"
YEARLY = "yearly"
FREQUENCIES = (WEEKLY, FORTNIGHTLY, MONTHLY, YEARLY)

NECESSITY = "necessity"
COST = "cost"
SAVINGS = "savings"
CATEGORIES = (NECESSITY, COST, SAVINGS)

LINK_INVESTMENT = "investment"
LINK_SAVINGS_BUCKET = "savings_bucket"
LINK_MORTGAGE = "mortgage"
LINK_HOUSING = "housing"

GOAL_EMERGENCY_FUND = "emergency_fund"
GOAL_WEALTH = "wealth"
GOAL_TIME_SPECIFIC = "time_specific"
GOAL_DEBT_FREE = "debt_free"


@dataclasses.dataclass(frozen=True)
class BudgetItem:
    id: str
    name: str
    amount: float  # per `frequency`
    frequency: str
    category: str
    parent_id: Optional[str] = None
    linked_to_id: Optional[str] = None
    linked_to_type: Optional[str] = None
    is_subscription: bool = False
    notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


@dataclasses.dataclass(frozen=True)
class Investment:
    id: str
    name: str
    current_value: float
    current_value_updated_at: dt.datetime
    weekly_contribution: float
    expected_return_rate: float  # annual %
    fee_rate: float = 0.0  # annual %
    type: str = "other"


@dataclasses.dataclass(frozen=True)
class Mortgage:
    id: str
    name: str
    principal: float
    principal_updated_at: dt.datetime
    original_principal: float
    interest_rate: float  # annual %
    weekly_payment: float
    extra_weekly_payment: float = 0.0
    term_years: int = 30
    property_value: Optional[float] = None
    start_date: Optional[dt.datetime] = None

    @property
    def total_weekly_payment(self) -> float:
        return self.weekly_payment + self.extra_weekly_payment


@dataclasses.dataclass(frozen=True)
class SavingsBucket:
    id: str
    name: str
    current_amount: float
    current_amount_updated_at: dt.datetime
    target_amount: float
    weekly_contribution: float
    expected_return_rate: Optional[float] = None  # annual %
    target_date: Optional[dt.datetime] = None


@dataclasses.dataclass(frozen=True)
class Goal:
    id: str
    name: str
    type: str
    target_amount: float
    current_amount: float
    current_amount_updated_at: Optional[dt.datetime] = None
    target_date: Optional[dt.datetime] = None
    months_of_expenses: Optional[float] = None
    linked_budget_item_ids: Tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class HouseExpense:
    id: str
    name: str
    amount: float
    frequency: str
    category: str = NECESSITY


@dataclasses.dataclass(frozen=True)
class SharedHousing:
    enabled: bool
    partner_weekly_income: float
    expenses: Tuple[HouseExpense, ...] = ()


@dataclasses.dataclass(frozen=True)
class UserSettings:
    age: int = 28
    retirement_age: int = 70
    after_tax_weekly_income: float = 0.0
    inflation_rate: float = 2.5  # annual %
    currency: str = "NZD"
    pay_frequency: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class BudgetStore:
    settings: UserSettings = dataclasses.field(default_factory=UserSettings)
    budget_items: Tuple[BudgetItem, ...] = ()
    savings_buckets: Tuple[SavingsBucket, ...] = ()
    investments: Tuple[Investment, ...] = ()
    mortgages: Tuple[Mortgage, ...] = ()
    goals: Tuple[Goal, ...] = ()
    shared_housing: Optional[SharedHousing] = None


@dataclasses.dataclass(frozen=True)
class ReportConfig:
    extra_payment_what_if: float = 50.0
    milestone_years: Tuple[int, ...] = (1, 5, 10, 20)
    log_level: str = "WARNING"
    json_logs: bool = False


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class Projection:
    nominal: float
    real: float


@dataclasses.dataclass(frozen=True)
class CategoryTotals:
    necessity: float = 0.0
    cost: float = 0.0
    savings: float = 0.0

    @property
    def total(self) -> float:
        return self.necessity + self.cost + self.savings

    def as_dict(self) -> Dict[str, float]:
        return {NECESSITY: self.necessity, COST: self.cost, SAVINGS: self.savings}


@dataclasses.dataclass(frozen=True)
class InvestmentSnapshot:
    projected_value: float
    weeks_since_update: float
    contributions_since_update: float
    growth_since_update: float


@dataclasses.dataclass(frozen=True)
class SavingsSnapshot:
    projected_amount: float
    weeks_since_update: float
    contributions_since_update: float
    growth_since_update: float


@dataclasses.dataclass(frozen=True)
class MortgageSnapshot:
    projected_balance: float
    weeks_since_update: float
    months_elapsed: int
    principal_paid_since_update: float
    interest_paid_since_update: float


@dataclasses.dataclass(frozen=True)
class MortgagePayoff:
    months_remaining: float  # math.inf when the payment never covers interest
    total_interest: float
    payoff_date: dt.date
    total_paid: float

    @property
    def is_payable(self) -> bool:
        return self.months_remaining != float("inf")


@dataclasses.dataclass(frozen=True)
class ExtraPaymentImpact:
    months_saved: float
    interest_saved: float


@dataclasses.dataclass(frozen=True)
class AmortizationRow:
    month: int
    payment: float
    interest: float
    principal: float
    balance: float


@dataclasses.dataclass(frozen=True)
class HousingExpenseShare:
    id: str
    name: str
    category: str
    weekly_amount: float
    your_share: float
    partner_share: float


@dataclasses.dataclass(frozen=True)
class SharedHousingSplit:
    total_weekly: float
    your_ratio: float
    partner_ratio: float
    your_share: float
    partner_share: float
    expenses: Tuple[HousingExpenseShare, ...] = ()


@dataclasses.dataclass(frozen=True)
class GoalProgress:
    goal_id: str
    name: str
    type: str
    target_amount: float
    current_amount: float
    progress_pct: float
    weekly_needed: float


@dataclasses.dataclass(frozen=True)
class BucketProgress:
    bucket_id: str
    name: str
    projected_amount: float
    target_amount: float
    progress_pct: float
    weeks_to_target: Optional[int]


@dataclasses.dataclass(frozen=True)
class WealthAtAge:
    age: int
    nominal: float
    real: float
    mortgage_remaining: float
    net_wealth: float
    net_wealth_real: float


@dataclasses.dataclass(frozen=True)
class CumulativeSavingsRow:
    year: int
    nominal: float
    contributed: float


@dataclasses.dataclass(frozen=True)
class WealthPoint:
    age: int
    year: int
    investments: float
    property: float
    debt: float

    @property
    def net_wealth(self) -> float:
        return self.investments + self.property - self.debt


@dataclasses.dataclass
class WealthTimeline:
    points: List[WealthPoint]

    def to_timeseries(self) -> List[Tuple[int, float]]:
        return [(p.age, p.net_wealth) for p in self.points]

    def to_records(self) -> List[Dict[str, float]]:
        return [
            {
                "age": p.age,
                "year": p.year,
                "investments": p.investments,
                "property": p.property,
                "debt": p.debt,
                "net_wealth": p.net_wealth,
            }
            for p in self.points
        ]


@dataclasses.dataclass(frozen=True)
class PaydayLine:
    item_id: str
    name: str
    weekly_amount: float
    period_amount: float
    linked_to_id: Optional[str] = None
    linked_to_type: Optional[str] = None


@dataclasses.dataclass
class PaydayPlan:
    pay_frequency: str
    lines: List[PaydayLine]
    new_balances: Dict[str, float]


@dataclasses.dataclass
class StoreSummary:
    weekly_by_category: CategoryTotals
    weekly_by_category_effective: CategoryTotals
    uncommitted_income: float
    investment_value: float
    weekly_investment_contributions: float
    mortgage_balance: float
    property_value: float
    equity: float
    milestones: Dict[str, WealthAtAge]
    emergency_fund_target: float
    shared_housing: Optional[SharedHousingSplit] = None
