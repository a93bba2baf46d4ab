from compound_core.domain.errors import BudgetHierarchyError, InvalidStoreError  # noqa: F401
from compound_core.domain.models import (  # noqa: F401
    AmortizationRow,
    BucketProgress,
    BudgetItem,
    BudgetStore,
    CategoryTotals,
    CumulativeSavingsRow,
    ExtraPaymentImpact,
    Goal,
    GoalProgress,
    HouseExpense,
    HousingExpenseShare,
    Investment,
    InvestmentSnapshot,
    Mortgage,
    MortgagePayoff,
    MortgageSnapshot,
    PaydayLine,
    PaydayPlan,
    Projection,
    ReportConfig,
    SavingsBucket,
    SavingsSnapshot,
    SharedHousing,
    SharedHousingSplit,
    StoreSummary,
    UserSettings,
    WealthAtAge,
    WealthPoint,
    WealthTimeline,
)

__all__ = [
    "AmortizationRow",
    "BucketProgress",
    "BudgetHierarchyError",
    "BudgetItem",
    "BudgetStore",
    "CategoryTotals",
    "CumulativeSavingsRow",
    "ExtraPaymentImpact",
    "Goal",
    "GoalProgress",
    "HouseExpense",
    "HousingExpenseShare",
    "InvalidStoreError",
    "Investment",
    "InvestmentSnapshot",
    "Mortgage",
    "MortgagePayoff",
    "MortgageSnapshot",
    "PaydayLine",
    "PaydayPlan",
    "Projection",
    "ReportConfig",
    "SavingsBucket",
    "SavingsSnapshot",
    "SharedHousing",
    "SharedHousingSplit",
    "StoreSummary",
    "UserSettings",
    "WealthAtAge",
    "WealthPoint",
    "WealthTimeline",
]
