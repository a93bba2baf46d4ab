from __future__ import annotations

import dataclasses
import datetime as dt
import math
from typing import Dict, List, Optional, Tuple

import pandas as pd
import structlog

from compound_core.domain.models import MONTHLY, AmortizationRow, ExtraPaymentImpact, Mortgage, MortgagePayoff
from compound_core.services.frequency import from_weekly

logger = structlog.get_logger(__name__)

MAX_MONTHS = 1200  # 100 years


def monthly_rate(mortgage: Mortgage) -> float:
    return mortgage.interest_rate / 100 / 12


def monthly_payment(mortgage: Mortgage) -> float:
    return from_weekly(mortgage.total_weekly_payment, MONTHLY)


def _amortize_month(balance: float, rate: float, payment: float) -> Tuple[float, float, float]:
    """
    One month of amortization: (interest, principal, new balance).
    Principal is capped at the outstanding balance so the loan lands on exactly zero.
    A payment below the interest yields negative principal (the balance grows).
    """
    interest = balance * rate
    principal = min(payment - interest, balance)
    return interest, principal, max(0.0, balance - principal)


def simulate_months(mortgage: Mortgage, months: int) -> Tuple[float, float, float]:
    """
    Run `months` whole months from the stored principal.
    Returns (balance, principal paid, interest paid).
    """
    rate = monthly_rate(mortgage)
    payment = monthly_payment(mortgage)
    balance = mortgage.principal
    principal_paid = 0.0
    interest_paid = 0.0
    for _ in range(max(0, months)):
        if balance <= 0:
            break
        interest, principal, balance = _amortize_month(balance, rate, payment)
        interest_paid += interest
        principal_paid += principal
    return balance, principal_paid, interest_paid


def balance_after_months(mortgage: Mortgage, months: int) -> float:
    balance, _, _ = simulate_months(mortgage, months)
    return balance


def _unpayable() -> MortgagePayoff:
    return MortgagePayoff(
        months_remaining=math.inf,
        total_interest=math.inf,
        payoff_date=dt.date.max,
        total_paid=math.inf,
    )


def _run_to_payoff(mortgage: Mortgage) -> Optional[Tuple[int, float]]:
    """(months, total interest) until the balance reaches zero, or None if the payment never covers the interest."""
    rate = monthly_rate(mortgage)
    payment = monthly_payment(mortgage)

    balance = mortgage.principal
    months = 0
    total_interest = 0.0
    while balance > 0 and months < MAX_MONTHS:
        interest, principal, balance = _amortize_month(balance, rate, payment)
        if principal <= 0:
            return None
        total_interest += interest
        months += 1
    return months, total_interest


def calculate_mortgage_payoff(mortgage: Mortgage, as_of: dt.date) -> MortgagePayoff:
    """
    Month-by-month payoff from the stored principal, dated from `as_of`.

    Returns the "infinite" sentinel (math.inf months and interest, date.max) when the
    payment does not cover the interest. The loop never runs past MAX_MONTHS.
    """
    result = _run_to_payoff(mortgage)
    if result is None:
        logger.warning(
            "mortgage_unpayable",
            mortgage_id=mortgage.id,
            monthly_payment=monthly_payment(mortgage),
            monthly_interest=mortgage.principal * monthly_rate(mortgage),
        )
        return _unpayable()

    months, total_interest = result
    payoff_date = (pd.Timestamp(as_of) + pd.DateOffset(months=months)).date()
    return MortgagePayoff(
        months_remaining=months,
        total_interest=total_interest,
        payoff_date=payoff_date,
        total_paid=mortgage.principal + total_interest,
    )


def mortgage_extra_payment_impact(mortgage: Mortgage, extra_weekly_amount: float) -> ExtraPaymentImpact:
    """What paying `extra_weekly_amount` more each week saves in months and interest."""
    original = _run_to_payoff(mortgage)
    modified = dataclasses.replace(
        mortgage,
        extra_weekly_payment=mortgage.extra_weekly_payment + extra_weekly_amount,
    )
    with_extra = _run_to_payoff(modified)

    if original is None:
        if with_extra is None:
            return ExtraPaymentImpact(months_saved=0.0, interest_saved=0.0)
        return ExtraPaymentImpact(months_saved=math.inf, interest_saved=math.inf)
    if with_extra is None:
        return ExtraPaymentImpact(months_saved=-math.inf, interest_saved=-math.inf)

    return ExtraPaymentImpact(
        months_saved=original[0] - with_extra[0],
        interest_saved=original[1] - with_extra[1],
    )


def amortization_schedule(mortgage: Mortgage) -> List[AmortizationRow]:
    """Monthly rows until payoff. Empty for a loan whose payment never covers interest."""
    if _run_to_payoff(mortgage) is None:
        return []

    rate = monthly_rate(mortgage)
    payment = monthly_payment(mortgage)
    balance = mortgage.principal
    rows: List[AmortizationRow] = []
    month = 0
    while balance > 0 and month < MAX_MONTHS:
        month += 1
        interest, principal, balance = _amortize_month(balance, rate, payment)
        rows.append(
            AmortizationRow(
                month=month,
                payment=interest + principal,
                interest=interest,
                principal=principal,
                balance=balance,
            )
        )
    return rows


def yearly_schedule(rows: List[AmortizationRow]) -> List[Dict[str, float]]:
    """Roll monthly rows up to loan years: summed flows, closing balance."""
    if not rows:
        return []
    df = pd.DataFrame([dataclasses.asdict(r) for r in rows])
    df["year"] = (df["month"] - 1) // 12 + 1
    agg = (
        df.groupby("year")
        .agg(
            payment=("payment", "sum"),
            interest=("interest", "sum"),
            principal=("principal", "sum"),
            balance=("balance", "last"),
        )
        .reset_index()
    )
    return agg.to_dict("records")
