"""
Subscription planning.

Normalises recurring charges to a monthly figure and advances billing
dates. Month arithmetic clamps to the end of the target month, so a
subscription billed on the 31st moves to the 30th (or 28th/29th) in
shorter months.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional, Union

from budgetcore.analytics.calendar import add_months
from budgetcore.models.records import BillingCycle, Subscription, Transaction, TransactionType


# Multipliers that turn one charge into a monthly equivalent
MONTHLY_FACTORS = {
    BillingCycle.DAILY: 30.0,
    BillingCycle.WEEKLY: 4.33,
    BillingCycle.MONTHLY: 1.0,
    BillingCycle.QUARTERLY: 1 / 3,
    BillingCycle.HALF_YEARLY: 1 / 6,
    BillingCycle.YEARLY: 1 / 12,
}

_CYCLE_MONTHS = {
    BillingCycle.MONTHLY: 1,
    BillingCycle.QUARTERLY: 3,
    BillingCycle.HALF_YEARLY: 6,
    BillingCycle.YEARLY: 12,
}


def monthly_cost(amount: float, cycle: Union[BillingCycle, str]) -> float:
    """Monthly equivalent of a charge billed every `cycle`."""
    try:
        cycle = BillingCycle(cycle)
    except ValueError:
        # Unknown cycles are treated as monthly
        return amount
    return amount * MONTHLY_FACTORS[cycle]


def next_billing_date(current: datetime, cycle: Union[BillingCycle, str]) -> datetime:
    """Advance a billing date by one cycle."""
    try:
        cycle = BillingCycle(cycle)
    except ValueError:
        cycle = BillingCycle.MONTHLY

    if cycle == BillingCycle.DAILY:
        return current + timedelta(days=1)
    if cycle == BillingCycle.WEEKLY:
        return current + timedelta(days=7)
    return add_months(current, _CYCLE_MONTHS[cycle])


def total_monthly_cost(subscriptions: Iterable[Subscription]) -> float:
    return sum(monthly_cost(sub.amount, sub.billing_cycle) for sub in subscriptions)


def due_autopay_charges(
    subscriptions: Iterable[Subscription],
    now: datetime,
    default_category: str = "Bills",
    default_context: str = "personal",
) -> tuple[list[Transaction], list[Subscription]]:
    """
    Charges an auto-pay subscription posts once its billing day has come.

    A subscription is due when its billing date (compared by calendar day)
    is on or before `now`. Returns the expense transactions to record and
    the due subscriptions with their billing date advanced by one cycle.
    Each due subscription is charged once per call.
    """
    charges = []
    advanced = []
    for sub in subscriptions:
        if not sub.auto_pay:
            continue
        if _calendar_day(sub.next_billing_date) > _calendar_day(now):
            continue
        charges.append(Transaction(
            id=f"autopay-{sub.id}-{_calendar_day(sub.next_billing_date).isoformat()}",
            title=sub.name,
            category=sub.category or default_category,
            amount=sub.amount,
            date=now,
            type=TransactionType.EXPENSE,
            context=sub.context or default_context,
        ))
        advanced.append(sub.model_copy(update={
            "next_billing_date": next_billing_date(sub.next_billing_date, sub.billing_cycle),
        }))
    return charges, advanced


def upcoming_subscriptions(subscriptions: Iterable[Subscription], limit: Optional[int] = 3) -> list[Subscription]:
    """Subscriptions ordered by next billing date, soonest first."""
    ordered = sorted(subscriptions, key=lambda sub: _calendar_day(sub.next_billing_date))
    return ordered[:limit] if limit is not None else ordered


def _calendar_day(value: datetime):
    return value.date()
