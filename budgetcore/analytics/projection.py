"""
Projection Engine

Builds the daily and cumulative series for a month and a linear
end-of-month forecast:

    daysPassed          = today's day if the month is the current one,
                          else the full month (past and future months are
                          treated as fully elapsed)
    currentDailyAverage = activeTotal / max(daysPassed, 1)
    predictedTotal      = activeTotal + currentDailyAverage * daysLeft

`activeTotal` includes every leaf of the month, even leaves dated after
today, while the cumulative series stops at today.
"""

from datetime import date
from typing import Sequence

from budgetcore.analytics.calendar import days_in_month, is_same_month
from budgetcore.models.analytics import LeafEntry, ProjectionResult
from budgetcore.models.records import TransactionType


def daily_buckets(leaves: Sequence[LeafEntry], month_days: int) -> list[float]:
    """Accumulate leaf amounts into one bucket per day of the month."""
    buckets = [0.0] * month_days
    for leaf in leaves:
        index = leaf.day - 1
        if 0 <= index < month_days:
            buckets[index] += leaf.amount
    return buckets


def elapsed_days(year: int, month: int, today: date) -> int:
    """Days of the month considered elapsed relative to `today`."""
    if is_same_month(today, date(year, month, 1)):
        return today.day
    return days_in_month(year, month)


def project_month(
    leaves: Sequence[LeafEntry],
    year: int,
    month: int,
    today: date,
    resolved_budget: float,
    view_type: TransactionType = TransactionType.EXPENSE,
) -> ProjectionResult:
    month_days = days_in_month(year, month)
    buckets = daily_buckets(leaves, month_days)

    current_day = elapsed_days(year, month, today)
    cumulative = []
    running_total = 0.0
    for i in range(current_day):
        running_total += buckets[i]
        cumulative.append(running_total)

    active_total = sum(leaf.amount for leaf in leaves)
    days_passed = max(current_day, 1)
    current_daily_average = active_total / days_passed
    days_left = month_days - days_passed
    predicted_total = active_total + current_daily_average * days_left

    # Only meaningful for spending
    is_over_budget = view_type == TransactionType.EXPENSE and predicted_total > resolved_budget

    return ProjectionResult(
        days_in_month=month_days,
        days_passed=days_passed,
        days_left=days_left,
        active_total=active_total,
        daily_spending=buckets,
        cumulative_spending=cumulative,
        running_total=running_total,
        current_daily_average=current_daily_average,
        predicted_total=predicted_total,
        is_over_budget=is_over_budget,
    )
