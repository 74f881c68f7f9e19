"""
Cash Flow Aggregator

Trailing monthly income/expense totals ending at the target month,
oldest first.

IMPORTANT: This works on the RAW transaction amounts. Split transactions
are not expanded here, unlike the category and projection views.
"""

from typing import Iterable, Optional

from budgetcore.analytics.calendar import month_key, to_local, trailing_months
from budgetcore.models.analytics import CashFlowMonth
from budgetcore.models.records import Transaction, TransactionType


def summarize_cash_flow(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    months: int = 6,
    tz_name: Optional[str] = None,
) -> list[CashFlowMonth]:
    window = trailing_months(year, month, months)
    totals = {
        (first.year, first.month): {TransactionType.INCOME: 0.0, TransactionType.EXPENSE: 0.0}
        for first in window
    }

    for tx in transactions:
        local = to_local(tx.date, tz_name)
        bucket = totals.get((local.year, local.month))
        if bucket is not None:
            bucket[tx.type] += tx.amount

    summary = []
    for first in window:
        bucket = totals[(first.year, first.month)]
        summary.append(CashFlowMonth(
            month_label=first.strftime("%b"),
            month_key=month_key(first),
            income=bucket[TransactionType.INCOME],
            expense=bucket[TransactionType.EXPENSE],
        ))
    return summary
