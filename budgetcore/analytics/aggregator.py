"""
Transaction Aggregator

Turns a full transaction set into the leaf entries of one month and one
direction (income or expense).

DESIGN DECISION: A split transaction is REPLACED by its splits.
The parent's own amount and category are discarded, never counted in
addition to the splits. The splits are trusted to sum to the parent
amount; they are not re-checked here.
"""

from typing import Iterable, Optional

from budgetcore.analytics.calendar import to_local
from budgetcore.models.analytics import LeafEntry
from budgetcore.models.records import Transaction, TransactionType


def transactions_in_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    tz_name: Optional[str] = None,
) -> list[Transaction]:
    """Keep transactions whose local calendar date falls in (year, month)."""
    kept = []
    for tx in transactions:
        local = to_local(tx.date, tz_name)
        if local.year == year and local.month == month:
            kept.append(tx)
    return kept


def expand_splits(tx: Transaction, tz_name: Optional[str] = None) -> list[tuple[LeafEntry, TransactionType]]:
    """Expand one transaction into (leaf, type) pairs."""
    day = to_local(tx.date, tz_name).day
    if tx.has_splits:
        return [
            (LeafEntry(category=split.category, amount=split.amount, day=day), tx.type)
            for split in tx.splits
        ]
    return [(LeafEntry(category=tx.category, amount=tx.amount, day=day), tx.type)]


def aggregate_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    view_type: TransactionType,
    tz_name: Optional[str] = None,
) -> list[LeafEntry]:
    """
    Filter to the target month, expand splits, then filter by type.
    
    An empty input yields an empty output.
    """
    leaves = []
    for tx in transactions_in_month(transactions, year, month, tz_name):
        for leaf, tx_type in expand_splits(tx, tz_name):
            if tx_type == view_type:
                leaves.append(leaf)
    return leaves
