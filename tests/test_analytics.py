"""Tests for the analytics building blocks."""

import pytest
from datetime import date, datetime, timezone

from budgetcore.analytics import (
    add_months,
    aggregate_month,
    daily_buckets,
    elapsed_days,
    expand_splits,
    month_key,
    parse_instant,
    project_month,
    resolve_total_budget,
    summarize_cash_flow,
    to_local,
    track_categories,
    transactions_in_month,
)
from budgetcore.analytics.calendar import trailing_months
from budgetcore.models import (
    CategoryDescriptor,
    LeafEntry,
    Transaction,
    TransactionType,
)


def make_tx(tx_id, amount, when, category="Food", tx_type="expense", splits=None):
    return Transaction.model_validate({
        "id": tx_id,
        "category": category,
        "amount": amount,
        "date": when,
        "type": tx_type,
        "splits": splits,
    })


CATEGORIES = [
    CategoryDescriptor(id="food", name="Food", color_code="#f97316"),
    CategoryDescriptor(id="transport", name="Transport", color_code="#3b82f6"),
    CategoryDescriptor(id="bills", name="Bills"),
    CategoryDescriptor(id="fun", name="Fun", color_code="#a855f7"),
]


class TestCalendar:
    """Tests for local-calendar helpers."""

    def test_parse_instant_accepts_zulu_suffix(self):
        """Test that a trailing 'Z' parses as UTC."""
        parsed = parse_instant("2026-04-10T08:30:00Z")
        assert parsed == datetime(2026, 4, 10, 8, 30, tzinfo=timezone.utc)

    def test_to_local_converts_aware_instants(self):
        """Test that month bucketing follows the configured timezone."""
        local = to_local("2026-03-31T23:30:00Z", "Asia/Kolkata")
        assert (local.year, local.month, local.day) == (2026, 4, 1)

    def test_to_local_keeps_naive_datetimes(self):
        """Test that naive values are already local."""
        assert to_local("2026-03-31T23:30:00", "Asia/Kolkata") == datetime(2026, 3, 31, 23, 30)

    def test_month_key(self):
        """Test YYYY-MM formatting."""
        assert month_key(date(2026, 4, 9)) == "2026-04"

    def test_trailing_months_across_years(self):
        """Test the month window across a year boundary."""
        assert trailing_months(2026, 2, 3) == [date(2025, 12, 1), date(2026, 1, 1), date(2026, 2, 1)]
        assert trailing_months(2026, 4, 1) == [date(2026, 4, 1)]

    def test_add_months_clamps_day(self):
        """Test that the day is clamped to the end of the target month."""
        assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
        assert add_months(date(2028, 1, 31), 1) == date(2028, 2, 29)
        assert add_months(date(2026, 1, 15), 12) == date(2027, 1, 15)
        assert add_months(datetime(2026, 3, 31, 9, 30), -1) == datetime(2026, 2, 28, 9, 30)


class TestTransactionAggregator:
    """Tests for month filtering and split expansion."""

    def test_empty_input_yields_no_leaves(self):
        """Test the empty case."""
        assert aggregate_month([], 2026, 4, TransactionType.EXPENSE) == []

    def test_filters_by_month(self):
        """Test that only the target month is kept."""
        txs = [
            make_tx(1, 10, "2026-04-01T00:00:00"),
            make_tx(2, 20, "2026-03-31T23:59:59"),
            make_tx(3, 30, "2026-05-01T00:00:00"),
        ]
        kept = transactions_in_month(txs, 2026, 4)
        assert [tx.id for tx in kept] == [1]

    def test_filters_by_view_type(self):
        """Test that the other direction is dropped."""
        txs = [
            make_tx(1, 10, "2026-04-02"),
            make_tx(2, 2000, "2026-04-02", category="Salary", tx_type="income"),
        ]
        expense = aggregate_month(txs, 2026, 4, TransactionType.EXPENSE)
        income = aggregate_month(txs, 2026, 4, TransactionType.INCOME)
        assert [leaf.amount for leaf in expense] == [10]
        assert [leaf.category for leaf in income] == ["Salary"]

    def test_split_replaces_parent(self):
        """Test that a split transaction contributes its splits only."""
        tx = make_tx(
            1, 900, "2026-04-03T10:00:00",
            category="Shopping",
            splits=[{"category": "Food", "amount": 600}, {"category": "Transport", "amount": 300}],
        )
        pairs = expand_splits(tx)
        assert [(leaf.category, leaf.amount, leaf.day) for leaf, _ in pairs] == [
            ("Food", 600, 3),
            ("Transport", 300, 3),
        ]
        assert all(tx_type == TransactionType.EXPENSE for _, tx_type in pairs)

    def test_leaf_day_uses_local_calendar(self):
        """Test that an aware instant lands on its local day."""
        tx = make_tx(1, 50, "2026-03-31T23:30:00Z")
        leaves = aggregate_month([tx], 2026, 4, TransactionType.EXPENSE, tz_name="Asia/Kolkata")
        assert leaves == [LeafEntry(category="Food", amount=50, day=1)]


class TestBudgetResolution:
    """Tests for total budget precedence."""

    def test_month_specific_wins(self):
        """Test month-specific over context default."""
        budgets = {"personal-2026-04": 500, "personal-default": 300}
        assert resolve_total_budget(budgets, "personal", "2026-04") == 500

    def test_falls_back_to_context_default(self):
        """Test the context default fallback."""
        budgets = {"personal-2026-03": 500, "personal-default": 300}
        assert resolve_total_budget(budgets, "personal", "2026-04") == 300

    def test_zero_falls_through(self):
        """Test that a stored zero is treated as unset."""
        budgets = {"personal-2026-04": 0, "personal-default": 300}
        assert resolve_total_budget(budgets, "personal", "2026-04") == 300

    def test_missing_resolves_to_zero(self):
        """Test the final fallback."""
        assert resolve_total_budget({"business-default": 300}, "personal", "2026-04") == 0


class TestProjectionEngine:
    """Tests for the daily series and linear forecast."""

    def test_mid_month_forecast(self):
        """Test a linear projection in the current month."""
        leaves = [LeafEntry(category="Food", amount=300, day=10)]
        result = project_month(leaves, 2026, 4, today=date(2026, 4, 20), resolved_budget=400)

        assert result.days_in_month == 30
        assert result.active_total == 300
        assert result.days_passed == 20
        assert result.current_daily_average == pytest.approx(15)
        assert result.days_left == 10
        assert result.predicted_total == pytest.approx(450)
        assert result.is_over_budget is True

    def test_cumulative_series_stops_at_today(self):
        """Test the cumulative series length and values."""
        leaves = [LeafEntry(category="Food", amount=300, day=10)]
        result = project_month(leaves, 2026, 4, today=date(2026, 4, 20), resolved_budget=0)

        assert len(result.daily_spending) == 30
        assert len(result.cumulative_spending) == 20
        assert result.cumulative_spending[8] == 0
        assert result.cumulative_spending[9] == 300
        assert result.cumulative_spending[-1] == 300
        assert result.running_total == 300

    def test_future_dated_leaf_counts_toward_total(self):
        """Test that leaves after today are in the total but not the series."""
        leaves = [LeafEntry(category="Food", amount=300, day=25)]
        result = project_month(leaves, 2026, 4, today=date(2026, 4, 20), resolved_budget=1000)

        assert result.active_total == 300
        assert result.running_total == 0
        assert result.predicted_total == pytest.approx(450)

    def test_past_month_is_fully_elapsed(self):
        """Test that non-current months use the whole month."""
        leaves = [LeafEntry(category="Food", amount=310, day=5)]
        result = project_month(leaves, 2026, 3, today=date(2026, 4, 20), resolved_budget=100)

        assert result.days_passed == 31
        assert result.days_left == 0
        assert result.predicted_total == pytest.approx(310)
        assert len(result.cumulative_spending) == 31

    def test_future_month_is_fully_elapsed(self):
        """Test that a future month is treated like a past one."""
        result = project_month([], 2026, 6, today=date(2026, 4, 20), resolved_budget=100)
        assert result.days_passed == 30
        assert result.predicted_total == 0
        assert result.is_over_budget is False

    def test_income_view_is_never_over_budget(self):
        """Test that the over-budget flag is expense-only."""
        leaves = [LeafEntry(category="Salary", amount=5000, day=1)]
        result = project_month(
            leaves, 2026, 4,
            today=date(2026, 4, 20),
            resolved_budget=100,
            view_type=TransactionType.INCOME,
        )
        assert result.is_over_budget is False

    def test_elapsed_days(self):
        """Test elapsed days relative to today."""
        assert elapsed_days(2026, 4, date(2026, 4, 1)) == 1
        assert elapsed_days(2026, 2, date(2026, 4, 1)) == 28

    def test_daily_buckets_accumulate_same_day(self):
        """Test that leaves on the same day add up."""
        leaves = [
            LeafEntry(category="Food", amount=10, day=2),
            LeafEntry(category="Fun", amount=5, day=2),
        ]
        assert daily_buckets(leaves, 3) == [0.0, 15.0, 0.0]


class TestCategoryBudgetTracker:
    """Tests for the per-category comparison."""

    def test_split_amounts_reach_their_categories(self):
        """Test that split shares are tracked under their own categories."""
        tx = make_tx(
            1, 900, "2026-04-03",
            category="Bills",
            splits=[{"category": "Food", "amount": 600}, {"category": "Transport", "amount": 300}],
        )
        leaves = aggregate_month([tx], 2026, 4, TransactionType.EXPENSE)
        breakdown = track_categories(leaves, CATEGORIES, {}, "2026-04")

        assert [(row.name, row.actual) for row in breakdown.rows] == [
            ("Food", 600),
            ("Transport", 300),
        ]
        assert all(row.actual != 900 for row in breakdown.rows)
        assert breakdown.total_for_donut == 900
        assert breakdown.max_category_val == 600

    def test_keeps_categories_with_limit_only(self):
        """Test that a limit keeps a category without spending."""
        leaves = [LeafEntry(category="Food", amount=50, day=1)]
        budgets = {"2026-04-category-Bills": 200}
        breakdown = track_categories(leaves, CATEGORIES, budgets, "2026-04")

        bills = next(row for row in breakdown.rows if row.name == "Bills")
        assert bills.actual == 0
        assert bills.limit == 200
        assert [row.name for row in breakdown.rows] == ["Food", "Bills"]

    def test_drops_categories_without_activity(self):
        """Test that untouched categories are omitted."""
        leaves = [LeafEntry(category="Food", amount=50, day=1)]
        breakdown = track_categories(leaves, CATEGORIES, {}, "2026-04")
        assert [row.name for row in breakdown.rows] == ["Food"]

    def test_unknown_leaf_categories_are_ignored(self):
        """Test that leaves outside the taxonomy do not create rows."""
        leaves = [LeafEntry(category="Crypto", amount=50, day=1)]
        breakdown = track_categories(leaves, CATEGORIES, {}, "2026-04")
        assert breakdown.rows == []
        assert breakdown.max_category_val == 1
        assert breakdown.total_for_donut == 0

    def test_default_color_for_uncoloured_category(self):
        """Test the fallback colour."""
        leaves = [LeafEntry(category="Bills", amount=10, day=1)]
        breakdown = track_categories(leaves, CATEGORIES, {}, "2026-04")
        assert breakdown.rows[0].color_code == "#cbd5e1"

    def test_ties_keep_taxonomy_order(self):
        """Test that sorting is stable."""
        leaves = [
            LeafEntry(category="Fun", amount=40, day=1),
            LeafEntry(category="Food", amount=40, day=2),
        ]
        breakdown = track_categories(leaves, CATEGORIES, {}, "2026-04")
        assert [row.name for row in breakdown.rows] == ["Food", "Fun"]

    def test_limits_are_per_month(self):
        """Test that another month's limit does not apply."""
        leaves = [LeafEntry(category="Food", amount=50, day=1)]
        budgets = {"2026-03-category-Food": 100}
        breakdown = track_categories(leaves, CATEGORIES, budgets, "2026-04")
        assert breakdown.rows[0].limit == 0


class TestCashFlowAggregator:
    """Tests for the trailing monthly summary."""

    def test_window_is_oldest_first(self):
        """Test the six-month window ending at the target month."""
        summary = summarize_cash_flow([], 2026, 4)
        assert [m.month_key for m in summary] == [
            "2025-11", "2025-12", "2026-01", "2026-02", "2026-03", "2026-04",
        ]
        assert [m.month_label for m in summary] == ["Nov", "Dec", "Jan", "Feb", "Mar", "Apr"]

    def test_totals_by_direction(self):
        """Test income and expense totals per month."""
        txs = [
            make_tx(1, 3000, "2026-04-01", category="Salary", tx_type="income"),
            make_tx(2, 200, "2026-04-05"),
            make_tx(3, 100, "2026-03-15"),
            make_tx(4, 999, "2025-10-31"),
        ]
        summary = summarize_cash_flow(txs, 2026, 4)
        april, march = summary[-1], summary[-2]

        assert (april.income, april.expense) == (3000, 200)
        assert april.net == 2800
        assert (march.income, march.expense) == (0, 100)
        assert sum(m.expense for m in summary) == 300

    def test_uses_raw_amounts_for_splits(self):
        """Test that split transactions count with their parent amount."""
        tx = make_tx(
            1, 900, "2026-04-03",
            splits=[{"category": "Food", "amount": 600}, {"category": "Transport", "amount": 300}],
        )
        summary = summarize_cash_flow([tx], 2026, 4)
        assert summary[-1].expense == 900

    def test_custom_window_length(self):
        """Test a shorter window."""
        summary = summarize_cash_flow([], 2026, 1, months=2)
        assert [m.month_key for m in summary] == ["2025-12", "2026-01"]
