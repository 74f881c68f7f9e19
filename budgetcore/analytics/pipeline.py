"""
Analytics Pipeline

One synchronous pass over a request snapshot:

    Aggregator -> Projection / CategoryBudgets -> CashFlow -> response

This function is what the dispatcher runs on its worker thread. It holds
no state between calls; the same request always yields the same response
for the same `today`.
"""

from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from budgetcore.analytics.aggregator import aggregate_month
from budgetcore.analytics.budget_keys import resolve_total_budget
from budgetcore.analytics.calendar import month_key, to_local
from budgetcore.analytics.cash_flow import summarize_cash_flow
from budgetcore.analytics.category_budgets import track_categories
from budgetcore.analytics.projection import project_month
from budgetcore.config import EngineSettings, get_settings
from budgetcore.models.analytics import AnalyticsRequest, AnalyticsResponse
from budgetcore.models.records import Transaction, TransactionType


def local_today(tz_name: Optional[str] = None) -> date:
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).date()
    return datetime.now().date()


def compute_analytics(
    request: Union[AnalyticsRequest, dict],
    engine: Optional[EngineSettings] = None,
    request_id: Optional[int] = None,
) -> AnalyticsResponse:
    """
    Compute the consolidated analytics payload for one request.

    Raises on malformed input (pydantic ValidationError, ValueError for
    bad dates); the dispatcher converts that into an error payload.
    """
    engine = engine or get_settings().engine
    tz_name = engine.local_timezone
    if not isinstance(request, AnalyticsRequest):
        request = AnalyticsRequest.model_validate(request)

    target = to_local(request.target_month, tz_name)
    year, month = target.year, target.month
    current_month = month_key(target)
    today = to_local(request.today, tz_name).date() if request.today else local_today(tz_name)

    transactions = [Transaction.model_validate(tx) for tx in request.transactions]
    resolved_budget = resolve_total_budget(request.budgets, request.active_context, current_month)

    leaves = aggregate_month(transactions, year, month, request.view_type, tz_name)
    projection = project_month(
        leaves,
        year,
        month,
        today=today,
        resolved_budget=resolved_budget,
        view_type=request.view_type,
    )

    taxonomy = (
        request.income_categories
        if request.view_type == TransactionType.INCOME
        else request.expense_categories
    )
    breakdown = track_categories(
        leaves,
        taxonomy,
        request.budgets,
        current_month,
        default_color=engine.default_category_color,
    )

    cash_flow = summarize_cash_flow(
        transactions,
        year,
        month,
        months=engine.cash_flow_months,
        tz_name=tz_name,
    )

    return AnalyticsResponse(
        request_id=request_id,
        active_total=projection.active_total,
        daily_spending=projection.daily_spending,
        cumulative_spending=projection.cumulative_spending,
        predicted_total=projection.predicted_total,
        is_over_budget=projection.is_over_budget,
        current_daily_average=projection.current_daily_average,
        category_data=breakdown.rows,
        max_category_val=breakdown.max_category_val,
        total_for_donut=breakdown.total_for_donut,
        resolved_budget=resolved_budget,
        days_in_month=projection.days_in_month,
        days_passed=projection.days_passed,
        days_left=projection.days_left,
        running_total=projection.running_total,
        cash_flow=cash_flow,
    )
