"""
Engine Output Models

Everything the engine hands back to the host: aggregator leaves, the
consolidated analytics response, dispatcher envelopes and payoff results.

DESIGN DECISION: Responses serialise with camelCase keys
(`model_dump(by_alias=True)`) so the wire format matches what the
presentation layer already expects.
"""

from datetime import date
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from budgetcore.models.records import (
    CategoryDescriptor,
    TransactionType,
)


OUTPUT_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
)


# =============================================================================
# AGGREGATION
# =============================================================================

class LeafEntry(BaseModel):
    """
    A post-expansion analytics unit: one category, one amount, one day.

    A split transaction contributes one leaf per split and nothing else.
    """
    model_config = ConfigDict(frozen=True)

    category: str
    amount: float
    day: int = Field(..., ge=1, le=31, description="Day of month (1-based)")


# =============================================================================
# PROJECTION / CATEGORY / CASH FLOW
# =============================================================================

class ProjectionResult(BaseModel):
    """Daily series and linear end-of-month forecast for one month."""
    model_config = OUTPUT_CONFIG

    days_in_month: int
    days_passed: int
    days_left: int
    active_total: float
    daily_spending: list[float]
    cumulative_spending: list[float]
    running_total: float
    current_daily_average: float
    predicted_total: float
    is_over_budget: bool


class CategoryBudgetRow(BaseModel):
    """Actual-vs-limit comparison for one category."""
    model_config = OUTPUT_CONFIG

    id: str
    name: str
    color_code: str
    actual: float
    limit: float

    @property
    def is_over_limit(self) -> bool:
        return self.limit > 0 and self.actual > self.limit


class CategoryBreakdown(BaseModel):
    """Kept categories plus the scaling values used by charts."""
    model_config = OUTPUT_CONFIG

    rows: list[CategoryBudgetRow] = Field(default_factory=list)
    max_category_val: float = 1.0
    total_for_donut: float = 0.0


class CashFlowMonth(BaseModel):
    """Raw income and expense totals for one calendar month."""
    model_config = OUTPUT_CONFIG

    month_label: str = Field(..., description="Short month name, e.g. 'Mar'")
    month_key: str = Field(..., description="YYYY-MM")
    income: float
    expense: float

    @property
    def net(self) -> float:
        return self.income - self.expense


# =============================================================================
# DISPATCHER ENVELOPES
# =============================================================================

class AnalyticsRequest(BaseModel):
    """
    One self-contained analytics request.

    Carries a complete input snapshot; nothing is shared with the caller
    once the request is posted.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    transactions: list[dict[str, Any]] = Field(default_factory=list)
    target_month: str = Field(..., description="ISO-8601 instant inside the target month")
    budgets: dict[str, float] = Field(default_factory=dict)
    view_type: TransactionType = TransactionType.EXPENSE
    active_context: str = "personal"
    expense_categories: list[CategoryDescriptor] = Field(default_factory=list)
    income_categories: list[CategoryDescriptor] = Field(default_factory=list)
    today: Optional[str] = Field(
        default=None,
        description="ISO-8601 'now' reference; defaults to the wall clock"
    )


class AnalyticsResponse(BaseModel):
    """Consolidated analytics payload for one request."""
    model_config = OUTPUT_CONFIG

    request_id: Optional[int] = None
    active_total: float
    daily_spending: list[float]
    cumulative_spending: list[float]
    predicted_total: float
    is_over_budget: bool
    current_daily_average: float
    category_data: list[CategoryBudgetRow]
    max_category_val: float
    total_for_donut: float
    resolved_budget: float
    days_in_month: int
    days_passed: int
    days_left: int
    running_total: float
    cash_flow: list[CashFlowMonth]


class AnalyticsErrorResponse(BaseModel):
    """Error payload posted back when a computation throws."""
    model_config = OUTPUT_CONFIG

    request_id: Optional[int] = None
    error: str


DispatchResult = Union[AnalyticsResponse, AnalyticsErrorResponse]


# =============================================================================
# DEBT PAYOFF
# =============================================================================

class PayoffResult(BaseModel):
    """
    Outcome of one payoff simulation.

    A trajectory that stopped at the month cap did not converge; its month
    count is a bound, not a payoff date.
    """
    model_config = OUTPUT_CONFIG

    months: int
    payoff_date: date
    total_interest: float
    baseline_months: int
    baseline_interest: float
    month_cap: int = 600

    @property
    def years_saved(self) -> float:
        return (self.baseline_months - self.months) / 12

    @property
    def interest_saved(self) -> float:
        return self.baseline_interest - self.total_interest

    @property
    def converged(self) -> bool:
        return self.months < self.month_cap and self.baseline_months < self.month_cap
