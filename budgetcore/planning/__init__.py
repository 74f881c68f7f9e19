"""Planning helpers: subscriptions, goals and the plan overview."""

from budgetcore.planning.goals import PlanOverview, goal_progress, plan_overview
from budgetcore.planning.subscriptions import (
    MONTHLY_FACTORS,
    due_autopay_charges,
    monthly_cost,
    next_billing_date,
    total_monthly_cost,
    upcoming_subscriptions,
)

__all__ = [
    "PlanOverview",
    "goal_progress",
    "plan_overview",
    "MONTHLY_FACTORS",
    "due_autopay_charges",
    "monthly_cost",
    "next_billing_date",
    "total_monthly_cost",
    "upcoming_subscriptions",
]
