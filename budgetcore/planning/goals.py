"""Goal progress and the plan overview."""

from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from budgetcore.models.records import Debt, Goal, Subscription
from budgetcore.planning.subscriptions import total_monthly_cost, upcoming_subscriptions


def goal_progress(goal: Goal) -> float:
    """Percentage of the target reached (0 when the target is 0)."""
    if goal.target_amount <= 0:
        return 0.0
    return goal.current_amount / goal.target_amount * 100


class PlanOverview(BaseModel):
    """Headline figures for the planning screen."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_monthly_subscriptions: float
    total_saved: float
    total_goal_target: float
    goal_progress: float = Field(..., description="Overall progress in percent")
    total_debt: float
    upcoming_subscriptions: list[Subscription] = Field(default_factory=list)
    top_goals: list[Goal] = Field(default_factory=list)


def plan_overview(
    subscriptions: Iterable[Subscription],
    goals: Iterable[Goal],
    debts: Iterable[Debt],
    preview: int = 3,
) -> PlanOverview:
    subscriptions = list(subscriptions)
    goals = list(goals)

    total_saved = sum(g.current_amount for g in goals)
    total_target = sum(g.target_amount for g in goals)

    return PlanOverview(
        total_monthly_subscriptions=total_monthly_cost(subscriptions),
        total_saved=total_saved,
        total_goal_target=total_target,
        goal_progress=total_saved / total_target * 100 if total_target > 0 else 0.0,
        total_debt=sum(d.current_balance for d in debts),
        upcoming_subscriptions=upcoming_subscriptions(subscriptions, preview),
        top_goals=sorted(goals, key=goal_progress, reverse=True)[:preview],
    )
