"""Debt payoff planning package."""

from budgetcore.debt.simulator import (
    DebtAmortizationSimulator,
    calculate_debt_payoff,
    estimate_months_closed_form,
    payoff_schedule,
    run_trajectory,
)

__all__ = [
    "DebtAmortizationSimulator",
    "calculate_debt_payoff",
    "estimate_months_closed_form",
    "payoff_schedule",
    "run_trajectory",
]
