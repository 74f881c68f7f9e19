"""
Debt Amortization Simulator

Month-by-month payoff simulation comparing two trajectories:

BASELINE - minimum payments only:
    for every debt with balance > epsilon:
        interest = balance * (APR / 100) / 12
        balance += interest
        balance -= min(balance, minimum payment)

ACCELERATED - the same monthly step, then an extra-payment pool:
    re-sort debts every month by strategy
        snowball  -> ascending balance
        avalanche -> descending interest rate
    pour the pool into the first debt with a balance, clear it, spill the
    rest into the next one, until the pool or the debts run out

NUMERIC POLICY:
- A balance <= epsilon (0.1 by default) counts as paid off, so float
  residue cannot cause endless tail iterations
- Both trajectories stop at a month cap (600 by default). A result AT the
  cap means "does not converge" (e.g. the minimum payment does not cover
  the interest), not an exact payoff date
- There is no validation layer: negative or non-finite inputs propagate
  into the results as NaN/Infinity instead of raising. Callers check
  inputs first (see budgetcore.validation.DebtValidator)

The caller's Debt objects are never mutated; each run works on private
copies.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Iterator, Optional, Union

from budgetcore.analytics.calendar import add_months
from budgetcore.config import EngineSettings, get_settings
from budgetcore.models.analytics import PayoffResult
from budgetcore.models.records import Debt, PayoffStrategy


@dataclass
class _WorkingDebt:
    """Private, mutable copy of a debt for one simulation run."""
    debt_id: str
    balance: float
    rate: float
    minimum: float


def _working_copies(debts: Iterable[Debt]) -> list[_WorkingDebt]:
    return [
        _WorkingDebt(
            debt_id=d.id,
            balance=d.current_balance,
            rate=d.interest_rate,
            minimum=d.minimum_payment,
        )
        for d in debts
    ]


def _accrue_and_pay_minimum(debt: _WorkingDebt, epsilon: float) -> float:
    """Apply one month of interest and the minimum payment; return the interest."""
    if not debt.balance > epsilon:
        return 0.0
    interest = debt.balance * (debt.rate / 100) / 12
    debt.balance += interest
    # Written out rather than min() so a NaN minimum propagates
    payment = debt.balance if debt.balance < debt.minimum else debt.minimum
    debt.balance -= payment
    return interest


def _apply_extra(debts: list[_WorkingDebt], pool: float) -> None:
    for debt in debts:
        if not pool > 0:
            break
        if debt.balance > 0:
            payment = min(debt.balance, pool)
            debt.balance -= payment
            pool -= payment


def _sort_by_strategy(debts: list[_WorkingDebt], strategy: PayoffStrategy) -> None:
    if strategy == PayoffStrategy.SNOWBALL:
        debts.sort(key=lambda d: d.balance)
    else:
        debts.sort(key=lambda d: d.rate, reverse=True)


def _iterate_months(
    debts: Iterable[Debt],
    extra_payment: float,
    strategy: Optional[PayoffStrategy],
    epsilon: float,
    month_cap: int,
) -> Iterator[tuple[int, float, list[_WorkingDebt]]]:
    """Yield (month, cumulative interest, working debts) after each month."""
    working = _working_copies(debts)
    accelerated = strategy is not None and extra_payment > 0
    months = 0
    total_interest = 0.0

    while any(d.balance > epsilon for d in working) and months < month_cap:
        months += 1
        if accelerated:
            _sort_by_strategy(working, strategy)

        for debt in working:
            total_interest += _accrue_and_pay_minimum(debt, epsilon)

        if accelerated:
            _apply_extra(working, extra_payment)

        yield months, total_interest, working


def run_trajectory(
    debts: Iterable[Debt],
    extra_payment: float = 0.0,
    strategy: Optional[PayoffStrategy] = None,
    epsilon: float = 0.1,
    month_cap: int = 600,
) -> tuple[int, float]:
    """
    Simulate one trajectory and return (months, total interest).

    With `strategy` None or no extra payment, debts are independent and
    are never re-ordered.
    """
    months, total_interest = 0, 0.0
    for months, total_interest, _ in _iterate_months(
        debts, extra_payment, strategy, epsilon, month_cap
    ):
        pass
    return months, total_interest


def payoff_schedule(
    debts: Iterable[Debt],
    extra_payment: float = 0.0,
    strategy: Optional[PayoffStrategy] = None,
    epsilon: float = 0.1,
    month_cap: int = 600,
) -> list[dict[str, float]]:
    """Balance of every debt (by id) at the end of each simulated month."""
    return [
        {d.debt_id: d.balance for d in working}
        for _, _, working in _iterate_months(debts, extra_payment, strategy, epsilon, month_cap)
    ]


class DebtAmortizationSimulator:
    """
    Payoff simulator bound to the engine's numeric policy.

    Pure and deterministic: the same inputs (and `today`) always give the
    same result.
    """

    def __init__(self, engine: Optional[EngineSettings] = None):
        engine = engine or get_settings().engine
        self._epsilon = engine.paid_off_epsilon
        self._month_cap = engine.max_simulation_months

    @property
    def month_cap(self) -> int:
        return self._month_cap

    def simulate(
        self,
        debts: Iterable[Debt],
        extra_payment: float = 0.0,
        strategy: Union[PayoffStrategy, str] = PayoffStrategy.AVALANCHE,
        today: Optional[date] = None,
    ) -> PayoffResult:
        """
        Compare the baseline trajectory with the accelerated one.

        Callers derive years saved and interest saved from the result
        (`PayoffResult.years_saved`, `PayoffResult.interest_saved`).
        """
        strategy = PayoffStrategy(strategy)
        debts = list(debts)

        baseline_months, baseline_interest = run_trajectory(
            debts,
            epsilon=self._epsilon,
            month_cap=self._month_cap,
        )
        months, total_interest = run_trajectory(
            debts,
            extra_payment=extra_payment,
            strategy=strategy,
            epsilon=self._epsilon,
            month_cap=self._month_cap,
        )

        return PayoffResult(
            months=months,
            payoff_date=add_months(today or date.today(), months),
            total_interest=total_interest,
            baseline_months=baseline_months,
            baseline_interest=baseline_interest,
            month_cap=self._month_cap,
        )

    def compare_strategies(
        self,
        debts: Iterable[Debt],
        extra_payment: float,
        today: Optional[date] = None,
    ) -> dict[PayoffStrategy, PayoffResult]:
        """Run every strategy on the same inputs."""
        debts = list(debts)
        return {
            strategy: self.simulate(debts, extra_payment, strategy, today)
            for strategy in PayoffStrategy
        }


def calculate_debt_payoff(
    debts: Iterable[Debt],
    extra_payment: float = 0.0,
    strategy: Union[PayoffStrategy, str] = PayoffStrategy.AVALANCHE,
    today: Optional[date] = None,
) -> PayoffResult:
    """Simulate with the configured numeric policy."""
    return DebtAmortizationSimulator().simulate(debts, extra_payment, strategy, today)


def estimate_months_closed_form(
    balance: float,
    annual_rate: float,
    payment: float,
) -> Optional[float]:
    """
    Closed-form months to repay one debt with a fixed payment.

        n = -ln(1 - r * B / P) / ln(1 + r),  r = APR / 100 / 12

    Returns None when the payment does not cover the monthly interest.
    Only valid without extra-payment reallocation; the simulator stays
    iterative because priority order changes as balances shrink.
    """
    if balance <= 0:
        return 0.0
    if payment <= 0:
        return None
    rate = (annual_rate / 100) / 12
    if rate == 0:
        return balance / payment
    if payment <= rate * balance:
        return None
    return -math.log(1 - rate * balance / payment) / math.log(1 + rate)
