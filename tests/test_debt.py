"""Tests for the debt payoff simulator and its input validation."""

import math
import pytest
from datetime import date

from budgetcore.config import EngineSettings
from budgetcore.debt import (
    DebtAmortizationSimulator,
    calculate_debt_payoff,
    estimate_months_closed_form,
    payoff_schedule,
    run_trajectory,
)
from budgetcore.models import Debt, PayoffStrategy
from budgetcore.validation import DebtValidationError, DebtValidator


TODAY = date(2026, 1, 15)


@pytest.fixture
def simulator():
    return DebtAmortizationSimulator(EngineSettings())


@pytest.fixture
def two_debts():
    return [
        Debt(id="A", name="Credit card", current_balance=1000, interest_rate=20, minimum_payment=50),
        Debt(id="B", name="Store card", current_balance=500, interest_rate=10, minimum_payment=30),
    ]


class TestPayoffStrategies:
    """Tests for where the extra-payment pool goes."""

    def test_avalanche_pays_highest_rate_first(self, two_debts):
        """Test that the extra pool goes to the higher-rate debt."""
        first_month = payoff_schedule(two_debts, 100, PayoffStrategy.AVALANCHE)[0]
        # A: 1000 + 16.67 interest - 50 minimum - 100 extra
        assert first_month["A"] == pytest.approx(866.667, abs=1e-3)
        # B: 500 + 4.17 interest - 30 minimum
        assert first_month["B"] == pytest.approx(474.167, abs=1e-3)

    def test_snowball_pays_lowest_balance_first(self, two_debts):
        """Test that the extra pool goes to the smaller debt."""
        first_month = payoff_schedule(two_debts, 100, PayoffStrategy.SNOWBALL)[0]
        assert first_month["A"] == pytest.approx(966.667, abs=1e-3)
        assert first_month["B"] == pytest.approx(374.167, abs=1e-3)

    def test_both_strategies_beat_baseline(self, simulator, two_debts):
        """Test that extra payments never lengthen the plan."""
        for strategy in PayoffStrategy:
            result = simulator.simulate(two_debts, 100, strategy, TODAY)
            assert result.months <= result.baseline_months
            assert result.total_interest <= result.baseline_interest
            assert result.converged is True

    def test_pool_spills_to_next_debt(self):
        """Test that a cleared debt passes the remaining pool on."""
        debts = [
            Debt(id="small", name="Small", current_balance=40, interest_rate=0, minimum_payment=10),
            Debt(id="big", name="Big", current_balance=1000, interest_rate=0, minimum_payment=10),
        ]
        first_month = payoff_schedule(debts, 100, PayoffStrategy.SNOWBALL)[0]
        assert first_month["small"] == 0
        # 1000 - 10 minimum - (100 - 30) spill
        assert first_month["big"] == pytest.approx(920)

    def test_compare_strategies(self, simulator, two_debts):
        """Test running every strategy on the same inputs."""
        results = simulator.compare_strategies(two_debts, 100, TODAY)
        assert set(results) == {PayoffStrategy.SNOWBALL, PayoffStrategy.AVALANCHE}
        assert results[PayoffStrategy.AVALANCHE].total_interest <= results[PayoffStrategy.SNOWBALL].total_interest

    def test_strategy_accepts_string(self, simulator, two_debts):
        """Test that strategy names are accepted."""
        by_name = simulator.simulate(two_debts, 100, "snowball", TODAY)
        by_enum = simulator.simulate(two_debts, 100, PayoffStrategy.SNOWBALL, TODAY)
        assert by_name == by_enum


class TestDebtAmortizationSimulator:
    """Tests for the month-by-month simulation."""

    def test_zero_interest_single_debt(self, simulator):
        """Test a plain instalment plan."""
        debt = Debt(id="d", name="Phone", current_balance=1200, interest_rate=0, minimum_payment=100)
        result = simulator.simulate([debt], 0, PayoffStrategy.AVALANCHE, TODAY)

        assert result.months == 12
        assert result.total_interest == 0
        assert result.baseline_months == 12
        assert result.payoff_date == date(2027, 1, 15)
        assert result.years_saved == 0

    def test_no_debts(self, simulator):
        """Test the empty plan."""
        result = simulator.simulate([], 100, PayoffStrategy.AVALANCHE, TODAY)
        assert result.months == 0
        assert result.baseline_months == 0
        assert result.payoff_date == TODAY

    def test_payoff_date_clamps_to_month_end(self, simulator):
        """Test month arithmetic on the payoff date."""
        debt = Debt(id="d", name="Loan", current_balance=100, interest_rate=0, minimum_payment=100)
        result = simulator.simulate([debt], 0, PayoffStrategy.AVALANCHE, date(2026, 1, 31))
        assert result.months == 1
        assert result.payoff_date == date(2026, 2, 28)

    def test_residue_below_epsilon_is_paid_off(self):
        """Test that float residue does not add tail months."""
        debt = Debt(id="d", name="Loan", current_balance=100.05, interest_rate=0, minimum_payment=50)
        months, _ = run_trajectory([debt])
        assert months == 2

    def test_is_idempotent(self, simulator, two_debts):
        """Test that repeated runs give the same result."""
        first = simulator.simulate(two_debts, 100, PayoffStrategy.AVALANCHE, TODAY)
        second = simulator.simulate(two_debts, 100, PayoffStrategy.AVALANCHE, TODAY)
        assert first == second
        assert two_debts[0].current_balance == 1000

    @pytest.mark.parametrize("strategy", list(PayoffStrategy))
    def test_more_extra_never_costs_more(self, simulator, two_debts, strategy):
        """Test that a larger extra payment never adds months or interest."""
        results = [
            simulator.simulate(two_debts, extra, strategy, TODAY)
            for extra in (0, 25, 50, 100, 200, 500, 2000)
        ]
        months = [r.months for r in results]
        interest = [r.total_interest for r in results]

        assert months == sorted(months, reverse=True)
        for larger_extra, smaller_extra in zip(interest[1:], interest):
            assert larger_extra <= smaller_extra + 1e-9
        assert all(r.baseline_interest == results[0].baseline_interest for r in results)

    def test_non_converging_plan_stops_at_cap(self):
        """Test that a payment below the interest hits the cap."""
        simulator = DebtAmortizationSimulator(EngineSettings(max_simulation_months=24))
        debt = Debt(id="d", name="Card", current_balance=1000, interest_rate=24, minimum_payment=10)
        result = simulator.simulate([debt], 0, PayoffStrategy.AVALANCHE, TODAY)

        assert result.months == 24
        assert result.baseline_months == 24
        assert result.converged is False
        assert simulator.month_cap == 24

    def test_nan_rate_propagates(self, simulator):
        """Test that a non-finite input shows up in the result."""
        debt = Debt(id="d", name="Card", current_balance=1000, interest_rate=float("nan"), minimum_payment=50)
        result = simulator.simulate([debt], 0, PayoffStrategy.AVALANCHE, TODAY)
        assert math.isnan(result.total_interest)
        assert math.isnan(result.baseline_interest)

    def test_calculate_debt_payoff_uses_defaults(self, two_debts):
        """Test the module-level shortcut."""
        result = calculate_debt_payoff(two_debts, 100, PayoffStrategy.AVALANCHE, TODAY)
        assert result.month_cap == 600
        assert result.months > 0


class TestClosedFormEstimate:
    """Tests for the single-debt closed-form estimate."""

    def test_zero_rate(self):
        """Test the no-interest case."""
        assert estimate_months_closed_form(1200, 0, 100) == pytest.approx(12)

    def test_matches_simulation(self):
        """Test agreement with the iterative simulation."""
        estimate = estimate_months_closed_form(1000, 12, 100)
        debt = Debt(id="d", name="Loan", current_balance=1000, interest_rate=12, minimum_payment=100)
        months, _ = run_trajectory([debt])

        assert estimate == pytest.approx(10.588, abs=1e-3)
        assert months == math.ceil(estimate)

    def test_payment_below_interest(self):
        """Test that a non-amortizing payment has no estimate."""
        assert estimate_months_closed_form(1000, 24, 20) is None
        assert estimate_months_closed_form(1000, 24, 0) is None

    def test_nothing_owed(self):
        """Test a zero balance."""
        assert estimate_months_closed_form(0, 24, 20) == 0


class TestDebtValidator:
    """Tests for caller-side debt validation."""

    def test_valid_debts(self, two_debts):
        """Test that sensible debts pass."""
        result = DebtValidator().validate(two_debts)
        assert result.issues == []
        assert DebtValidator().get_user_friendly_summary(result) is None

    def test_non_finite_and_negative_values(self):
        """Test numeric errors."""
        debt = Debt(
            id="d", name="Card",
            current_balance=-5,
            interest_rate=float("inf"),
            minimum_payment=float("nan"),
        )
        result = DebtValidator().validate([debt])
        issue_types = {(i.field, i.issue_type) for i in result.issues}

        assert ("current_balance", "negative_value") in issue_types
        assert ("interest_rate", "not_finite") in issue_types
        assert ("minimum_payment", "not_finite") in issue_types
        assert all(i.debt_id == "d" for i in result.issues)
        assert result.has_errors is True

    def test_zero_payment_is_an_error(self):
        """Test that a zero minimum payment is rejected."""
        debt = Debt(id="d", name="Card", current_balance=100, interest_rate=5, minimum_payment=0)
        result = DebtValidator().validate([debt])
        assert [i.issue_type for i in result.issues] == ["zero_payment"]

    def test_negative_amortization_is_a_warning(self):
        """Test that a payment below the interest is flagged."""
        debt = Debt(id="d", name="Card", current_balance=1000, interest_rate=24, minimum_payment=10)
        result = DebtValidator().validate([debt])

        assert [i.issue_type for i in result.issues] == ["negative_amortization"]
        assert result.is_valid is True
        summary = DebtValidator().get_user_friendly_summary(result)
        assert summary.startswith("Please check:")

    def test_ensure_valid_raises(self):
        """Test the raising variant."""
        debt = Debt(id="d", name="Card", current_balance=100, interest_rate=5, minimum_payment=0)
        with pytest.raises(DebtValidationError) as exc_info:
            DebtValidator().ensure_valid([debt])
        assert exc_info.value.result.error_count == 1
        assert "zero" in str(exc_info.value)
