"""
Debt Input Validation

DESIGN DECISION: The payoff simulator has NO validation layer of its own.
Bad numbers flow through it as NaN/Infinity. This module is the caller's
tool for checking the documented preconditions BEFORE simulating.

Validation happens in two stages:

STAGE 1 - NUMERIC CHECKS (errors):
- Every amount is finite
- Balance and interest rate are not negative
- Minimum payment is positive

STAGE 2 - PLAN SANITY CHECKS (warnings):
- Minimum payment covers the first month's interest
  (otherwise the balance grows and the simulation runs to its cap)

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to correct.
"""

import math
from typing import Iterable, Optional

from budgetcore.models.records import Debt
from budgetcore.models.validation import ValidationIssue, ValidationResult


class DebtValidationError(ValueError):
    """Raised by ensure_valid() when a debt fails a numeric check."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(i.message for i in result.errors))


class DebtValidator:
    """Checks debts against the simulator's preconditions."""

    def _validate_numbers(self, debt: Debt) -> list[ValidationIssue]:
        """Stage 1: numeric checks."""
        issues = []
        fields = (
            ("current_balance", debt.current_balance, "Balance"),
            ("interest_rate", debt.interest_rate, "Interest rate"),
            ("minimum_payment", debt.minimum_payment, "Minimum payment"),
        )

        for field, value, label in fields:
            if not math.isfinite(value):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="not_finite",
                    message=f"{label} of '{debt.name}' is not a finite number",
                    severity="error",
                    suggested_fix=f"Enter a numeric {label.lower()}",
                    debt_id=debt.id,
                ))
            elif value < 0:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="negative_value",
                    message=f"{label} of '{debt.name}' cannot be negative",
                    severity="error",
                    suggested_fix=f"Enter a {label.lower()} of zero or more",
                    debt_id=debt.id,
                ))

        if math.isfinite(debt.minimum_payment) and debt.minimum_payment == 0 and debt.current_balance > 0:
            issues.append(ValidationIssue(
                field="minimum_payment",
                issue_type="zero_payment",
                message=f"Minimum payment of '{debt.name}' is zero",
                severity="error",
                suggested_fix="Enter the minimum monthly payment from your statement",
                debt_id=debt.id,
            ))

        return issues

    def _validate_plan(self, debt: Debt) -> list[ValidationIssue]:
        """Stage 2: plan sanity checks."""
        issues = []
        first_interest = debt.current_balance * (debt.interest_rate / 100) / 12
        if debt.current_balance > 0 and debt.minimum_payment <= first_interest:
            issues.append(ValidationIssue(
                field="minimum_payment",
                issue_type="negative_amortization",
                message=(
                    f"Minimum payment of '{debt.name}' does not cover its monthly "
                    f"interest ({first_interest:,.2f}); the balance will not go down"
                ),
                severity="warning",
                suggested_fix="Increase the payment or add an extra payment",
                debt_id=debt.id,
            ))
        return issues

    def validate(self, debts: Iterable[Debt]) -> ValidationResult:
        """
        Run both stages for every debt.

        Stage 2 is skipped for a debt that fails stage 1.
        """
        issues = []
        for debt in debts:
            numeric_issues = self._validate_numbers(debt)
            issues.extend(numeric_issues)
            if not any(i.severity == "error" for i in numeric_issues):
                issues.extend(self._validate_plan(debt))
        return ValidationResult(issues=issues)

    def ensure_valid(self, debts: Iterable[Debt]) -> ValidationResult:
        """Validate and raise DebtValidationError on any error-level issue."""
        result = self.validate(debts)
        if result.has_errors:
            raise DebtValidationError(result)
        return result

    def get_user_friendly_summary(self, result: ValidationResult) -> Optional[str]:
        """Short text for the planner screen, or None when there is nothing to say."""
        if not result.issues:
            return None

        lines = []
        errors = result.errors
        warnings = result.warnings

        if errors:
            lines.append("Please fix the following before planning:")
            for issue in errors:
                lines.append(f"   • {issue.message}")
        if warnings:
            if lines:
                lines.append("")
            lines.append("Please check:")
            for issue in warnings:
                lines.append(f"   • {issue.message}")

        return "\n".join(lines)
