"""
Debt Validation Models

Findings produced by DebtValidator before a payoff simulation. The
simulator itself never rejects input, so these are the only place a bad
balance, rate or payment is reported to the user.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """One problem with one debt field."""

    field: str = Field(
        ...,
        description="Debt field the finding refers to (e.g., 'minimum_payment')"
    )
    issue_type: str = Field(
        ...,
        description="Finding code: 'not_finite', 'negative_value', 'zero_payment' or 'negative_amortization'"
    )
    message: str = Field(
        ...,
        description="Text shown on the planner screen"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="'error' blocks a meaningful plan; 'warning' means the plan will not converge"
    )
    suggested_fix: Optional[str] = None
    debt_id: Optional[str] = Field(
        default=None,
        description="Id of the debt the finding belongs to"
    )


class ValidationResult(BaseModel):
    """All findings for one set of debts."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def is_valid(self) -> bool:
        """True when the debts can be simulated meaningfully (warnings allowed)."""
        return not self.has_errors
