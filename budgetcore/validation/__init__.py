"""Caller-side validation package."""

from budgetcore.validation.validator import DebtValidationError, DebtValidator

__all__ = ["DebtValidationError", "DebtValidator"]
