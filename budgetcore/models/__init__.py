"""
Data Models Package

This package contains all Pydantic models used by Budget Core.
All data flowing into and out of the engine must conform to these schemas.
"""

from budgetcore.models.records import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    BillingCycle,
    CategoryDescriptor,
    Debt,
    Goal,
    PayoffStrategy,
    Subscription,
    Transaction,
    TransactionSplit,
    TransactionType,
    strip_category,
)
from budgetcore.models.analytics import (
    AnalyticsErrorResponse,
    AnalyticsRequest,
    AnalyticsResponse,
    CashFlowMonth,
    CategoryBreakdown,
    CategoryBudgetRow,
    DispatchResult,
    LeafEntry,
    PayoffResult,
    ProjectionResult,
)
from budgetcore.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from budgetcore.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Input records
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "BillingCycle",
    "CategoryDescriptor",
    "Debt",
    "Goal",
    "PayoffStrategy",
    "Subscription",
    "Transaction",
    "TransactionSplit",
    "TransactionType",
    "strip_category",
    # Engine outputs
    "AnalyticsErrorResponse",
    "AnalyticsRequest",
    "AnalyticsResponse",
    "CashFlowMonth",
    "CategoryBreakdown",
    "CategoryBudgetRow",
    "DispatchResult",
    "LeafEntry",
    "PayoffResult",
    "ProjectionResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
