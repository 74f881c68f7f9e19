"""Audit logging package."""

from budgetcore.audit.logger import AuditLogger, configure_logging, create_correlation_id
from budgetcore.audit.sinks import AuditSinkInterface, InMemoryAuditSink

__all__ = [
    "AuditLogger",
    "AuditSinkInterface",
    "InMemoryAuditSink",
    "configure_logging",
    "create_correlation_id",
]
