"""
Audit Models for Budget Core

Every significant engine action is logged for audit purposes.
This provides:
1. Traceability from a view refresh to the computation that served it
2. Debugging information when a computation fails
3. Visibility into non-converging debt plans

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Dispatcher lifecycle
    DISPATCHER_STARTED = "dispatcher_started"
    DISPATCHER_STOPPED = "dispatcher_stopped"

    # Analytics requests
    ANALYTICS_REQUESTED = "analytics_requested"
    ANALYTICS_COMPUTED = "analytics_computed"
    ANALYTICS_FAILED = "analytics_failed"
    STALE_RESPONSE_DISCARDED = "stale_response_discarded"

    # Debt planner
    DEBT_SIMULATION_COMPLETED = "debt_simulation_completed"
    SIMULATION_CAP_REACHED = "simulation_cap_reached"
    DEBT_VALIDATION_FAILED = "debt_validation_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'analytics_request', 'debt_plan')"
    )
    entity_id: Optional[str] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one view refresh)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.analytics_requested(request_id, "expense", correlation_id)
        event = AuditEventBuilder.simulation_cap_reached(600, "avalanche")
    """

    @staticmethod
    def dispatcher_started(thread_name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DISPATCHER_STARTED,
            entity_type="dispatcher",
            entity_id=thread_name,
            description=f"Analytics worker started: {thread_name}",
        )

    @staticmethod
    def dispatcher_stopped(thread_name: str, processed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DISPATCHER_STOPPED,
            entity_type="dispatcher",
            entity_id=thread_name,
            description=f"Analytics worker stopped after {processed} requests",
            details={"processed": processed},
        )

    @staticmethod
    def analytics_requested(
        request_id: int,
        view_type: str,
        target_month: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYTICS_REQUESTED,
            severity=AuditSeverity.DEBUG,
            entity_type="analytics_request",
            entity_id=str(request_id),
            correlation_id=correlation_id,
            description=f"Analytics requested for {target_month} ({view_type})",
            details={
                "view_type": view_type,
                "target_month": target_month,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def analytics_computed(
        request_id: int,
        active_total: float,
        elapsed_ms: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYTICS_COMPUTED,
            entity_type="analytics_request",
            entity_id=str(request_id),
            correlation_id=correlation_id,
            description=f"Analytics computed in {elapsed_ms:.1f} ms",
            details={
                "active_total": active_total,
                "elapsed_ms": round(elapsed_ms, 3),
            },
        )

    @staticmethod
    def analytics_failed(
        request_id: int,
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYTICS_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="analytics_request",
            entity_id=str(request_id),
            correlation_id=correlation_id,
            description=f"Analytics computation failed: {error_type}",
            error_message=error_message,
            details={"error_type": error_type},
        )

    @staticmethod
    def stale_response_discarded(
        request_id: int,
        latest_request_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STALE_RESPONSE_DISCARDED,
            severity=AuditSeverity.DEBUG,
            entity_type="analytics_request",
            entity_id=str(request_id),
            correlation_id=correlation_id,
            description=f"Discarded response {request_id}; {latest_request_id} already applied",
            details={"latest_request_id": latest_request_id},
        )

    @staticmethod
    def debt_simulation_completed(
        strategy: str,
        debt_count: int,
        months: int,
        baseline_months: int,
        interest_saved: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_SIMULATION_COMPLETED,
            entity_type="debt_plan",
            correlation_id=correlation_id,
            description=f"Payoff simulated ({strategy}): {months} vs {baseline_months} months",
            details={
                "strategy": strategy,
                "debt_count": debt_count,
                "months": months,
                "baseline_months": baseline_months,
                "interest_saved": interest_saved,
            },
        )

    @staticmethod
    def simulation_cap_reached(
        month_cap: int,
        strategy: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIMULATION_CAP_REACHED,
            severity=AuditSeverity.WARNING,
            entity_type="debt_plan",
            correlation_id=correlation_id,
            description=f"Payoff simulation did not converge within {month_cap} months",
            details={"month_cap": month_cap, "strategy": strategy},
        )

    @staticmethod
    def debt_validation_failed(
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="debt_plan",
            correlation_id=correlation_id,
            description=f"Debt validation failed with {len(issues)} issues",
            details={"issues": issues},
        )
