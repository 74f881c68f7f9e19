"""
Audit Logger

DESIGN DECISION: Every significant engine action is logged.
This provides:
1. Traceability from a view refresh to the computation that served it
2. Debugging capability for failed computations
3. A record of debt plans that did not converge

The audit logger:
- Is synchronous and thread-safe, so the dispatcher worker can use it
- Gracefully handles sink failures (logging is never fatal)
- Tags events of one user action with a shared correlation id
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from budgetcore.audit.sinks import AuditSinkInterface
from budgetcore.models.audit import AuditEvent, AuditEventBuilder


# JSON lines through stdlib logging; configured once at import
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog's JSON lines through the stdlib root handler."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class AuditLogger:
    """
    Records engine events.

    Every event goes to the structured local log. If a sink is attached
    the event is also appended there, e.g. for a "recent activity" panel.
    """

    def __init__(
        self,
        sink: Optional[AuditSinkInterface] = None,
    ):
        self._sink = sink
        self._logger = structlog.get_logger("budgetcore.audit")

    @property
    def sink(self) -> Optional[AuditSinkInterface]:
        return self._sink

    def log(self, event: AuditEvent) -> bool:
        """Write one event; False only when the attached sink failed."""
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink:
            try:
                return self._sink.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_dispatcher_started(self, thread_name: str) -> None:
        self.log(AuditEventBuilder.dispatcher_started(thread_name))

    def log_dispatcher_stopped(self, thread_name: str, processed: int) -> None:
        self.log(AuditEventBuilder.dispatcher_stopped(thread_name, processed))

    def log_analytics_requested(
        self,
        request_id: int,
        view_type: str,
        target_month: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a request posted to the dispatcher."""
        self.log(AuditEventBuilder.analytics_requested(
            request_id=request_id,
            view_type=view_type,
            target_month=target_month,
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        ))

    def log_analytics_computed(
        self,
        request_id: int,
        active_total: float,
        elapsed_ms: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.analytics_computed(
            request_id=request_id,
            active_total=active_total,
            elapsed_ms=elapsed_ms,
            correlation_id=correlation_id,
        ))

    def log_analytics_failed(
        self,
        request_id: int,
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a computation that ended in an error payload."""
        self.log(AuditEventBuilder.analytics_failed(
            request_id=request_id,
            error_type=error_type,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_stale_response_discarded(
        self,
        request_id: int,
        latest_request_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.stale_response_discarded(
            request_id=request_id,
            latest_request_id=latest_request_id,
            correlation_id=correlation_id,
        ))

    def log_debt_simulation_completed(
        self,
        strategy: str,
        debt_count: int,
        months: int,
        baseline_months: int,
        interest_saved: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.debt_simulation_completed(
            strategy=strategy,
            debt_count=debt_count,
            months=months,
            baseline_months=baseline_months,
            interest_saved=interest_saved,
            correlation_id=correlation_id,
        ))

    def log_simulation_cap_reached(
        self,
        month_cap: int,
        strategy: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a payoff plan that does not converge."""
        self.log(AuditEventBuilder.simulation_cap_reached(
            month_cap=month_cap,
            strategy=strategy,
            correlation_id=correlation_id,
        ))

    def log_debt_validation_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.debt_validation_failed(
            issues=issues,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """New id tying together the events of one user action (one refresh, one plan)."""
    return uuid4()
