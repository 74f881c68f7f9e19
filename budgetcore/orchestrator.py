"""
Main Orchestrator for Budget Core

This module ties together the components and defines the caller-side
flows for:
1. Analytics (state change -> request -> background compute -> apply)
2. Debt planning (inputs change -> validate -> simulate synchronously)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Only data-only records cross into the engine
- Stale analytics responses never overwrite newer ones
- A failed computation leaves the last good result on screen
- Every step is audited
"""

import threading
from datetime import date, datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union
from uuid import UUID

from budgetcore.audit import AuditLogger, InMemoryAuditSink, configure_logging, create_correlation_id
from budgetcore.config import get_settings
from budgetcore.debt import DebtAmortizationSimulator
from budgetcore.dispatch import ComputationDispatcher
from budgetcore.models.analytics import (
    AnalyticsErrorResponse,
    AnalyticsRequest,
    AnalyticsResponse,
    DispatchResult,
    PayoffResult,
)
from budgetcore.models.records import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    CategoryDescriptor,
    Debt,
    PayoffStrategy,
    TransactionType,
    strip_category,
)
from budgetcore.models.validation import ValidationResult
from budgetcore.validation import DebtValidator


# Display-only transaction fields that never cross into the engine
_PRESENTATION_FIELDS = frozenset({"icon", "attachment", "hasAttachment", "has_attachment"})


def sanitize_transaction(tx: Union[Mapping[str, Any], Any]) -> dict[str, Any]:
    """Plain-data copy of a transaction without presentation fields."""
    if hasattr(tx, "model_dump"):
        return tx.model_dump(mode="json", by_alias=True)
    return {k: v for k, v in dict(tx).items() if k not in _PRESENTATION_FIELDS}


class AnalyticsFlow:
    """
    Orchestrates analytics for one mounted analytics view.

    Flow:
    1. State changes (month, view type, data) -> refresh()
    2. refresh() posts a snapshot to the view's single dispatcher
    3. The worker computes and posts back one result per request
    4. Results superseded by a newer request are discarded once
       something is on screen, and never overwrite a newer result
    5. An error result is logged; the previous analytics stay visible

    The flow never blocks on a computation. `is_pending` is True from the
    first request until any result arrives.

    A passed-in dispatcher must not have an `on_result` callback yet; the
    flow installs its own and raises ValueError rather than replace one.
    """

    def __init__(
        self,
        audit_logger: Optional[AuditLogger] = None,
        dispatcher: Optional[ComputationDispatcher] = None,
        on_update: Optional[Callable[[AnalyticsResponse], None]] = None,
        expense_categories: Sequence[CategoryDescriptor] = EXPENSE_CATEGORIES,
        income_categories: Sequence[CategoryDescriptor] = INCOME_CATEGORIES,
    ):
        self._audit_logger = audit_logger
        self._dispatcher = dispatcher or ComputationDispatcher(audit_logger=audit_logger)
        if self._dispatcher.result_callback is not None:
            raise ValueError("Dispatcher already delivers results to another callback")
        self._dispatcher.set_result_callback(self._handle_result)
        self._on_update = on_update
        self._expense_categories = [strip_category(c) for c in expense_categories]
        self._income_categories = [strip_category(c) for c in income_categories]

        self._lock = threading.Lock()
        self._correlations: dict[int, UUID] = {}
        self._latest_requested = 0
        self._latest_applied = 0
        self._latest_result: Optional[AnalyticsResponse] = None
        self._last_error: Optional[str] = None
        self._any_received = threading.Event()

    @property
    def dispatcher(self) -> ComputationDispatcher:
        return self._dispatcher

    @property
    def latest_result(self) -> Optional[AnalyticsResponse]:
        return self._latest_result

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def is_pending(self) -> bool:
        """True until the first result (response or error) has arrived."""
        return self._latest_requested > 0 and not self._any_received.is_set()

    @property
    def latest_request_id(self) -> int:
        return self._latest_requested

    def wait_for_first_result(self, timeout: Optional[float] = None) -> bool:
        return self._any_received.wait(timeout)

    def build_request(
        self,
        transactions: Iterable[Any],
        target_month: Union[datetime, date, str],
        budgets: Mapping[str, float],
        view_type: Union[TransactionType, str] = TransactionType.EXPENSE,
        active_context: str = "personal",
        today: Optional[Union[datetime, date, str]] = None,
    ) -> AnalyticsRequest:
        """Build a self-contained request, stripping display metadata."""
        return AnalyticsRequest(
            transactions=[sanitize_transaction(tx) for tx in transactions],
            target_month=_iso(target_month),
            budgets=dict(budgets),
            view_type=TransactionType(view_type),
            active_context=active_context,
            expense_categories=self._expense_categories,
            income_categories=self._income_categories,
            today=_iso(today) if today is not None else None,
        )

    def refresh(
        self,
        transactions: Iterable[Any],
        target_month: Union[datetime, date, str],
        budgets: Mapping[str, float],
        view_type: Union[TransactionType, str] = TransactionType.EXPENSE,
        active_context: str = "personal",
        today: Optional[Union[datetime, date, str]] = None,
    ) -> int:
        """Post a request for the current state and return its request id."""
        request = self.build_request(
            transactions, target_month, budgets, view_type, active_context, today
        )
        correlation_id = create_correlation_id()
        with self._lock:
            request_id = self._dispatcher.post(request, correlation_id=correlation_id)
            self._correlations[request_id] = correlation_id
            self._latest_requested = max(self._latest_requested, request_id)
        return request_id

    def _handle_result(self, result: DispatchResult) -> None:
        """Runs on the dispatcher's worker thread."""
        request_id = result.request_id or 0
        with self._lock:
            correlation_id = self._correlations.pop(request_id, None)
            superseded = request_id < self._latest_requested and self._latest_result is not None
            stale = superseded or request_id < self._latest_applied

            if stale:
                if self._audit_logger:
                    self._audit_logger.log_stale_response_discarded(
                        request_id=request_id,
                        latest_request_id=self._latest_requested,
                        correlation_id=correlation_id,
                    )
            elif isinstance(result, AnalyticsErrorResponse):
                # Keep the previous analytics on screen; no retry
                self._last_error = result.error
                self._latest_applied = request_id
            else:
                self._latest_result = result
                self._last_error = None
                self._latest_applied = request_id

        self._any_received.set()
        if not stale and isinstance(result, AnalyticsResponse) and self._on_update:
            self._on_update(result)

    def close(self) -> None:
        """Unmount the view: stop its dispatcher."""
        self._dispatcher.close()


class DebtPlannerFlow:
    """
    Orchestrates the debt planner.

    The simulation is cheap and runs synchronously on the caller's thread
    whenever the planner inputs change.
    """

    def __init__(
        self,
        simulator: Optional[DebtAmortizationSimulator] = None,
        validator: Optional[DebtValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._simulator = simulator or DebtAmortizationSimulator()
        self._validator = validator or DebtValidator()
        self._audit_logger = audit_logger

    def validate(self, debts: Iterable[Debt], correlation_id: Optional[UUID] = None) -> ValidationResult:
        result = self._validator.validate(debts)
        if self._audit_logger and result.issues:
            self._audit_logger.log_debt_validation_failed(
                issues=[
                    {"debt_id": i.debt_id, "field": i.field, "type": i.issue_type, "message": i.message}
                    for i in result.issues
                ],
                correlation_id=correlation_id,
            )
        return result

    def plan(
        self,
        debts: Iterable[Debt],
        extra_payment: float = 0.0,
        strategy: Union[PayoffStrategy, str] = PayoffStrategy.AVALANCHE,
        today: Optional[date] = None,
        validate: bool = True,
    ) -> tuple[PayoffResult, Optional[ValidationResult]]:
        """
        Simulate the payoff plan.

        Validation only reports; invalid inputs are still simulated and
        show up as NaN/Infinity in the result.

        Returns:
            (payoff_result, validation_result or None)
        """
        correlation_id = create_correlation_id()
        debts = list(debts)

        validation = self.validate(debts, correlation_id) if validate else None
        result = self._simulator.simulate(debts, extra_payment, strategy, today)

        if self._audit_logger:
            strategy_name = PayoffStrategy(strategy).value
            self._audit_logger.log_debt_simulation_completed(
                strategy=strategy_name,
                debt_count=len(debts),
                months=result.months,
                baseline_months=result.baseline_months,
                interest_saved=result.interest_saved,
                correlation_id=correlation_id,
            )
            if not result.converged:
                self._audit_logger.log_simulation_cap_reached(
                    month_cap=result.month_cap,
                    strategy=strategy_name,
                    correlation_id=correlation_id,
                )

        return result, validation


def _iso(value: Union[datetime, date, str]) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def create_app_components(
    keep_audit_trail: bool = True,
) -> tuple[AnalyticsFlow, DebtPlannerFlow, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        keep_audit_trail: Keep recent audit events in memory for display.

    Returns:
        (analytics_flow, debt_planner_flow, audit_logger)
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    audit_logger = AuditLogger(InMemoryAuditSink() if keep_audit_trail else None)

    analytics_flow = AnalyticsFlow(
        audit_logger=audit_logger,
        dispatcher=ComputationDispatcher(
            audit_logger=audit_logger,
            settings=settings.dispatcher,
            engine=settings.engine,
        ),
    )
    debt_planner_flow = DebtPlannerFlow(
        simulator=DebtAmortizationSimulator(settings.engine),
        audit_logger=audit_logger,
    )

    return analytics_flow, debt_planner_flow, audit_logger
