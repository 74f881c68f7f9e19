"""
Computation Dispatcher

Runs the analytics pipeline off the caller's interactive path.

DESIGN DECISION: One long-lived worker thread per mounted analytics view,
fed through a FIFO queue.
- Requests are processed strictly in arrival order
- Each request is computed completely within one step
- Exactly one result is delivered per request: a response, or an error
  payload if the computation threw

There is NO deduplication and NO cancellation. Every posted request
eventually produces a result; the caller discards stale ones using the
request id returned by post().

Messages are snapshotted to plain data at post() time, so the worker never
shares mutable state with the caller.
"""

import asyncio
import copy
import itertools
import queue
import threading
import time
from concurrent.futures import Future
from typing import Any, Callable, Optional, Union
from uuid import UUID

import structlog

from budgetcore.analytics.pipeline import compute_analytics
from budgetcore.audit import AuditLogger
from budgetcore.config import DispatcherSettings, EngineSettings, get_settings
from budgetcore.models.analytics import (
    AnalyticsErrorResponse,
    AnalyticsRequest,
    DispatchResult,
)


class AnalyticsError(Exception):
    """Base exception for analytics dispatch errors."""
    pass


class InvalidRequestError(AnalyticsError):
    """A message could not be snapshotted for the worker."""
    pass


class DispatcherClosedError(AnalyticsError):
    """A request was posted after the dispatcher was closed."""
    pass


_STOP = object()

ResultCallback = Callable[[DispatchResult], None]


class ComputationDispatcher:
    """
    Background execution context for analytics requests.

    Usage:
        dispatcher = ComputationDispatcher(on_result=handle)
        request_id = dispatcher.post(request)
        ...
        dispatcher.close()
    """

    def __init__(
        self,
        on_result: Optional[ResultCallback] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[DispatcherSettings] = None,
        engine: Optional[EngineSettings] = None,
    ):
        self._on_result = on_result
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().dispatcher
        self._engine = engine or get_settings().engine
        self._logger = structlog.get_logger("budgetcore.dispatch")

        self._queue: queue.Queue = queue.Queue()
        self._sequence = itertools.count(1)
        self._futures: dict[int, Future] = {}
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._closed = False
        self._processed = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def result_callback(self) -> Optional[ResultCallback]:
        return self._on_result

    def set_result_callback(self, on_result: Optional[ResultCallback]) -> None:
        """Replace the callback invoked on the worker thread for every result."""
        self._on_result = on_result

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def processed_count(self) -> int:
        return self._processed

    def start(self) -> None:
        """Create the worker thread. Calling it again is a no-op."""
        with self._lock:
            if self._closed:
                raise DispatcherClosedError("Dispatcher has been closed")
            if self._thread is not None:
                return
            self._thread = threading.Thread(
                target=self._run,
                name=self._settings.thread_name,
                daemon=True,
            )
            self._thread.start()

        if self._audit_logger:
            self._audit_logger.log_dispatcher_started(self._settings.thread_name)

    def close(self, timeout: Optional[float] = None) -> None:
        """
        Stop accepting requests and wait for the worker to drain the queue.

        Requests already queued are still computed and delivered.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            thread = self._thread
            # Nothing can be queued behind the sentinel
            if thread is not None:
                self._queue.put(_STOP)

        if thread is not None:
            thread.join(timeout if timeout is not None else self._settings.join_timeout_seconds)
            if thread.is_alive():
                self._logger.warning(
                    "dispatcher_join_timeout",
                    thread=self._settings.thread_name,
                )

        if self._audit_logger:
            self._audit_logger.log_dispatcher_stopped(self._settings.thread_name, self._processed)

    def __enter__(self) -> "ComputationDispatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Posting
    # ------------------------------------------------------------------

    def post(
        self,
        message: Union[AnalyticsRequest, dict],
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Queue a request and return its request id.

        Request ids increase monotonically; a larger id is a newer request.
        Never blocks on the computation.
        """
        request_id, _ = self._enqueue(message, correlation_id, with_future=False)
        return request_id

    def submit(
        self,
        message: Union[AnalyticsRequest, dict],
        correlation_id: Optional[UUID] = None,
    ) -> Future:
        """Queue a request and return a Future resolved with its result."""
        _, future = self._enqueue(message, correlation_id, with_future=True)
        return future

    async def request(
        self,
        message: Union[AnalyticsRequest, dict],
        correlation_id: Optional[UUID] = None,
    ) -> DispatchResult:
        """Await the result of one request from asyncio code."""
        return await asyncio.wrap_future(self.submit(message, correlation_id))

    def _enqueue(
        self,
        message: Union[AnalyticsRequest, dict],
        correlation_id: Optional[UUID],
        with_future: bool,
    ) -> tuple[int, Optional[Future]]:
        if self._closed:
            raise DispatcherClosedError("Dispatcher has been closed")

        snapshot = self._snapshot(message)
        self.start()

        future = Future() if with_future else None
        with self._lock:
            if self._closed:
                raise DispatcherClosedError("Dispatcher has been closed")
            request_id = next(self._sequence)
            if future is not None:
                self._futures[request_id] = future
            self._queue.put((request_id, snapshot, correlation_id))

        if self._audit_logger:
            self._audit_logger.log_analytics_requested(
                request_id=request_id,
                view_type=str(snapshot.get("viewType", snapshot.get("view_type", ""))),
                target_month=str(snapshot.get("targetMonth", snapshot.get("target_month", ""))),
                transaction_count=len(snapshot.get("transactions") or []),
                correlation_id=correlation_id,
            )

        return request_id, future

    @staticmethod
    def _snapshot(message: Union[AnalyticsRequest, dict]) -> dict[str, Any]:
        """Reduce a message to plain, caller-independent data."""
        if isinstance(message, AnalyticsRequest):
            return message.model_dump(mode="json", by_alias=True)
        if isinstance(message, dict):
            try:
                return copy.deepcopy(message)
            except Exception as e:
                raise InvalidRequestError(f"Request cannot be copied: {e}") from e
        raise InvalidRequestError(
            f"Unsupported request type: {type(message).__name__}"
        )

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            request_id, snapshot, correlation_id = item
            result = self._compute(request_id, snapshot, correlation_id)
            self._processed += 1
            self._deliver(request_id, result)

    def _compute(
        self,
        request_id: int,
        snapshot: dict[str, Any],
        correlation_id: Optional[UUID],
    ) -> DispatchResult:
        started = time.perf_counter()
        try:
            response = compute_analytics(snapshot, engine=self._engine, request_id=request_id)
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_analytics_failed(
                    request_id=request_id,
                    error_type=type(e).__name__,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return AnalyticsErrorResponse(
                request_id=request_id,
                error=str(e) or type(e).__name__,
            )

        if self._audit_logger:
            self._audit_logger.log_analytics_computed(
                request_id=request_id,
                active_total=response.active_total,
                elapsed_ms=(time.perf_counter() - started) * 1000,
                correlation_id=correlation_id,
            )
        return response

    def _deliver(self, request_id: int, result: DispatchResult) -> None:
        with self._lock:
            future = self._futures.pop(request_id, None)
        if future is not None:
            future.set_result(result)

        if self._on_result is not None:
            try:
                self._on_result(result)
            except Exception as e:
                # A faulty callback must not take the worker down
                self._logger.error(
                    "result_callback_failed",
                    request_id=request_id,
                    error=str(e),
                )
