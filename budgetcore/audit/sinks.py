"""
Audit Sinks

DESIGN DECISION: The audit trail goes through an abstract, append-only sink.
The engine ships an in-memory implementation; hosts can plug in their own
persistence without the engine knowing about it.
"""

import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Optional
from uuid import UUID

from budgetcore.models.audit import AuditEvent, AuditEventType


class AuditSinkInterface(ABC):
    """
    Abstract interface for audit event storage.
    
    Audit logs are append-only - we never delete or modify them.
    Implementations must be safe to call from the dispatcher's worker thread.
    """
    
    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.
        
        Returns:
            True if stored successfully
        """
        pass
    
    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class InMemoryAuditSink(AuditSinkInterface):
    """Bounded in-memory audit trail."""
    
    def __init__(self, max_events: Optional[int] = 1000):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()
    
    def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            self._events.append(event)
        return True
    
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        with self._lock:
            events = list(self._events)
        return list(reversed(events))[:limit]
    
    def events_of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        """All stored events of one type, oldest first."""
        with self._lock:
            return [e for e in self._events if e.event_type == event_type]
    
    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        with self._lock:
            return [e for e in self._events if e.correlation_id == correlation_id]
