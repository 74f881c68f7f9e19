"""Background dispatch of analytics computations."""

from budgetcore.dispatch.dispatcher import (
    AnalyticsError,
    ComputationDispatcher,
    DispatcherClosedError,
    InvalidRequestError,
)

__all__ = [
    "AnalyticsError",
    "ComputationDispatcher",
    "DispatcherClosedError",
    "InvalidRequestError",
]
