"""
Observability for Hexkeeper.

Sequenced logging of dice rolls, table lookups, clock advancement and
campaign actions.
"""

from hexkeeper.observability.run_log import (
    RunLog,
    LogEvent,
    EventType,
    RollEvent,
    TableLookupEvent,
    TimeStepEvent,
    ActionEvent,
    get_run_log,
)

__all__ = [
    "RunLog",
    "LogEvent",
    "EventType",
    "RollEvent",
    "TableLookupEvent",
    "TimeStepEvent",
    "ActionEvent",
    "get_run_log",
]
