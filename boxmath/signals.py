"""
Engine signals.

Tree errors (parse errors, domain errors) live inside expressions as
["Error", ...] nodes. This module covers the other channel: warnings
delivered to a handler while a computation keeps going, and fatal signals
raised as exceptions that abort the current top-level operation.
"""

from typing import Any, Callable, List, Optional
import logging

logger = logging.getLogger('boxmath')


class Signal:
    """A warning or error raised by the engine outside of the expression tree."""

    __slots__ = ('severity', 'message', 'head')

    def __init__(self, message: str, severity: str = 'warning', head: Optional[str] = None):
        self.severity = severity
        self.message = message
        self.head = head

    def __repr__(self) -> str:
        where = f" in {self.head}" if self.head else ""
        return f"Signal({self.severity}: {self.message}{where})"

    def to_dict(self) -> dict:
        return {'severity': self.severity, 'message': self.message, 'head': self.head}


WarningHandler = Callable[[List[Signal]], Any]


def log_warnings(signals: List[Signal]) -> None:
    """Default warning handler: report through the 'boxmath' logger."""
    for signal in signals:
        if signal.head:
            logger.warning("%s (%s)", signal.message, signal.head)
        else:
            logger.warning("%s", signal.message)


# ============================================================
# Fatal signals
# ============================================================

class ComputeEngineError(Exception):
    """Base class for fatal engine signals."""


class RecursionLimitExceeded(ComputeEngineError):
    """Raised when nested canonical/simplify/evaluate/N calls exceed the recursion budget."""

    def __init__(self, limit: int, head: Optional[str] = None):
        self.limit = limit
        self.head = head
        where = f" while processing {head}" if head else ""
        super().__init__(f"Recursion limit of {limit} exceeded{where}")


class TimeLimitExceeded(ComputeEngineError):
    """Raised when a hard time budget runs out."""

    def __init__(self, limit: float):
        self.limit = limit
        super().__init__(f"Time limit of {limit}s exceeded")
