"""Developer-facing trace of packing decisions.

A :class:`CalculationTrace` is passed through the engine calls explicitly.
When a caller does not pass one, the engine falls back to a thread-local
default trace controlled by :func:`enable_calculation_logging`,
:func:`get_calculation_logs` and :func:`clear_calculation_logs`.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

logger = logging.getLogger(__name__)


class CalculationTrace:
    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled
        self._lines: List[str] = []

    def enable(self, enabled: bool = True) -> None:
        self.enabled = bool(enabled)

    def append(self, line: str, *args: object) -> None:
        if not self.enabled:
            return
        text = line % args if args else line
        self._lines.append(text)
        logger.debug(text)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def drain(self) -> List[str]:
        lines = self._lines
        self._lines = []
        return lines

    def clear(self) -> None:
        self._lines = []


_local = threading.local()


def default_trace() -> CalculationTrace:
    trace = getattr(_local, "trace", None)
    if trace is None:
        trace = CalculationTrace()
        _local.trace = trace
    return trace


def resolve_trace(trace: Optional[CalculationTrace]) -> CalculationTrace:
    return trace if trace is not None else default_trace()


def enable_calculation_logging(enabled: bool) -> None:
    default_trace().enable(enabled)


def get_calculation_logs() -> List[str]:
    return default_trace().lines


def clear_calculation_logs() -> None:
    default_trace().clear()
