"""
Evaluation trace: the diagnostic side channel of the rule engine.

Resolvers record what they matched, skipped and decided into a trace
instead of logging directly, so a caller can show the reasoning behind a
simulation result. A trace may forward every event to a structlog logger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import structlog


@dataclass
class TraceEvent:
    step: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)


class EvaluationTrace:
    """Ordered collector of trace events."""

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self.events: list[TraceEvent] = []
        self._logger = logger

    def record(self, step: str, message: str, **data: Any) -> None:
        self.events.append(TraceEvent(step=step, message=message, data=data))
        if self._logger is not None:
            self._logger.debug(message, step=step, **data)

    def for_step(self, step: str) -> list[TraceEvent]:
        return [e for e in self.events if e.step == step]

    def messages(self) -> list[str]:
        return [e.message for e in self.events]

    def __len__(self) -> int:
        return len(self.events)
