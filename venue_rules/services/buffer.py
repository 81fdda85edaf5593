from __future__ import annotations

from typing import Optional

from venue_rules.core.tracing import EvaluationTrace
from venue_rules.schemas.rules import RuleSet
from venue_rules.schemas.simulation import SimulationInput, SimulationResult

STEP = "buffer_time"


def evaluate_buffers(
    rule_set: RuleSet,
    request: SimulationInput,
    trace: Optional[EvaluationTrace] = None,
) -> SimulationResult:
    """Always allows.

    Enforcing a buffer needs the existing bookings of the same space around
    the requested slot: a query returning every booking of ``space`` on
    ``date`` ending within ``buffer_duration`` before ``start_time`` or
    starting within ``buffer_duration`` after ``end_time``. A simulation has
    no such bookings, so the matching rules are only traced.
    """
    for rule in rule_set.buffer_time_rules:
        if request.space in rule.spaces and trace is not None:
            trace.record(STEP, "Buffer rule not enforced by simulation", buffer_duration=rule.buffer_duration)
    return SimulationResult(allowed=True)
