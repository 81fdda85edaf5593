"""
Simulation entry point.

``evaluate`` runs a fixed pipeline over one rule set and one request and
stops at the first rejection: duration check, booking conditions, booking
window, quotas, buffers, then pricing. It reads nothing but its arguments,
so it is safe to call concurrently.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from venue_rules.core.logging import get_logger
from venue_rules.core.tracing import EvaluationTrace
from venue_rules.schemas.rules import RuleSet
from venue_rules.schemas.simulation import SimulationInput, SimulationResult
from venue_rules.services.booking_window import evaluate_booking_window
from venue_rules.services.buffer import evaluate_buffers
from venue_rules.services.conditions import evaluate_booking_conditions
from venue_rules.services.durations import duration_hours
from venue_rules.services.pricing import evaluate_pricing
from venue_rules.services.quota import evaluate_quotas

logger = get_logger(__name__)


def evaluate(
    rule_set: RuleSet,
    request: SimulationInput,
    now: Optional[datetime] = None,
    trace: Optional[EvaluationTrace] = None,
) -> SimulationResult:
    if trace is None:
        trace = EvaluationTrace(logger=logger)
    if now is None:
        now = datetime.now(timezone.utc)

    duration = duration_hours(request.start_time, request.end_time)
    trace.record("duration", "Requested duration", hours=duration)
    if duration <= 0:
        return SimulationResult(
            allowed=False,
            duration=duration,
            error_reason="End time must be after start time",
            violated_rule="Time validation",
        )

    outcome = evaluate_booking_conditions(rule_set, request, duration, trace)
    if not outcome.allowed:
        return outcome.model_copy(update={"duration": duration})

    window = evaluate_booking_window(rule_set, request, now, trace)
    if not window.allowed:
        return window.model_copy(update={"duration": duration})

    quota = evaluate_quotas(rule_set, request, duration, trace)
    if not quota.allowed:
        return quota.model_copy(update={"duration": duration})

    buffers = evaluate_buffers(rule_set, request, trace)
    if not buffers.allowed:
        return buffers.model_copy(update={"duration": duration})

    quote = evaluate_pricing(rule_set, request, duration, trace)
    trace.record("result", "Booking allowed", total_price=quote.total_price)
    return SimulationResult(
        allowed=True,
        total_price=quote.total_price,
        hourly_rate=quote.hourly_rate,
        rate_label=quote.rate_label,
        duration=duration,
        error_reason=window.error_reason,
    )
