from __future__ import annotations

from typing import Optional

from venue_rules.core.tracing import EvaluationTrace
from venue_rules.schemas.rules import QuotaRule, RuleSet, has_any_tag, is_anonymous
from venue_rules.schemas.simulation import SimulationInput, SimulationResult
from venue_rules.services.durations import Duration

STEP = "quota"


def quota_targets(rule: QuotaRule, user_tags: list[str]) -> bool:
    if rule.target in ("individuals_with_tags", "group_with_tag"):
        return has_any_tag(user_tags, rule.tags)
    if rule.target == "individuals_with_no_tags":
        return is_anonymous(user_tags)
    return True


def evaluate_quotas(
    rule_set: RuleSet,
    request: SimulationInput,
    duration: float,
    trace: Optional[EvaluationTrace] = None,
) -> SimulationResult:
    """Per-booking quota check.

    Only time quotas are checked, and only against the requested booking:
    the engine has no booking history to total usage over the period.
    """
    for rule in rule_set.quota_rules:
        if not quota_targets(rule, request.user_tags):
            continue
        if request.space not in rule.affected_spaces:
            continue

        if rule.quota_type != "time":
            if trace is not None:
                trace.record(STEP, "Count quota not enforced by simulation", value=rule.value, period=rule.period)
            continue

        limit = Duration.parse(rule.value)
        if limit is None:
            if trace is not None:
                trace.record(STEP, "Unparseable quota value ignored", value=rule.value)
            continue

        if duration > limit.hours:
            if trace is not None:
                trace.record(STEP, "Quota exceeded", limit_hours=limit.hours, duration=duration)
            return SimulationResult(
                allowed=False,
                error_reason=(
                    f"Booking duration ({duration:g}h) exceeds quota limit of {limit.hours:g}h per {rule.period}"
                ),
                violated_rule=rule.explanation or "Quota limit",
            )
    return SimulationResult(allowed=True)
