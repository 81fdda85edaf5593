"""
Advance-booking windows.

``less_than`` N means the booking may be at most N ahead (an upper bound);
``more_than`` N means it must be made at least N ahead. Rules are resolved
most-specific-first: a general ``all_users`` rule only applies when no
tag-scoped rule already governs the requester.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from venue_rules.core.tracing import EvaluationTrace
from venue_rules.schemas.rules import BookingWindowRule, RuleSet, has_any_tag, is_anonymous
from venue_rules.schemas.simulation import SimulationInput, SimulationResult
from venue_rules.services.durations import advance_hours, booking_datetime

STEP = "booking_window"

NO_RULES_MESSAGE = "Booking is allowed - no booking window rules are configured."
NO_APPLICABLE_MESSAGE = "Booking is allowed - no booking window restrictions apply to this request."

SCOPE_PRIORITY = {"users_with_tags": 0, "users_with_no_tags": 1, "all_users": 2}

_UNIT_HOURS = {"hour": 1, "hours": 1, "day": 24, "days": 24, "week": 168, "weeks": 168}


@dataclass
class WindowCheck:
    rule: BookingWindowRule
    applicable: bool
    violates: bool = False


def sort_by_priority(rules: Sequence[BookingWindowRule]) -> list[BookingWindowRule]:
    # sorted() is stable, so authoring order is kept within a scope
    return sorted(rules, key=lambda r: SCOPE_PRIORITY.get(r.user_scope, len(SCOPE_PRIORITY)))


def rule_hours(rule: BookingWindowRule) -> float:
    return rule.value * _UNIT_HOURS.get((rule.unit or "hours").lower(), 1)


def violates_window(constraint: str, advance: float, limit: float) -> bool:
    if constraint == "less_than":
        return advance >= limit
    if constraint == "more_than":
        return advance <= limit
    return False


def describe_scope(rule: BookingWindowRule) -> str:
    if rule.user_scope == "users_with_tags":
        return "users tagged " + ", ".join(rule.tags)
    if rule.user_scope == "users_with_no_tags":
        return "users without tags"
    return "all users"


def _unit_word(rule: BookingWindowRule) -> str:
    unit = (rule.unit or "hours").lower()
    return unit if unit in _UNIT_HOURS else "hours"


def rejection_message(rule: BookingWindowRule, advance: float) -> str:
    limit = f"{rule.value:g} {_unit_word(rule)}"
    if rule.constraint == "more_than":
        requirement = f"must book more than {limit} in advance"
    else:
        requirement = f"can only book less than {limit} in advance"
    days_ahead = round(advance / 24)
    return (
        f"Booking not allowed for {describe_scope(rule)}: {requirement}. "
        f"You're trying to book {days_ahead} days ahead."
    )


def allowed_message(rule: BookingWindowRule) -> str:
    window = f"{rule.value:g}-{_unit_word(rule).rstrip('s')}"
    message = f"Booking allowed for {describe_scope(rule)} within the {window} window."
    if rule.explanation:
        message = f"{message} {rule.explanation}"
    return message


def check_rules(
    rules: Sequence[BookingWindowRule],
    request: SimulationInput,
    advance: float,
    trace: Optional[EvaluationTrace] = None,
) -> list[WindowCheck]:
    checks: list[WindowCheck] = []
    anonymous = is_anonymous(request.user_tags)
    specific_found = False

    for rule in sort_by_priority(rules):
        if request.space not in rule.spaces:
            checks.append(WindowCheck(rule, applicable=False))
            continue

        if rule.user_scope == "users_with_tags":
            applies = has_any_tag(request.user_tags, rule.tags)
            specific_found = specific_found or applies
        elif rule.user_scope == "users_with_no_tags":
            applies = anonymous
            specific_found = specific_found or applies
        elif rule.user_scope == "all_users":
            applies = not specific_found
        else:
            applies = False

        if not applies:
            if trace is not None:
                trace.record(STEP, "Window rule does not apply to requester", scope=rule.user_scope, tags=rule.tags)
            checks.append(WindowCheck(rule, applicable=False))
            continue

        limit = rule_hours(rule)
        violates = violates_window(rule.constraint, advance, limit)
        if trace is not None:
            trace.record(
                STEP,
                "Window rule evaluated",
                scope=rule.user_scope,
                constraint=rule.constraint,
                limit_hours=limit,
                advance_hours=round(advance, 2),
                violates=violates,
            )
        checks.append(WindowCheck(rule, applicable=True, violates=violates))
    return checks


def evaluate_booking_window(
    rule_set: RuleSet,
    request: SimulationInput,
    now: datetime,
    trace: Optional[EvaluationTrace] = None,
) -> SimulationResult:
    if not rule_set.booking_window_rules:
        return SimulationResult(allowed=True, error_reason=NO_RULES_MESSAGE)

    advance = advance_hours(now, booking_datetime(request.date, now))
    checks = check_rules(rule_set.booking_window_rules, request, advance, trace)
    applicable = [c for c in checks if c.applicable]

    for check in applicable:
        if check.violates:
            return SimulationResult(
                allowed=False,
                error_reason=rejection_message(check.rule, advance),
                violated_rule=check.rule.explanation or "Booking window",
            )

    if applicable:
        return SimulationResult(allowed=True, error_reason=allowed_message(applicable[0].rule))
    return SimulationResult(allowed=True, error_reason=NO_APPLICABLE_MESSAGE)
