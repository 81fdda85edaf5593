"""
Booking conditions: the access and format gate.

Each condition block targets spaces (and optionally weekdays) and holds a
list of condition rules. Any violation in any applicable block rejects the
booking; the messages of one block are joined into the rejection reason.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from venue_rules.core.tracing import EvaluationTrace
from venue_rules.schemas.rules import BookingCondition, ConditionRule, RuleSet, has_any_tag, name_list
from venue_rules.schemas.simulation import SimulationInput, SimulationResult
from venue_rules.services.durations import Duration, day_matches, time_to_minutes, weekday_name

STEP = "booking_conditions"

MULTIPLE_OF = ("multiple_of", "is_not_a_multiple_of")
INTERVAL_TYPES = ("interval_start", "interval_end")
_DURATION_OPERATORS = (
    "is_greater_than",
    "is_greater_than_or_equal_to",
    "is_less_than",
    "is_less_than_or_equal_to",
) + MULTIPLE_OF

# Inverse operator for the smallest / largest duration rule, strictness kept
_SMALLEST_FIX = {
    "is_less_than": "is_greater_than_or_equal_to",
    "is_less_than_or_equal_to": "is_greater_than",
}
_LARGEST_FIX = {
    "is_greater_than": "is_less_than_or_equal_to",
    "is_greater_than_or_equal_to": "is_less_than",
}


@dataclass(frozen=True)
class OperatorCorrection:
    index: int
    value: str
    original: str
    corrected: str


def correct_duration_operators(
    rules: Sequence[ConditionRule],
) -> tuple[list[ConditionRule], list[OperatorCorrection]]:
    """Flip the operators of the smallest and largest duration rules.

    Rule authors (and the rule generator) often phrase a min/max pair as the
    forbidden range ("less than 2h", "greater than 4h"). Sorting the duration
    rules by value, the smallest one must be a lower bound and the largest an
    upper bound; a rule pointing the wrong way is inverted. Correct rules pass
    through untouched, so applying this twice is the same as applying it once.
    """
    corrected = list(rules)
    measured = []
    for index, rule in enumerate(corrected):
        if rule.condition_type != "duration":
            continue
        parsed = Duration.parse(rule.value)
        if parsed is not None:
            measured.append((parsed.minutes, index))

    if len(measured) < 2:
        return corrected, []

    measured.sort(key=lambda item: item[0])
    corrections: list[OperatorCorrection] = []
    for (_, index), fixes in ((measured[0], _SMALLEST_FIX), (measured[-1], _LARGEST_FIX)):
        rule = corrected[index]
        replacement = fixes.get(rule.operator or "")
        if replacement is None:
            continue
        corrected[index] = rule.model_copy(update={"operator": replacement})
        corrections.append(
            OperatorCorrection(index=index, value=str(rule.value), original=rule.operator, corrected=replacement)
        )
    return corrected, corrections


def _shown(value: object, parsed: Duration) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return str(parsed)


def check_duration(rule: ConditionRule, duration: float, trace: Optional[EvaluationTrace] = None) -> Optional[str]:
    limit = Duration.parse(rule.value)
    if limit is None:
        if trace is not None:
            trace.record(STEP, "Unparseable duration value ignored", value=rule.value)
        return None

    hours = limit.hours
    shown = _shown(rule.value, limit)
    op = rule.operator
    if op not in _DURATION_OPERATORS and trace is not None:
        trace.record(STEP, "Unknown duration operator ignored", operator=op)

    if op == "is_greater_than" and duration <= hours:
        return f"Booking must be longer than {shown}."
    if op == "is_greater_than_or_equal_to" and duration < hours:
        return f"Booking must be at least {shown}."
    if op == "is_less_than" and duration >= hours:
        return f"Booking must be shorter than {shown}."
    if op == "is_less_than_or_equal_to" and duration > hours:
        return f"Booking cannot exceed {shown}."
    if op in MULTIPLE_OF:
        if hours <= 0:
            return None
        remainder = duration % hours
        if min(remainder, hours - remainder) > 0.01:
            return f"Booking duration must be in {shown} increments."
    return None


def _interval_message(minutes: float) -> str:
    if minutes == 60:
        return "Bookings must start and end on the hour (e.g., 9:00, 10:00)."
    if minutes > 60 and minutes % 60 == 0:
        return f"Bookings must start and end on {minutes / 60:g}-hour intervals."
    return f"Bookings must start and end on {minutes:g}-minute intervals."


def check_interval(
    rule: ConditionRule, request: SimulationInput, trace: Optional[EvaluationTrace] = None
) -> Optional[str]:
    if rule.operator not in MULTIPLE_OF:
        return None
    interval = Duration.parse(rule.value, default_unit="min")
    if interval is None or interval.minutes <= 0:
        if trace is not None:
            trace.record(STEP, "Unparseable interval value ignored", value=rule.value)
        return None

    clock = request.start_time if rule.condition_type == "interval_start" else request.end_time
    if time_to_minutes(clock) % interval.minutes:
        return _interval_message(interval.minutes)
    return None


def check_user_tags(rule: ConditionRule, user_tags: Sequence[str]) -> Optional[str]:
    tags = name_list(rule.value)
    if not tags:
        return None
    listed = ", ".join(tags)
    holds = has_any_tag(user_tags, tags)

    # The condition describes who is turned away
    if rule.operator == "contains_none_of" and not holds:
        return f"Only users with tags: {listed} can book this space."
    if rule.operator == "contains_any_of" and holds:
        return f"Users with tags: {listed} cannot book this space."
    return None


def check_condition_rule(
    rule: ConditionRule,
    request: SimulationInput,
    duration: float,
    trace: Optional[EvaluationTrace] = None,
) -> Optional[str]:
    kind = rule.condition_type
    if kind == "duration":
        return check_duration(rule, duration, trace)
    if kind in INTERVAL_TYPES:
        return check_interval(rule, request, trace)
    if kind == "user_tags":
        return check_user_tags(rule, request.user_tags)
    if trace is not None:
        trace.record(STEP, "Unknown condition type ignored", condition_type=kind)
    return None


def condition_applies(condition: BookingCondition, request: SimulationInput) -> bool:
    if request.space not in condition.space:
        return False
    # No weekday list means every day
    if condition.days:
        return day_matches(condition.days, weekday_name(request.date))
    return True


def block_violations(
    condition: BookingCondition,
    request: SimulationInput,
    duration: float,
    trace: Optional[EvaluationTrace] = None,
) -> list[str]:
    rules, corrections = correct_duration_operators(condition.condition_rules())
    for c in corrections:
        if trace is not None:
            trace.record(
                STEP,
                f"Corrected duration operator {c.original} -> {c.corrected}",
                value=c.value,
                original=c.original,
                corrected=c.corrected,
            )

    violations: list[str] = []
    for rule in rules:
        message = check_condition_rule(rule, request, duration, trace)
        if message and message not in violations:
            violations.append(message)
    return violations


def evaluate_booking_conditions(
    rule_set: RuleSet,
    request: SimulationInput,
    duration: float,
    trace: Optional[EvaluationTrace] = None,
) -> SimulationResult:
    for position, condition in enumerate(rule_set.booking_conditions):
        if not condition_applies(condition, request):
            if trace is not None:
                trace.record(STEP, "Condition block does not apply", block=position)
            continue

        violations = block_violations(condition, request, duration, trace)
        if violations:
            if trace is not None:
                trace.record(STEP, "Condition block violated", block=position, violations=violations)
            return SimulationResult(
                allowed=False,
                error_reason=" ".join(violations),
                violated_rule=condition.explanation or "Booking condition",
            )
        if trace is not None:
            trace.record(STEP, "Condition block satisfied", block=position)

    return SimulationResult(allowed=True)
