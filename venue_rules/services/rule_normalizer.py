"""
Rule-set helpers used around the engine: template normalization, options
for the simulation form and authoring warnings.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

from venue_rules.schemas.parse import RuleWarning, SetupStep
from venue_rules.schemas.rules import ANONYMOUS_TAG, RULE_FAMILIES, RuleSet, name_list
from venue_rules.schemas.simulation import SimulationOptions
from venue_rules.services.booking_window import rule_hours
from venue_rules.services.conditions import correct_duration_operators
from venue_rules.services.durations import split_time_range

STEP_TITLES = {
    "pricing_rules": "Pricing Rules",
    "booking_conditions": "Booking Conditions",
    "quota_rules": "Quota Rules",
    "buffer_time_rules": "Buffer Time Rules",
    "booking_window_rules": "Booking Window Rules",
    "space_sharing": "Space Sharing Rules",
}

_FAMILY_ALIASES = {
    "booking_condition_rules": "booking_conditions",
    "space_sharing_rules": "space_sharing",
}


def _with_time_fields(rule: Any) -> Any:
    if not isinstance(rule, dict):
        return rule
    if rule.get("time_range") and (not rule.get("from_time") or not rule.get("to_time")):
        start, end = split_time_range(rule["time_range"])
        rule = {**rule, "from_time": start, "to_time": end}
    return rule


def normalize_rule_set(raw: Mapping[str, Any]) -> tuple[RuleSet, list[SetupStep]]:
    """Normalize stored or generated rules and synthesize a setup guide.

    ``from_time``/``to_time`` are derived from every ``time_range``; an
    existing ``setup_guide`` is kept and completed with one step per
    non-empty family.
    """
    data = copy.deepcopy(dict(raw))
    if isinstance(data.get("parsed_rule_blocks"), dict):
        outer = data
        data = dict(outer["parsed_rule_blocks"])
        data.setdefault("setup_guide", outer.get("setup_guide"))
        data.setdefault("summary", outer.get("summary"))

    for alias, family in _FAMILY_ALIASES.items():
        if alias in data and not data.get(family):
            data[family] = data.pop(alias)
        else:
            data.pop(alias, None)

    guide_raw = data.pop("setup_guide", None) or []
    for family in RULE_FAMILIES:
        data[family] = [_with_time_fields(r) for r in data.get(family) or []]

    rule_set = RuleSet.model_validate(data)
    guide = [SetupStep.model_validate(s) for s in guide_raw if isinstance(s, dict)]
    known = {s.step_key for s in guide}
    for family in RULE_FAMILIES:
        if data[family] and family not in known:
            guide.append(
                SetupStep(
                    step_key=family,
                    title=f"Step: {STEP_TITLES[family]}",
                    instruction="Configure these rule blocks in your booking system",
                    rule_blocks=[r for r in data[family] if isinstance(r, dict)],
                )
            )
    return rule_set, guide


def _add(seen: dict[str, None], names: list[str]) -> None:
    for name in names:
        seen.setdefault(name, None)


def simulation_options(rule_set: RuleSet) -> SimulationOptions:
    """Tags and spaces a simulation form can offer, in first-seen order."""
    tags: dict[str, None] = {ANONYMOUS_TAG: None}
    spaces: dict[str, None] = {}

    for condition in rule_set.booking_conditions:
        _add(spaces, condition.space)
        for rule in condition.condition_rules():
            if rule.condition_type == "user_tags":
                _add(tags, name_list(rule.value))
    for rule in rule_set.pricing_rules:
        _add(spaces, rule.space)
        if rule.condition_type == "user_tags":
            _add(tags, name_list(rule.value))
    for rule in rule_set.quota_rules:
        _add(tags, rule.tags)
        _add(spaces, rule.affected_spaces)
    for rule in rule_set.booking_window_rules:
        _add(tags, rule.tags)
        _add(spaces, rule.spaces)
    for rule in rule_set.buffer_time_rules:
        _add(spaces, rule.spaces)
    for rule in rule_set.space_sharing:
        _add(spaces, [n for n in (rule.from_space, rule.to_space) if n])

    return SimulationOptions(tags=list(tags), spaces=list(spaces))


def lint_rule_set(rule_set: RuleSet) -> list[RuleWarning]:
    warnings: list[RuleWarning] = []

    for index, condition in enumerate(rule_set.booking_conditions):
        _, corrections = correct_duration_operators(condition.condition_rules())
        for c in corrections:
            warnings.append(
                RuleWarning(
                    level="warning",
                    family="booking_conditions",
                    index=index,
                    message=(
                        f"Duration rule '{c.original} {c.value}' reads as the opposite bound "
                        f"and is evaluated as '{c.corrected} {c.value}'."
                    ),
                )
            )
        for rule in condition.condition_rules():
            if rule.condition_type == "user_tags" and rule.operator == "contains_any_of":
                warnings.append(
                    RuleWarning(
                        level="info",
                        family="booking_conditions",
                        index=index,
                        message=(
                            "'contains_any_of' turns away users holding these tags. "
                            "Use 'contains_none_of' for 'only ... can book'."
                        ),
                    )
                )

    for index, rule in enumerate(rule_set.booking_window_rules):
        hours = rule_hours(rule)
        if rule.constraint == "more_than" and hours < 24:
            warnings.append(
                RuleWarning(
                    level="warning",
                    family="booking_window_rules",
                    index=index,
                    message="A 'more_than' window under 24 hours only asks for short notice; check the direction.",
                )
            )
        elif rule.constraint == "less_than" and hours > 168:
            warnings.append(
                RuleWarning(
                    level="info",
                    family="booking_window_rules",
                    index=index,
                    message="A 'less_than' window over a week allows booking far ahead; check the direction.",
                )
            )

    for index, rule in enumerate(rule_set.quota_rules):
        if rule.quota_type == "count":
            warnings.append(
                RuleWarning(
                    level="info",
                    family="quota_rules",
                    index=index,
                    message="Booking-count quotas are not enforced by simulation.",
                )
            )

    for index, _ in enumerate(rule_set.space_sharing):
        warnings.append(
            RuleWarning(
                level="info",
                family="space_sharing",
                index=index,
                message="Space-sharing rules are not enforced by simulation.",
            )
        )
    return warnings
