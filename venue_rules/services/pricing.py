"""
Best-match pricing.

Every rule covering the requested space is scored; the highest score wins
and ties keep the earlier rule. Tag-scoped rules outscore generic ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from venue_rules.core.tracing import EvaluationTrace
from venue_rules.schemas.rules import UNIT_LABEL, PricingRule, RuleSet, has_any_tag, name_list
from venue_rules.schemas.simulation import SimulationInput
from venue_rules.services.durations import day_matches, weekday_name

STEP = "pricing"

NO_RULES_LABEL = "No pricing rules found"
NO_MATCH_LABEL = "No applicable pricing rule found"

SPACE_SCORE = 10
DAY_SCORE = 5
TAG_HOLDER_SCORE = 20
TAG_EXCLUSION_SCORE = 15


@dataclass
class Quote:
    total_price: float
    hourly_rate: float
    rate_label: str


def score_rule(rule: PricingRule, request: SimulationInput) -> Optional[int]:
    """Match score of ``rule`` for ``request``; None when the space differs."""
    if request.space not in rule.space:
        return None

    score = SPACE_SCORE
    if rule.days and day_matches(rule.days, weekday_name(request.date)):
        score += DAY_SCORE

    if rule.condition_type == "user_tags":
        tags = name_list(rule.value)
        holds = has_any_tag(request.user_tags, tags)
        if rule.operator == "contains_any_of" and holds:
            score += TAG_HOLDER_SCORE
        elif rule.operator == "contains_none_of" and not holds:
            score += TAG_EXCLUSION_SCORE
    return score


def best_rule(rule_set: RuleSet, request: SimulationInput, trace: Optional[EvaluationTrace] = None):
    best: Optional[PricingRule] = None
    best_score = -1
    for position, rule in enumerate(rule_set.pricing_rules):
        score = score_rule(rule, request)
        if trace is not None:
            trace.record(STEP, "Pricing rule scored", rule=position, score=score)
        if score is not None and score > best_score:
            best, best_score = rule, score
    return best


def price_rule(rule: PricingRule, request: SimulationInput, duration: float) -> Quote:
    amount = rule.rate.amount
    unit = rule.rate.unit

    if unit == "fixed":
        total = amount
        hourly = amount / duration if duration > 0 else 0
        label = f"${amount:g} fixed rate"
    elif unit == "per_hour":
        hourly = amount
        total = amount * duration
        label = f"${amount:g}/hour"
    elif unit == "per_day":
        # Any booking within the day is billed the full day
        total = amount
        hourly = amount / duration if duration > 0 else 0
        label = f"${amount:g}/day"
    else:
        return Quote(0, 0, f"${amount:g} {UNIT_LABEL.get(unit, unit)} (not priced)")

    if rule.condition_type == "user_tags" and request.user_tags:
        label += f" ({', '.join(request.user_tags)})"
    return Quote(round(total, 2), round(hourly, 2), label)


def evaluate_pricing(
    rule_set: RuleSet,
    request: SimulationInput,
    duration: float,
    trace: Optional[EvaluationTrace] = None,
) -> Quote:
    if not rule_set.pricing_rules:
        return Quote(0, 0, NO_RULES_LABEL)

    rule = best_rule(rule_set, request, trace)
    if rule is None:
        return Quote(0, 0, NO_MATCH_LABEL)

    quote = price_rule(rule, request, duration)
    if trace is not None:
        trace.record(STEP, "Pricing rule selected", rate=rule.rate.model_dump(), label=quote.rate_label)
    return quote
