"""
Natural-language booking policy -> structured rule set, through Gemini.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import ValidationError

from venue_rules.core.logging import get_logger
from venue_rules.schemas.parse import Diagnostics, ParsedRuleResponse
from venue_rules.schemas.rules import RULE_FAMILIES, RuleSet
from venue_rules.services.gemini_client import GeminiClient, GeminiError
from venue_rules.services.rule_normalizer import normalize_rule_set

logger = get_logger(__name__)

SPECIFIC_DATE_PATTERNS = (
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
    re.compile(r"\b\d{1,2}/\d{1,2}/\d{4}\b"),
    re.compile(
        r"\b(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
        r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?\s+\d{1,2}\b",
        re.IGNORECASE,
    ),
)

RULE_PROMPT = """You convert a venue's booking policy into JSON rule blocks.

Return one JSON object with keys "parsed_rule_blocks", "setup_guide" and "summary".
"parsed_rule_blocks" holds six arrays (use [] when a family is not mentioned):

- pricing_rules: {{space: [names], time_range: "HH:MM-HH:MM", days: [weekday names],
  rate: {{amount: number, unit: fixed|per_15min|per_30min|per_hour|per_2hours|per_day}},
  condition_type: duration|user_tags, operator, value, explanation}}
  Tag-specific prices use condition_type "user_tags", operator "contains_any_of"
  and the tags that GET the price as value.
- booking_conditions: {{space: [names], days: [weekday names], time_range,
  rules: [{{condition_type: duration|interval_start|interval_end|user_tags,
  operator, value, explanation}}], logic_operators: [OR|AND], explanation}}
  A booking condition describes when a booking is FORBIDDEN.
  "Minimum 2h, maximum 4h" is duration is_less_than "2h" OR is_greater_than "4h".
  "Only Club Members can book" is user_tags contains_none_of ["Club Members"].
  Hour alignment is interval_start and interval_end multiple_of "1h".
- quota_rules: {{target: individuals|individuals_with_tags|individuals_with_no_tags|group_with_tag,
  tags: [names], quota_type: time|count, value: "4h" or a count,
  period: day|week|month|at_any_time, affected_spaces: [names], explanation}}
- buffer_time_rules: {{spaces: [names], buffer_duration: "15min", explanation}}
- booking_window_rules: {{user_scope: all_users|users_with_tags|users_with_no_tags,
  tags: [names], constraint: less_than|more_than, value: number, unit: hours|days|weeks,
  spaces: [names], explanation}}
  "can book up to 30 days ahead" is less_than 30 days;
  "must book at least 24 hours ahead" is more_than 24 hours. Keep the unit used in the text.
- space_sharing: {{from: name, to: name, explanation}} for spaces that cannot be booked together.

Use durations like "2h", "30min" or "1h30min". Use full English weekday names.
"setup_guide" is a list of {{step_key, title, instruction}}; "summary" is one sentence.

Policy:
{rule}
"""


class RuleParseError(Exception):
    pass


def detect_specific_dates(text: str) -> bool:
    return any(p.search(text) for p in SPECIFIC_DATE_PATTERNS)


def build_prompt(text: str) -> str:
    return RULE_PROMPT.format(rule=text.strip())


def response_from_payload(payload: dict[str, Any]) -> ParsedRuleResponse:
    """Build a response from a model reply, wrapped or flat."""
    try:
        rule_set, guide = normalize_rule_set(payload)
    except ValidationError as exc:
        raise RuleParseError(f"Model output does not fit the rule model: {exc.error_count()} error(s)") from exc

    summary = payload.get("summary") or rule_set.summary or ""
    return ParsedRuleResponse(parsed_rule_blocks=rule_set, setup_guide=guide, summary=str(summary))


async def parse_rule_text(text: str, client: GeminiClient) -> ParsedRuleResponse:
    if detect_specific_dates(text):
        logger.info("rule_parse_specific_date", text=text)
        return ParsedRuleResponse(
            parsed_rule_blocks=RuleSet(),
            diagnostics=Diagnostics(
                message="specific_date_unsupported",
                suggest="Use booking-blocks feature or rolling window.",
            ),
        )

    try:
        payload = await client.generate_json(build_prompt(text))
    except GeminiError as exc:
        logger.warning("rule_parse_failed", error=str(exc))
        raise RuleParseError(str(exc)) from exc

    response = response_from_payload(payload)
    logger.info(
        "rule_parse_completed",
        families={f: len(getattr(response.parsed_rule_blocks, f)) for f in RULE_FAMILIES},
    )
    return response
