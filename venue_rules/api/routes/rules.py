from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from venue_rules.core.deps import get_gemini_client
from venue_rules.schemas.parse import ParsedRuleResponse, ParseRuleRequest, RuleWarning
from venue_rules.schemas.rules import RuleSet
from venue_rules.services.gemini_client import GeminiClient
from venue_rules.services.rule_normalizer import lint_rule_set
from venue_rules.services.rule_parser import RuleParseError, parse_rule_text

router = APIRouter()


@router.post("/parse", response_model=ParsedRuleResponse)
async def parse_rule(payload: ParseRuleRequest, client: GeminiClient = Depends(get_gemini_client)):
    try:
        return await parse_rule_text(payload.rule, client)
    except RuleParseError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.post("/lint", response_model=list[RuleWarning])
def lint_rules(rules: RuleSet):
    return lint_rule_set(rules)
