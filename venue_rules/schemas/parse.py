from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from venue_rules.schemas.rules import RuleSet


class ParseRuleRequest(BaseModel):
    rule: str = Field(min_length=1, max_length=4000)


class SetupStep(BaseModel):
    step_key: str = ""
    title: str = ""
    instruction: str = ""
    rule_blocks: list[dict[str, Any]] = Field(default_factory=list)


class Diagnostics(BaseModel):
    message: str
    suggest: Optional[str] = None
    details: Optional[str] = None


class ParsedRuleResponse(BaseModel):
    parsed_rule_blocks: RuleSet = Field(default_factory=RuleSet)
    setup_guide: list[SetupStep] = Field(default_factory=list)
    summary: str = ""
    diagnostics: Optional[Diagnostics] = None


class RuleWarning(BaseModel):
    level: Literal["warning", "info"]
    family: str
    index: int
    message: str
