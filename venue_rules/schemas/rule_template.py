from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from venue_rules.schemas.parse import SetupStep
from venue_rules.schemas.rules import RuleSet


class RuleTemplateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    category: str = Field(default="general", min_length=1, max_length=64)
    description: str = ""
    prompt: str = ""
    rules_json: dict = Field(default_factory=dict)
    is_active: bool = True


class RuleTemplateUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    category: str | None = Field(default=None, min_length=1, max_length=64)
    description: str | None = None
    prompt: str | None = None
    rules_json: dict | None = None
    is_active: bool | None = None


class RuleTemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    category: str
    description: str
    prompt: str
    rules_json: dict
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RuleTemplateDetail(RuleTemplateOut):
    rules: RuleSet
    setup_guide: list[SetupStep] = Field(default_factory=list)
