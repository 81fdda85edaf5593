from __future__ import annotations

import datetime as dt
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from venue_rules.schemas.rules import RuleSet

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


class SimulationInput(BaseModel):
    """A hypothetical booking request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    user_tags: list[str] = Field(default_factory=list)
    space: str
    date: dt.datetime | dt.date
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_hhmm(cls, value: str) -> str:
        m = _HHMM.match(value)
        if not m:
            raise ValueError("time must be HH:MM")
        hour, minute = int(m.group(1)), int(m.group(2))
        if minute > 59 or hour > 24 or (hour == 24 and minute != 0):
            raise ValueError("time must be between 00:00 and 24:00")
        return f"{hour:02d}:{minute:02d}"


class SimulationResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    allowed: bool
    total_price: float | None = None
    hourly_rate: float | None = None
    rate_label: str | None = None
    duration: float | None = None  # hours
    # Also carries the positive justification on success
    error_reason: str | None = None
    violated_rule: str | None = None


class TraceEventOut(BaseModel):
    step: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


class SimulationRequest(BaseModel):
    rules: RuleSet = Field(default_factory=RuleSet)
    request: SimulationInput
    now: dt.datetime | None = None


class SimulationResponse(BaseModel):
    result: SimulationResult
    trace: list[TraceEventOut] = Field(default_factory=list)


class SimulationOptions(BaseModel):
    tags: list[str]
    spaces: list[str]
