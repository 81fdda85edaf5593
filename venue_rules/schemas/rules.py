"""Pydantic models for the six booking rule families and the rule set.

Rule sets are produced by a language model or edited by hand, so the
models are lenient: operators and units stay plain strings (unknown ones
are ignored by the engine), list fields accept a single string or
``{"id", "name"}`` objects, and the aliases emitted by older generators
are accepted.
"""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

ANONYMOUS_TAG = "Anonymous"

RULE_FAMILIES = (
    "pricing_rules",
    "booking_conditions",
    "quota_rules",
    "buffer_time_rules",
    "booking_window_rules",
    "space_sharing",
)

# Display labels for pricing units
UNIT_LABEL: dict[str, str] = {
    "fixed": "fixed rate",
    "per_15min": "per 15 min",
    "per_30min": "per 30 min",
    "per_hour": "per hour",
    "per_2hours": "per 2 h",
    "per_day": "per day",
}


def name_list(value: Any) -> list[str]:
    """Normalize a tag/space reference list to plain names."""
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    names: list[str] = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("name") or ""
        name = str(item).strip()
        if name:
            names.append(name)
    return names


def is_anonymous(user_tags: Iterable[str]) -> bool:
    tags = list(user_tags)
    return not tags or ANONYMOUS_TAG in tags


def has_any_tag(user_tags: Iterable[str], tags: Iterable[str]) -> bool:
    held = set(user_tags)
    return any(t in held for t in tags)


class _Rule(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    explanation: str = ""

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # Generated rules use null for "not set"
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("explanation", mode="before", check_fields=False)
    @classmethod
    def explanation_str(cls, v: Any) -> str:
        return "" if v is None else str(v)


class Rate(BaseModel):
    amount: float = 0
    unit: str = "per_hour"


class PricingSubCondition(BaseModel):
    model_config = ConfigDict(extra="allow")

    condition_type: str | None = None
    operator: str | None = None
    value: Any = None
    logic: str | None = None  # AND | OR


class PricingRule(_Rule):
    space: list[str] = Field(default_factory=list, validation_alias=AliasChoices("space", "spaces"))
    time_range: str | None = None
    days: list[str] = Field(default_factory=list)
    rate: Rate = Field(default_factory=Rate)
    condition_type: str | None = None  # duration | user_tags
    operator: str | None = None
    value: Any = None
    sub_conditions: list[PricingSubCondition] = Field(default_factory=list)

    @field_validator("space", "days", mode="before")
    @classmethod
    def normalize_names(cls, v: Any) -> list[str]:
        return name_list(v)

    @field_validator("sub_conditions", mode="before")
    @classmethod
    def subs_list(cls, v: Any) -> Any:
        return [] if v is None else v


class ConditionRule(BaseModel):
    model_config = ConfigDict(extra="allow")

    condition_type: str | None = None  # duration | interval_start | interval_end | user_tags
    operator: str | None = None
    value: Any = None
    explanation: str | None = None


class BookingCondition(_Rule):
    """When a booking is forbidden.

    Either the legacy single-rule shape (``condition_type``/``operator``/
    ``value`` on the block itself) or a list of ``rules``.
    """

    space: list[str] = Field(default_factory=list, validation_alias=AliasChoices("space", "spaces"))
    days: list[str] | None = None
    time_range: str | None = None
    condition_type: str | None = None
    operator: str | None = None
    value: Any = None
    rules: list[ConditionRule] | None = None
    logic_operators: list[str] = Field(default_factory=list)

    @field_validator("space", mode="before")
    @classmethod
    def normalize_spaces(cls, v: Any) -> list[str]:
        return name_list(v)

    @field_validator("days", mode="before")
    @classmethod
    def normalize_days(cls, v: Any) -> list[str] | None:
        return None if v is None else name_list(v)

    @field_validator("logic_operators", mode="before")
    @classmethod
    def logic_list(cls, v: Any) -> Any:
        return [] if v is None else v

    def condition_rules(self) -> list[ConditionRule]:
        if self.rules:
            return list(self.rules)
        if self.condition_type:
            return [
                ConditionRule(
                    condition_type=self.condition_type,
                    operator=self.operator,
                    value=self.value,
                    explanation=self.explanation,
                )
            ]
        return []


class QuotaRule(_Rule):
    target: str = "individuals"  # individuals | individuals_with_tags | individuals_with_no_tags | group_with_tag
    tags: list[str] = Field(default_factory=list)
    quota_type: str = "time"  # time | count
    value: Any = None
    period: str = "day"  # day | week | month | at_any_time
    affected_spaces: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("affected_spaces", "spaces")
    )
    consideration_time: str = "any_time"
    time_range: str | None = None
    days: list[str] = Field(default_factory=list)

    @field_validator("tags", "affected_spaces", "days", mode="before")
    @classmethod
    def normalize_names(cls, v: Any) -> list[str]:
        return name_list(v)


class BufferTimeRule(_Rule):
    spaces: list[str] = Field(default_factory=list, validation_alias=AliasChoices("spaces", "space"))
    buffer_duration: Any = None

    @field_validator("spaces", mode="before")
    @classmethod
    def normalize_names(cls, v: Any) -> list[str]:
        return name_list(v)


class BookingWindowRule(_Rule):
    user_scope: str = "all_users"  # all_users | users_with_tags | users_with_no_tags
    tags: list[str] = Field(default_factory=list)
    constraint: str = "less_than"  # less_than | more_than
    value: float = 0
    unit: str = "hours"  # hours | days | weeks
    spaces: list[str] = Field(default_factory=list, validation_alias=AliasChoices("spaces", "space"))

    @field_validator("tags", "spaces", mode="before")
    @classmethod
    def normalize_names(cls, v: Any) -> list[str]:
        return name_list(v)


class SpaceSharingRule(_Rule):
    from_space: str = Field(
        default="", validation_alias=AliasChoices("from", "from_space"), serialization_alias="from"
    )
    to_space: str = Field(default="", validation_alias=AliasChoices("to", "to_space"), serialization_alias="to")


class RuleSet(BaseModel):
    """All rule families handed to one evaluation."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    pricing_rules: list[PricingRule] = Field(default_factory=list)
    booking_conditions: list[BookingCondition] = Field(
        default_factory=list, validation_alias=AliasChoices("booking_conditions", "booking_condition_rules")
    )
    quota_rules: list[QuotaRule] = Field(default_factory=list)
    buffer_time_rules: list[BufferTimeRule] = Field(default_factory=list)
    booking_window_rules: list[BookingWindowRule] = Field(default_factory=list)
    space_sharing: list[SpaceSharingRule] = Field(
        default_factory=list, validation_alias=AliasChoices("space_sharing", "space_sharing_rules")
    )
    summary: str | None = None

    @field_validator(*RULE_FAMILIES, mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v
