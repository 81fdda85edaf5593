from __future__ import annotations

import uuid

from sqlalchemy import Boolean, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from venue_rules.db.base import Base
from venue_rules.models._mixins import TimestampMixin


class RuleTemplate(Base, TimestampMixin):
    __tablename__ = "rule_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # e.g. coworking, sports, studio
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="general", index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Natural-language policy the rules were generated from
    prompt: Mapped[str] = mapped_column(Text, nullable=False, default="")
    rules_json: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
