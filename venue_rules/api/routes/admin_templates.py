from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from venue_rules.core.deps import get_db, require_admin_api_key
from venue_rules.core.logging import get_logger
from venue_rules.models.rule_template import RuleTemplate
from venue_rules.schemas.rule_template import (
    RuleTemplateCreate,
    RuleTemplateDetail,
    RuleTemplateOut,
    RuleTemplateUpdate,
)
from venue_rules.services.rule_normalizer import normalize_rule_set

router = APIRouter(dependencies=[Depends(require_admin_api_key)])
logger = get_logger(__name__)


@router.get("", response_model=list[RuleTemplateOut])
def list_templates(category: Optional[str] = None, db: Session = Depends(get_db)):
    q = select(RuleTemplate).order_by(RuleTemplate.category, RuleTemplate.name)
    if category:
        q = q.where(RuleTemplate.category == category)
    return db.execute(q).scalars().all()


@router.get("/{template_id}", response_model=RuleTemplateDetail)
def get_template(template_id: str, db: Session = Depends(get_db)):
    t = db.get(RuleTemplate, template_id)
    if not t:
        raise HTTPException(status_code=404, detail="Not found")
    rules, guide = normalize_rule_set(t.rules_json or {})
    out = RuleTemplateOut.model_validate(t)
    return RuleTemplateDetail(**out.model_dump(), rules=rules, setup_guide=guide)


@router.post("", response_model=RuleTemplateOut)
def create_template(payload: RuleTemplateCreate, db: Session = Depends(get_db)):
    t = RuleTemplate(**payload.model_dump())
    db.add(t)
    db.commit()
    db.refresh(t)

    logger.info("template_created", template_id=t.id, name=t.name)
    return t


@router.patch("/{template_id}", response_model=RuleTemplateOut)
def update_template(template_id: str, payload: RuleTemplateUpdate, db: Session = Depends(get_db)):
    t = db.get(RuleTemplate, template_id)
    if not t:
        raise HTTPException(status_code=404, detail="Not found")
    data = payload.model_dump(exclude_unset=True)
    for k, v in data.items():
        setattr(t, k, v)
    db.commit()
    db.refresh(t)

    logger.info("template_updated", template_id=t.id, keys=sorted(data.keys()))
    return t


@router.delete("/{template_id}")
def delete_template(template_id: str, db: Session = Depends(get_db)):
    t = db.get(RuleTemplate, template_id)
    if not t:
        raise HTTPException(status_code=404, detail="Not found")
    db.delete(t)
    db.commit()

    logger.info("template_deleted", template_id=template_id)
    return {"ok": True}
