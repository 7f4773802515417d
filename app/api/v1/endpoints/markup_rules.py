from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import require_reseller
from app.models import User
from app.schemas.pricing import MarkupRuleCreate, MarkupRuleOut, MarkupRuleUpdate
from app.services.markup_rules import (
    create_markup_rule,
    delete_markup_rule,
    list_markup_rules,
    update_markup_rule,
)

router = APIRouter()


@router.get("", response_model=list[MarkupRuleOut])
def get_rules(include_inactive: bool = False, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return list_markup_rules(db, user.id, include_inactive)


@router.post("", response_model=MarkupRuleOut, status_code=201)
def create_rule(payload: MarkupRuleCreate, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return create_markup_rule(db, user_id=user.id, **payload.model_dump())


@router.put("/{rule_id}", response_model=MarkupRuleOut)
def update_rule(rule_id: int, payload: MarkupRuleUpdate, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return update_markup_rule(db, user_id=user.id, rule_id=rule_id, updates=payload.model_dump(exclude_unset=True))


@router.delete("/{rule_id}")
def delete_rule(rule_id: int, user: User = Depends(require_reseller), db: Session = Depends(get_db)):
    return delete_markup_rule(db, user_id=user.id, rule_id=rule_id)
