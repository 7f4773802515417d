import logging
from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import MarkupRule, MarkupType, RuleKind


logger = logging.getLogger(__name__)

MAX_PERCENTAGE_MARKUP = Decimal("1000")
UPDATABLE_FIELDS = (
    "name",
    "markup_type",
    "markup_value",
    "min_volume",
    "max_volume",
    "country_code",
    "sms_type",
    "priority",
    "is_active",
)
# Clearing these widens the rule's scope to "any".
NULLABLE_FIELDS = {"max_volume", "country_code", "sms_type"}


def _validate_markup(markup_type: MarkupType, markup_value) -> None:
    value = Decimal(str(markup_value))
    if value < 0:
        raise HTTPException(status_code=400, detail="Markup value cannot be negative")
    if MarkupType(markup_type) == MarkupType.PERCENTAGE and value > MAX_PERCENTAGE_MARKUP:
        raise HTTPException(status_code=400, detail="Percentage markup cannot exceed 1000%")


def _ensure_unique_name(db: Session, user_id: int, name: str, exclude_id: int | None = None) -> None:
    query = db.query(MarkupRule).filter(MarkupRule.user_id == user_id, MarkupRule.name == name)
    if exclude_id is not None:
        query = query.filter(MarkupRule.id != exclude_id)
    if query.first() is not None:
        raise HTTPException(status_code=409, detail="Markup rule with this name already exists")


def _commit_rule(db: Session, rule: MarkupRule) -> MarkupRule:
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent create with the same name.
        db.rollback()
        raise HTTPException(status_code=409, detail="Markup rule with this name already exists")
    db.refresh(rule)
    return rule


def get_rule_for_user(db: Session, user_id: int, rule_id: int) -> MarkupRule:
    rule = db.query(MarkupRule).filter(MarkupRule.id == rule_id, MarkupRule.user_id == user_id).first()
    if not rule:
        raise HTTPException(status_code=404, detail="Markup rule not found")
    return rule


def create_markup_rule(
    db: Session,
    *,
    user_id: int,
    name: str,
    markup_type: MarkupType,
    markup_value: Decimal,
    min_volume: int = 0,
    max_volume: int | None = None,
    country_code: str | None = None,
    sms_type: str | None = None,
    priority: int = 0,
    is_active: bool = True,
    kind: RuleKind = RuleKind.MARKUP,
) -> MarkupRule:
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Rule name is required")
    _validate_markup(markup_type, markup_value)
    _ensure_unique_name(db, user_id, name)

    rule = MarkupRule(
        user_id=user_id,
        name=name,
        kind=kind,
        markup_type=MarkupType(markup_type),
        markup_value=Decimal(str(markup_value)),
        min_volume=min_volume or 0,
        max_volume=max_volume,
        country_code=country_code or None,
        sms_type=sms_type or None,
        priority=priority or 0,
        is_active=is_active,
    )
    db.add(rule)
    rule = _commit_rule(db, rule)
    logger.info("Created %s rule id=%s user_id=%s name=%s", rule.kind.value, rule.id, user_id, name)
    return rule


def list_markup_rules(db: Session, user_id: int, include_inactive: bool = False) -> list[MarkupRule]:
    query = db.query(MarkupRule).filter(MarkupRule.user_id == user_id)
    if not include_inactive:
        query = query.filter(MarkupRule.is_active.is_(True))
    return query.order_by(MarkupRule.priority.desc(), MarkupRule.created_at.desc(), MarkupRule.id.desc()).all()


def update_markup_rule(db: Session, *, user_id: int, rule_id: int, updates: dict) -> MarkupRule:
    rule = get_rule_for_user(db, user_id, rule_id)
    changes = {
        key: value
        for key, value in updates.items()
        if key in UPDATABLE_FIELDS and (value is not None or key in NULLABLE_FIELDS)
    }

    if "markup_type" in changes or "markup_value" in changes:
        # Checked as a pair: a type switch alone can push a stored value past the cap.
        _validate_markup(
            changes.get("markup_type") or rule.markup_type,
            changes.get("markup_value", rule.markup_value),
        )

    new_name = changes.get("name")
    if new_name is not None:
        new_name = new_name.strip()
        if not new_name:
            raise HTTPException(status_code=400, detail="Rule name is required")
        changes["name"] = new_name
        if new_name != rule.name:
            _ensure_unique_name(db, user_id, new_name, exclude_id=rule.id)

    for key, value in changes.items():
        if key == "markup_value" and value is not None:
            value = Decimal(str(value))
        if key == "markup_type" and value is not None:
            value = MarkupType(value)
        setattr(rule, key, value)

    rule = _commit_rule(db, rule)
    logger.info("Updated rule id=%s user_id=%s fields=%s", rule.id, user_id, sorted(changes))
    return rule


def delete_markup_rule(db: Session, *, user_id: int, rule_id: int) -> dict:
    rule = get_rule_for_user(db, user_id, rule_id)
    db.delete(rule)
    db.commit()
    logger.info("Deleted rule id=%s user_id=%s", rule_id, user_id)
    return {"success": True, "message": "Markup rule deleted successfully"}


def create_pricing_tier(
    db: Session,
    *,
    user_id: int,
    name: str,
    min_volume: int,
    max_volume: int | None = None,
    discount_percentage: Decimal,
    is_active: bool = True,
) -> MarkupRule:
    return create_markup_rule(
        db,
        user_id=user_id,
        name=name,
        markup_type=MarkupType.PERCENTAGE,
        markup_value=discount_percentage,
        min_volume=min_volume,
        max_volume=max_volume,
        priority=1,
        is_active=is_active,
        kind=RuleKind.VOLUME_TIER,
    )


def list_pricing_tiers(db: Session, user_id: int) -> list[MarkupRule]:
    return (
        db.query(MarkupRule)
        .filter(
            MarkupRule.user_id == user_id,
            MarkupRule.kind == RuleKind.VOLUME_TIER,
            MarkupRule.is_active.is_(True),
        )
        .order_by(MarkupRule.min_volume.asc(), MarkupRule.id.asc())
        .all()
    )
