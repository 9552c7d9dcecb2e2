from __future__ import annotations

from typing import Any

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.api.common import iso, optional_uuid_or_400, str_id, uuid_or_400
from app.models.form_definition import FormDefinition
from app.models.form_rule import FormRule
from app.schemas.studio import FormRulePatch, FormRuleUpsert


def rule_row(row: FormRule) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "name": row.name,
        "description": row.description,
        "form_id": str_id(row.form_id),
        "conditions": list(row.conditions or []),
        "actions": list(row.actions or []),
        "is_enabled": bool(row.is_enabled),
        "created_at": iso(row.created_at),
        "updated_at": iso(row.updated_at),
    }


def _get_rule_or_404(db: Session, rule_id: str) -> FormRule:
    row = db.get(FormRule, uuid_or_400(rule_id, "rule id"))
    if row is None:
        raise HTTPException(status_code=404, detail="Rule not found")
    return row


def _form_id_or_404(db: Session, raw: str | None):
    form_id = optional_uuid_or_400(raw, "form id")
    if form_id is not None and db.get(FormDefinition, form_id) is None:
        raise HTTPException(status_code=404, detail="Form not found")
    return form_id


def list_rules_service(db: Session, *, form_id: str | None = None) -> list[dict[str, Any]]:
    query = db.query(FormRule)
    form_uuid = optional_uuid_or_400(form_id, "form id")
    if form_uuid is not None:
        query = query.filter(FormRule.form_id == form_uuid)
    return [rule_row(row) for row in query.order_by(FormRule.created_at.desc()).all()]


def create_rule_service(payload: FormRuleUpsert, db: Session) -> dict[str, Any]:
    row = FormRule(
        name=payload.name,
        description=payload.description,
        form_id=_form_id_or_404(db, payload.form_id),
        conditions=[item.model_dump() for item in payload.conditions],
        actions=[item.model_dump() for item in payload.actions],
        is_enabled=payload.is_enabled,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return rule_row(row)


def get_rule_service(rule_id: str, db: Session) -> dict[str, Any]:
    return rule_row(_get_rule_or_404(db, rule_id))


def update_rule_service(rule_id: str, payload: FormRulePatch, db: Session) -> dict[str, Any]:
    row = _get_rule_or_404(db, rule_id)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "name" in changes:
        if changes["name"] is None:
            raise HTTPException(status_code=400, detail="Name is required")
        row.name = changes["name"]
    if "description" in changes:
        row.description = changes["description"]
    if "form_id" in changes:
        row.form_id = _form_id_or_404(db, changes["form_id"])
    if "conditions" in changes:
        row.conditions = list(changes["conditions"] or [])
    if "actions" in changes:
        row.actions = list(changes["actions"] or [])
    if "is_enabled" in changes and changes["is_enabled"] is not None:
        row.is_enabled = bool(changes["is_enabled"])
    db.add(row)
    db.commit()
    db.refresh(row)
    return rule_row(row)


def delete_rule_service(rule_id: str, db: Session) -> dict[str, Any]:
    row = _get_rule_or_404(db, rule_id)
    db.delete(row)
    db.commit()
    return {"status": "deleted", "id": str(row.id)}
