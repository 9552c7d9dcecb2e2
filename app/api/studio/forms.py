from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.api.common import iso, optional_uuid_or_400, str_id, uuid_or_400
from app.models.asset_type import AssetType
from app.models.form_definition import FormDefinition
from app.models.form_field import FormField
from app.models.form_rule import FormRule
from app.schemas.studio import CustomFieldCreate, CustomFieldPatch, FormDefinitionCreate, FormDefinitionPatch
from app.services.field_sets import (
    ensure_custom_key_available_or_400,
    ensure_form_compatible_with_asset_type_or_400,
    load_core_field_set,
    load_custom_field_set,
    render_stage,
)
from app.services.forms.assembler import compose_stages, order_fields
from app.services.forms.options import normalize_options, options_as_dicts

logger = logging.getLogger(__name__)

_NOT_NULL_FIELD_COLUMNS = (
    "field_key",
    "label",
    "field_type",
    "is_required",
    "is_readonly",
    "is_visible",
    "is_system_field",
    "sort_order",
    "column_span",
    "tab",
)


def form_row(row: FormDefinition, fields: list[FormField] | None = None) -> dict[str, Any]:
    data = {
        "id": str(row.id),
        "name": row.name,
        "description": row.description,
        "asset_type_id": str_id(row.asset_type_id),
        "version": row.version,
        "is_published": bool(row.is_published),
        "status": row.status,
        "created_at": iso(row.created_at),
        "updated_at": iso(row.updated_at),
    }
    if fields is not None:
        data["form_fields"] = [custom_field_row(item) for item in fields]
        data["field_count"] = len(fields)
    return data


def custom_field_row(row: FormField) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "form_id": str_id(row.form_id),
        "field_key": row.field_key,
        "label": row.label,
        "field_type": row.field_type,
        "is_required": bool(row.is_required),
        "is_readonly": bool(row.is_readonly),
        "is_visible": bool(row.is_visible),
        "is_system_field": bool(row.is_system_field),
        "default_value": row.default_value,
        "help_text": row.help_text,
        "placeholder": row.placeholder,
        "options": row.options,
        "normalized_options": options_as_dicts(normalize_options(row.options)),
        "validation_rules": row.validation_rules,
        "sort_order": row.sort_order,
        "column_span": row.column_span,
        "section": row.section,
        "tab": row.tab,
        "created_at": iso(row.created_at),
        "updated_at": iso(row.updated_at),
    }


def get_form_or_404(db: Session, form_id: str) -> FormDefinition:
    row = db.get(FormDefinition, uuid_or_400(form_id, "form id"))
    if row is None:
        raise HTTPException(status_code=404, detail="Form not found")
    return row


def _asset_type_id_or_404(db: Session, raw: str | None):
    asset_type_id = optional_uuid_or_400(raw, "asset type id")
    if asset_type_id is not None and db.get(AssetType, asset_type_id) is None:
        raise HTTPException(status_code=404, detail="Asset type not found")
    return asset_type_id


def _ordered_form_fields(db: Session, form: FormDefinition) -> list[FormField]:
    rows = db.query(FormField).filter(FormField.form_id == form.id).order_by(FormField.created_at.asc()).all()
    return order_fields(rows)


def list_forms_service(db: Session, *, asset_type_id: str | None = None, published: bool | None = None) -> list[dict[str, Any]]:
    query = db.query(FormDefinition)
    type_uuid = optional_uuid_or_400(asset_type_id, "asset type id")
    if type_uuid is not None:
        query = query.filter(FormDefinition.asset_type_id == type_uuid)
    if published is not None:
        query = query.filter(FormDefinition.is_published.is_(published))
    rows = query.order_by(FormDefinition.created_at.desc()).all()
    return [form_row(row, _ordered_form_fields(db, row)) for row in rows]


def create_form_service(payload: FormDefinitionCreate, db: Session) -> dict[str, Any]:
    row = FormDefinition(
        name=payload.name,
        description=payload.description,
        asset_type_id=_asset_type_id_or_404(db, payload.asset_type_id),
        version=1,
        is_published=False,
        status="Draft",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return form_row(row, [])


def get_form_service(form_id: str, db: Session) -> dict[str, Any]:
    row = get_form_or_404(db, form_id)
    return form_row(row, _ordered_form_fields(db, row))


def update_form_service(form_id: str, payload: FormDefinitionPatch, db: Session) -> dict[str, Any]:
    row = get_form_or_404(db, form_id)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "name" in changes:
        if changes["name"] is None:
            raise HTTPException(status_code=400, detail="Name is required")
        row.name = changes["name"]
    if "description" in changes:
        row.description = changes["description"]
    if "status" in changes and changes["status"] is not None:
        row.status = changes["status"]
    if "asset_type_id" in changes:
        asset_type_id = _asset_type_id_or_404(db, changes["asset_type_id"])
        if asset_type_id != row.asset_type_id:
            ensure_form_compatible_with_asset_type_or_400(db, row, asset_type_id)
        row.asset_type_id = asset_type_id
    db.add(row)
    db.commit()
    db.refresh(row)
    return form_row(row, _ordered_form_fields(db, row))


def delete_form_service(form_id: str, db: Session) -> dict[str, Any]:
    row = get_form_or_404(db, form_id)
    db.query(FormField).filter(FormField.form_id == row.id).delete(synchronize_session=False)
    db.query(FormRule).filter(FormRule.form_id == row.id).update({FormRule.form_id: None}, synchronize_session=False)
    db.delete(row)
    db.commit()
    return {"status": "deleted", "id": str(row.id)}


def publish_form_service(form_id: str, db: Session) -> dict[str, Any]:
    row = get_form_or_404(db, form_id)
    if row.is_published:
        row.version = int(row.version or 1) + 1
    row.is_published = True
    row.status = "Active"
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("form published id=%s version=%s", row.id, row.version)
    return form_row(row, _ordered_form_fields(db, row))


def list_form_fields_service(form_id: str, db: Session) -> list[dict[str, Any]]:
    form = get_form_or_404(db, form_id)
    return [custom_field_row(row) for row in _ordered_form_fields(db, form)]


def create_form_field_service(form_id: str, payload: CustomFieldCreate, db: Session) -> dict[str, Any]:
    form = get_form_or_404(db, form_id)
    ensure_custom_key_available_or_400(db, form, payload.field_key)
    row = FormField(form_id=form.id, **payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return custom_field_row(row)


def _get_form_field_or_404(db: Session, form: FormDefinition, field_id: str) -> FormField:
    row = db.get(FormField, uuid_or_400(field_id, "field id"))
    if row is None or row.form_id != form.id:
        raise HTTPException(status_code=404, detail="Form field not found")
    return row


def update_form_field_service(form_id: str, field_id: str, payload: CustomFieldPatch, db: Session) -> dict[str, Any]:
    form = get_form_or_404(db, form_id)
    row = _get_form_field_or_404(db, form, field_id)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    for column in _NOT_NULL_FIELD_COLUMNS:
        if column in changes and changes[column] is None:
            raise HTTPException(status_code=400, detail=f'Field "{column}" cannot be null')
    if "field_key" in changes and changes["field_key"] != row.field_key:
        ensure_custom_key_available_or_400(db, form, changes["field_key"], exclude_id=row.id)
    for key, value in changes.items():
        setattr(row, key, value)
    db.add(row)
    db.commit()
    db.refresh(row)
    return custom_field_row(row)


def delete_form_field_service(form_id: str, field_id: str, db: Session) -> dict[str, Any]:
    form = get_form_or_404(db, form_id)
    row = _get_form_field_or_404(db, form, field_id)
    db.delete(row)
    db.commit()
    return {"status": "deleted", "id": str(row.id)}


def render_form_service(form_id: str, db: Session) -> dict[str, Any]:
    """Preview of a form as operators see it: core stage, then custom stage."""
    form = get_form_or_404(db, form_id)
    composition = compose_stages(
        load_core_field_set(db, form.asset_type_id),
        load_custom_field_set(db, form.id),
    )
    return {
        "form": form_row(form),
        "stages": [render_stage(stage) for stage in composition.stages],
        "field_count": composition.field_count,
        "conflicts": composition.conflicts,
    }
