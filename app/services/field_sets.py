from __future__ import annotations

import uuid
from typing import Any

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.asset_type_field import AssetTypeField
from app.models.form_definition import FormDefinition
from app.models.form_field import FormField
from app.services.forms.assembler import Stage
from app.services.forms.descriptors import FieldOrigin, FieldSet
from app.services.forms.renderer import FormState


def load_core_field_set(db: Session, asset_type_id: uuid.UUID | None) -> FieldSet:
    if asset_type_id is None:
        return FieldSet(origin=FieldOrigin.CORE)
    rows = (
        db.query(AssetTypeField)
        .filter(AssetTypeField.asset_type_id == asset_type_id)
        .order_by(AssetTypeField.created_at.asc())
        .all()
    )
    return FieldSet.of(FieldOrigin.CORE, rows)


def load_custom_field_set(db: Session, form_id: uuid.UUID | None) -> FieldSet:
    if form_id is None:
        return FieldSet(origin=FieldOrigin.CUSTOM)
    rows = (
        db.query(FormField)
        .filter(FormField.form_id == form_id)
        .order_by(FormField.created_at.asc())
        .all()
    )
    return FieldSet.of(FieldOrigin.CUSTOM, rows)


def published_forms_for(db: Session, asset_type_id: uuid.UUID | None) -> list[FormDefinition]:
    if asset_type_id is None:
        return []
    return (
        db.query(FormDefinition)
        .filter(
            FormDefinition.asset_type_id == asset_type_id,
            FormDefinition.is_published.is_(True),
        )
        .order_by(FormDefinition.created_at.asc(), FormDefinition.name.asc())
        .all()
    )


def _core_key_exists(db: Session, asset_type_id: uuid.UUID, field_key: str, exclude_id: uuid.UUID | None) -> bool:
    query = db.query(AssetTypeField.id).filter(
        AssetTypeField.asset_type_id == asset_type_id,
        AssetTypeField.field_key == field_key,
    )
    if exclude_id is not None:
        query = query.filter(AssetTypeField.id != exclude_id)
    return query.first() is not None


def _custom_key_exists(db: Session, form_ids: list[uuid.UUID], field_key: str, exclude_id: uuid.UUID | None) -> bool:
    if not form_ids:
        return False
    query = db.query(FormField.id).filter(FormField.form_id.in_(form_ids), FormField.field_key == field_key)
    if exclude_id is not None:
        query = query.filter(FormField.id != exclude_id)
    return query.first() is not None


def ensure_core_key_available_or_400(
    db: Session,
    asset_type_id: uuid.UUID,
    field_key: str,
    *,
    exclude_id: uuid.UUID | None = None,
) -> None:
    if _core_key_exists(db, asset_type_id, field_key, exclude_id):
        raise HTTPException(status_code=400, detail=f'Core field "{field_key}" already exists for this asset type')
    form_ids = [form_id for (form_id,) in db.query(FormDefinition.id).filter(FormDefinition.asset_type_id == asset_type_id).all()]
    if _custom_key_exists(db, form_ids, field_key, None):
        raise HTTPException(
            status_code=400,
            detail=f'Field key "{field_key}" is already used by a form field of this asset type',
        )


def ensure_custom_key_available_or_400(
    db: Session,
    form: FormDefinition,
    field_key: str,
    *,
    exclude_id: uuid.UUID | None = None,
) -> None:
    if _custom_key_exists(db, [form.id], field_key, exclude_id):
        raise HTTPException(status_code=400, detail=f'Form field "{field_key}" already exists in this form')
    if form.asset_type_id is not None and _core_key_exists(db, form.asset_type_id, field_key, None):
        raise HTTPException(
            status_code=400,
            detail=f'Field key "{field_key}" is already used by a core field of this asset type',
        )


def ensure_form_compatible_with_asset_type_or_400(db: Session, form: FormDefinition, asset_type_id: uuid.UUID | None) -> None:
    """Rebinding a form must not introduce keys that collide with the new type's core fields.

    ``FieldSet.union`` raises ``DuplicateFieldKeyError``, which the HTTP layer
    reports as 400 with the offending keys.
    """
    if asset_type_id is None:
        return
    load_core_field_set(db, asset_type_id).union(load_custom_field_set(db, form.id))


def render_stage(stage: Stage, values: dict[str, Any] | None = None, *, readonly: bool = False) -> dict[str, Any]:
    state = FormState(stage.fields, values)
    return {
        "stage": stage.name,
        "origin": stage.origin.value,
        "controls": [control.as_dict() for control in state.render(readonly=readonly)],
        "rows": [[item.field_key for item in row] for row in stage.rows],
        "values": state.snapshot(),
    }
