from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.api.common import iso, str_id, uuid_or_400
from app.models.asset import Asset
from app.models.asset_type import AssetType
from app.models.asset_type_field import AssetTypeField
from app.models.form_definition import FormDefinition
from app.schemas.studio import AssetTypePatch, AssetTypeUpsert, CoreFieldCreate, CoreFieldPatch
from app.services.field_sets import ensure_core_key_available_or_400
from app.services.forms.assembler import order_fields
from app.services.forms.options import options_as_dicts, normalize_options

logger = logging.getLogger(__name__)


def asset_type_row(row: AssetType, *, field_count: int | None = None) -> dict[str, Any]:
    data = {
        "id": str(row.id),
        "name": row.name,
        "description": row.description,
        "icon": row.icon,
        "status": row.status,
        "created_at": iso(row.created_at),
        "updated_at": iso(row.updated_at),
    }
    if field_count is not None:
        data["field_count"] = field_count
    return data


def core_field_row(row: AssetTypeField) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "asset_type_id": str_id(row.asset_type_id),
        "field_key": row.field_key,
        "label": row.label,
        "field_type": row.field_type,
        "is_required": bool(row.is_required),
        "is_readonly": bool(row.is_readonly),
        "default_value": row.default_value,
        "help_text": row.help_text,
        "placeholder": row.placeholder,
        "options": row.options,
        "normalized_options": options_as_dicts(normalize_options(row.options)),
        "validation_rules": row.validation_rules,
        "sort_order": row.sort_order,
        "created_at": iso(row.created_at),
        "updated_at": iso(row.updated_at),
    }


def get_asset_type_or_404(db: Session, asset_type_id: str) -> AssetType:
    row = db.get(AssetType, uuid_or_400(asset_type_id, "asset type id"))
    if row is None:
        raise HTTPException(status_code=404, detail="Asset type not found")
    return row


def _ordered_core_rows(db: Session, asset_type: AssetType) -> list[AssetTypeField]:
    rows = (
        db.query(AssetTypeField)
        .filter(AssetTypeField.asset_type_id == asset_type.id)
        .order_by(AssetTypeField.created_at.asc())
        .all()
    )
    return order_fields(rows)


def _ensure_unique_name_or_400(db: Session, name: str, exclude: AssetType | None = None) -> None:
    query = db.query(AssetType.id).filter(AssetType.name == name)
    if exclude is not None:
        query = query.filter(AssetType.id != exclude.id)
    if query.first() is not None:
        raise HTTPException(status_code=400, detail="Asset type with this name already exists")


def list_asset_types_service(db: Session) -> list[dict[str, Any]]:
    rows = db.query(AssetType).order_by(AssetType.name.asc()).all()
    counts: dict[Any, int] = {}
    for (asset_type_id,) in db.query(AssetTypeField.asset_type_id).all():
        counts[asset_type_id] = counts.get(asset_type_id, 0) + 1
    return [asset_type_row(row, field_count=counts.get(row.id, 0)) for row in rows]


def create_asset_type_service(payload: AssetTypeUpsert, db: Session) -> dict[str, Any]:
    _ensure_unique_name_or_400(db, payload.name)
    row = AssetType(**payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("asset type created id=%s name=%s", row.id, row.name)
    return asset_type_row(row, field_count=0)


def get_asset_type_service(asset_type_id: str, db: Session) -> dict[str, Any]:
    row = get_asset_type_or_404(db, asset_type_id)
    fields = _ordered_core_rows(db, row)
    data = asset_type_row(row, field_count=len(fields))
    data["fields"] = [core_field_row(item) for item in fields]
    return data


def update_asset_type_service(asset_type_id: str, payload: AssetTypePatch, db: Session) -> dict[str, Any]:
    row = get_asset_type_or_404(db, asset_type_id)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "name" in changes:
        if changes["name"] is None:
            raise HTTPException(status_code=400, detail="Name is required")
        _ensure_unique_name_or_400(db, changes["name"], exclude=row)
    if "status" in changes and changes["status"] is None:
        raise HTTPException(status_code=400, detail="Status cannot be empty")
    for key, value in changes.items():
        setattr(row, key, value)
    db.add(row)
    db.commit()
    db.refresh(row)
    return asset_type_row(row)


def delete_asset_type_service(asset_type_id: str, db: Session) -> dict[str, Any]:
    row = get_asset_type_or_404(db, asset_type_id)
    in_use = db.query(Asset.id).filter(Asset.asset_type_id == row.id).first()
    if in_use is not None:
        raise HTTPException(status_code=400, detail="Asset type is used by existing assets")
    db.query(AssetTypeField).filter(AssetTypeField.asset_type_id == row.id).delete(synchronize_session=False)
    db.query(FormDefinition).filter(FormDefinition.asset_type_id == row.id).update(
        {FormDefinition.asset_type_id: None},
        synchronize_session=False,
    )
    db.delete(row)
    db.commit()
    return {"status": "deleted", "id": str(row.id)}


def list_core_fields_service(asset_type_id: str, db: Session) -> list[dict[str, Any]]:
    asset_type = get_asset_type_or_404(db, asset_type_id)
    return [core_field_row(row) for row in _ordered_core_rows(db, asset_type)]


def create_core_field_service(asset_type_id: str, payload: CoreFieldCreate, db: Session) -> dict[str, Any]:
    asset_type = get_asset_type_or_404(db, asset_type_id)
    ensure_core_key_available_or_400(db, asset_type.id, payload.field_key)
    row = AssetTypeField(asset_type_id=asset_type.id, **payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return core_field_row(row)


def _get_core_field_or_404(db: Session, asset_type: AssetType, field_id: str) -> AssetTypeField:
    row = db.get(AssetTypeField, uuid_or_400(field_id, "field id"))
    if row is None or row.asset_type_id != asset_type.id:
        raise HTTPException(status_code=404, detail="Core field not found")
    return row


def update_core_field_service(asset_type_id: str, field_id: str, payload: CoreFieldPatch, db: Session) -> dict[str, Any]:
    asset_type = get_asset_type_or_404(db, asset_type_id)
    row = _get_core_field_or_404(db, asset_type, field_id)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    for required in ("field_key", "label", "field_type", "is_required", "is_readonly", "sort_order"):
        if required in changes and changes[required] is None:
            raise HTTPException(status_code=400, detail=f'Field "{required}" cannot be null')
    if "field_key" in changes and changes["field_key"] != row.field_key:
        ensure_core_key_available_or_400(db, asset_type.id, changes["field_key"], exclude_id=row.id)
    for key, value in changes.items():
        setattr(row, key, value)
    db.add(row)
    db.commit()
    db.refresh(row)
    return core_field_row(row)


def delete_core_field_service(asset_type_id: str, field_id: str, db: Session) -> dict[str, Any]:
    asset_type = get_asset_type_or_404(db, asset_type_id)
    row = _get_core_field_or_404(db, asset_type, field_id)
    db.delete(row)
    db.commit()
    return {"status": "deleted", "id": str(row.id)}
