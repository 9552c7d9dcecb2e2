from __future__ import annotations

from typing import Any

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.api.common import iso, optional_uuid_or_400, str_id, uuid_or_400
from app.models.asset import Asset
from app.services.asset_hierarchy import build_asset_tree


def asset_row(row: Asset) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "name": row.name,
        "asset_type_id": str_id(row.asset_type_id),
        "parent_id": str_id(row.parent_id),
        "form_id": str_id(row.form_id),
        "hierarchy_level": row.hierarchy_level,
        "status": row.status,
        "criticality": row.criticality,
        "location": row.location,
        "data": dict(row.data or {}),
        "created_at": iso(row.created_at),
        "updated_at": iso(row.updated_at),
    }


def get_asset_or_404(db: Session, asset_id: str) -> Asset:
    row = db.get(Asset, uuid_or_400(asset_id, "asset id"))
    if row is None:
        raise HTTPException(status_code=404, detail="Asset not found")
    return row


def list_assets_service(
    db: Session,
    *,
    asset_type_id: str | None = None,
    status: str | None = None,
    search: str | None = None,
) -> list[dict[str, Any]]:
    query = db.query(Asset)
    type_uuid = optional_uuid_or_400(asset_type_id, "asset type id")
    if type_uuid is not None:
        query = query.filter(Asset.asset_type_id == type_uuid)
    if status:
        query = query.filter(Asset.status == status)
    text = str(search or "").strip()
    if text:
        pattern = f"%{text}%"
        query = query.filter(or_(Asset.name.ilike(pattern), Asset.location.ilike(pattern)))
    return [asset_row(row) for row in query.order_by(Asset.created_at.desc()).all()]


def get_asset_hierarchy_service(db: Session) -> list[dict[str, Any]]:
    return build_asset_tree(db.query(Asset).all(), asset_row)


def get_asset_service(asset_id: str, db: Session) -> dict[str, Any]:
    return asset_row(get_asset_or_404(db, asset_id))


def delete_asset_service(asset_id: str, db: Session) -> dict[str, Any]:
    row = get_asset_or_404(db, asset_id)
    db.query(Asset).filter(Asset.parent_id == row.id).update(
        {Asset.parent_id: row.parent_id},
        synchronize_session=False,
    )
    db.delete(row)
    db.commit()
    return {"status": "deleted", "id": str(row.id)}
