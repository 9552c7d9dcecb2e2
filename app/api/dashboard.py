from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.api.common import iso
from app.db.session import get_db
from app.models.asset import Asset
from app.models.asset_type import AssetType
from app.models.form_definition import FormDefinition
from app.models.form_rule import FormRule

router = APIRouter()

RECENT_ASSETS = 2
RECENT_FORMS = 1
RECENT_RULES = 1

WELCOME_ACTIVITY = {
    "action": "Welcome!",
    "description": "Start by creating your first asset type",
    "kind": "welcome",
    "at": None,
}


def _count(db: Session, column, *criteria) -> int:
    query = db.query(func.count(column))
    if criteria:
        query = query.filter(*criteria)
    return int(query.scalar() or 0)


def _recent_activity(db: Session) -> list[dict[str, Any]]:
    activity: list[dict[str, Any]] = []
    for row in db.query(Asset).order_by(Asset.created_at.desc()).limit(RECENT_ASSETS).all():
        activity.append(
            {"action": "Asset created", "description": f"{row.name} added", "kind": "asset", "at": iso(row.created_at)}
        )
    for row in db.query(FormDefinition).order_by(FormDefinition.created_at.desc()).limit(RECENT_FORMS).all():
        activity.append(
            {
                "action": "Form published" if row.is_published else "Form created",
                "description": row.name,
                "kind": "form",
                "at": iso(row.updated_at),
            }
        )
    for row in db.query(FormRule).order_by(FormRule.created_at.desc()).limit(RECENT_RULES).all():
        activity.append({"action": "Rule added", "description": row.name, "kind": "rule", "at": iso(row.created_at)})
    return activity or [dict(WELCOME_ACTIVITY)]


def get_dashboard_service(db: Session) -> dict[str, Any]:
    published = _count(db, FormDefinition.id, FormDefinition.is_published.is_(True))
    total_forms = _count(db, FormDefinition.id)
    return {
        "stats": {
            "total_assets": _count(db, Asset.id),
            "asset_types": _count(db, AssetType.id),
            "draft_forms": total_forms - published,
            "published_forms": published,
        },
        "recent_activity": _recent_activity(db),
    }


@router.get("")
def get_dashboard(db: Session = Depends(get_db)):
    return get_dashboard_service(db)
