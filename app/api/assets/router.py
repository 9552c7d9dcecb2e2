from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.assets import EditWizardSubmitIn, WizardPlanIn, WizardStageIn, WizardSubmitIn

from .service import delete_asset_service, get_asset_hierarchy_service, get_asset_service, list_assets_service
from .wizard import (
    get_edit_wizard_service,
    plan_wizard_service,
    submit_edit_wizard_service,
    submit_wizard_service,
    validate_wizard_stage_service,
)

router = APIRouter()


@router.get("")
def list_assets(
    db: Session = Depends(get_db),
    asset_type_id: str | None = Query(default=None),
    status: str | None = Query(default=None),
    q: str | None = Query(default=None),
):
    return list_assets_service(db, asset_type_id=asset_type_id, status=status, search=q)


@router.get("/hierarchy")
def get_asset_hierarchy(db: Session = Depends(get_db)):
    return get_asset_hierarchy_service(db)


@router.post("/wizard/plan")
def plan_wizard(payload: WizardPlanIn, db: Session = Depends(get_db)):
    return plan_wizard_service(payload, db)


@router.post("/wizard/validate")
def validate_wizard_stage(payload: WizardStageIn, db: Session = Depends(get_db)):
    return validate_wizard_stage_service(payload, db)


@router.post("/wizard/submit", status_code=201)
def submit_wizard(payload: WizardSubmitIn, db: Session = Depends(get_db)):
    return submit_wizard_service(payload, db)


@router.get("/{asset_id}")
def get_asset(asset_id: str, db: Session = Depends(get_db)):
    return get_asset_service(asset_id, db)


@router.delete("/{asset_id}")
def delete_asset(asset_id: str, db: Session = Depends(get_db)):
    return delete_asset_service(asset_id, db)


@router.get("/{asset_id}/edit-wizard")
def get_edit_wizard(asset_id: str, db: Session = Depends(get_db)):
    return get_edit_wizard_service(asset_id, db)


@router.post("/{asset_id}/edit-wizard/submit")
def submit_edit_wizard(asset_id: str, payload: EditWizardSubmitIn, db: Session = Depends(get_db)):
    return submit_edit_wizard_service(asset_id, payload, db)
