from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.studio import (
    AssetTypePatch,
    AssetTypeUpsert,
    CoreFieldCreate,
    CoreFieldPatch,
    CustomFieldCreate,
    CustomFieldPatch,
    FormDefinitionCreate,
    FormDefinitionPatch,
    FormRulePatch,
    FormRuleUpsert,
)

from .asset_types import (
    create_asset_type_service,
    create_core_field_service,
    delete_asset_type_service,
    delete_core_field_service,
    get_asset_type_service,
    list_asset_types_service,
    list_core_fields_service,
    update_asset_type_service,
    update_core_field_service,
)
from .forms import (
    create_form_field_service,
    create_form_service,
    delete_form_field_service,
    delete_form_service,
    get_form_service,
    list_form_fields_service,
    list_forms_service,
    publish_form_service,
    render_form_service,
    update_form_field_service,
    update_form_service,
)
from .rules import create_rule_service, delete_rule_service, get_rule_service, list_rules_service, update_rule_service

asset_types_router = APIRouter()
forms_router = APIRouter()
rules_router = APIRouter()


@asset_types_router.get("")
def list_asset_types(db: Session = Depends(get_db)):
    return list_asset_types_service(db)


@asset_types_router.post("", status_code=201)
def create_asset_type(payload: AssetTypeUpsert, db: Session = Depends(get_db)):
    return create_asset_type_service(payload, db)


@asset_types_router.get("/{asset_type_id}")
def get_asset_type(asset_type_id: str, db: Session = Depends(get_db)):
    return get_asset_type_service(asset_type_id, db)


@asset_types_router.patch("/{asset_type_id}")
def update_asset_type(asset_type_id: str, payload: AssetTypePatch, db: Session = Depends(get_db)):
    return update_asset_type_service(asset_type_id, payload, db)


@asset_types_router.delete("/{asset_type_id}")
def delete_asset_type(asset_type_id: str, db: Session = Depends(get_db)):
    return delete_asset_type_service(asset_type_id, db)


@asset_types_router.get("/{asset_type_id}/fields")
def list_core_fields(asset_type_id: str, db: Session = Depends(get_db)):
    return list_core_fields_service(asset_type_id, db)


@asset_types_router.post("/{asset_type_id}/fields", status_code=201)
def create_core_field(asset_type_id: str, payload: CoreFieldCreate, db: Session = Depends(get_db)):
    return create_core_field_service(asset_type_id, payload, db)


@asset_types_router.patch("/{asset_type_id}/fields/{field_id}")
def update_core_field(asset_type_id: str, field_id: str, payload: CoreFieldPatch, db: Session = Depends(get_db)):
    return update_core_field_service(asset_type_id, field_id, payload, db)


@asset_types_router.delete("/{asset_type_id}/fields/{field_id}")
def delete_core_field(asset_type_id: str, field_id: str, db: Session = Depends(get_db)):
    return delete_core_field_service(asset_type_id, field_id, db)


@forms_router.get("")
def list_forms(
    db: Session = Depends(get_db),
    asset_type_id: str | None = Query(default=None),
    published: bool | None = Query(default=None),
):
    return list_forms_service(db, asset_type_id=asset_type_id, published=published)


@forms_router.post("", status_code=201)
def create_form(payload: FormDefinitionCreate, db: Session = Depends(get_db)):
    return create_form_service(payload, db)


@forms_router.get("/{form_id}")
def get_form(form_id: str, db: Session = Depends(get_db)):
    return get_form_service(form_id, db)


@forms_router.patch("/{form_id}")
def update_form(form_id: str, payload: FormDefinitionPatch, db: Session = Depends(get_db)):
    return update_form_service(form_id, payload, db)


@forms_router.delete("/{form_id}")
def delete_form(form_id: str, db: Session = Depends(get_db)):
    return delete_form_service(form_id, db)


@forms_router.post("/{form_id}/publish")
def publish_form(form_id: str, db: Session = Depends(get_db)):
    return publish_form_service(form_id, db)


@forms_router.get("/{form_id}/render")
def render_form(form_id: str, db: Session = Depends(get_db)):
    return render_form_service(form_id, db)


@forms_router.get("/{form_id}/fields")
def list_form_fields(form_id: str, db: Session = Depends(get_db)):
    return list_form_fields_service(form_id, db)


@forms_router.post("/{form_id}/fields", status_code=201)
def create_form_field(form_id: str, payload: CustomFieldCreate, db: Session = Depends(get_db)):
    return create_form_field_service(form_id, payload, db)


@forms_router.patch("/{form_id}/fields/{field_id}")
def update_form_field(form_id: str, field_id: str, payload: CustomFieldPatch, db: Session = Depends(get_db)):
    return update_form_field_service(form_id, field_id, payload, db)


@forms_router.delete("/{form_id}/fields/{field_id}")
def delete_form_field(form_id: str, field_id: str, db: Session = Depends(get_db)):
    return delete_form_field_service(form_id, field_id, db)


@rules_router.get("")
def list_rules(db: Session = Depends(get_db), form_id: str | None = Query(default=None)):
    return list_rules_service(db, form_id=form_id)


@rules_router.post("", status_code=201)
def create_rule(payload: FormRuleUpsert, db: Session = Depends(get_db)):
    return create_rule_service(payload, db)


@rules_router.get("/{rule_id}")
def get_rule(rule_id: str, db: Session = Depends(get_db)):
    return get_rule_service(rule_id, db)


@rules_router.patch("/{rule_id}")
def update_rule(rule_id: str, payload: FormRulePatch, db: Session = Depends(get_db)):
    return update_rule_service(rule_id, payload, db)


@rules_router.delete("/{rule_id}")
def delete_rule(rule_id: str, db: Session = Depends(get_db)):
    return delete_rule_service(rule_id, db)
