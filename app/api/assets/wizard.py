from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.common import optional_uuid_or_400, str_id
from app.api.studio.asset_types import get_asset_type_or_404
from app.models.asset import Asset
from app.models.asset_type import AssetType
from app.models.form_definition import FormDefinition
from app.schemas.assets import EditWizardSubmitIn, WizardPlanIn, WizardStageIn, WizardSubmitIn
from app.services.asset_hierarchy import ensure_valid_parent_or_400
from app.services.field_sets import (
    load_core_field_set,
    load_custom_field_set,
    published_forms_for,
    render_stage,
)
from app.services.forms.assembler import Composition, Stage, compose_stages
from app.services.forms.merger import MergeResult, merge_stage_values
from app.services.forms.schema import ValidationOutcome, synthesize_validator
from app.services.forms.wizard import WizardContext, WizardStep, plan_edit_steps, split_payload

from .service import asset_row, get_asset_or_404

logger = logging.getLogger(__name__)


@dataclass
class WizardSources:
    asset_type: AssetType | None
    forms: list[FormDefinition]
    selected_form: FormDefinition | None
    composition: Composition


def _form_summary(row: FormDefinition) -> dict[str, Any]:
    return {"id": str(row.id), "name": row.name, "description": row.description, "version": row.version}


def resolve_wizard_sources(db: Session, asset_type_id: str, form_id: str | None) -> WizardSources:
    asset_type = get_asset_type_or_404(db, asset_type_id)
    forms = published_forms_for(db, asset_type.id)
    form_uuid = optional_uuid_or_400(form_id, "form id")
    selected: FormDefinition | None = None
    if form_uuid is not None:
        selected = next((item for item in forms if item.id == form_uuid), None)
        if selected is None:
            raise HTTPException(status_code=400, detail="Form is not published for this asset type")
    elif len(forms) == 1:
        selected = forms[0]
    composition = compose_stages(
        load_core_field_set(db, asset_type.id),
        load_custom_field_set(db, selected.id if selected else None),
    )
    return WizardSources(asset_type=asset_type, forms=forms, selected_form=selected, composition=composition)


def wizard_context(sources: WizardSources, step: WizardStep = WizardStep.ASSET_TYPE) -> WizardContext:
    selected = sources.selected_form
    return WizardContext(
        asset_type_id=str(sources.asset_type.id) if sources.asset_type else None,
        has_core_fields=not sources.composition.core.is_empty,
        available_form_ids=[str(item.id) for item in sources.forms],
        selected_form_id=str(selected.id) if selected else None,
        chosen_form_has_custom_fields=(not sources.composition.custom.is_empty) if selected else True,
        step=step,
    )


def _stage_for(composition: Composition, step: WizardStep) -> Stage:
    return composition.core if step is WizardStep.CORE_FIELDS else composition.custom


def validate_stage_values(stage: Stage, values: dict[str, Any] | None) -> ValidationOutcome:
    validator = synthesize_validator(stage.fields, name=stage.name.replace("-", "_"))
    return validator.validate(values or {})


def validate_stages_or_400(stages: list[tuple[Stage, dict[str, Any] | None]]) -> list[ValidationOutcome]:
    outcomes: list[ValidationOutcome] = []
    errors: dict[str, dict[str, str]] = {}
    for stage, values in stages:
        outcome = validate_stage_values(stage, values)
        if not outcome.is_valid:
            errors[stage.name] = outcome.errors
        outcomes.append(outcome)
    if errors:
        raise HTTPException(status_code=400, detail={"message": "Validation failed", "errors": errors})
    return outcomes


def _warnings(merged: MergeResult, conflicts: list[str]) -> list[str]:
    messages = [f'Field key "{key}" is defined in both core and form fields' for key in conflicts]
    messages.extend(
        f'Field key "{item.key}" was provided by more than one stage; the later value was kept'
        for item in merged.collisions
    )
    return messages


def plan_wizard_service(payload: WizardPlanIn, db: Session) -> dict[str, Any]:
    if payload.asset_type_id:
        sources = resolve_wizard_sources(db, payload.asset_type_id, payload.selected_form_id)
    else:
        sources = WizardSources(asset_type=None, forms=[], selected_form=None, composition=compose_stages(None, None))
    context = wizard_context(sources)

    if payload.current_step not in context.steps:
        raise HTTPException(status_code=400, detail=f'Step "{payload.current_step.value}" is skipped for this asset type')
    context.step = payload.current_step

    if payload.direction == "next":
        if sources.asset_type is None:
            raise HTTPException(status_code=400, detail="Select an asset type first")
        try:
            context.advance()
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
    elif payload.direction == "back":
        context.back()

    composition = sources.composition
    return {
        "steps": [step.value for step in context.steps],
        "current_step": context.step.value,
        "step_index": context.step_index,
        "asset_type_id": context.asset_type_id,
        "selected_form_id": context.selected_form_id,
        "available_forms": [_form_summary(item) for item in sources.forms],
        "stages": {stage.name: render_stage(stage) for stage in composition.stages},
        "conflicts": composition.conflicts,
    }


def validate_wizard_stage_service(payload: WizardStageIn, db: Session) -> dict[str, Any]:
    sources = resolve_wizard_sources(db, payload.asset_type_id, payload.form_id)
    stage = _stage_for(sources.composition, payload.stage)
    (outcome,) = validate_stages_or_400([(stage, payload.values)])
    return {"stage": stage.name, "valid": True, "values": outcome.values}


def submit_wizard_service(payload: WizardSubmitIn, db: Session) -> dict[str, Any]:
    basic = payload.asset
    if not basic.asset_type_id:
        raise HTTPException(status_code=400, detail="Asset type is required")
    sources = resolve_wizard_sources(db, basic.asset_type_id, payload.form_id)
    if len(sources.forms) > 1 and sources.selected_form is None:
        raise HTTPException(status_code=400, detail="Select a form to continue")

    parent_id = optional_uuid_or_400(basic.parent_id, "parent id")
    ensure_valid_parent_or_400(db, None, parent_id)

    composition = sources.composition
    core, custom = validate_stages_or_400(
        [(composition.core, payload.core_values), (composition.custom, payload.custom_values)]
    )
    merged = merge_stage_values(core.values, custom.values)

    row = Asset(
        name=basic.name,
        asset_type_id=sources.asset_type.id,
        parent_id=parent_id,
        form_id=sources.selected_form.id if sources.selected_form else None,
        hierarchy_level=basic.hierarchy_level,
        status=basic.status,
        criticality=basic.criticality,
        location=basic.location,
        data=merged.values,
    )
    try:
        db.add(row)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("asset create failed asset_type_id=%s", sources.asset_type.id)
        raise HTTPException(status_code=502, detail="Failed to save asset")
    db.refresh(row)
    logger.info("asset created id=%s asset_type_id=%s form_id=%s", row.id, row.asset_type_id, row.form_id)

    result = asset_row(row)
    result["warnings"] = _warnings(merged, composition.conflicts)
    return result


def _edit_sources(db: Session, asset: Asset) -> WizardSources:
    asset_type = db.get(AssetType, asset.asset_type_id) if asset.asset_type_id else None
    forms = published_forms_for(db, asset_type.id) if asset_type else []
    form = db.get(FormDefinition, asset.form_id) if asset.form_id else None
    if form is None and forms:
        form = forms[0]
    composition = compose_stages(
        load_core_field_set(db, asset_type.id if asset_type else None),
        load_custom_field_set(db, form.id if form else None),
    )
    return WizardSources(asset_type=asset_type, forms=forms, selected_form=form, composition=composition)


def get_edit_wizard_service(asset_id: str, db: Session) -> dict[str, Any]:
    asset = get_asset_or_404(db, asset_id)
    sources = _edit_sources(db, asset)
    composition = sources.composition
    core_values, custom_values = split_payload(asset.data, composition.core.keys, composition.custom.keys)
    steps = plan_edit_steps(not composition.core.is_empty, not composition.custom.is_empty)
    stages = {}
    if not composition.core.is_empty:
        stages[composition.core.name] = render_stage(composition.core, core_values)
    if not composition.custom.is_empty:
        stages[composition.custom.name] = render_stage(composition.custom, custom_values)
    return {
        "asset": asset_row(asset),
        "steps": [step.value for step in steps],
        "form_id": str_id(sources.selected_form.id if sources.selected_form else None),
        "stages": stages,
        "conflicts": composition.conflicts,
    }


def submit_edit_wizard_service(asset_id: str, payload: EditWizardSubmitIn, db: Session) -> dict[str, Any]:
    asset = get_asset_or_404(db, asset_id)
    changes = payload.asset.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] is None:
        raise HTTPException(status_code=400, detail="Asset name is required")
    if "parent_id" in changes:
        parent_id = optional_uuid_or_400(changes.pop("parent_id"), "parent id")
        ensure_valid_parent_or_400(db, asset.id, parent_id)
        asset.parent_id = parent_id

    sources = _edit_sources(db, asset)
    composition = sources.composition
    core, custom = validate_stages_or_400(
        [(composition.core, payload.core_values), (composition.custom, payload.custom_values)]
    )
    merged = merge_stage_values(core.values, custom.values)

    for key in ("name", "hierarchy_level", "status", "criticality"):
        if changes.get(key) is not None:
            setattr(asset, key, changes[key])
    if "location" in changes:
        asset.location = str(changes["location"] or "").strip() or None
    owned = set(composition.core.keys) | set(composition.custom.keys)
    data = {key: value for key, value in (asset.data or {}).items() if key not in owned}
    data.update(merged.values)
    asset.data = data
    if sources.selected_form is not None:
        asset.form_id = sources.selected_form.id
    try:
        db.add(asset)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("asset update failed id=%s", asset.id)
        raise HTTPException(status_code=502, detail="Failed to save asset")
    db.refresh(asset)

    result = asset_row(asset)
    result["warnings"] = _warnings(merged, composition.conflicts)
    return result
