from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.models.asset import Asset
from app.models.asset_type import AssetType
from app.models.asset_type_field import AssetTypeField
from app.models.form_definition import FormDefinition
from app.models.form_field import FormField
from app.models.form_rule import FormRule

logger = logging.getLogger(__name__)

ASSET_TYPES = [
    {
        "name": "Motor",
        "description": "Electric motors and gearmotors",
        "icon": "cog",
        "status": "Active",
        "fields": [
            {"field_key": "serial_number", "label": "Serial Number", "field_type": "text", "is_required": True, "sort_order": 10},
            {"field_key": "rated_power", "label": "Rated Power (kW)", "field_type": "number", "is_required": True, "sort_order": 20},
            {
                "field_key": "manufacturer",
                "label": "Manufacturer",
                "field_type": "dropdown",
                "options": ["ABB", "Siemens", "WEG"],
                "sort_order": 30,
            },
            {"field_key": "install_date", "label": "Install Date", "field_type": "date", "sort_order": 40},
        ],
    },
    {
        "name": "Pump",
        "description": "Centrifugal and positive displacement pumps",
        "icon": "droplet",
        "status": "Active",
        "fields": [
            {"field_key": "serial_number", "label": "Serial Number", "field_type": "text", "is_required": True, "sort_order": 10},
            {"field_key": "flow_rate", "label": "Flow Rate (m3/h)", "field_type": "number", "sort_order": 20},
        ],
    },
]

FORMS = [
    {
        "name": "Motor Inspection",
        "asset_type": "Motor",
        "published": True,
        "fields": [
            {"field_key": "rpm", "label": "RPM", "field_type": "number", "sort_order": 10},
            {"field_key": "gear_ratio", "label": "Gear Ratio", "field_type": "text", "sort_order": 20},
            {"field_key": "explosion_proof", "label": "Explosion Proof", "field_type": "toggle", "default_value": "false", "sort_order": 30},
            {
                "field_key": "maintenance_notes",
                "label": "Maintenance Notes",
                "field_type": "textarea",
                "column_span": 2,
                "sort_order": 40,
            },
            {
                "field_key": "operating_hours",
                "label": "Operating Hours",
                "field_type": "number",
                "is_system_field": True,
                "is_readonly": True,
                "sort_order": 50,
            },
        ],
    },
    {
        "name": "Motor Commissioning",
        "asset_type": "Motor",
        "published": True,
        "fields": [
            {"field_key": "commissioned_by", "label": "Commissioned By", "field_type": "text", "is_required": True, "sort_order": 10},
            {
                "field_key": "vibration_class",
                "label": "Vibration Class",
                "field_type": "dropdown",
                "options": [{"label": "Class A", "value": "a"}, {"label": "Class B", "value": "b"}],
                "sort_order": 20,
            },
        ],
    },
    {
        "name": "Pump Survey",
        "asset_type": "Pump",
        "published": False,
        "fields": [
            {"field_key": "seal_type", "label": "Seal Type", "field_type": "text", "sort_order": 10},
        ],
    },
]

RULES = [
    {
        "name": "Show gear ratio for gearmotors",
        "form": "Motor Inspection",
        "conditions": [{"field": "Asset Type", "operator": "equals", "value": "Gearmotor"}],
        "actions": [{"type": "Show", "field": "Gear Ratio", "value": None}],
    },
]

ASSETS = [
    {"name": "Acme Manufacturing", "hierarchy_level": "Enterprise", "parent": None},
    {"name": "Plant 1", "hierarchy_level": "Site", "parent": "Acme Manufacturing", "location": "Building A"},
    {"name": "Line A", "hierarchy_level": "Area", "parent": "Plant 1"},
    {
        "name": "Motor M-2847",
        "hierarchy_level": "Unit",
        "parent": "Line A",
        "asset_type": "Motor",
        "form": "Motor Inspection",
        "criticality": "High",
        "data": {"serial_number": "M-2847", "rated_power": 7.5, "manufacturer": "ABB", "rpm": 1450},
    },
]


def _ensure_asset_types(db: Session) -> dict[str, AssetType]:
    out: dict[str, AssetType] = {}
    for item in ASSET_TYPES:
        row = db.query(AssetType).filter(AssetType.name == item["name"]).first()
        if row is None:
            row = AssetType(name=item["name"])
            db.add(row)
        row.description = item["description"]
        row.icon = item["icon"]
        row.status = item["status"]
        db.flush()
        existing = {
            key for (key,) in db.query(AssetTypeField.field_key).filter(AssetTypeField.asset_type_id == row.id).all()
        }
        for definition in item["fields"]:
            if definition["field_key"] not in existing:
                db.add(AssetTypeField(asset_type_id=row.id, **definition))
        out[row.name] = row
    return out


def _ensure_forms(db: Session, asset_types: dict[str, AssetType]) -> dict[str, FormDefinition]:
    out: dict[str, FormDefinition] = {}
    for item in FORMS:
        asset_type = asset_types[item["asset_type"]]
        row = (
            db.query(FormDefinition)
            .filter(FormDefinition.name == item["name"], FormDefinition.asset_type_id == asset_type.id)
            .first()
        )
        if row is None:
            row = FormDefinition(name=item["name"], asset_type_id=asset_type.id, version=1)
            db.add(row)
        row.is_published = bool(item["published"])
        row.status = "Active" if item["published"] else "Draft"
        db.flush()
        existing = {key for (key,) in db.query(FormField.field_key).filter(FormField.form_id == row.id).all()}
        for definition in item["fields"]:
            if definition["field_key"] not in existing:
                db.add(FormField(form_id=row.id, **definition))
        out[row.name] = row
    return out


def _ensure_rules(db: Session, forms: dict[str, FormDefinition]) -> int:
    created = 0
    for item in RULES:
        if db.query(FormRule.id).filter(FormRule.name == item["name"]).first() is not None:
            continue
        db.add(
            FormRule(
                name=item["name"],
                form_id=forms[item["form"]].id,
                conditions=item["conditions"],
                actions=item["actions"],
                is_enabled=True,
            )
        )
        created += 1
    return created


def _ensure_assets(db: Session, asset_types: dict[str, AssetType], forms: dict[str, FormDefinition]) -> dict[str, Asset]:
    out: dict[str, Asset] = {}
    for item in ASSETS:
        row = db.query(Asset).filter(Asset.name == item["name"]).first()
        if row is None:
            row = Asset(name=item["name"])
            db.add(row)
        parent = out.get(item["parent"]) if item["parent"] else None
        row.parent_id = parent.id if parent else None
        row.hierarchy_level = item["hierarchy_level"]
        row.status = "Active"
        row.criticality = item.get("criticality", "Medium")
        row.location = item.get("location")
        row.asset_type_id = asset_types[item["asset_type"]].id if item.get("asset_type") else None
        row.form_id = forms[item["form"]].id if item.get("form") else None
        row.data = dict(item.get("data") or {})
        db.flush()
        out[row.name] = row
    return out


def seed_demo_catalog(db: Session) -> dict[str, int]:
    asset_types = _ensure_asset_types(db)
    forms = _ensure_forms(db, asset_types)
    rules_created = _ensure_rules(db, forms)
    assets = _ensure_assets(db, asset_types, forms)
    db.commit()
    summary = {
        "asset_types": len(asset_types),
        "forms": len(forms),
        "rules_created": rules_created,
        "assets": len(assets),
    }
    logger.info("demo catalog seeded: %s", summary)
    return summary


if __name__ == "__main__":
    from app.db.session import SessionLocal

    logging.basicConfig(level=logging.INFO)
    with SessionLocal() as session:
        print("demo seed summary:", seed_demo_catalog(session))
