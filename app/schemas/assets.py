from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.asset import ASSET_STATUSES, CRITICALITY_LEVELS, HIERARCHY_LEVELS
from app.services.forms.wizard import WizardStep


def _one_of(value: Optional[str], allowed: tuple[str, ...], name: str) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    for item in allowed:
        if item.lower() == text.lower():
            return item
    raise ValueError(f"{name} must be one of: " + ", ".join(allowed))


class AssetBasicInfo(BaseModel):
    name: str = Field(max_length=200)
    asset_type_id: Optional[str] = None
    parent_id: Optional[str] = None
    hierarchy_level: str = "Unit"
    status: str = "Active"
    criticality: str = "Medium"
    location: Optional[str] = Field(default=None, max_length=255)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("Asset name is required")
        return text

    @field_validator("hierarchy_level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        return _one_of(value, HIERARCHY_LEVELS, "hierarchy_level")

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: str) -> str:
        return _one_of(value, ASSET_STATUSES, "status")

    @field_validator("criticality")
    @classmethod
    def validate_criticality(cls, value: str) -> str:
        return _one_of(value, CRITICALITY_LEVELS, "criticality")

    @field_validator("location")
    @classmethod
    def normalize_location(cls, value: Optional[str]) -> Optional[str]:
        text = str(value or "").strip()
        return text or None


class AssetBasicPatch(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    parent_id: Optional[str] = None
    hierarchy_level: Optional[str] = None
    status: Optional[str] = None
    criticality: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=255)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError("Asset name is required")
        return text

    @field_validator("hierarchy_level")
    @classmethod
    def validate_level(cls, value: Optional[str]) -> Optional[str]:
        return _one_of(value, HIERARCHY_LEVELS, "hierarchy_level")

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: Optional[str]) -> Optional[str]:
        return _one_of(value, ASSET_STATUSES, "status")

    @field_validator("criticality")
    @classmethod
    def validate_criticality(cls, value: Optional[str]) -> Optional[str]:
        return _one_of(value, CRITICALITY_LEVELS, "criticality")


class WizardPlanIn(BaseModel):
    asset_type_id: Optional[str] = None
    selected_form_id: Optional[str] = None
    current_step: WizardStep = WizardStep.ASSET_TYPE
    direction: Optional[str] = None

    @field_validator("direction")
    @classmethod
    def validate_direction(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        normalized = value.strip().lower()
        if normalized not in {"next", "back"}:
            raise ValueError('direction must be "next" or "back"')
        return normalized


class WizardStageIn(BaseModel):
    asset_type_id: str
    form_id: Optional[str] = None
    stage: WizardStep
    values: dict[str, Any] = Field(default_factory=dict)

    @field_validator("stage")
    @classmethod
    def validate_stage(cls, value: WizardStep) -> WizardStep:
        if value not in (WizardStep.CORE_FIELDS, WizardStep.FORM_FILL):
            raise ValueError('stage must be "core-fields" or "form-fill"')
        return value


class WizardSubmitIn(BaseModel):
    asset: AssetBasicInfo
    form_id: Optional[str] = None
    core_values: dict[str, Any] = Field(default_factory=dict)
    custom_values: dict[str, Any] = Field(default_factory=dict)


class EditWizardSubmitIn(BaseModel):
    asset: AssetBasicPatch = Field(default_factory=AssetBasicPatch)
    core_values: dict[str, Any] = Field(default_factory=dict)
    custom_values: dict[str, Any] = Field(default_factory=dict)
