from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, Field, field_validator

from app.core.config import settings
from app.models.common import LIFECYCLE_STATUSES
from app.services.forms.descriptors import validate_field_key
from app.services.forms.errors import InvalidFieldKeyError

RULE_OPERATORS = {"equals", "not equals", "contains", "is empty", "is not empty"}
RULE_ACTION_TYPES = {"Show", "Hide", "Make Required", "Make Optional", "Set Value"}


def _lifecycle_status(value: str) -> str:
    normalized = str(value).strip().capitalize()
    if normalized not in LIFECYCLE_STATUSES:
        raise ValueError("status must be one of: " + ", ".join(LIFECYCLE_STATUSES))
    return normalized


def _field_key(value: str) -> str:
    try:
        return validate_field_key(value, max_length=settings.FIELD_KEY_MAX_LENGTH)
    except InvalidFieldKeyError as exc:
        raise ValueError(f"Field key {exc.reason}") from exc


def _label(value: str) -> str:
    text = str(value).strip()
    if not text:
        raise ValueError("Label is required")
    if len(text) > settings.FIELD_LABEL_MAX_LENGTH:
        raise ValueError(f"Label must be at most {settings.FIELD_LABEL_MAX_LENGTH} characters")
    return text


def _field_type(value: str) -> str:
    text = str(value).strip().lower()
    if not text:
        raise ValueError("Field type is required")
    return text


def _required_name(value: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValueError("Name is required")
    return text


LifecycleStatus = Annotated[str, AfterValidator(_lifecycle_status)]
FieldKey = Annotated[str, AfterValidator(_field_key)]
Label = Annotated[str, AfterValidator(_label)]
FieldTypeName = Annotated[str, Field(max_length=30), AfterValidator(_field_type)]
RequiredName = Annotated[str, Field(max_length=200), AfterValidator(_required_name)]


class AssetTypeUpsert(BaseModel):
    name: RequiredName
    description: Optional[str] = None
    icon: Optional[str] = None
    status: LifecycleStatus = "Draft"


class AssetTypePatch(BaseModel):
    name: Optional[RequiredName] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    status: Optional[LifecycleStatus] = None


class CoreFieldCreate(BaseModel):
    field_key: FieldKey
    label: Label
    field_type: FieldTypeName = "text"
    is_required: bool = False
    is_readonly: bool = False
    default_value: Optional[str] = Field(default=None, max_length=255)
    help_text: Optional[str] = Field(default=None, max_length=500)
    placeholder: Optional[str] = Field(default=None, max_length=255)
    options: Optional[Any] = None
    validation_rules: Optional[dict] = None
    sort_order: int = 0


class CoreFieldPatch(BaseModel):
    field_key: Optional[FieldKey] = None
    label: Optional[Label] = None
    field_type: Optional[FieldTypeName] = None
    is_required: Optional[bool] = None
    is_readonly: Optional[bool] = None
    default_value: Optional[str] = Field(default=None, max_length=255)
    help_text: Optional[str] = Field(default=None, max_length=500)
    placeholder: Optional[str] = Field(default=None, max_length=255)
    options: Optional[Any] = None
    validation_rules: Optional[dict] = None
    sort_order: Optional[int] = None


class CustomFieldCreate(CoreFieldCreate):
    is_visible: bool = True
    is_system_field: bool = False
    column_span: int = Field(default=1, ge=1, le=2)
    section: Optional[str] = Field(default=None, max_length=100)
    tab: str = Field(default="general", max_length=50)


class CustomFieldPatch(CoreFieldPatch):
    is_visible: Optional[bool] = None
    is_system_field: Optional[bool] = None
    column_span: Optional[int] = Field(default=None, ge=1, le=2)
    section: Optional[str] = Field(default=None, max_length=100)
    tab: Optional[str] = Field(default=None, max_length=50)


class FormDefinitionCreate(BaseModel):
    name: RequiredName
    description: Optional[str] = None
    asset_type_id: Optional[str] = None


class FormDefinitionPatch(BaseModel):
    name: Optional[RequiredName] = None
    description: Optional[str] = None
    asset_type_id: Optional[str] = None
    status: Optional[LifecycleStatus] = None


class RuleCondition(BaseModel):
    field: str
    operator: str = "equals"
    value: Optional[str] = ""

    @field_validator("operator")
    @classmethod
    def validate_operator(cls, value: str) -> str:
        normalized = str(value or "").strip().lower()
        if normalized not in RULE_OPERATORS:
            raise ValueError("operator must be one of: " + ", ".join(sorted(RULE_OPERATORS)))
        return normalized


class RuleAction(BaseModel):
    type: str
    field: str
    value: Optional[str] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: str) -> str:
        text = str(value or "").strip()
        if text not in RULE_ACTION_TYPES:
            raise ValueError("type must be one of: " + ", ".join(sorted(RULE_ACTION_TYPES)))
        return text


class FormRuleUpsert(BaseModel):
    name: RequiredName
    description: Optional[str] = None
    form_id: Optional[str] = None
    conditions: list[RuleCondition] = Field(default_factory=list)
    actions: list[RuleAction] = Field(default_factory=list)
    is_enabled: bool = True


class FormRulePatch(BaseModel):
    name: Optional[RequiredName] = None
    description: Optional[str] = None
    form_id: Optional[str] = None
    conditions: Optional[list[RuleCondition]] = None
    actions: Optional[list[RuleAction]] = None
    is_enabled: Optional[bool] = None
