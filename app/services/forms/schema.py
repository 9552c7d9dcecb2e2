"""Validation schema synthesis for runtime-defined field sets.

Each descriptor becomes one field of a dynamically created pydantic model.
Field keys are bound through aliases so that any key matching
``[a-z][a-z0-9_]*`` is accepted, including names that would shadow
``BaseModel`` attributes.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Callable, Iterable, Mapping

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, create_model
from pydantic_core import PydanticCustomError

from .descriptors import FieldDescriptor, FieldType

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"^[+-]?\d+$")
TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = {"false", "0", "no", "off", ""}

Rule = Callable[[Any], Any]


def _required_error(label: str) -> PydanticCustomError:
    return PydanticCustomError("field_required", "{label} is required", {"label": label})


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _number_rule(item: FieldDescriptor) -> Rule:
    def check(value: Any) -> Any:
        if _blank(value):
            if item.is_required:
                raise _required_error(item.label)
            return None
        if isinstance(value, bool):
            number = None
        elif isinstance(value, (int, float, Decimal)):
            number = value
        elif isinstance(value, str):
            text = value.strip().replace(",", ".")
            try:
                number = int(text) if _INT_RE.fullmatch(text) else float(text)
            except ValueError:
                number = None
        else:
            number = None
        if isinstance(number, Decimal):
            number = float(number)
        if number is None or (isinstance(number, float) and not math.isfinite(number)):
            if item.is_required:
                raise _required_error(item.label)
            raise PydanticCustomError("number_type", "{label} must be a number", {"label": item.label})
        return number

    return check


def _toggle_rule(item: FieldDescriptor) -> Rule:
    def check(value: Any) -> bool:
        if value is None or isinstance(value, bool):
            return bool(value)
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            text = value.strip().lower()
            if text in TRUE_STRINGS:
                return True
            if text in _FALSE_STRINGS:
                return False
        raise PydanticCustomError("bool_type", "{label} must be true or false", {"label": item.label})

    return check


def _is_iso_date(text: str) -> bool:
    try:
        date.fromisoformat(text)
        return True
    except ValueError:
        pass
    try:
        datetime.fromisoformat(text.replace("Z", "+00:00"))
        return True
    except ValueError:
        return False


def _date_rule(item: FieldDescriptor) -> Rule:
    def check(value: Any) -> Any:
        if _blank(value):
            if item.is_required:
                raise _required_error(item.label)
            return value
        if isinstance(value, str) and _is_iso_date(value.strip()):
            return value
        raise PydanticCustomError("date_type", "{label} must be a valid date", {"label": item.label})

    return check


def _string_rule(item: FieldDescriptor) -> Rule:
    def check(value: Any) -> Any:
        if isinstance(value, bool):
            raise PydanticCustomError("string_type", "{label} must be text", {"label": item.label})
        if isinstance(value, (int, float, Decimal)):
            value = str(value)
        if value is not None and not isinstance(value, str):
            raise PydanticCustomError("string_type", "{label} must be text", {"label": item.label})
        if item.is_required and _blank(value):
            raise _required_error(item.label)
        return value

    return check


RULE_BUILDERS: dict[FieldType, Callable[[FieldDescriptor], Rule]] = {
    FieldType.NUMBER: _number_rule,
    FieldType.TOGGLE: _toggle_rule,
    FieldType.DATE: _date_rule,
    FieldType.TEXT: _string_rule,
    FieldType.TEXTAREA: _string_rule,
    FieldType.DROPDOWN: _string_rule,
    FieldType.LOOKUP: _string_rule,
}


def build_field_rule(item: FieldDescriptor) -> Rule:
    builder = RULE_BUILDERS.get(item.kind, _string_rule)
    return builder(item)


def _attribute_name(index: int) -> str:
    # Field keys are lowercase, so an uppercase attribute name never shadows one.
    return f"Field{index}"


@dataclass
class ValidationOutcome:
    values: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class FormValidator:
    """Composite validator keyed by ``field_key``."""

    def __init__(self, fields: tuple[FieldDescriptor, ...], model: type[BaseModel]):
        self.fields = fields
        self.model = model
        # Defaults are validated under the attribute name, supplied values under the alias.
        self._key_by_name = {_attribute_name(index): item.field_key for index, item in enumerate(fields)}

    @property
    def keys(self) -> list[str]:
        return [item.field_key for item in self.fields]

    def validate(self, values: Mapping[str, Any] | None) -> ValidationOutcome:
        payload = dict(values) if isinstance(values, Mapping) else {}
        try:
            parsed = self.model.model_validate(payload)
        except ValidationError as exc:
            errors: dict[str, str] = {}
            for error in exc.errors():
                loc = error.get("loc") or ("",)
                key = self._key_by_name.get(str(loc[0]), str(loc[0]))
                errors.setdefault(key, error.get("msg") or "Invalid value")
            return ValidationOutcome(errors=errors)
        return ValidationOutcome(values=parsed.model_dump(by_alias=True))


def synthesize_validator(fields: Iterable[FieldDescriptor], *, name: str = "DynamicForm") -> FormValidator:
    """Build a ``FormValidator`` for ``fields`` in their given order.

    A repeated ``field_key`` keeps its first descriptor; the rest are dropped
    with a warning.
    """
    kept: list[FieldDescriptor] = []
    seen: set[str] = set()
    for item in fields:
        if item.field_key in seen:
            logger.warning("duplicate field key %r ignored while building %s", item.field_key, name)
            continue
        seen.add(item.field_key)
        kept.append(item)

    definitions: dict[str, Any] = {}
    for index, item in enumerate(kept):
        annotation = Annotated[Any, BeforeValidator(build_field_rule(item))]
        definitions[_attribute_name(index)] = (annotation, Field(default=None, alias=item.field_key, validate_default=True))

    model = create_model(name, __config__=ConfigDict(extra="ignore"), **definitions)
    return FormValidator(tuple(kept), model)
