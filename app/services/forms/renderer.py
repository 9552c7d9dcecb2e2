from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from .descriptors import FieldDescriptor, FieldType
from .options import Choice
from .schema import TRUE_STRINGS

ChangeHandler = Callable[[Any], None]

_NUMBER_RE = re.compile(r"^[+-]?(\d+([.,]\d*)?|[.,]\d+)$")


@dataclass
class Control:
    field_key: str
    label: str
    widget: str
    value: Any
    placeholder: str = ""
    options: tuple[Choice, ...] = ()
    disabled: bool = False
    required: bool = False
    help_text: str | None = None
    column_span: int = 1
    section: str | None = None
    tab: str | None = None
    on_change: ChangeHandler | None = field(default=None, repr=False, compare=False)

    def change(self, value: Any) -> bool:
        """Forward a new value to the bound slot; read-only controls ignore it."""
        if self.disabled or self.on_change is None:
            return False
        self.on_change(value)
        self.value = bool(value) if self.widget == "switch" else value
        return True

    def as_dict(self) -> dict[str, Any]:
        return {
            "field_key": self.field_key,
            "label": self.label,
            "widget": self.widget,
            "value": self.value,
            "placeholder": self.placeholder,
            "options": [choice.as_dict() for choice in self.options],
            "disabled": self.disabled,
            "required": self.required,
            "help_text": self.help_text,
            "column_span": self.column_span,
            "section": self.section,
            "tab": self.tab,
        }


def _text_control(item: FieldDescriptor, value: Any) -> dict[str, Any]:
    return {"widget": "input", "value": value, "placeholder": item.placeholder or f"Enter {item.label.lower()}..."}


def _number_control(item: FieldDescriptor, value: Any) -> dict[str, Any]:
    return {"widget": "number", "value": value, "placeholder": item.placeholder or "0"}


def _date_control(item: FieldDescriptor, value: Any) -> dict[str, Any]:
    return {"widget": "date", "value": value, "placeholder": item.placeholder or ""}


def _textarea_control(item: FieldDescriptor, value: Any) -> dict[str, Any]:
    return {"widget": "textarea", "value": value, "placeholder": item.placeholder or f"Enter {item.label.lower()}..."}


def _toggle_control(item: FieldDescriptor, value: Any) -> dict[str, Any]:
    return {"widget": "switch", "value": bool(value), "placeholder": ""}


def _dropdown_control(item: FieldDescriptor, value: Any) -> dict[str, Any]:
    return {
        "widget": "select",
        "value": value,
        "placeholder": item.placeholder or "Select...",
        "options": item.options.choices,
    }


def _lookup_control(item: FieldDescriptor, value: Any) -> dict[str, Any]:
    # No cross-entity search yet: lookups are plain text inputs.
    return {"widget": "input", "value": value, "placeholder": item.placeholder or "Search..."}


def _fallback_control(item: FieldDescriptor, value: Any) -> dict[str, Any]:
    return {"widget": "input", "value": value, "placeholder": item.placeholder or ""}


CONTROL_BUILDERS: dict[FieldType, Callable[[FieldDescriptor, Any], dict[str, Any]]] = {
    FieldType.TEXT: _text_control,
    FieldType.NUMBER: _number_control,
    FieldType.DATE: _date_control,
    FieldType.TEXTAREA: _textarea_control,
    FieldType.TOGGLE: _toggle_control,
    FieldType.DROPDOWN: _dropdown_control,
    FieldType.LOOKUP: _lookup_control,
}


def render_field(
    item: FieldDescriptor,
    value: Any,
    on_change: ChangeHandler | None = None,
    *,
    readonly: bool = False,
) -> Control:
    builder = CONTROL_BUILDERS.get(item.kind, _fallback_control)
    attrs = builder(item, value)
    return Control(
        field_key=item.field_key,
        label=item.label,
        required=item.is_required,
        disabled=bool(readonly or item.is_readonly),
        help_text=item.help_text,
        column_span=item.column_span,
        section=item.section,
        tab=item.tab,
        on_change=on_change,
        **attrs,
    )


def coerce_default(item: FieldDescriptor) -> Any:
    """Initial slot value derived from ``default_value`` for the field's type."""
    raw = item.default_value
    kind = item.kind
    if kind is FieldType.TOGGLE:
        return str(raw or "").strip().lower() in TRUE_STRINGS
    if raw is None:
        return ""
    text = str(raw)
    if kind is FieldType.NUMBER:
        cleaned = text.strip()
        if not _NUMBER_RE.fullmatch(cleaned):
            return ""
        cleaned = cleaned.replace(",", ".")
        return float(cleaned) if "." in cleaned else int(cleaned)
    return text


class FormState:
    """Values of one rendered field set, one slot per ``field_key``."""

    def __init__(self, fields: Iterable[FieldDescriptor], initial: Mapping[str, Any] | None = None):
        self.fields = tuple(fields)
        seed = dict(initial or {})
        self.values: dict[str, Any] = {}
        for item in self.fields:
            if item.field_key in self.values:
                continue
            existing = seed.get(item.field_key)
            self.values[item.field_key] = existing if existing is not None else coerce_default(item)

    def bind(self, field_key: str) -> ChangeHandler:
        if field_key not in self.values:
            raise KeyError(field_key)

        def _on_change(value: Any) -> None:
            self.values[field_key] = value

        return _on_change

    def snapshot(self) -> dict[str, Any]:
        return dict(self.values)

    def render(self, *, readonly: bool = False) -> list[Control]:
        return [
            render_field(item, self.values.get(item.field_key), self.bind(item.field_key), readonly=readonly)
            for item in self.fields
        ]
