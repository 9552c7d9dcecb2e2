from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Iterator

from .errors import DuplicateFieldKeyError, InvalidFieldKeyError
from .options import NO_OPTIONS, OptionSet, normalize_options

FIELD_KEY_RE = re.compile(r"^[a-z][a-z0-9_]*$")
FIELD_KEY_MAX_LENGTH = 50


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DROPDOWN = "dropdown"
    LOOKUP = "lookup"
    TOGGLE = "toggle"
    TEXTAREA = "textarea"


FIELD_TYPE_VALUES = frozenset(item.value for item in FieldType)


def resolve_field_type(raw: Any) -> FieldType | None:
    """Known field type for ``raw`` or ``None``; callers fall back to text."""
    if isinstance(raw, FieldType):
        return raw
    value = str(raw or "").strip().lower()
    if value in FIELD_TYPE_VALUES:
        return FieldType(value)
    return None


class FieldOrigin(str, Enum):
    CORE = "core"
    CUSTOM = "custom"


def validate_field_key(key: str, *, max_length: int = FIELD_KEY_MAX_LENGTH) -> str:
    value = str(key or "").strip()
    if not value:
        raise InvalidFieldKeyError(value, "must not be empty")
    if len(value) > max_length:
        raise InvalidFieldKeyError(value, f"must be at most {max_length} characters")
    if not FIELD_KEY_RE.fullmatch(value):
        raise InvalidFieldKeyError(
            value,
            "must start with a lowercase letter and contain only lowercase letters, numbers and underscores",
        )
    return value


@dataclass(frozen=True)
class FieldDescriptor:
    field_key: str
    label: str
    field_type: str = FieldType.TEXT.value
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    is_required: bool = False
    is_readonly: bool = False
    is_visible: bool = True
    is_system_field: bool = False
    default_value: str | None = None
    help_text: str | None = None
    placeholder: str | None = None
    options: OptionSet = NO_OPTIONS
    sort_order: int = 0
    column_span: int = 1
    section: str | None = None
    tab: str | None = None

    @property
    def kind(self) -> FieldType | None:
        return resolve_field_type(self.field_type)

    @classmethod
    def from_source(cls, source: Any, **overrides: Any) -> "FieldDescriptor":
        """Build a descriptor from a stored row (ORM object) or a plain mapping."""
        if isinstance(source, dict):
            get = source.get
        else:
            def get(name, default=None):
                return getattr(source, name, default)

        span = get("column_span")
        values = {
            "id": str(get("id") or uuid.uuid4()),
            "field_key": str(get("field_key") or "").strip(),
            "label": str(get("label") or "").strip(),
            "field_type": str(get("field_type") or FieldType.TEXT.value).strip(),
            "is_required": bool(get("is_required", False)),
            "is_readonly": bool(get("is_readonly", False)),
            "is_visible": bool(get("is_visible", True)),
            "is_system_field": bool(get("is_system_field", False)),
            "default_value": get("default_value"),
            "help_text": get("help_text"),
            "placeholder": get("placeholder"),
            "options": normalize_options(get("options")),
            "sort_order": int(get("sort_order") or 0),
            "column_span": 2 if span == 2 else 1,
            "section": get("section"),
            "tab": get("tab"),
        }
        values.update(overrides)
        values["options"] = normalize_options(values["options"])
        return cls(**values)

    def with_changes(self, **changes: Any) -> "FieldDescriptor":
        return replace(self, **changes)


@dataclass(frozen=True)
class FieldSet:
    origin: FieldOrigin
    fields: tuple[FieldDescriptor, ...] = ()

    @classmethod
    def of(cls, origin: FieldOrigin | str, sources: Iterable[Any] | None) -> "FieldSet":
        descriptors = tuple(
            item if isinstance(item, FieldDescriptor) else FieldDescriptor.from_source(item)
            for item in (sources or ())
        )
        return cls(origin=FieldOrigin(origin), fields=descriptors)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __bool__(self) -> bool:
        return bool(self.fields)

    def keys(self) -> list[str]:
        return [item.field_key for item in self.fields]

    def get(self, field_key: str) -> FieldDescriptor | None:
        for item in self.fields:
            if item.field_key == field_key:
                return item
        return None

    def duplicate_keys(self) -> list[str]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for key in self.keys():
            if key in seen and key not in duplicates:
                duplicates.append(key)
            seen.add(key)
        return duplicates

    def shared_keys(self, other: "FieldSet") -> list[str]:
        other_keys = set(other.keys())
        return [key for key in dict.fromkeys(self.keys()) if key in other_keys]

    def union(self, other: "FieldSet") -> tuple[FieldDescriptor, ...]:
        """Concatenate two sets, failing when any ``field_key`` repeats."""
        duplicates = self.duplicate_keys() + other.duplicate_keys() + self.shared_keys(other)
        if duplicates:
            raise DuplicateFieldKeyError(duplicates)
        return self.fields + other.fields

    def without_keys(self, keys: Iterable[str]) -> "FieldSet":
        excluded = set(keys)
        return FieldSet(origin=self.origin, fields=tuple(f for f in self.fields if f.field_key not in excluded))
