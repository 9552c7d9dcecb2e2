from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .descriptors import FieldDescriptor, FieldOrigin, FieldSet

_LOG = logging.getLogger("app.forms")

STAGE_BY_ORIGIN = {
    FieldOrigin.CORE: "core-fields",
    FieldOrigin.CUSTOM: "form-fill",
}


def is_user_facing(item: FieldDescriptor) -> bool:
    return bool(item.is_visible) and not item.is_system_field


def order_fields(fields: Iterable[FieldDescriptor]) -> list[FieldDescriptor]:
    # sorted() is stable, equal sort_order keeps the stored sequence.
    return sorted(fields, key=lambda item: item.sort_order)


def visible_fields(fields: Iterable[FieldDescriptor]) -> list[FieldDescriptor]:
    return [item for item in order_fields(fields) if is_user_facing(item)]


def layout_rows(fields: Iterable[FieldDescriptor], columns: int = 2) -> list[list[FieldDescriptor]]:
    """Place fields on a grid in order; a field never wraps across rows."""
    rows: list[list[FieldDescriptor]] = []
    current: list[FieldDescriptor] = []
    used = 0
    for item in fields:
        span = min(max(int(item.column_span or 1), 1), columns)
        if current and used + span > columns:
            rows.append(current)
            current, used = [], 0
        current.append(item)
        used += span
        if used >= columns:
            rows.append(current)
            current, used = [], 0
    if current:
        rows.append(current)
    return rows


@dataclass(frozen=True)
class Stage:
    name: str
    origin: FieldOrigin
    fields: tuple[FieldDescriptor, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.fields

    @property
    def keys(self) -> list[str]:
        return [item.field_key for item in self.fields]

    @property
    def rows(self) -> list[list[FieldDescriptor]]:
        return layout_rows(self.fields)


def build_stage(field_set: FieldSet | None, origin: FieldOrigin) -> Stage:
    fields = visible_fields(field_set or ())
    kept: list[FieldDescriptor] = []
    seen: set[str] = set()
    for item in fields:
        if item.field_key in seen:
            _LOG.warning("duplicate field key %r dropped from %s stage", item.field_key, origin.value)
            continue
        seen.add(item.field_key)
        kept.append(item)
    return Stage(name=STAGE_BY_ORIGIN[origin], origin=origin, fields=tuple(kept))


@dataclass(frozen=True)
class Composition:
    core: Stage
    custom: Stage
    conflicts: list[str] = field(default_factory=list)

    @property
    def stages(self) -> list[Stage]:
        return [stage for stage in (self.core, self.custom) if not stage.is_empty]

    @property
    def field_count(self) -> int:
        return len(self.core.fields) + len(self.custom.fields)


def compose_stages(core: FieldSet | None, custom: FieldSet | None = None) -> Composition:
    """Core and custom fields as two sequential stages.

    A custom field reusing a core ``field_key`` is a configuration error; it is
    left out of the custom stage and reported in ``conflicts``.
    """
    core_set = core or FieldSet(origin=FieldOrigin.CORE)
    custom_set = custom or FieldSet(origin=FieldOrigin.CUSTOM)
    conflicts = list(dict.fromkeys(core_set.duplicate_keys() + custom_set.duplicate_keys()))

    shared = core_set.shared_keys(custom_set)
    if shared:
        _LOG.warning("custom fields reuse core field keys: %s", ", ".join(shared))
        custom_set = custom_set.without_keys(shared)
        conflicts.extend(key for key in shared if key not in conflicts)

    return Composition(
        core=build_stage(core_set, FieldOrigin.CORE),
        custom=build_stage(custom_set, FieldOrigin.CUSTOM),
        conflicts=conflicts,
    )
