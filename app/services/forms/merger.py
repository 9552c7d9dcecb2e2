from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

_LOG = logging.getLogger("app.forms")


@dataclass(frozen=True)
class MergeCollision:
    key: str
    previous: Any
    current: Any


@dataclass
class MergeResult:
    values: dict[str, Any] = field(default_factory=dict)
    collisions: list[MergeCollision] = field(default_factory=list)

    @property
    def has_collisions(self) -> bool:
        return bool(self.collisions)


def merge_stage_values(*stages: Mapping[str, Any] | None) -> MergeResult:
    """Flatten stage values in order, later stages winning on shared keys.

    Core and custom keys never overlap in a valid configuration, so every
    override is recorded as a collision and logged.
    """
    result = MergeResult()
    for stage in stages:
        if not stage:
            continue
        for key, value in stage.items():
            if key in result.values:
                result.collisions.append(MergeCollision(key=key, previous=result.values[key], current=value))
            result.values[key] = value
    if result.collisions:
        _LOG.warning(
            "stage values collided on keys: %s",
            ", ".join(sorted({item.key for item in result.collisions})),
        )
    return result
