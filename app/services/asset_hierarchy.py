from __future__ import annotations

import uuid
from typing import Any, Callable, Iterable

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.asset import Asset, HIERARCHY_LEVELS

_LEVEL_RANK = {level: index for index, level in enumerate(HIERARCHY_LEVELS)}


def build_asset_tree(assets: Iterable[Asset], serialize: Callable[[Asset], dict[str, Any]]) -> list[dict[str, Any]]:
    """Nest assets under their parents; unknown parents make an asset a root.

    Nodes are ordered by hierarchy level, then name.
    """
    ordered = sorted(assets, key=lambda row: (_LEVEL_RANK.get(row.hierarchy_level, len(_LEVEL_RANK)), row.name or ""))
    nodes: dict[uuid.UUID, dict[str, Any]] = {}
    for row in ordered:
        node = serialize(row)
        node["children"] = []
        nodes[row.id] = node

    roots: list[dict[str, Any]] = []
    for row in ordered:
        parent = nodes.get(row.parent_id) if row.parent_id is not None else None
        if parent is not None and row.parent_id != row.id:
            parent["children"].append(nodes[row.id])
        else:
            roots.append(nodes[row.id])
    return roots


def ensure_valid_parent_or_400(db: Session, asset_id: uuid.UUID | None, parent_id: uuid.UUID | None) -> None:
    if parent_id is None:
        return
    if asset_id is not None and parent_id == asset_id:
        raise HTTPException(status_code=400, detail="An asset cannot be its own parent")

    current = db.get(Asset, parent_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Parent asset not found")

    depth = 0
    while current is not None and current.parent_id is not None:
        if asset_id is not None and current.parent_id == asset_id:
            raise HTTPException(status_code=400, detail="Parent assignment would create a cycle")
        depth += 1
        if depth > settings.ASSET_TREE_MAX_DEPTH:
            raise HTTPException(status_code=400, detail="Asset hierarchy is too deep")
        current = db.get(Asset, current.parent_id)
