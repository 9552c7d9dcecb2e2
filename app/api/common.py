from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from fastapi import HTTPException


def uuid_or_400(raw: Any, what: str = "id") -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError, AttributeError):
        raise HTTPException(status_code=400, detail=f"Invalid {what}")


def optional_uuid_or_400(raw: Any, what: str = "id") -> uuid.UUID | None:
    if raw is None or str(raw).strip() == "":
        return None
    return uuid_or_400(raw, what)


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def str_id(value: uuid.UUID | None) -> str | None:
    return str(value) if value else None
