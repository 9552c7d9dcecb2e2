import uuid

from sqlalchemy import JSON, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin

HIERARCHY_LEVELS = ("Enterprise", "Site", "Area", "System", "Unit", "Subunit", "Component", "Part", "Sensor")
ASSET_STATUSES = ("Active", "Maintenance", "Inactive")
CRITICALITY_LEVELS = ("High", "Medium", "Low")

class Asset(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "assets"
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    asset_type_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    form_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    hierarchy_level: Mapped[str] = mapped_column(String(20), default="Unit", nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="Active", nullable=False)
    criticality: Mapped[str] = mapped_column(String(10), default="Medium", nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    data: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
