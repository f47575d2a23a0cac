"""
HRMS - Recycle Bin Models

Row snapshots taken by the safe-delete service and the manifest that ties
one deletion's snapshots together so it can be restored as a unit.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import Integer, JSON, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel

# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


class DeletedModel(BaseModel):
    """Snapshot of a single deleted row."""

    __tablename__ = "deleted_models"

    key: Mapped[str] = mapped_column(String(40), unique=True, nullable=False, index=True)
    model: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    row_values: Mapped[Dict[str, Any]] = mapped_column(JSONType, nullable=False)


class DeletionManifest(BaseModel):
    """
    Record of one safe delete. Immutable once written; removed on restore
    or permanent delete.
    """

    __tablename__ = "deletion_manifests"

    deletion_key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    root_model: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    root_id: Mapped[int] = mapped_column(Integer, nullable=False)
    root_display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    snapshot_keys: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    table_order: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    deleted_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    deleted_by_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def snapshot_count(self) -> int:
        return len(self.snapshot_keys or [])
