"""
HRMS - Import Status Model

Progress/result record for employee spreadsheet imports, keyed by the
import id handed back to the client for polling.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel
from app.models.recycle_bin import JSONType


class ImportState(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportStatus(BaseModel):
    __tablename__ = "import_statuses"

    import_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default=ImportState.QUEUED.value, nullable=False)
    file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    total_rows: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    processed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    skipped: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    errors: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    warnings: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    created_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    finished_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
