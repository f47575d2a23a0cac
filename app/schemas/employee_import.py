"""
HRMS - Employee Import Schemas
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class ImportResult(BaseModel):
    """Outcome of an inline import."""
    import_id: str
    total_rows: int
    processed: int
    skipped: int
    errors: List[str] = []
    warnings: List[str] = []

    class Config:
        from_attributes = True


class ImportQueued(BaseModel):
    import_id: str
    status: str
    total_rows: int


class ImportStatusResponse(BaseModel):
    import_id: str
    status: str
    file_name: Optional[str] = None
    total_rows: int
    processed: int
    skipped: int
    errors: List[str] = []
    warnings: List[str] = []
    created_by: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    class Config:
        from_attributes = True
