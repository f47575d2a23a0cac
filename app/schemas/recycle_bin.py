"""
HRMS - Recycle Bin Schemas
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class DeletionResult(BaseModel):
    """Outcome of a single safe delete."""
    id: int
    deletion_key: str
    display_name: Optional[str] = None
    snapshot_count: int


class DeletionFailure(BaseModel):
    id: int
    blockers: List[str]


class BatchDeleteResult(BaseModel):
    succeeded: List[DeletionResult]
    failed: List[DeletionFailure]


class SafeDeleteResponse(BaseModel):
    """Body returned by single-record safe delete endpoints."""
    success: bool = True
    message: str
    deletion_key: str
    deleted_records_count: int


class DeletionManifestResponse(BaseModel):
    id: int
    deletion_key: str
    root_model: str
    root_id: int
    root_display_name: Optional[str] = None
    snapshot_count: int
    table_order: List[str] = []
    deleted_by: Optional[int] = None
    deleted_by_name: Optional[str] = None
    reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RecycleBinStats(BaseModel):
    total: int
    by_model: Dict[str, int]
    oldest: Optional[datetime] = None
    newest: Optional[datetime] = None


class RestoreRequest(BaseModel):
    deletion_key: str = Field(..., min_length=1, max_length=64)


class BulkRestoreRequest(BaseModel):
    deletion_keys: List[str] = Field(..., min_length=1)


class RestoreResult(BaseModel):
    deletion_key: str
    root_model: str
    root_id: int
    display_name: Optional[str] = None
    restored_count: int


class RestoreFailure(BaseModel):
    deletion_key: str
    error: str


class BulkRestoreResult(BaseModel):
    succeeded: List[RestoreResult]
    failed: List[RestoreFailure]
