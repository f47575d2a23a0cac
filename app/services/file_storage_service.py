"""
HRMS - File Storage Service

Local storage for uploaded import files that are handed to the Celery
worker. Files live under ``{storage_local_path}/{category}/`` and are
removed once the worker has processed them.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import aiofiles

from app.config import settings

logger = logging.getLogger(__name__)


IMPORTS_CATEGORY = "imports"


class FileStorageService:
    """Local file storage."""

    def __init__(self, base_path: Optional[str] = None):
        self.local_storage_path = Path(base_path or settings.storage_local_path)

    def _generate_name(self, original_filename: str) -> str:
        """
        Unique file name keeping the original name readable.

        Format: YYYYMMDD_HHMMSS_unique_id_filename
        """
        now = datetime.utcnow()
        file_id = uuid.uuid4().hex[:12]
        safe_filename = "".join(
            c if c.isalnum() or c in ".-_" else "_"
            for c in original_filename
        )
        return f"{now:%Y%m%d_%H%M%S}_{file_id}_{safe_filename}"

    async def save(self, content: bytes, filename: str, category: str = IMPORTS_CATEGORY) -> Path:
        """Write the file and return its path."""
        file_path = self.local_storage_path / category / self._generate_name(filename)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(file_path, "wb") as f:
            await f.write(content)
        logger.info(f"Stored {len(content)} bytes at {file_path}")
        return file_path

    async def read(self, path: str) -> bytes:
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        async with aiofiles.open(file_path, "rb") as f:
            return await f.read()

    def delete(self, path: str) -> bool:
        file_path = Path(path)
        if file_path.exists():
            file_path.unlink()
            return True
        return False
