"""
HRMS - Celery Tasks

Background tasks: queued employee imports and the daily recycle bin purge.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from celery import shared_task

from app.config import settings
from app.database import async_session_factory
from app.services.cache_service import CacheService
from app.services.context import RequestContext
from app.services.notification_service import create_event_dispatcher

logger = logging.getLogger(__name__)


def run_async(coro):
    """Helper to run async functions in Celery tasks."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _worker_context(db, cache: CacheService, actor_name: str, actor_id: Optional[int]) -> RequestContext:
    return RequestContext(
        actor_id=actor_id,
        actor_name=actor_name,
        cache=cache,
        events=create_event_dispatcher(db),
    )


# ===========================================
# IMPORT TASKS
# ===========================================

@shared_task(name='app.tasks.celery_tasks.import_employees_task')
def import_employees_task(
    import_id: str,
    file_path: str,
    actor_name: str,
    actor_id: Optional[int] = None,
) -> Dict[str, Any]:
    """Run a queued employee spreadsheet import."""
    return run_async(_import_employees(import_id, file_path, actor_name, actor_id))


async def _import_employees(
    import_id: str,
    file_path: str,
    actor_name: str,
    actor_id: Optional[int],
) -> Dict[str, Any]:
    from app.services.employee_import_service import EmployeeImportService
    from app.services.employee_spreadsheet import read_rows
    from app.services.file_storage_service import FileStorageService
    from app.utils.error_handling import AppException

    storage = FileStorageService()
    # Redis clients are bound to the event loop they were created on
    cache = CacheService()
    try:
        async with async_session_factory() as db:
            service = EmployeeImportService(db, _worker_context(db, cache, actor_name, actor_id))
            try:
                rows = read_rows(await storage.read(file_path), Path(file_path).suffix)
            except (AppException, FileNotFoundError) as e:
                message = e.message if isinstance(e, AppException) else str(e)
                import_status = await service.mark_failed(import_id, message)
                return {"import_id": import_id, "status": import_status.status}

            # run_import records its own failure before re-raising
            import_status = await service.run_import(import_id, rows)

            logger.info(f"Background import {import_id} finished with status {import_status.status}")
            return {
                "import_id": import_id,
                "status": import_status.status,
                "processed": import_status.processed,
                "skipped": import_status.skipped,
            }
    finally:
        storage.delete(file_path)
        await cache.close()


# ===========================================
# RECYCLE BIN TASKS
# ===========================================

@shared_task(name='app.tasks.celery_tasks.purge_recycle_bin_task')
def purge_recycle_bin_task() -> Dict[str, Any]:
    """Permanently delete recycle bin entries past the retention period."""
    return run_async(_purge_recycle_bin())


async def _purge_recycle_bin() -> Dict[str, Any]:
    from app.services.safe_delete_service import SafeDeleteService

    days = settings.recycle_bin_retention_days
    async with async_session_factory() as db:
        purged = await SafeDeleteService(db).purge_expired(days)

    if purged:
        cache = CacheService()
        try:
            await cache.invalidate_statistics(CacheService.STATS_RECYCLE_BIN)
        finally:
            await cache.close()
    logger.info(f"Recycle bin purge removed {purged} entries older than {days} days")
    return {"purged": purged, "retention_days": days}
