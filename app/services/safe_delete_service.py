"""
HRMS - Safe Delete Service

Moves a record and the rows that depend on it into the recycle bin instead
of destroying them.

A safe delete:
1. Refuses (DeletionBlockedException, 422) while live records outside the
   cascade still reference the target, e.g. payroll lines for an employee.
2. Otherwise, in one transaction, snapshots every dependent row (in the
   configured order) and then the root into deleted_models, deletes the
   dependents and the root, and writes a DeletionManifest plus an
   activity log entry.

Restoring a manifest re-inserts the root first and then the dependents in
reverse order, with their original primary keys.
"""

import logging
import secrets
import string
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from sqlalchemy import Date, DateTime, Numeric, delete, func, insert, inspect, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_log import ActivityLog
from app.models.base import BaseModel
from app.models.employee import (
    Employee,
    EmployeeBeneficiary,
    EmployeeChild,
    EmployeeEducation,
    EmployeeLanguage,
)
from app.models.employment import Employment, Payroll
from app.models.funding_allocation import EmployeeFundingAllocation
from app.models.leave import LeaveBalance
from app.models.organization_structure import Department, Position
from app.models.recycle_bin import DeletedModel, DeletionManifest
from app.services.cache_service import CacheService
from app.services.context import RequestContext
from app.utils.error_handling import (
    ConflictException,
    DeletionBlockedException,
    NotFoundException,
)

logger = logging.getLogger(__name__)

SNAPSHOT_KEY_LENGTH = 40
_KEY_ALPHABET = string.ascii_letters + string.digits


BlockerCheck = Callable[[AsyncSession, Any], Awaitable[List[str]]]


@dataclass
class CascadeConfig:
    """How one root model is safely deleted."""
    model: Type[BaseModel]
    resource_name: str                       # event / message name, e.g. "employee"
    stats_name: str                          # statistics cache entry to invalidate
    children: List[Tuple[Type[BaseModel], str]] = field(default_factory=list)
    blockers: Optional[BlockerCheck] = None


# ===========================================
# BLOCKER CHECKS
# ===========================================

async def _employee_blockers(db: AsyncSession, employee: Employee) -> List[str]:
    blockers = []
    payroll_count = (await db.execute(
        select(func.count(Payroll.id)).where(Payroll.employee_id == employee.id)
    )).scalar() or 0
    if payroll_count:
        blockers.append(f"Employee has {payroll_count} payroll record(s)")
    return blockers


async def _department_blockers(db: AsyncSession, department: Department) -> List[str]:
    blockers = []
    employment_count = (await db.execute(
        select(func.count(Employment.id)).where(Employment.department_id == department.id)
    )).scalar() or 0
    if employment_count:
        blockers.append(f"{employment_count} employment record(s) reference this department")

    position_ids = select(Position.id).where(Position.department_id == department.id)
    position_employment_count = (await db.execute(
        select(func.count(Employment.id)).where(Employment.position_id.in_(position_ids))
    )).scalar() or 0
    if position_employment_count:
        blockers.append(
            f"{position_employment_count} employment record(s) reference positions in this department"
        )
    return blockers


CASCADES: Dict[Type[BaseModel], CascadeConfig] = {
    Employee: CascadeConfig(
        model=Employee,
        resource_name="employee",
        stats_name=CacheService.STATS_EMPLOYEES,
        children=[
            # Funding allocations reference employments: they go first
            (EmployeeFundingAllocation, "employee_id"),
            (Employment, "employee_id"),
            (LeaveBalance, "employee_id"),
            (EmployeeBeneficiary, "employee_id"),
            (EmployeeChild, "employee_id"),
            (EmployeeEducation, "employee_id"),
            (EmployeeLanguage, "employee_id"),
        ],
        blockers=_employee_blockers,
    ),
    Department: CascadeConfig(
        model=Department,
        resource_name="department",
        stats_name=CacheService.STATS_DEPARTMENTS,
        children=[(Position, "department_id")],
        blockers=_department_blockers,
    ),
}

# Every table a snapshot may come from
MODEL_REGISTRY: Dict[str, Type[BaseModel]] = {}
for _config in CASCADES.values():
    MODEL_REGISTRY[_config.model.__tablename__] = _config.model
    for _child, _ in _config.children:
        MODEL_REGISTRY[_child.__tablename__] = _child


# ===========================================
# ROW SERIALIZATION
# ===========================================

def serialize_row(instance: BaseModel) -> Dict[str, Any]:
    """Column values of a mapped row as JSON-safe data."""
    data: Dict[str, Any] = {}
    for attr in inspect(type(instance)).column_attrs:
        value = getattr(instance, attr.key)
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = str(value)
        data[attr.key] = value
    return data


def deserialize_row(model: Type[BaseModel], data: Dict[str, Any]) -> Dict[str, Any]:
    """Inverse of serialize_row, typed for the model's columns."""
    values: Dict[str, Any] = {}
    for attr in inspect(model).column_attrs:
        if attr.key not in data:
            continue
        value = data[attr.key]
        column_type = attr.columns[0].type
        if value is not None:
            if isinstance(column_type, DateTime):
                value = datetime.fromisoformat(value)
            elif isinstance(column_type, Date):
                value = date.fromisoformat(value)
            elif isinstance(column_type, Numeric):
                value = Decimal(value)
        values[attr.key] = value
    return values


def _restore_sort_key(row: Dict[str, Any]) -> Tuple[int, int]:
    # Parents of self-referencing rows (positions) must exist first
    return (row.get("level") or 0, row.get("id") or 0)


def generate_snapshot_key() -> str:
    return "".join(secrets.choice(_KEY_ALPHABET) for _ in range(SNAPSHOT_KEY_LENGTH))


class SafeDeleteService:
    """Recycle-bin deletion, restore and purge."""

    def __init__(self, db: AsyncSession, context: Optional[RequestContext] = None):
        self.db = db
        self.context = context

    def get_config(self, model: Type[BaseModel]) -> CascadeConfig:
        config = CASCADES.get(model)
        if config is None:
            raise ValueError(f"{model.__name__} does not support safe delete")
        return config

    @staticmethod
    def display_name(instance: BaseModel) -> str:
        return getattr(instance, "display_name", None) or f"{type(instance).__name__} #{instance.id}"

    # =========================================================================
    # DELETE
    # =========================================================================

    async def validate_deletion(self, instance: BaseModel) -> List[str]:
        """Reasons the record cannot be deleted right now (empty if none)."""
        config = self.get_config(type(instance))
        if config.blockers is None:
            return []
        return await config.blockers(self.db, instance)

    async def delete(self, instance: BaseModel, reason: Optional[str] = None) -> DeletionManifest:
        """
        Move a record and its dependents to the recycle bin.

        Raises:
            DeletionBlockedException: live records outside the cascade
                still reference the target; nothing is changed.
        """
        config = self.get_config(type(instance))
        root_id = instance.id
        root_name = self.display_name(instance)

        blockers = await self.validate_deletion(instance)
        if blockers:
            logger.warning(f"Safe delete of {config.resource_name} {root_id} blocked: {blockers}")
            raise DeletionBlockedException(config.model.__name__, blockers)

        snapshot_keys: List[str] = []
        table_order: List[str] = []
        try:
            for child_model, fk_name in config.children:
                fk_column = getattr(child_model, fk_name)
                result = await self.db.execute(
                    select(child_model).where(fk_column == root_id).order_by(child_model.id)
                )
                rows = result.scalars().all()
                if not rows:
                    continue
                table_order.append(child_model.__tablename__)
                for row in rows:
                    snapshot_keys.append(self._snapshot(row))

            snapshot_keys.append(self._snapshot(instance))

            for child_model, fk_name in config.children:
                fk_column = getattr(child_model, fk_name)
                await self.db.execute(
                    delete(child_model)
                    .where(fk_column == root_id)
                    .execution_options(synchronize_session="fetch")
                )
            await self.db.execute(
                delete(config.model)
                .where(config.model.id == root_id)
                .execution_options(synchronize_session="fetch")
            )

            manifest = DeletionManifest(
                deletion_key=uuid.uuid4().hex,
                root_model=config.model.__tablename__,
                root_id=root_id,
                root_display_name=root_name,
                snapshot_keys=snapshot_keys,
                table_order=table_order,
                deleted_by=self.context.actor_id if self.context else None,
                deleted_by_name=self.context.actor_name if self.context else None,
                reason=reason,
            )
            self.db.add(manifest)
            self._log_activity(
                action="deleted",
                subject_type=config.model.__tablename__,
                subject_id=root_id,
                description=f"{root_name} moved to recycle bin",
                properties={
                    "deletion_key": manifest.deletion_key,
                    "snapshot_count": len(snapshot_keys),
                    "reason": reason,
                },
            )
            await self.db.commit()
            await self.db.refresh(manifest)
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info(
            f"Moved {config.resource_name} {root_id} to recycle bin "
            f"({len(snapshot_keys)} rows, key={manifest.deletion_key})"
        )
        await self._after_change(
            config,
            action="deleted",
            summary=f"{root_name} moved to recycle bin",
            entity_id=root_id,
            deletion_key=manifest.deletion_key,
            reason=reason,
        )
        return manifest

    async def bulk_delete(
        self,
        model: Type[BaseModel],
        ids: List[int],
        reason: Optional[str] = None,
    ) -> Dict[str, List[Dict[str, Any]]]:
        """
        Safe delete several records, each in its own transaction.

        Returns:
            {"succeeded": [...], "failed": [{"id", "blockers"}]}
        """
        succeeded: List[Dict[str, Any]] = []
        failed: List[Dict[str, Any]] = []

        for record_id in ids:
            instance = await self.db.get(model, record_id)
            if instance is None:
                failed.append({"id": record_id, "blockers": [f"{model.__name__} not found"]})
                continue
            try:
                manifest = await self.delete(instance, reason)
            except DeletionBlockedException as e:
                failed.append({"id": record_id, "blockers": e.blockers})
                continue
            succeeded.append({
                "id": record_id,
                "deletion_key": manifest.deletion_key,
                "display_name": manifest.root_display_name,
                "snapshot_count": manifest.snapshot_count,
            })

        return {"succeeded": succeeded, "failed": failed}

    # =========================================================================
    # RESTORE
    # =========================================================================

    async def get_manifest(self, deletion_key: str) -> DeletionManifest:
        result = await self.db.execute(
            select(DeletionManifest).where(DeletionManifest.deletion_key == deletion_key)
        )
        manifest = result.scalar_one_or_none()
        if not manifest:
            raise NotFoundException("Deletion", deletion_key, message=f"No recycle bin entry for key '{deletion_key}'")
        return manifest

    async def restore(self, deletion_key: str) -> Dict[str, Any]:
        """
        Re-insert everything a manifest snapshotted.

        Raises:
            NotFoundException: unknown key
            ConflictException: a restored row would collide with live data;
                nothing is restored
        """
        manifest = await self.get_manifest(deletion_key)
        root_model = MODEL_REGISTRY.get(manifest.root_model)
        if root_model is None:
            raise ConflictException(f"Cannot restore records of type '{manifest.root_model}'")
        config = self.get_config(root_model)

        result = await self.db.execute(
            select(DeletedModel).where(DeletedModel.key.in_(manifest.snapshot_keys))
        )
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for snapshot in result.scalars().all():
            grouped.setdefault(snapshot.model, []).append(snapshot.row_values)

        restore_order = [manifest.root_model] + list(reversed(manifest.table_order))
        restored_count = 0
        try:
            for table_name in restore_order:
                model = MODEL_REGISTRY[table_name]
                rows = sorted(
                    (deserialize_row(model, data) for data in grouped.get(table_name, [])),
                    key=_restore_sort_key,
                )
                if not rows:
                    continue
                ids = [row["id"] for row in rows]
                existing = (await self.db.execute(
                    select(func.count(model.id)).where(model.id.in_(ids))
                )).scalar() or 0
                if existing:
                    raise ConflictException(
                        f"Cannot restore: {existing} {table_name} row(s) with the same ID already exist",
                        resource_type=table_name,
                    )
                for row in rows:
                    await self.db.execute(insert(model).values(**row))
                restored_count += len(rows)

            await self.db.execute(
                delete(DeletedModel).where(DeletedModel.key.in_(manifest.snapshot_keys))
            )
            await self.db.delete(manifest)
            self._log_activity(
                action="restored",
                subject_type=manifest.root_model,
                subject_id=manifest.root_id,
                description=f"{manifest.root_display_name} restored from recycle bin",
                properties={"deletion_key": deletion_key, "restored_count": restored_count},
            )
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictException(
                "Cannot restore: restored records conflict with existing data",
                resource_type=manifest.root_model,
                details={"error": str(e.orig) if e.orig else str(e)},
            )
        except (ConflictException, SQLAlchemyError):
            await self.db.rollback()
            raise

        logger.info(f"Restored {manifest.root_model} {manifest.root_id} ({restored_count} rows)")
        await self._after_change(
            config,
            action="restored",
            summary=f"{manifest.root_display_name} restored from recycle bin",
            entity_id=manifest.root_id,
            deletion_key=deletion_key,
        )
        return {
            "deletion_key": deletion_key,
            "root_model": manifest.root_model,
            "root_id": manifest.root_id,
            "display_name": manifest.root_display_name,
            "restored_count": restored_count,
        }

    async def bulk_restore(self, deletion_keys: List[str]) -> Dict[str, List[Dict[str, Any]]]:
        succeeded: List[Dict[str, Any]] = []
        failed: List[Dict[str, Any]] = []
        for key in deletion_keys:
            try:
                succeeded.append(await self.restore(key))
            except (NotFoundException, ConflictException) as e:
                failed.append({"deletion_key": key, "error": e.message})
        return {"succeeded": succeeded, "failed": failed}

    # =========================================================================
    # PERMANENT DELETE / PURGE
    # =========================================================================

    async def permanently_delete(self, deletion_key: str) -> int:
        """Drop a manifest and its snapshots. Returns the number of snapshots removed."""
        manifest = await self.get_manifest(deletion_key)
        count = await self._purge_manifest(manifest)
        await self.db.commit()
        logger.info(f"Permanently deleted recycle bin entry {deletion_key} ({count} rows)")
        if self.context:
            await self.context.cache.invalidate_statistics(CacheService.STATS_RECYCLE_BIN)
        return count

    async def purge_expired(self, days: int = 30) -> int:
        """Permanently delete manifests older than ``days``. Returns manifests purged."""
        cutoff = datetime.utcnow() - timedelta(days=days)
        result = await self.db.execute(
            select(DeletionManifest).where(DeletionManifest.created_at < cutoff)
        )
        manifests = result.scalars().all()
        for manifest in manifests:
            await self._purge_manifest(manifest)
        await self.db.commit()
        if manifests:
            logger.info(f"Purged {len(manifests)} recycle bin entries older than {days} days")
        return len(manifests)

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _purge_manifest(self, manifest: DeletionManifest) -> int:
        count = manifest.snapshot_count
        await self.db.execute(
            delete(DeletedModel).where(DeletedModel.key.in_(manifest.snapshot_keys))
        )
        self._log_activity(
            action="permanently_deleted",
            subject_type=manifest.root_model,
            subject_id=manifest.root_id,
            description=f"{manifest.root_display_name} permanently deleted",
            properties={"deletion_key": manifest.deletion_key, "snapshot_count": count},
        )
        await self.db.delete(manifest)
        return count

    def _snapshot(self, instance: BaseModel) -> str:
        key = generate_snapshot_key()
        self.db.add(
            DeletedModel(
                key=key,
                model=type(instance).__tablename__,
                row_values=serialize_row(instance),
            )
        )
        return key

    def _log_activity(
        self,
        action: str,
        subject_type: str,
        subject_id: Optional[int],
        description: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.db.add(
            ActivityLog(
                action=action,
                subject_type=subject_type,
                subject_id=subject_id,
                description=description,
                causer_id=self.context.actor_id if self.context else None,
                causer_name=self.context.actor_name if self.context else None,
                properties=properties,
            )
        )

    async def _after_change(self, config: CascadeConfig, action: str, summary: str, entity_id: int, **payload):
        if not self.context:
            return
        await self.context.cache.invalidate_statistics(config.stats_name)
        await self.context.cache.invalidate_statistics(CacheService.STATS_RECYCLE_BIN)
        await self.context.emit(action, config.resource_name, summary, entity_id=entity_id, **payload)
