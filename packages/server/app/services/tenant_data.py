"""
Tenant-scoped CRUD helpers.

Every read and write here takes the organization id explicitly and filters
on it; callers get that id from ``RequestContext``, never from a request body.
A row belonging to another organization is reported as not found.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Optional, Sequence, Type, TypeVar

import structlog
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from app.core.errors import NotFound

log = structlog.get_logger()

T = TypeVar("T", bound=SQLModel)


def _plain(values: dict[str, Any]) -> dict[str, Any]:
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in values.items()}


async def get_scoped(
    session: AsyncSession,
    model: Type[T],
    entity_id: uuid.UUID,
    org_id: uuid.UUID,
    *,
    label: Optional[str] = None,
) -> T:
    result = await session.execute(
        select(model).where(model.id == entity_id, model.organization_id == org_id)
    )
    obj = result.scalar_one_or_none()
    if obj is None:
        raise NotFound(f"{label or model.__name__} not found")
    return obj


async def list_scoped(
    session: AsyncSession,
    model: Type[T],
    org_id: uuid.UUID,
    *filters: Any,
    order_by: Optional[Sequence[Any]] = None,
) -> list[T]:
    stmt = select(model).where(model.organization_id == org_id, *filters)
    if order_by is not None:
        stmt = stmt.order_by(*order_by)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_scoped(
    session: AsyncSession,
    model: Type[T],
    data: BaseModel,
    org_id: uuid.UUID,
    **extra: Any,
) -> T:
    """Insert a row stamped with ``org_id``. Any organization in ``data`` is ignored."""
    values = _plain(data.model_dump(exclude={"organization_id"}))
    values.update(extra)
    obj = model(**values, organization_id=org_id)
    session.add(obj)
    await session.flush()
    log.info("tenant_data.created", model=model.__tablename__, id=str(obj.id), org_id=str(org_id))
    return obj


async def update_scoped(session: AsyncSession, obj: T, patch: BaseModel) -> T:
    """Apply the fields set on ``patch``. The organization of a row never changes."""
    changes = _plain(patch.model_dump(exclude_unset=True, exclude={"organization_id"}))
    for field, value in changes.items():
        setattr(obj, field, value)
    session.add(obj)
    await session.flush()
    return obj


async def delete_scoped(
    session: AsyncSession,
    model: Type[T],
    entity_id: uuid.UUID,
    org_id: uuid.UUID,
    *,
    label: Optional[str] = None,
) -> None:
    obj = await get_scoped(session, model, entity_id, org_id, label=label)
    await session.delete(obj)
    await session.flush()
    log.info("tenant_data.deleted", model=model.__tablename__, id=str(entity_id), org_id=str(org_id))
