# joinery/crud/project.py

from __future__ import annotations
from typing import Any, Optional, Sequence

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

import joinery.db.base  # noqa: F401  registers every mapper before the first query
from joinery.db.models.project import Project
from joinery.schemas.project import ProjectCreate, ProjectUpdate


async def get_project(db: AsyncSession, project_id: str) -> Optional[Project]:
    return await db.get(Project, project_id)


async def get_project_by_number(db: AsyncSession, project_number: str) -> Optional[Project]:
    stmt = sa.select(Project).where(Project.project_number == project_number)
    res = await db.execute(stmt)
    return res.scalar_one_or_none()


async def find_projects(
    db: AsyncSession,
    *,
    project_number: Optional[str] = None,
    project_name: Optional[str] = None,
    client: Optional[str] = None,
    status: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Sequence[Project]:
    """
    Select projects, newest first.
    project_number is an exact match; project_name and client are
    case-insensitive substring matches.
    """
    q = sa.select(Project)
    if project_number is not None:
        q = q.where(Project.project_number == project_number)
    if project_name is not None:
        q = q.where(Project.project_name.icontains(project_name, autoescape=True))
    if client is not None:
        q = q.where(Project.client.icontains(client, autoescape=True))
    if status is not None:
        q = q.where(Project.project_status == status)
    q = q.order_by(Project.created_at.desc(), Project.project_number.desc()).offset(offset)
    if limit is not None:
        q = q.limit(limit)
    res = await db.execute(q)
    return res.scalars().all()


async def create_project(db: AsyncSession, data: ProjectCreate | dict[str, Any]) -> Project:
    """Insert a project. Raises IntegrityError when project_number is taken."""
    values = data.model_dump() if isinstance(data, ProjectCreate) else dict(data)
    obj = Project(**values)
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise
    await db.refresh(obj)
    return obj


async def update_project(db: AsyncSession, project_id: str, data: ProjectUpdate) -> Optional[Project]:
    obj = await db.get(Project, project_id)
    if not obj:
        return None

    changes = data.model_dump(exclude_unset=True)
    for k, v in changes.items():
        setattr(obj, k, v)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise
    await db.refresh(obj)
    return obj


async def upsert_project(db: AsyncSession, data: ProjectCreate) -> tuple[Project, bool]:
    """Insert or update by project_number. Returns (project, created)."""
    existing = await get_project_by_number(db, data.project_number)
    if existing is None:
        return await create_project(db, data), True

    for k, v in data.model_dump(exclude={"project_number"}).items():
        setattr(existing, k, v)
    await db.commit()
    await db.refresh(existing)
    return existing, False


async def delete_project(db: AsyncSession, project_id: str) -> bool:
    obj = await db.get(Project, project_id)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    return True
