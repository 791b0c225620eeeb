# joinery/crud/task.py

from __future__ import annotations
from typing import Optional, Sequence

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from joinery.db.models.task import ProjectTask
from joinery.schemas.task import TaskUpdate


async def list_tasks(db: AsyncSession, project_id: str) -> Sequence[ProjectTask]:
    q = (
        sa.select(ProjectTask)
        .where(ProjectTask.project_id == project_id)
        .order_by(ProjectTask.created_at.desc())
    )
    res = await db.execute(q)
    return res.scalars().all()


async def create_task(db: AsyncSession, *, project_id: str, task_description: str) -> ProjectTask:
    obj = ProjectTask(project_id=project_id, task_description=task_description, is_completed=False)
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


async def update_task(db: AsyncSession, task_id: str, data: TaskUpdate) -> Optional[ProjectTask]:
    obj = await db.get(ProjectTask, task_id)
    if not obj:
        return None
    for k, v in data.model_dump(exclude_unset=True).items():
        setattr(obj, k, v)
    await db.commit()
    await db.refresh(obj)
    return obj


async def toggle_task(db: AsyncSession, task_id: str) -> Optional[ProjectTask]:
    obj = await db.get(ProjectTask, task_id)
    if not obj:
        return None
    obj.is_completed = not obj.is_completed
    await db.commit()
    await db.refresh(obj)
    return obj


async def delete_task(db: AsyncSession, task_id: str) -> bool:
    obj = await db.get(ProjectTask, task_id)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    return True
