# joinery/crud/joinery_item.py

from __future__ import annotations
from typing import Optional, Sequence

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from joinery.db.models.joinery_item import CHECKLIST_STEPS, JoineryItem
from joinery.schemas.joinery_item import JoineryItemCreate, JoineryItemUpdate


async def list_joinery_items(db: AsyncSession, project_id: str) -> Sequence[JoineryItem]:
    q = (
        sa.select(JoineryItem)
        .where(JoineryItem.project_id == project_id)
        .order_by(JoineryItem.created_at.desc())
    )
    res = await db.execute(q)
    return res.scalars().all()


async def create_joinery_item(db: AsyncSession, *, project_id: str, data: JoineryItemCreate) -> JoineryItem:
    # checklist flags all start unticked (column defaults)
    obj = JoineryItem(project_id=project_id, **data.model_dump())
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


async def update_joinery_item(db: AsyncSession, item_id: str, data: JoineryItemUpdate) -> Optional[JoineryItem]:
    obj = await db.get(JoineryItem, item_id)
    if not obj:
        return None
    for k, v in data.model_dump(exclude_unset=True).items():
        setattr(obj, k, v)
    await db.commit()
    await db.refresh(obj)
    return obj


async def set_checklist_step(db: AsyncSession, item_id: str, step: str, completed: bool) -> Optional[JoineryItem]:
    if step not in CHECKLIST_STEPS:
        raise ValueError(f"Unknown checklist step: {step}")
    obj = await db.get(JoineryItem, item_id)
    if not obj:
        return None
    setattr(obj, step, completed)
    await db.commit()
    await db.refresh(obj)
    return obj


async def delete_joinery_item(db: AsyncSession, item_id: str) -> bool:
    obj = await db.get(JoineryItem, item_id)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    return True
