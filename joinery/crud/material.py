# joinery/crud/material.py

from __future__ import annotations
from typing import Any, Optional, Sequence

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from joinery.db.models.material import Material
from joinery.schemas.material import MaterialCreate, MaterialUpdate


async def list_materials(db: AsyncSession, project_id: str) -> Sequence[Material]:
    q = (
        sa.select(Material)
        .where(Material.project_id == project_id)
        .order_by(Material.created_at.desc())
    )
    res = await db.execute(q)
    return res.scalars().all()


async def create_material(db: AsyncSession, *, project_id: str, data: MaterialCreate) -> Material:
    obj = Material(project_id=project_id, **data.model_dump())
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


async def update_material(db: AsyncSession, material_id: str, data: MaterialUpdate) -> Optional[Material]:
    obj = await db.get(Material, material_id)
    if not obj:
        return None
    for k, v in data.model_dump(exclude_unset=True).items():
        setattr(obj, k, v)
    await db.commit()
    await db.refresh(obj)
    return obj


async def update_materials_by_name(
    db: AsyncSession,
    material_name: str,
    changes: dict[str, Any],
    *,
    project_id: Optional[str] = None,
) -> int:
    """
    Apply a partial update to every material whose name contains
    material_name (case-insensitive), optionally scoped to one project.
    Returns the number of rows matched.
    """
    if not changes:
        return 0
    q = sa.select(Material).where(Material.material_name.icontains(material_name, autoescape=True))
    if project_id is not None:
        q = q.where(Material.project_id == project_id)
    rows = (await db.execute(q)).scalars().all()
    for row in rows:
        for k, v in changes.items():
            setattr(row, k, v)
    await db.commit()
    return len(rows)


async def delete_material(db: AsyncSession, material_id: str) -> bool:
    obj = await db.get(Material, material_id)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    return True
