# joinery/api/routes/joinery_items.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from joinery.crud.joinery_item import (
    create_joinery_item, delete_joinery_item, list_joinery_items, set_checklist_step, update_joinery_item
)
from joinery.crud.project import get_project
from joinery.db.models.joinery_item import CHECKLIST_STEPS
from joinery.db.session import get_session
from joinery.schemas.joinery_item import (
    ChecklistStepUpdate, JoineryItemCreate, JoineryItemOut, JoineryItemUpdate
)

router = APIRouter(tags=["joinery-items"])

@router.get("/projects/{project_id}/joinery-items", response_model=list[JoineryItemOut])
async def list_items_ep(project_id: str, db: AsyncSession = Depends(get_session)):
    if not await get_project(db, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return await list_joinery_items(db, project_id)

@router.post("/projects/{project_id}/joinery-items", response_model=JoineryItemOut,
             status_code=status.HTTP_201_CREATED)
async def create_item_ep(project_id: str, payload: JoineryItemCreate, db: AsyncSession = Depends(get_session)):
    if not await get_project(db, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return await create_joinery_item(db, project_id=project_id, data=payload)

@router.patch("/joinery-items/{item_id}", response_model=JoineryItemOut)
async def update_item_ep(item_id: str, payload: JoineryItemUpdate, db: AsyncSession = Depends(get_session)):
    obj = await update_joinery_item(db, item_id, payload)
    if not obj:
        raise HTTPException(status_code=404, detail="Joinery item not found")
    return obj

@router.put("/joinery-items/{item_id}/checklist/{step}", response_model=JoineryItemOut)
async def set_checklist_step_ep(item_id: str, step: str, payload: ChecklistStepUpdate,
                                db: AsyncSession = Depends(get_session)):
    if step not in CHECKLIST_STEPS:
        raise HTTPException(status_code=404, detail=f"Unknown checklist step: {step}")
    obj = await set_checklist_step(db, item_id, step, payload.completed)
    if not obj:
        raise HTTPException(status_code=404, detail="Joinery item not found")
    return obj

@router.delete("/joinery-items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item_ep(item_id: str, db: AsyncSession = Depends(get_session)):
    if not await delete_joinery_item(db, item_id):
        raise HTTPException(status_code=404, detail="Joinery item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
