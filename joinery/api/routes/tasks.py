# joinery/api/routes/tasks.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from joinery.crud.project import get_project
from joinery.crud.task import create_task, delete_task, list_tasks, toggle_task, update_task
from joinery.db.session import get_session
from joinery.schemas.task import TaskCreate, TaskOut, TaskUpdate

router = APIRouter(tags=["tasks"])

async def _require_project(db: AsyncSession, project_id: str) -> None:
    if not await get_project(db, project_id):
        raise HTTPException(status_code=404, detail="Project not found")

@router.get("/projects/{project_id}/tasks", response_model=list[TaskOut])
async def list_tasks_ep(project_id: str, db: AsyncSession = Depends(get_session)):
    await _require_project(db, project_id)
    return await list_tasks(db, project_id)

@router.post("/projects/{project_id}/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task_ep(project_id: str, payload: TaskCreate, db: AsyncSession = Depends(get_session)):
    await _require_project(db, project_id)
    return await create_task(db, project_id=project_id, task_description=payload.task_description)

@router.patch("/tasks/{task_id}", response_model=TaskOut)
async def update_task_ep(task_id: str, payload: TaskUpdate, db: AsyncSession = Depends(get_session)):
    obj = await update_task(db, task_id, payload)
    if not obj:
        raise HTTPException(status_code=404, detail="Task not found")
    return obj

@router.post("/tasks/{task_id}/toggle", response_model=TaskOut)
async def toggle_task_ep(task_id: str, db: AsyncSession = Depends(get_session)):
    obj = await toggle_task(db, task_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Task not found")
    return obj

@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task_ep(task_id: str, db: AsyncSession = Depends(get_session)):
    if not await delete_task(db, task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
