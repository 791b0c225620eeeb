# joinery/api/routes/projects.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from joinery.db.session import get_session
from joinery.schemas.project import ProjectCreate, ProjectOut, ProjectStatus, ProjectUpdate
from joinery.crud.project import (
    create_project, delete_project, find_projects, get_project, update_project
)

router = APIRouter(prefix="/projects", tags=["projects"])

@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project_ep(payload: ProjectCreate, db: AsyncSession = Depends(get_session)):
    try:
        return await create_project(db, payload)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="project_number already exists")

@router.get("", response_model=list[ProjectOut])
async def list_projects_ep(
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_session),
):
    return await find_projects(db, status=status_filter, limit=limit, offset=offset)

@router.get("/{project_id}", response_model=ProjectOut)
async def get_project_ep(project_id: str, db: AsyncSession = Depends(get_session)):
    obj = await get_project(db, project_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Project not found")
    return obj

@router.patch("/{project_id}", response_model=ProjectOut)
async def update_project_ep(project_id: str, payload: ProjectUpdate, db: AsyncSession = Depends(get_session)):
    try:
        obj = await update_project(db, project_id, payload)
    except IntegrityError:
        raise HTTPException(status_code=409, detail="project_number already exists")
    if not obj:
        raise HTTPException(status_code=404, detail="Project not found")
    return obj

@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project_ep(project_id: str, db: AsyncSession = Depends(get_session)):
    ok = await delete_project(db, project_id)
    if not ok:
        raise HTTPException(status_code=404, detail="Project not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
