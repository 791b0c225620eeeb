# joinery/api/routes/materials.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from joinery.crud.material import create_material, delete_material, list_materials, update_material
from joinery.crud.project import get_project
from joinery.db.session import get_session
from joinery.schemas.material import MaterialCreate, MaterialOut, MaterialUpdate

router = APIRouter(tags=["materials"])

@router.get("/projects/{project_id}/materials", response_model=list[MaterialOut])
async def list_materials_ep(project_id: str, db: AsyncSession = Depends(get_session)):
    if not await get_project(db, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return await list_materials(db, project_id)

@router.post("/projects/{project_id}/materials", response_model=MaterialOut, status_code=status.HTTP_201_CREATED)
async def create_material_ep(project_id: str, payload: MaterialCreate, db: AsyncSession = Depends(get_session)):
    if not await get_project(db, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return await create_material(db, project_id=project_id, data=payload)

@router.patch("/materials/{material_id}", response_model=MaterialOut)
async def update_material_ep(material_id: str, payload: MaterialUpdate, db: AsyncSession = Depends(get_session)):
    obj = await update_material(db, material_id, payload)
    if not obj:
        raise HTTPException(status_code=404, detail="Material not found")
    return obj

@router.delete("/materials/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_material_ep(material_id: str, db: AsyncSession = Depends(get_session)):
    if not await delete_material(db, material_id):
        raise HTTPException(status_code=404, detail="Material not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
