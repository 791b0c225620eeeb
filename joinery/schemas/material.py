# joinery/schemas/material.py
from datetime import datetime as _Datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class MaterialCreate(BaseModel):
    material_name: str = Field(..., min_length=1, max_length=200)
    thickness: Optional[float] = Field(None, gt=0)
    board_size: Optional[str] = None
    quantity: int = Field(1, ge=0)
    supplier: Optional[str] = None
    is_ordered: bool = False
    order_number: Optional[str] = None


class MaterialUpdate(BaseModel):
    material_name: Optional[str] = Field(None, min_length=1, max_length=200)
    thickness: Optional[float] = Field(None, gt=0)
    board_size: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    supplier: Optional[str] = None
    is_ordered: Optional[bool] = None
    order_number: Optional[str] = None

    @field_validator("material_name", "quantity", "is_ordered")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class MaterialOut(MaterialCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    created_at: _Datetime
    updated_at: _Datetime
