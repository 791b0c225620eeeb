# joinery/schemas/joinery_item.py
from datetime import date as _Date, datetime as _Datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from joinery.schemas.project import install_end_date


class JoineryItemCreate(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=200)
    item_budget: float = Field(0, ge=0)
    install_commencement_date: Optional[_Date] = None
    install_duration: Optional[int] = Field(None, ge=1, le=365)


class JoineryItemUpdate(BaseModel):
    item_name: Optional[str] = Field(None, min_length=1, max_length=200)
    item_budget: Optional[float] = Field(None, ge=0)
    install_commencement_date: Optional[_Date] = None
    install_duration: Optional[int] = Field(None, ge=1, le=365)

    @field_validator("item_name", "item_budget")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class ChecklistStepUpdate(BaseModel):
    completed: bool


class JoineryItemOut(JoineryItemCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    shop_drawings_approved: bool
    board_ordered: bool
    hardware_ordered: bool
    site_measured: bool
    microvellum_ready_to_process: bool
    processed_to_factory: bool
    picked_up_from_factory: bool
    install_scheduled: bool
    plans_printed: bool
    assembled: bool
    delivered: bool
    installed: bool
    invoiced: bool
    progress: int
    created_at: _Datetime
    updated_at: _Datetime

    @computed_field
    @property
    def install_end_date(self) -> Optional[_Date]:
        return install_end_date(self.install_commencement_date, self.install_duration)
