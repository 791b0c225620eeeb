# joinery/schemas/project.py
from datetime import date as _Date, datetime as _Datetime, timedelta
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

ProjectStatus = Literal["planning", "in_progress", "completed", "on_hold"]
PriorityLevel = Literal["low", "medium", "high"]


def _clean_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = " ".join(v.strip().split())
    if not v:
        raise ValueError("must not be empty")
    return v


def install_end_date(start: Optional[_Date], duration: Optional[int]) -> Optional[_Date]:
    """Last install day, counting the commencement day as day one."""
    if start is None:
        return None
    return start + timedelta(days=max(duration or 1, 1) - 1)


class ProjectBase(BaseModel):
    project_number: str = Field(..., min_length=1, max_length=32)
    client: str = Field(..., min_length=1, max_length=200)
    project_name: str = Field(..., min_length=1, max_length=200)
    project_address: str = Field("", max_length=300)
    project_status: ProjectStatus = "planning"
    install_commencement_date: Optional[_Date] = None
    install_duration: Optional[int] = Field(None, ge=1, le=365)
    overall_project_budget: float = Field(0, ge=0)
    priority_level: PriorityLevel = "medium"

    @field_validator("project_number", "client", "project_name")
    @classmethod
    def _clean(cls, v: str) -> str:
        return _clean_text(v)


class ProjectCreate(ProjectBase):
    """Incoming payload for creating a project."""
    pass


class ProjectUpdate(BaseModel):
    project_number: Optional[str] = None
    client: Optional[str] = None
    project_name: Optional[str] = None
    project_address: Optional[str] = None
    project_status: Optional[ProjectStatus] = None
    install_commencement_date: Optional[_Date] = None
    install_duration: Optional[int] = Field(None, ge=1, le=365)
    overall_project_budget: Optional[float] = Field(None, ge=0)
    priority_level: Optional[PriorityLevel] = None

    @field_validator("project_number", "client", "project_name")
    @classmethod
    def _clean(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v)

    @field_validator("project_number", "client", "project_name", "project_address",
                     "project_status", "overall_project_budget", "priority_level")
    @classmethod
    def _not_null(cls, v):
        # omit a field to leave it unchanged; these columns cannot be cleared
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class ProjectOut(ProjectBase):
    """Response model for reading a project."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    date_created: _Date
    created_at: _Datetime
    updated_at: _Datetime

    @computed_field
    @property
    def install_end_date(self) -> Optional[_Date]:
        return install_end_date(self.install_commencement_date, self.install_duration)
