# joinery/schemas/task.py
from datetime import datetime as _Datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskCreate(BaseModel):
    task_description: str = Field(..., min_length=1)


class TaskUpdate(BaseModel):
    task_description: Optional[str] = Field(None, min_length=1)
    is_completed: Optional[bool] = None

    @field_validator("task_description", "is_completed")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    task_description: str
    is_completed: bool
    created_at: _Datetime
    updated_at: _Datetime
