# joinery/db/models/task.py

from __future__ import annotations
import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship
from joinery.db.session import Base
from joinery.db.models.mixins import IdTimestampMixin

class ProjectTask(IdTimestampMixin, Base):
    __tablename__ = "project_tasks"
    __table_args__ = (
        sa.Index("ix_project_tasks_project_id", "project_id"),
    )

    project_id: Mapped[str] = mapped_column(
        sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    task_description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    is_completed: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)

    project: Mapped["Project"] = relationship(back_populates="tasks")
