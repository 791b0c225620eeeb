# joinery/db/models/project.py

from __future__ import annotations
from datetime import date
import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship
from joinery.db.session import Base
from joinery.db.models.mixins import IdTimestampMixin

PROJECT_STATUSES = ("planning", "in_progress", "completed", "on_hold")
PRIORITY_LEVELS = ("low", "medium", "high")

class Project(IdTimestampMixin, Base):
    __tablename__ = "projects"
    __table_args__ = (
        sa.UniqueConstraint("project_number", name="uq_projects_project_number"),
        sa.Index("ix_projects_created_at", "created_at"),
        sa.Index("ix_projects_project_status", "project_status"),
    )

    project_number: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    client: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    project_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    project_address: Mapped[str] = mapped_column(sa.String(300), nullable=False, default="")
    date_created: Mapped[date] = mapped_column(sa.Date, nullable=False, default=lambda: date.today())
    project_status: Mapped[str] = mapped_column(sa.String(32), nullable=False, default="planning")
    install_commencement_date: Mapped[date | None] = mapped_column(sa.Date)
    install_duration: Mapped[int | None] = mapped_column(sa.Integer)
    overall_project_budget: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0)
    priority_level: Mapped[str] = mapped_column(sa.String(16), nullable=False, default="medium")

    # Relations
    tasks: Mapped[list["ProjectTask"]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )
    materials: Mapped[list["Material"]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )
    joinery_items: Mapped[list["JoineryItem"]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )
