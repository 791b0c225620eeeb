# joinery/db/models/material.py

from __future__ import annotations
import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship
from joinery.db.session import Base
from joinery.db.models.mixins import IdTimestampMixin

class Material(IdTimestampMixin, Base):
    __tablename__ = "materials"
    __table_args__ = (
        sa.Index("ix_materials_project_id", "project_id"),
    )

    project_id: Mapped[str] = mapped_column(
        sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    material_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    thickness: Mapped[float | None] = mapped_column(sa.Float)  # millimetres
    board_size: Mapped[str | None] = mapped_column(sa.String(64))
    quantity: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=1)
    supplier: Mapped[str | None] = mapped_column(sa.String(200))
    is_ordered: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    order_number: Mapped[str | None] = mapped_column(sa.String(64))

    project: Mapped["Project"] = relationship(back_populates="materials")
