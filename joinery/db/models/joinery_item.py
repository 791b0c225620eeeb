# joinery/db/models/joinery_item.py

from __future__ import annotations
from datetime import date
import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship
from joinery.db.session import Base
from joinery.db.models.mixins import IdTimestampMixin

# Manufacturing checklist, in workshop order
CHECKLIST_STEPS = (
    "shop_drawings_approved",
    "board_ordered",
    "hardware_ordered",
    "site_measured",
    "microvellum_ready_to_process",
    "processed_to_factory",
    "picked_up_from_factory",
    "install_scheduled",
    "plans_printed",
    "assembled",
    "delivered",
    "installed",
    "invoiced",
)

def _flag() -> Mapped[bool]:
    return mapped_column(sa.Boolean, nullable=False, default=False)

class JoineryItem(IdTimestampMixin, Base):
    __tablename__ = "joinery_items"
    __table_args__ = (
        sa.Index("ix_joinery_items_project_id", "project_id"),
    )

    project_id: Mapped[str] = mapped_column(
        sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    item_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    item_budget: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0)
    install_commencement_date: Mapped[date | None] = mapped_column(sa.Date)
    install_duration: Mapped[int | None] = mapped_column(sa.Integer)

    shop_drawings_approved: Mapped[bool] = _flag()
    board_ordered: Mapped[bool] = _flag()
    hardware_ordered: Mapped[bool] = _flag()
    site_measured: Mapped[bool] = _flag()
    microvellum_ready_to_process: Mapped[bool] = _flag()
    processed_to_factory: Mapped[bool] = _flag()
    picked_up_from_factory: Mapped[bool] = _flag()
    install_scheduled: Mapped[bool] = _flag()
    plans_printed: Mapped[bool] = _flag()
    assembled: Mapped[bool] = _flag()
    delivered: Mapped[bool] = _flag()
    installed: Mapped[bool] = _flag()
    invoiced: Mapped[bool] = _flag()

    project: Mapped["Project"] = relationship(back_populates="joinery_items")

    @property
    def progress(self) -> int:
        done = sum(1 for step in CHECKLIST_STEPS if getattr(self, step))
        return round(done / len(CHECKLIST_STEPS) * 100)
