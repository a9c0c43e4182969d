from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base

if TYPE_CHECKING:
    from .saved_path_model import SavedPath


class PathProgress(Base):
    """Completion state of one trackable item of a saved path.

    Rows are addressed by ``(stage_index, level_index, item_type, item_index)``,
    see :class:`app.models.path.position_key.PositionKey`.
    """

    __tablename__ = "path_progress"
    __table_args__ = (
        UniqueConstraint(
            "path_id",
            "stage_index",
            "level_index",
            "item_type",
            "item_index",
            name="uq_path_progress_position",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    path_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_paths.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    stage_index: Mapped[int] = mapped_column(Integer, nullable=False)
    level_index: Mapped[int] = mapped_column(Integer, nullable=False, default=-1, server_default="-1")
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)
    item_index: Mapped[int] = mapped_column(Integer, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    path: Mapped["SavedPath"] = relationship(back_populates="progress_items")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            "<PathProgress(path_id={0}, stage={1}, level={2}, type={3}, index={4}, done={5})>".format(
                self.path_id,
                self.stage_index,
                self.level_index,
                self.item_type,
                self.item_index,
                self.is_completed,
            )
        )
