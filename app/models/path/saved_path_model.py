from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base

if TYPE_CHECKING:
    from app.models.user.user_model import User
    from .path_progress_model import PathProgress


class PathStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class PathFormat(str, enum.Enum):
    UNITS = "units"
    STAGES = "stages"


class SavedPath(Base):
    """A learning path saved by a user.

    ``path_data`` is stored exactly as received and never rewritten; progress
    lives in :class:`PathProgress`. ``total_*`` are frozen at save time while
    ``completed_*`` are a cache of the progress rows, refreshed on every toggle.
    """

    __tablename__ = "user_paths"
    __table_args__ = (
        Index(
            "uq_user_paths_open_topic",
            "user_id",
            "topic",
            unique=True,
            postgresql_where=text("status <> 'archived'"),
            sqlite_where=text("status <> 'archived'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    topic: Mapped[str] = mapped_column(String(200), nullable=False)
    path_format: Mapped[PathFormat] = mapped_column(
        Enum(PathFormat, name="pathformat", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    path_data: Mapped[Any] = mapped_column(JSON, nullable=False)

    total_stages: Mapped[int] = mapped_column(Integer, nullable=False)
    total_topics: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_stages: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    completed_topics: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    status: Mapped[PathStatus] = mapped_column(
        Enum(PathStatus, name="pathstatus", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=PathStatus.ACTIVE,
        server_default=PathStatus.ACTIVE.value,
        index=True,
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    last_accessed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["User"] = relationship(back_populates="paths")
    progress_items: Mapped[List["PathProgress"]] = relationship(
        back_populates="path", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def is_units_format(self) -> bool:
        return self.path_format == PathFormat.UNITS

    @property
    def progress_percent(self) -> int:
        if not self.total_topics:
            return 0
        return round(self.completed_topics / self.total_topics * 100)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<SavedPath(id={self.id}, topic='{self.topic}', status={self.status.value})>"
