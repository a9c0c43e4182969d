from __future__ import annotations
from sqlalchemy import Integer, String, DateTime, func, ForeignKey, Index, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base_class import Base
from datetime import datetime
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .user_model import User


class Achievement(Base):
    """An award earned by a user.

    ``path_id`` is set for path completions only; milestones and the first path
    award are per user. Deleting the path removes its completion award.
    """

    __tablename__ = "achievements"
    __table_args__ = (
        UniqueConstraint("user_id", "type", "path_id", name="uq_achievement_user_type_path"),
        # NULL path ids never collide in the constraint above.
        Index(
            "uq_achievement_user_type_once",
            "user_id",
            "type",
            unique=True,
            postgresql_where=text("path_id IS NULL"),
            sqlite_where=text("path_id IS NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String(50), index=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    topic: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    icon: Mapped[str] = mapped_column(String(50), default="trophy")
    path_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("user_paths.id", ondelete="CASCADE"), nullable=True, index=True
    )
    earned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped["User"] = relationship(back_populates="achievements")
