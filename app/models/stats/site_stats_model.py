from sqlalchemy import Integer, BigInteger, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base_class import Base
from datetime import datetime

SITE_STATS_ROW_ID = 1


class SiteStats(Base):
    """Single-row table of anonymous site counters."""

    __tablename__ = "site_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SITE_STATS_ROW_ID)
    quick_dive_searches: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), default=0, server_default="0")
    paths_generated: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), default=0, server_default="0")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
