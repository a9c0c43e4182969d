"""Site-wide counters and the public stats snapshot."""
from __future__ import annotations

import logging

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.models.path.saved_path_model import PathStatus, SavedPath
from app.models.stats.site_stats_model import SITE_STATS_ROW_ID, SiteStats
from app.models.user.achievement_model import Achievement
from app.models.user.user_model import User
from app.schemas.stats.stats_schema import PublicStats

logger = logging.getLogger(__name__)

COUNTERS = frozenset({"quick_dive_searches", "paths_generated"})


def _ensure_row(db: Session) -> None:
    if db.get(SiteStats, SITE_STATS_ROW_ID) is None:
        db.add(SiteStats(id=SITE_STATS_ROW_ID, quick_dive_searches=0, paths_generated=0))
        db.flush()


def increment_stat(db: Session, counter: str) -> None:
    """Atomically add one to ``counter`` on the single site_stats row."""
    if counter not in COUNTERS:
        raise ValueError(f"Unknown site counter: {counter}")

    _ensure_row(db)
    column = getattr(SiteStats, counter)
    db.execute(
        update(SiteStats)
        .where(SiteStats.id == SITE_STATS_ROW_ID)
        .values({column: column + 1})
    )
    db.commit()
    logger.debug("Incremented site counter %s", counter)


def get_public_stats(db: Session) -> PublicStats:
    site = db.get(SiteStats, SITE_STATS_ROW_ID)

    def _count(model, *criteria) -> int:
        return db.query(func.count(model.id)).filter(*criteria).scalar() or 0

    return PublicStats(
        users=_count(User),
        quick_dive_searches=site.quick_dive_searches if site else 0,
        paths_generated=site.paths_generated if site else 0,
        paths_started=_count(SavedPath),
        paths_completed=_count(SavedPath, SavedPath.status == PathStatus.COMPLETED),
        achievements=_count(Achievement),
    )
