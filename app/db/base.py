"""Imports every model so ``Base.metadata`` knows all tables."""

from app.db.base_class import Base

from app.models.user.user_model import User
from app.models.user.achievement_model import Achievement
from app.models.path.saved_path_model import SavedPath
from app.models.path.path_progress_model import PathProgress
from app.models.stats.site_stats_model import SiteStats

__all__ = (
    "Base",
    "User",
    "Achievement",
    "SavedPath",
    "PathProgress",
    "SiteStats",
)
