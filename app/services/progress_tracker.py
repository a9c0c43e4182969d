from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ItemLockedError, PathArchivedError, PathNotFoundError
from app.crud import path_crud
from app.models.path.path_progress_model import PathProgress
from app.models.path.position_key import ITEM_STAGE, PositionKey
from app.models.path.saved_path_model import PathFormat, PathStatus, SavedPath
from app.models.user.achievement_model import Achievement
from app.models.user.user_model import User
from app.services.achievement_evaluator import AchievementEvaluator
from app.services.path_layout import PathLayout

logger = logging.getLogger(__name__)


@dataclass
class ToggleResult:
    completed_topics: int
    completed_stages: int
    is_fully_completed: bool
    new_achievements: List[Achievement] = field(default_factory=list)


class ProgressTracker:
    """Per-item completion state machine for a user's saved paths.

    A toggle runs as one transaction: lock the path row, upsert the progress
    row, recount the rollups from the progress table, update the path and, on
    the first transition to ``completed``, award achievements. Rollups are
    always recounted, never incremented.
    """

    def __init__(
        self,
        db: Session,
        user: User,
        *,
        evaluator: Optional[AchievementEvaluator] = None,
        enforce_unlock: Optional[bool] = None,
    ):
        self.db = db
        self.user = user
        self.evaluator = evaluator or AchievementEvaluator(db)
        self.enforce_unlock = (
            settings.ENFORCE_SEQUENTIAL_UNLOCK if enforce_unlock is None else enforce_unlock
        )

    def toggle_item(
        self,
        path_id: int,
        *,
        stage_index: int,
        item_type: str,
        item_index: int,
        is_completed: bool,
        level_index: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> ToggleResult:
        try:
            result = self._toggle(
                path_id,
                stage_index=stage_index,
                level_index=level_index,
                item_type=item_type,
                item_index=item_index,
                is_completed=is_completed,
                notes=notes,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return result

    # ------------------------------------------------------------------
    # Transaction body
    # ------------------------------------------------------------------
    def _toggle(
        self,
        path_id: int,
        *,
        stage_index: int,
        level_index: Optional[int],
        item_type: str,
        item_index: int,
        is_completed: bool,
        notes: Optional[str],
    ) -> ToggleResult:
        path = path_crud.get_owned_path(self.db, self.user.id, path_id, lock=True)
        if path is None:
            raise PathNotFoundError()
        if path.status == PathStatus.ARCHIVED:
            raise PathArchivedError()

        key = PositionKey.from_request(
            path.path_format,
            stage_index=stage_index,
            level_index=level_index,
            item_type=item_type,
            item_index=item_index,
        )
        layout = PathLayout.from_saved(path.path_format, path.path_data)
        if not layout.contains(key):
            raise PathNotFoundError(code="item_not_found")

        if is_completed and self.enforce_unlock:
            done = path_crud.completed_keys(self.db, path.id)
            if key not in done and not layout.is_unlocked(key, done):
                logger.info("Rejected locked item %s on path %s", key, path.id)
                raise ItemLockedError()

        now = self._utcnow()
        self._upsert_record(path, key, is_completed, notes, now)
        self.db.flush()

        completed_topics = path_crud.count_completed(self.db, path.id, layout.leaf_item_type)
        completed_stages = self._count_completed_stages(path, layout)

        path.completed_topics = completed_topics
        path.completed_stages = completed_stages
        path.last_accessed_at = now

        is_fully_completed = path.total_topics > 0 and completed_topics >= path.total_topics
        new_achievements: List[Achievement] = []
        if is_fully_completed and path.status != PathStatus.COMPLETED:
            path.status = PathStatus.COMPLETED
            path.completed_at = now
            self.db.flush()
            logger.info("Path %s completed by user %s", path.id, self.user.id)
            new_achievements = self.evaluator.on_path_completed(self.user.id, path.id)

        return ToggleResult(
            completed_topics=completed_topics,
            completed_stages=completed_stages,
            is_fully_completed=is_fully_completed,
            new_achievements=new_achievements,
        )

    def _upsert_record(
        self,
        path: SavedPath,
        key: PositionKey,
        is_completed: bool,
        notes: Optional[str],
        now: datetime,
    ) -> PathProgress:
        record = path_crud.get_progress(self.db, path.id, key)
        if record is None:
            record = PathProgress(
                path_id=path.id,
                user_id=self.user.id,
                stage_index=key.stage_index,
                level_index=key.level_index,
                item_type=key.item_type,
                item_index=key.item_index,
                is_completed=False,
            )
            self.db.add(record)

        if is_completed and not record.is_completed:
            record.completed_at = now
        elif not is_completed:
            record.completed_at = None
        record.is_completed = is_completed

        if notes is not None:
            record.notes = notes
        return record

    def _count_completed_stages(self, path: SavedPath, layout: PathLayout) -> int:
        if path.path_format == PathFormat.STAGES:
            return path_crud.count_completed(self.db, path.id, ITEM_STAGE)
        return layout.completed_levels(path_crud.completed_keys(self.db, path.id))

    @staticmethod
    def _utcnow() -> datetime:
        return datetime.now(timezone.utc)
