from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import PathArchivedError, PathConflictError, PathNotFoundError
from app.crud import path_crud
from app.models.path.path_progress_model import PathProgress
from app.models.path.position_key import PositionKey
from app.models.path.saved_path_model import PathStatus, SavedPath
from app.models.user.user_model import User
from app.services.path_layout import PathLayout

logger = logging.getLogger(__name__)


class PathStore:
    """Saved path lifecycle for one user: save, fetch, list, archive, restart.

    The payload is stored exactly as received. Totals are computed from it
    once, at save time.
    """

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def save(self, topic: str, path_data: Any, *, replace: bool = False) -> SavedPath:
        layout = PathLayout.parse(path_data)

        existing = path_crud.find_open_path(self.db, self.user.id, topic)
        if existing is not None:
            if not replace:
                logger.info("User %s already has path %s for %r", self.user.id, existing.id, topic)
                raise PathConflictError(existing_path_id=existing.id)
            existing.status = PathStatus.ARCHIVED
            self.db.flush()
            logger.info("Archived path %s to replace it", existing.id)

        now = self._utcnow()
        path = SavedPath(
            user_id=self.user.id,
            topic=topic,
            path_format=layout.path_format,
            path_data=path_data,
            total_stages=layout.total_stages,
            total_topics=layout.total_topics,
            completed_stages=0,
            completed_topics=0,
            status=PathStatus.ACTIVE,
            started_at=now,
            last_accessed_at=now,
        )
        self.db.add(path)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent save for the same topic.
            self.db.rollback()
            winner = path_crud.find_open_path(self.db, self.user.id, topic)
            raise PathConflictError(existing_path_id=winner.id if winner else None)

        self.db.refresh(path)
        logger.info(
            "Saved %s path %s for user %s (%s stages, %s topics)",
            layout.path_format.value,
            path.id,
            self.user.id,
            path.total_stages,
            path.total_topics,
        )
        return path

    def get(self, path_id: int) -> Tuple[SavedPath, Dict[str, PathProgress]]:
        """Return the path and its progress keyed by ``PositionKey.map_key()``.

        Touches ``last_accessed_at``.
        """
        path = self._get_owned(path_id)
        path.last_accessed_at = self._utcnow()
        self.db.commit()
        self.db.refresh(path)

        progress_map = {
            PositionKey.of(record).map_key(): record
            for record in path_crud.list_progress(self.db, path.id)
        }
        return path, progress_map

    def list_paths(self) -> List[SavedPath]:
        return path_crud.list_open_paths(self.db, self.user.id)

    def archive(self, path_id: int) -> SavedPath:
        path = self._get_owned(path_id)
        if path.status != PathStatus.ARCHIVED:
            path.status = PathStatus.ARCHIVED
            self.db.commit()
            self.db.refresh(path)
            logger.info("Archived path %s for user %s", path.id, self.user.id)
        return path

    def restart(self, path_id: int) -> SavedPath:
        path = self._get_owned(path_id)
        if path.status == PathStatus.ARCHIVED:
            raise PathArchivedError()

        removed = path_crud.delete_progress(self.db, path.id)
        path.completed_stages = 0
        path.completed_topics = 0
        path.status = PathStatus.ACTIVE
        path.completed_at = None
        path.last_accessed_at = self._utcnow()
        self.db.commit()
        self.db.refresh(path)
        logger.info("Restarted path %s (%s progress rows removed)", path.id, removed)
        return path

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _get_owned(self, path_id: int) -> SavedPath:
        path = path_crud.get_owned_path(self.db, self.user.id, path_id)
        if path is None:
            raise PathNotFoundError()
        return path

    @staticmethod
    def _utcnow() -> datetime:
        return datetime.now(timezone.utc)
