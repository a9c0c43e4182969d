from typing import List, Optional, Set

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.path.path_progress_model import PathProgress
from app.models.path.position_key import PositionKey
from app.models.path.saved_path_model import PathStatus, SavedPath


def get_owned_path(db: Session, user_id: int, path_id: int, *, lock: bool = False) -> Optional[SavedPath]:
    """Path ``path_id`` if it belongs to ``user_id``; other users' paths look missing."""
    query = db.query(SavedPath).filter(SavedPath.id == path_id, SavedPath.user_id == user_id)
    if lock:
        query = query.with_for_update()
    return query.first()


def find_open_path(db: Session, user_id: int, topic: str) -> Optional[SavedPath]:
    return (
        db.query(SavedPath)
        .filter(
            SavedPath.user_id == user_id,
            SavedPath.topic == topic,
            SavedPath.status != PathStatus.ARCHIVED,
        )
        .first()
    )


def list_open_paths(db: Session, user_id: int) -> List[SavedPath]:
    return (
        db.query(SavedPath)
        .filter(SavedPath.user_id == user_id, SavedPath.status != PathStatus.ARCHIVED)
        .order_by(SavedPath.last_accessed_at.desc(), SavedPath.id.desc())
        .all()
    )


def list_progress(db: Session, path_id: int) -> List[PathProgress]:
    return (
        db.query(PathProgress)
        .filter(PathProgress.path_id == path_id)
        .order_by(
            PathProgress.stage_index,
            PathProgress.level_index,
            PathProgress.item_type,
            PathProgress.item_index,
        )
        .all()
    )


def get_progress(db: Session, path_id: int, key: PositionKey) -> Optional[PathProgress]:
    return (
        db.query(PathProgress)
        .filter(
            PathProgress.path_id == path_id,
            PathProgress.stage_index == key.stage_index,
            PathProgress.level_index == key.level_index,
            PathProgress.item_type == key.item_type,
            PathProgress.item_index == key.item_index,
        )
        .first()
    )


def completed_keys(db: Session, path_id: int) -> Set[PositionKey]:
    rows = (
        db.query(
            PathProgress.stage_index,
            PathProgress.level_index,
            PathProgress.item_type,
            PathProgress.item_index,
        )
        .filter(PathProgress.path_id == path_id, PathProgress.is_completed.is_(True))
        .all()
    )
    return {PositionKey(*row) for row in rows}


def count_completed(db: Session, path_id: int, item_type: str) -> int:
    return (
        db.query(func.count(PathProgress.id))
        .filter(
            PathProgress.path_id == path_id,
            PathProgress.item_type == item_type,
            PathProgress.is_completed.is_(True),
        )
        .scalar()
        or 0
    )


def delete_progress(db: Session, path_id: int) -> int:
    return (
        db.query(PathProgress)
        .filter(PathProgress.path_id == path_id)
        .delete(synchronize_session=False)
    )
