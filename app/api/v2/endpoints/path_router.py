from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_current_user, get_db
from app.core.errors import LearningPathError, to_http_exception
from app.models.path.path_progress_model import PathProgress
from app.models.path.saved_path_model import SavedPath
from app.models.user.user_model import User
from app.schemas.path import path_schema
from app.schemas.user.achievement_schema import AchievementRead
from app.services.path_store import PathStore
from app.services.progress_tracker import ProgressTracker

router = APIRouter()


def _detail(path: SavedPath, progress_map: Dict[str, PathProgress]) -> path_schema.SavedPathDetail:
    summary = path_schema.SavedPathSummary.model_validate(path)
    return path_schema.SavedPathDetail(
        **summary.model_dump(),
        path_data=path.path_data,
        progress_map={
            key: path_schema.PathProgressRead.model_validate(record)
            for key, record in progress_map.items()
        },
    )


@router.get("", response_model=List[path_schema.SavedPathSummary])
def list_my_paths(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return PathStore(db=db, user=current_user).list_paths()


@router.post("", response_model=path_schema.SavePathResponse, status_code=status.HTTP_201_CREATED)
def save_path(
    payload: path_schema.SavePathRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    store = PathStore(db=db, user=current_user)
    try:
        path = store.save(payload.topic, payload.path_data, replace=payload.replace)
    except LearningPathError as exc:
        raise to_http_exception(exc) from exc
    return path_schema.SavePathResponse(
        path_id=path.id,
        topic=path.topic,
        total_stages=path.total_stages,
        total_topics=path.total_topics,
    )


@router.get("/{path_id}", response_model=path_schema.SavedPathDetail)
def get_path(
    path_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        path, progress_map = PathStore(db=db, user=current_user).get(path_id)
    except LearningPathError as exc:
        raise to_http_exception(exc) from exc
    return _detail(path, progress_map)


@router.put("/{path_id}/progress", response_model=path_schema.ProgressUpdateResponse)
def update_progress(
    path_id: int,
    payload: path_schema.ProgressUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tracker = ProgressTracker(db=db, user=current_user)
    try:
        result = tracker.toggle_item(
            path_id,
            stage_index=payload.stage_index,
            level_index=payload.level_index,
            item_type=payload.item_type,
            item_index=payload.item_index,
            is_completed=payload.is_completed,
            notes=payload.notes,
        )
    except LearningPathError as exc:
        raise to_http_exception(exc) from exc
    return path_schema.ProgressUpdateResponse(
        completed_topics=result.completed_topics,
        completed_stages=result.completed_stages,
        is_fully_completed=result.is_fully_completed,
        new_achievements=[AchievementRead.model_validate(a) for a in result.new_achievements],
    )


@router.post("/{path_id}/restart", response_model=path_schema.SavedPathSummary)
def restart_path(
    path_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return PathStore(db=db, user=current_user).restart(path_id)
    except LearningPathError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{path_id}", response_model=path_schema.MessageResponse)
def archive_path(
    path_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        PathStore(db=db, user=current_user).archive(path_id)
    except LearningPathError as exc:
        raise to_http_exception(exc) from exc
    return path_schema.MessageResponse(message="Path archived")
