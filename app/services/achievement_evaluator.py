from __future__ import annotations

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import PathNotFoundError
from app.crud import achievement_crud
from app.gamification.achievement_rules import FIRST_PATH, MILESTONES, path_completion_rule
from app.models.path.saved_path_model import PathStatus, SavedPath
from app.models.user.achievement_model import Achievement
from app.models.user.user_model import User

logger = logging.getLogger(__name__)


class AchievementEvaluator:
    """Awards achievements when a path transitions to ``completed``.

    Every rule is checked against existing awards before inserting, so running
    the evaluator twice for the same path grants nothing the second time. The
    caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def on_path_completed(self, user_id: int, path_id: int) -> List[Achievement]:
        path = (
            self.db.query(SavedPath)
            .filter(SavedPath.id == path_id, SavedPath.user_id == user_id)
            .first()
        )
        if path is None:
            raise PathNotFoundError()

        awarded: List[Achievement] = []

        completion = achievement_crud.award_achievement(
            self.db, user_id, path_completion_rule(path.topic, path.total_topics), path_id=path.id
        )
        if completion:
            awarded.append(completion)

        # Serializes concurrent completions of one user so each sees the others' counts.
        self._lock_user(user_id)
        completed_count = self._completed_path_count(user_id)
        if completed_count == 1:
            first = achievement_crud.award_achievement(self.db, user_id, FIRST_PATH)
            if first:
                awarded.append(first)

        for threshold, rule in sorted(MILESTONES.items()):
            if completed_count < threshold:
                break
            milestone = achievement_crud.award_achievement(self.db, user_id, rule)
            if milestone:
                awarded.append(milestone)

        if awarded:
            logger.info(
                "User %s earned %s for path %s",
                user_id,
                ", ".join(achievement.type for achievement in awarded),
                path.id,
            )
        return awarded

    def _lock_user(self, user_id: int) -> None:
        self.db.query(User.id).filter(User.id == user_id).with_for_update().one()

    def _completed_path_count(self, user_id: int) -> int:
        return (
            self.db.query(func.count(SavedPath.id))
            .filter(SavedPath.user_id == user_id, SavedPath.status == PathStatus.COMPLETED)
            .scalar()
            or 0
        )
