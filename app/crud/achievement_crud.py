from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.gamification.achievement_rules import (
    FIRST_PATH_TYPE,
    MILESTONE_PREFIX,
    PATH_COMPLETION,
    AchievementRule,
)
from app.models.user.achievement_model import Achievement
from app.schemas.user.achievement_schema import AchievementStats


def has_achievement(db: Session, user_id: int, achievement_type: str, path_id: Optional[int] = None) -> bool:
    query = db.query(Achievement.id).filter(
        Achievement.user_id == user_id,
        Achievement.type == achievement_type,
    )
    if path_id is not None:
        query = query.filter(Achievement.path_id == path_id)
    return query.first() is not None


def award_achievement(
    db: Session,
    user_id: int,
    rule: AchievementRule,
    path_id: Optional[int] = None,
) -> Optional[Achievement]:
    """Insert the award unless the user already holds it. Does not commit."""
    if has_achievement(db, user_id, rule.type, path_id):
        return None

    achievement = Achievement(
        user_id=user_id,
        path_id=path_id,
        type=rule.type,
        title=rule.title,
        description=rule.description,
        topic=rule.topic,
        icon=rule.icon,
    )
    db.add(achievement)
    db.flush()
    return achievement


def list_achievements(db: Session, user_id: int) -> List[Achievement]:
    return (
        db.query(Achievement)
        .filter(Achievement.user_id == user_id)
        .order_by(Achievement.earned_at.desc(), Achievement.id.desc())
        .all()
    )


def get_achievement_stats(db: Session, user_id: int) -> AchievementStats:
    base = db.query(func.count(Achievement.id)).filter(Achievement.user_id == user_id)
    return AchievementStats(
        total_achievements=base.scalar() or 0,
        paths_completed=base.filter(Achievement.type == PATH_COMPLETION).scalar() or 0,
        milestones=base.filter(
            or_(Achievement.type == FIRST_PATH_TYPE, Achievement.type.startswith(MILESTONE_PREFIX))
        ).scalar()
        or 0,
    )
