from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db, get_current_user
from app.crud import achievement_crud
from app.schemas.user.achievement_schema import AchievementRead, AchievementStats
from app.models.user.user_model import User

router = APIRouter()


@router.get("", response_model=List[AchievementRead], summary="Achievements earned, newest first")
def list_achievements(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return achievement_crud.list_achievements(db, current_user.id)


@router.get("/stats", response_model=AchievementStats)
def achievement_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return achievement_crud.get_achievement_stats(db, current_user.id)
