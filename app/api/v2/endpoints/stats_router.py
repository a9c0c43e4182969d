from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db
from app.schemas.stats.stats_schema import PublicStats
from app.services import stats_service

router = APIRouter()


@router.get("/public", response_model=PublicStats)
def public_stats(db: Session = Depends(get_db)):
    return stats_service.get_public_stats(db)
