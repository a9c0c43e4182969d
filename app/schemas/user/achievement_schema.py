from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AchievementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    description: Optional[str]
    topic: Optional[str]
    icon: str
    earned_at: Optional[datetime]
    path_id: Optional[int]


class AchievementStats(BaseModel):
    total_achievements: int = 0
    paths_completed: int = 0
    milestones: int = 0
