"""Request and response bodies for the path endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.path.saved_path_model import PathFormat, PathStatus
from app.schemas.path.learning_path_schema import Resource
from app.schemas.user.achievement_schema import AchievementRead

TOPIC_MIN_LENGTH = 2
TOPIC_MAX_LENGTH = 200

ItemType = Literal["topic", "project", "stage", "lesson", "boss"]


def sanitize_topic(value: Any) -> str:
    """Trim, strip angle brackets and enforce the 2-200 character window."""
    if not isinstance(value, str):
        raise ValueError("topic must be a string")
    cleaned = value.strip().replace("<", "").replace(">", "")[:1000].strip()
    if not TOPIC_MIN_LENGTH <= len(cleaned) <= TOPIC_MAX_LENGTH:
        raise ValueError(f"topic must be {TOPIC_MIN_LENGTH}-{TOPIC_MAX_LENGTH} characters")
    return cleaned


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _TopicRequest(_Request):
    topic: str

    @field_validator("topic", mode="before")
    @classmethod
    def _clean_topic(cls, value):
        return sanitize_topic(value)


# --- Generation --------------------------------------------------------------

class GeneratePathRequest(_TopicRequest):
    skill_level: Optional[str] = None


class ResourceListRequest(_TopicRequest):
    has_youtube_videos: bool = Field(default=False, alias="hasYouTubeVideos")


class SuggestionsRequest(_TopicRequest):
    pass


class YouTubeSearchRequest(_Request):
    query: str = Field(..., min_length=1, max_length=TOPIC_MAX_LENGTH)
    max_results: int = Field(default=3, ge=1, le=10)


class ResourceListResponse(BaseModel):
    resources: List[Resource]


class SuggestionsResponse(BaseModel):
    suggestions: List[str]


class VideoOut(_Request):
    video_id: str
    title: str
    description: str
    channel_title: str
    published_at: str
    thumbnail_url: Optional[str]
    view_count: int
    duration: str


class YouTubeSearchResponse(BaseModel):
    videos: List[VideoOut]


# --- Persistence -------------------------------------------------------------

class SavePathRequest(_TopicRequest):
    path_data: Any
    replace: bool = False


class SavePathResponse(_Request):
    path_id: int
    topic: str
    total_stages: int
    total_topics: int


class SavedPathSummary(_Request):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    topic: str
    path_format: PathFormat
    total_stages: int
    total_topics: int
    completed_stages: int
    completed_topics: int
    status: PathStatus
    started_at: Optional[datetime]
    last_accessed_at: Optional[datetime]
    completed_at: Optional[datetime]
    progress_percent: int = 0


class PathProgressRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stage_index: int
    level_index: int
    item_type: str
    item_index: int
    is_completed: bool
    completed_at: Optional[datetime]
    notes: Optional[str]


class SavedPathDetail(SavedPathSummary):
    path_data: Any
    progress_map: Dict[str, PathProgressRead] = Field(default_factory=dict)


# --- Progress ----------------------------------------------------------------

class ProgressUpdateRequest(_Request):
    """Toggle request for one trackable item.

    ``level_index`` may be omitted for a units-format path, in which case
    ``stage_index`` is read with the historical ``unit * 100 + level`` encoding.
    """

    stage_index: int = Field(..., ge=0)
    level_index: Optional[int] = Field(default=None, ge=-1)
    item_type: ItemType
    item_index: int = Field(..., ge=0)
    is_completed: bool
    notes: Optional[str] = Field(default=None, max_length=2000)


class ProgressUpdateResponse(_Request):
    completed_topics: int
    completed_stages: int
    is_fully_completed: bool
    new_achievements: List[AchievementRead] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str
