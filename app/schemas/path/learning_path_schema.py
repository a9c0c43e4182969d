"""Pydantic models for generated learning content.

Two payload shapes coexist:

* the unit/level/lesson tree (:class:`LearningPath`), produced by the path
  generator;
* the legacy flat list of :class:`PathStage`, still accepted for paths saved
  before the tree existed.

Field names are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

import math
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ResourceKind = Literal["Video", "Article", "Course", "Book", "Podcast"]
RESOURCE_KINDS: tuple[str, ...] = ("Video", "Article", "Course", "Book", "Podcast")

DEFAULT_UNIT_COLOR = "#10b981"
DEFAULT_LEVEL_ICON = "📚"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Resource(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str
    type: ResourceKind = "Video"
    description: str = ""
    url: str
    views: str = "-"
    view_count: int = Field(default=0, ge=0)
    published_date: str = ""
    duration_min: int = Field(default=0, ge=0)
    video_id: Optional[str] = None
    thumbnail_url: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_kind(cls, value):
        if isinstance(value, str):
            for kind in RESOURCE_KINDS:
                if value.strip().lower() == kind.lower():
                    return kind
        return value

    @field_validator("duration_min", mode="before")
    @classmethod
    def _whole_minutes(cls, value):
        if isinstance(value, float):
            return math.ceil(value)
        return value

    @field_validator("description", "views", "published_date", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value


class Lesson(CamelModel):
    id: str = ""
    title: str = Field(..., min_length=1)
    description: str = ""
    xp_reward: int = Field(default=10, ge=0)
    resource: Resource


class Level(CamelModel):
    id: str = ""
    level_number: int = 1
    title: str = Field(..., min_length=1)
    description: str = ""
    icon: str = DEFAULT_LEVEL_ICON
    lessons: List[Lesson] = Field(..., min_length=1)
    challenge_project: Optional[str] = None
    total_xp: int = 0


class Unit(CamelModel):
    id: str = ""
    unit_number: int = 1
    title: str = Field(..., min_length=1)
    description: str = ""
    color: str = DEFAULT_UNIT_COLOR
    levels: List[Level] = Field(..., min_length=1)
    boss_challenge: Optional[str] = None


class LearningPath(CamelModel):
    topic: str
    skill_level: Optional[str] = None
    total_units: int = 0
    total_levels: int = 0
    total_lessons: int = 0
    total_xp: int = 0
    estimated_hours: Optional[float] = None
    units: List[Unit] = Field(..., min_length=1)


# --- Legacy format ---------------------------------------------------------

class KeyTopic(CamelModel):
    name: str = Field(..., min_length=1)
    resource: Resource


class PathStage(CamelModel):
    stage_name: str = Field(..., min_length=1)
    description: str = ""
    goal: str = ""
    key_topics: List[KeyTopic]
    suggested_project: str = ""


# --- Provider outline (before resource resolution) -------------------------

class _OutlineModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LessonOutline(_OutlineModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    search_query: Optional[str] = None


class LevelOutline(_OutlineModel):
    level_number: Optional[int] = None
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    lessons: List[LessonOutline] = Field(..., min_length=1)
    challenge_project: Optional[str] = None


class UnitOutline(_OutlineModel):
    unit_number: Optional[int] = None
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None
    levels: List[LevelOutline] = Field(..., min_length=1)
    boss_challenge: Optional[str] = None


class PathOutline(_OutlineModel):
    topic: Optional[str] = None
    units: List[UnitOutline] = Field(..., min_length=1)
