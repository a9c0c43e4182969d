"""Pydantic schemas for learning paths and their progress."""

from .learning_path_schema import (
    KeyTopic,
    LearningPath,
    Lesson,
    Level,
    PathOutline,
    PathStage,
    Resource,
    Unit,
)

__all__ = [
    "KeyTopic",
    "LearningPath",
    "Lesson",
    "Level",
    "PathOutline",
    "PathStage",
    "Resource",
    "Unit",
]
